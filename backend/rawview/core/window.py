"""Window/level mapping from sample values to 8-bit grayscale."""

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from .decoder import BufferLike, decode_all
from .element_type import ElementType


@dataclass(frozen=True)
class Window:
    """Display window; ordering is not enforced, see ``normalized``."""
    window_min: float
    window_max: float

    @property
    def width(self) -> float:
        return self.window_max - self.window_min

    def normalized(self) -> "Window":
        if self.window_min > self.window_max:
            return Window(self.window_max, self.window_min)
        return self


def _effective_range(window_min: float, window_max: float) -> float:
    # degenerate window: map as if the range were 1
    return (window_max - window_min) or 1.0


def map_to_grayscale(value: float, window_min: float, window_max: float) -> int:
    """Map one sample into ``[0, 255]``; halves round up, NaN maps to 0."""
    normalized = (value - window_min) / _effective_range(window_min, window_max)
    if math.isnan(normalized):
        return 0
    normalized = min(max(normalized, 0.0), 1.0)
    return int(math.floor(normalized * 255 + 0.5))


def map_values_to_grayscale(values, window_min: float, window_max: float) -> np.ndarray:
    """Vectorised ``map_to_grayscale``; returns a uint8 array of ``len(values)``."""
    values = np.asarray(values)
    out = np.empty(values.shape, dtype=np.uint8)
    if values.size == 0:
        return out
    scaled = values.astype(np.float64)
    scaled -= window_min
    scaled /= _effective_range(window_min, window_max)
    np.clip(scaled, 0.0, 1.0, out=scaled)
    np.nan_to_num(scaled, copy=False, nan=0.0)
    scaled *= 255
    scaled += 0.5
    np.floor(scaled, out=scaled)
    out[...] = scaled
    return out


def map_samples_to_grayscale(raw: BufferLike, data_type: Union[ElementType, str],
                             little_endian: bool, window_min: float,
                             window_max: float) -> bytes:
    """Decode ``raw`` and window it; one output byte per complete sample."""
    values = decode_all(raw, data_type, little_endian)
    return map_values_to_grayscale(values, window_min, window_max).tobytes()


__all__ = ["Window", "map_to_grayscale", "map_values_to_grayscale", "map_samples_to_grayscale"]
