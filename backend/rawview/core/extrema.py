"""
Global min/max scan used to seed the default display window.

The scan decodes zero-copy chunks and reduces each with ``np.fmin`` /
``np.fmax``; partial results combine with plain comparisons, so chunk order
does not matter. Comparison semantics follow a strict running min/max seeded
with the first sample: NaN samples never replace an ordered value, and a NaN
first sample is never replaced.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Union

import numpy as np

from .decoder import BufferLike, iter_samples
from .element_type import ElementType

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_ELEMENTS = 4 * 1024 * 1024


@dataclass(frozen=True)
class Extrema:
    min_value: float
    max_value: float

    @property
    def is_nan(self) -> bool:
        return math.isnan(self.min_value) or math.isnan(self.max_value)

    def as_tuple(self):
        return self.min_value, self.max_value


def _reduce_chunks(chunks: Iterable[np.ndarray]) -> Optional[Extrema]:
    lo: Optional[float] = None
    hi: Optional[float] = None
    for chunk in chunks:
        if chunk.size == 0:
            continue
        if lo is None:
            seed = float(chunk[0])
            if math.isnan(seed):
                return Extrema(seed, seed)
            lo = hi = seed
        # fmin/fmax skip NaN unless the whole chunk is NaN
        chunk_min = float(np.fmin.reduce(chunk))
        chunk_max = float(np.fmax.reduce(chunk))
        if chunk_min < lo:
            lo = chunk_min
        if chunk_max > hi:
            hi = chunk_max
    if lo is None:
        return None
    return Extrema(lo, hi)


def compute_extrema(buffer: BufferLike, data_type: Union[ElementType, str],
                    little_endian: bool = True,
                    chunk_size: int = DEFAULT_CHUNK_ELEMENTS) -> Extrema:
    """Min and max over every complete element of ``buffer``.

    A buffer shorter than one element yields ``Extrema(0, 0)``.
    """
    etype = ElementType.parse(data_type)
    result = _reduce_chunks(iter_samples(buffer, etype, little_endian, chunk_size))
    if result is None:
        logger.debug("No complete %s element in %d bytes, using (0, 0)", etype.value, len(buffer))
        return Extrema(0.0, 0.0)
    return result


def extrema_of(values) -> Extrema:
    """Same semantics as ``compute_extrema`` for already-decoded samples."""
    result = _reduce_chunks([np.asarray(values).ravel()])
    return result if result is not None else Extrema(0.0, 0.0)


# exposed name used by the viewer-facing API
compute_global_extrema = compute_extrema


__all__ = ["Extrema", "compute_extrema", "compute_global_extrema", "extrema_of"]
