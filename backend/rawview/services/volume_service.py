"""VolumeService: the viewer-facing side of the raw volume engine.

Responsible for:
  - Listing raw volume files (.raw / .bin) under the data root
  - Resolving a volume name to a file path without escaping the data root
  - Reporting file info and slice counts from the file size alone
  - Extracting slices and encoding them as raw bytes, windowed 8-bit
    grayscale bytes, or PNG
  - Global window (min/max over the whole volume), memoised per buffer
  - Slice histograms and percentile windows

The geometry of a volume (width, height, element type, byte order) is never
stored: every call carries it, and the same file may be read under different
interpretations one request after another.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import PIL.Image

from ..core.decoder import decode_all
from ..core.element_type import ElementType
from ..core.engine import Extrema, ViewingPlane, extract_slice, max_slice_count
from ..core.extrema import extrema_of
from ..core.histogram import compute_histogram, percentile_range
from ..core.slice_reader import validate_slice_params
from ..core.window import Window, map_values_to_grayscale
from ..models.volume import (
    HistogramInfo,
    SliceCount,
    SliceEncoding,
    VolumeFile,
    VolumeInfo,
    WindowInfo,
)
from ..config import settings
from .file_cache import FileCache

logger = logging.getLogger(__name__)


@dataclass
class SliceResult:
    content:    bytes
    media_type: str
    width:      int
    height:     int
    window:     Optional[Window]   # None for raw payloads


def window_info(window: Union[Window, Extrema]) -> WindowInfo:
    """JSON-safe window; non-finite bounds (NaN, +-inf) become None."""
    if isinstance(window, Extrema):
        lo, hi = window.min_value, window.max_value
    else:
        lo, hi = window.window_min, window.window_max
    return WindowInfo(
        window_min = float(lo) if np.isfinite(lo) else None,
        window_max = float(hi) if np.isfinite(hi) else None,
    )


class VolumeService:
    """Serves slices and windows of raw volumes under a data root."""

    def __init__(self, data_root: Path | None = None, cache: FileCache | None = None):
        # Default to configured data root from settings if not provided
        self.data_root = Path(data_root or settings.data_root_path)
        self.cache = cache if cache is not None else FileCache(
            max_file_size          = settings.max_file_size,
            max_items              = settings.max_cached_files,
            extrema_chunk_elements = settings.extrema_chunk_elements,
        )
        self.extensions = tuple(ext.lower() for ext in settings.supported_extensions)

    # -------------------- Files --------------------
    def list_volumes(self) -> List[VolumeFile]:
        if not self.data_root.exists():
            raise FileNotFoundError(f"Data root not found: {self.data_root}")
        volumes = []
        for path in sorted(self.data_root.rglob('*')):
            if path.is_file() and path.suffix.lower() in self.extensions:
                volumes.append(VolumeFile(
                    name      = path.relative_to(self.data_root).as_posix(),
                    file_size = path.stat().st_size,
                ))
        return volumes

    def _candidate_path(self, name: str) -> Path:
        root = self.data_root.resolve()
        path = (root / name).resolve()
        if root != path and root not in path.parents:
            raise ValueError(f"Volume name escapes the data root: {name}")
        if path.suffix.lower() not in self.extensions:
            raise ValueError(f"Unsupported file extension '{path.suffix}', expected one of {list(self.extensions)}")
        return path

    def resolve_path(self, name: str) -> Path:
        path = self._candidate_path(name)
        if not path.is_file():
            raise FileNotFoundError(f"Volume not found: {name}")
        return path

    def get_file_info(self, name: str) -> VolumeInfo:
        path = self.resolve_path(name)
        return VolumeInfo(
            name          = name,
            file_size     = path.stat().st_size,
            cached        = self.cache.is_cached(path),
            max_file_size = self.cache.max_file_size,
        )

    # -------------------- Geometry --------------------
    def slice_count(self, name: str, width: int, height: int,
                    data_type: Union[ElementType, str], plane: Union[ViewingPlane, str]) -> SliceCount:
        path = self.resolve_path(name)
        plane = ViewingPlane.parse(plane)
        count = max_slice_count(path.stat().st_size, width, height, data_type, plane)
        return SliceCount(name=name, plane=plane.value, count=count)

    # -------------------- Slices --------------------
    def _load_slice(self, name: str, width: int, height: int, slice_index: int,
                    data_type: Union[ElementType, str], plane: Union[ViewingPlane, str]):
        path = self.resolve_path(name)
        # reject bad requests from the file size before reading the whole file
        validate_slice_params(slice_index, width, height, path.stat().st_size, data_type, plane)
        buffer = self.cache.get(path)
        return extract_slice(buffer, width, height, slice_index, data_type, plane)

    def read_slice(self, name: str, width: int, height: int, slice_index: int,
                   data_type: Union[ElementType, str], little_endian: bool = True,
                   plane: Union[ViewingPlane, str] = ViewingPlane.AXIAL,
                   window_min: Optional[float] = None, window_max: Optional[float] = None,
                   encoding: Union[SliceEncoding, str] = SliceEncoding.GRAY) -> SliceResult:
        """Extract one slice and encode it.

        Missing window bounds are taken from the slice's own min/max. An
        inverted window is swapped before mapping.
        """
        encoding = SliceEncoding(encoding)
        sl = self._load_slice(name, width, height, slice_index, data_type, plane)
        if encoding == SliceEncoding.RAW:
            return SliceResult(sl.data, 'application/octet-stream', sl.width, sl.height, None)

        values = decode_all(sl.data, sl.data_type, little_endian)
        if window_min is None or window_max is None:
            extrema = extrema_of(values)
            window_min = extrema.min_value if window_min is None else window_min
            window_max = extrema.max_value if window_max is None else window_max
        window = Window(window_min, window_max).normalized()
        gray = map_values_to_grayscale(values, window.window_min, window.window_max)
        logger.debug("Windowed slice %s/%s/%d to [%s, %s]",
                     name, sl.plane.value, slice_index, window.window_min, window.window_max)

        if encoding == SliceEncoding.PNG:
            content = self._gray_to_png(gray, sl.width, sl.height)
            return SliceResult(content, 'image/png', sl.width, sl.height, window)
        return SliceResult(gray.tobytes(), 'application/octet-stream', sl.width, sl.height, window)

    def _gray_to_png(self, gray: np.ndarray, width: int, height: int) -> bytes:
        """Encode a windowed slice as a lossless grayscale PNG"""
        if gray.size == 0:
            raise ValueError("Slice is empty; nothing to encode as PNG")
        image = PIL.Image.fromarray(gray.reshape(height, width))
        with BytesIO() as output:
            image.save(output, format="PNG", optimize=True)
            return output.getvalue()

    # -------------------- Windows --------------------
    def global_window(self, name: str, data_type: Union[ElementType, str],
                      little_endian: bool = True) -> Extrema:
        path = self.resolve_path(name)
        return self.cache.get_extrema(path, data_type, little_endian)

    def histogram(self, name: str, width: int, height: int, slice_index: int,
                  data_type: Union[ElementType, str], little_endian: bool = True,
                  plane: Union[ViewingPlane, str] = ViewingPlane.AXIAL,
                  num_bins: Optional[int] = None,
                  lower: float = 0.0, upper: float = 1.0) -> HistogramInfo:
        sl = self._load_slice(name, width, height, slice_index, data_type, plane)
        values = decode_all(sl.data, sl.data_type, little_endian)
        range_min, range_max = percentile_range(values, 0.0, 1.0)
        bins = compute_histogram(values, num_bins or settings.histogram_bins, range_min, range_max)
        p_low, p_high = percentile_range(values, lower, upper)
        return HistogramInfo(
            slice             = slice_index,
            plane             = sl.plane.value,
            bins              = bins.tolist(),
            range_min         = range_min,
            range_max         = range_max,
            percentile_window = window_info(Window(p_low, p_high)),
        )

    # -------------------- Cache lifecycle --------------------
    def evict(self, name: str) -> bool:
        """Drop a volume's buffer, e.g. when the viewer session showing it closes."""
        return self.cache.evict(self._candidate_path(name))

    def clear_cache(self):
        self.cache.clear()
