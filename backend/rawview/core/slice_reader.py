"""
Slice extraction for headerless raw volumes.

The volume is stored x-fastest, then y, then z (slice index), so an axial
slice is one contiguous block while a coronal slice gathers row ``y`` from
every z-block.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from numbers import Integral, Real
from typing import Union

import numpy as np

from .decoder import BufferLike
from .element_type import ElementType
from .errors import (
    InvalidMetadataError,
    InvalidSliceIndexError,
    SliceOutOfRangeError,
)

logger = logging.getLogger(__name__)


class ViewingPlane(str, Enum):
    """Planes a slice can be taken along."""
    AXIAL = "axial"       # XY plane, one slice per z
    CORONAL = "coronal"   # XZ plane, one slice per y

    @classmethod
    def parse(cls, plane: Union["ViewingPlane", str]) -> "ViewingPlane":
        if isinstance(plane, cls):
            return plane
        try:
            return cls(str(plane).strip().lower())
        except ValueError:
            raise InvalidMetadataError(f"Unsupported viewing plane: {plane}") from None


@dataclass(frozen=True)
class SliceData:
    data: bytes
    width: int
    height: int
    data_type: ElementType
    plane: ViewingPlane

    @property
    def sample_count(self) -> int:
        return self.width * self.height


def _check_dimension(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidMetadataError(f"Invalid {name}: {value!r}")
    if not math.isfinite(value) or value <= 0 or int(value) != value:
        raise InvalidMetadataError(f"Invalid {name}: {value!r}")
    return int(value)


def validate_metadata(width, height, data_type: Union[ElementType, str]):
    """Validate caller-declared geometry; returns ``(width, height, ElementType)``."""
    width = _check_dimension("width", width)
    height = _check_dimension("height", height)
    return width, height, ElementType.parse(data_type)


def _check_slice_index(slice_index) -> int:
    if isinstance(slice_index, bool) or not isinstance(slice_index, Integral):
        raise InvalidSliceIndexError(f"Slice index must be an integer, got {slice_index!r}")
    if slice_index < 0:
        raise InvalidSliceIndexError("Slice index must be non-negative")
    return int(slice_index)


def max_slice_count(file_size: int, width, height, data_type: Union[ElementType, str],
                    plane: Union[ViewingPlane, str] = ViewingPlane.AXIAL) -> int:
    """How many slices a file of ``file_size`` bytes holds along ``plane``.

    Coronal slices run through the declared height, independent of file size.
    """
    width, height, etype = validate_metadata(width, height, data_type)
    if ViewingPlane.parse(plane) == ViewingPlane.CORONAL:
        return height
    return file_size // (width * height * etype.bytes_per_pixel)


def validate_slice_params(slice_index, width, height, file_size: int,
                          data_type: Union[ElementType, str],
                          plane: Union[ViewingPlane, str] = ViewingPlane.AXIAL) -> None:
    """Raise if ``slice_index`` cannot be served from a file of ``file_size`` bytes."""
    slice_index = _check_slice_index(slice_index)
    max_slices = max_slice_count(file_size, width, height, data_type, plane)
    if slice_index >= max_slices:
        raise SliceOutOfRangeError(
            f"Slice {slice_index} exceeds maximum available slices ({max_slices})")


def extract_slice(buffer: BufferLike, width, height, slice_index,
                  data_type: Union[ElementType, str],
                  plane: Union[ViewingPlane, str] = ViewingPlane.AXIAL) -> SliceData:
    """Return the raw bytes of one 2D slice and its resulting geometry.

    Args:
        buffer: Whole volume contents
        width: Declared x extent in pixels
        height: Declared y extent in pixels
        slice_index: z index (axial) or y index (coronal)
        data_type: Element type name or ``ElementType``
        plane: ``axial`` or ``coronal``

    Returns:
        ``SliceData``; axial slices are ``width x height``, coronal slices are
        ``width x depth`` with ``depth = len(buffer) // (width*height*bpp)``.
    """
    width, height, etype = validate_metadata(width, height, data_type)
    plane = ViewingPlane.parse(plane)
    slice_index = _check_slice_index(slice_index)
    bpp = etype.bytes_per_pixel
    axial_size = width * height * bpp

    if plane == ViewingPlane.CORONAL:
        if slice_index >= height:
            raise SliceOutOfRangeError(
                f"Coronal slice {slice_index} extends beyond image height {height}")
        # bytes past the last full axial slice are ignored
        depth = len(buffer) // axial_size
        row_bytes = width * bpp
        if depth == 0:
            data = b""
        else:
            volume = np.frombuffer(buffer, dtype=np.uint8, count=depth * axial_size)
            data = volume.reshape(depth, height, row_bytes)[:, slice_index, :].tobytes()
        logger.debug("Coronal slice y=%d: %dx%d %s", slice_index, width, depth, etype.value)
        return SliceData(data, width, depth, etype, plane)

    offset = slice_index * axial_size
    if offset + axial_size > len(buffer):
        raise SliceOutOfRangeError(
            f"Axial slice {slice_index} extends beyond file size ({len(buffer)} bytes)")
    data = bytes(memoryview(buffer)[offset:offset + axial_size])
    logger.debug("Axial slice z=%d: %dx%d %s", slice_index, width, height, etype.value)
    return SliceData(data, width, height, etype, plane)


__all__ = [
    "ViewingPlane",
    "SliceData",
    "validate_metadata",
    "validate_slice_params",
    "max_slice_count",
    "extract_slice",
]
