"""Entry points the viewer layer calls.

Thin wrappers over the core modules so the service and CLI depend on one
import site.
"""

from typing import Union

from .element_type import ElementType, bytes_per_pixel
from .extrema import Extrema, compute_global_extrema
from .slice_reader import SliceData, ViewingPlane, extract_slice, max_slice_count
from .window import map_samples_to_grayscale


def get_bytes_per_pixel(data_type: Union[ElementType, str]) -> int:
    return bytes_per_pixel(data_type)


__all__ = [
    "ElementType",
    "ViewingPlane",
    "SliceData",
    "Extrema",
    "get_bytes_per_pixel",
    "extract_slice",
    "compute_global_extrema",
    "map_samples_to_grayscale",
    "max_slice_count",
]
