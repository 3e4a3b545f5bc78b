"""Element type catalogue for headerless raw volumes.

Each ``ElementType`` member knows its byte width and how to turn a byte span
into a number (and back) at a given byte order. Every other component asks
the enum instead of switching on type-name strings.
"""

from enum import Enum
from typing import Union

import numpy as np

from .errors import UnsupportedTypeError


class ElementType(str, Enum):
    """Numeric encoding of one sample."""
    UINT8 = "uint8"
    INT8 = "int8"
    UINT16 = "uint16"
    INT16 = "int16"
    UINT32 = "uint32"
    INT32 = "int32"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @classmethod
    def parse(cls, data_type: Union["ElementType", str]) -> "ElementType":
        if isinstance(data_type, cls):
            return data_type
        try:
            return cls(str(data_type).strip().lower())
        except ValueError:
            raise UnsupportedTypeError(f"Unsupported data type: {data_type}") from None

    @property
    def bytes_per_pixel(self) -> int:
        return _BYTE_WIDTHS[self]

    @property
    def is_float(self) -> bool:
        return self in (ElementType.FLOAT32, ElementType.FLOAT64)

    def dtype(self, little_endian: bool = True) -> np.dtype:
        """numpy dtype with explicit byte order (no-op for single-byte types)."""
        dt = np.dtype(self.value)
        if dt.itemsize == 1:
            return dt
        return dt.newbyteorder("<" if little_endian else ">")

    def decode(self, span, little_endian: bool = True) -> float:
        """Decode exactly one element from ``span`` (length == bytes_per_pixel)."""
        value = np.frombuffer(span, dtype=self.dtype(little_endian), count=1)[0]
        return float(value)

    def encode(self, value, little_endian: bool = True) -> bytes:
        """Inverse of ``decode``; integers must be within the type's range."""
        if not self.is_float:
            info = np.iinfo(self.value)
            if int(value) != value or not info.min <= int(value) <= info.max:
                raise ValueError(f"{value!r} is not representable as {self.value}")
            value = int(value)
        return np.array([value], dtype=self.dtype(little_endian)).tobytes()


_BYTE_WIDTHS = {
    ElementType.UINT8: 1,
    ElementType.INT8: 1,
    ElementType.UINT16: 2,
    ElementType.INT16: 2,
    ElementType.UINT32: 4,
    ElementType.INT32: 4,
    ElementType.FLOAT32: 4,
    ElementType.FLOAT64: 8,
}


def bytes_per_pixel(data_type: Union[ElementType, str]) -> int:
    """Byte width of one sample of ``data_type``.

    Raises:
        UnsupportedTypeError: for names outside the catalogue.
    """
    return ElementType.parse(data_type).bytes_per_pixel


__all__ = ["ElementType", "bytes_per_pixel"]
