"""Turn raw bytes into numeric samples.

Bulk decoding uses ``np.frombuffer`` so the returned arrays are zero-copy
views over the caller's buffer; callers must not expect them to be writable.
"""

from typing import Iterator, Union

import numpy as np

from .element_type import ElementType
from .errors import OutOfBoundsError

BufferLike = Union[bytes, bytearray, memoryview]


def sample_count(buffer: BufferLike, data_type: Union[ElementType, str]) -> int:
    """Number of complete elements in ``buffer``; a trailing partial element is dropped."""
    return len(buffer) // ElementType.parse(data_type).bytes_per_pixel


def decode(buffer: BufferLike, offset: int, data_type: Union[ElementType, str],
           little_endian: bool = True) -> float:
    """Decode the element starting at byte ``offset``."""
    etype = ElementType.parse(data_type)
    width = etype.bytes_per_pixel
    if offset < 0 or offset + width > len(buffer):
        raise OutOfBoundsError(
            f"Cannot decode {etype.value} at offset {offset}: buffer holds {len(buffer)} bytes")
    return etype.decode(memoryview(buffer)[offset:offset + width], little_endian)


def decode_all(buffer: BufferLike, data_type: Union[ElementType, str],
               little_endian: bool = True) -> np.ndarray:
    """All complete elements of ``buffer`` in ascending offset order."""
    etype = ElementType.parse(data_type)
    dtype = etype.dtype(little_endian)
    count = sample_count(buffer, etype)
    if count == 0:
        return np.empty(0, dtype=dtype)
    return np.frombuffer(buffer, dtype=dtype, count=count)


def iter_samples(buffer: BufferLike, data_type: Union[ElementType, str],
                 little_endian: bool = True,
                 chunk_size: int = 1024 * 1024) -> Iterator[np.ndarray]:
    """Lazy form of ``decode_all``: yields views of at most ``chunk_size`` elements."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    etype = ElementType.parse(data_type)
    dtype = etype.dtype(little_endian)
    width = etype.bytes_per_pixel
    total = sample_count(buffer, etype)
    for start in range(0, total, chunk_size):
        count = min(chunk_size, total - start)
        yield np.frombuffer(buffer, dtype=dtype, count=count, offset=start * width)


def encode(value, data_type: Union[ElementType, str], little_endian: bool = True) -> bytes:
    return ElementType.parse(data_type).encode(value, little_endian)


__all__ = ["BufferLike", "sample_count", "decode", "decode_all", "iter_samples", "encode"]
