"""Errors raised while interpreting a raw volume buffer.

All of them derive from ``VolumeError`` (a ``ValueError``) so callers that
only care about "bad request" can catch a single type.
"""


class VolumeError(ValueError):
    """Base class for raw volume interpretation errors."""


class InvalidMetadataError(VolumeError):
    """Width/height not finite positive integers, or an unknown element type / plane."""


class UnsupportedTypeError(InvalidMetadataError):
    """Element type name outside the supported catalogue."""


class InvalidSliceIndexError(VolumeError):
    """Negative (or non-integer) slice index."""


class SliceOutOfRangeError(VolumeError):
    """Requested slice does not fit in the buffer, or coronal index >= height."""


class OutOfBoundsError(VolumeError):
    """Decode offset outside the buffer."""


class SizeLimitExceededError(VolumeError):
    """File larger than the configured in-memory ceiling."""


class EmptyBufferError(VolumeError):
    """No complete element in the buffer.

    The extremum scanner reports this case as a ``(0, 0)`` window instead of
    raising; the type exists for callers that want to signal it explicitly.
    """


__all__ = [
    "VolumeError",
    "InvalidMetadataError",
    "UnsupportedTypeError",
    "InvalidSliceIndexError",
    "SliceOutOfRangeError",
    "OutOfBoundsError",
    "SizeLimitExceededError",
    "EmptyBufferError",
]
