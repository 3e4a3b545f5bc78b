"""
Tests for the element type catalogue and the sample decoder
"""

import math
import struct

import numpy as np
import pytest

from rawview.core.element_type import ElementType, bytes_per_pixel
from rawview.core.decoder import decode, decode_all, encode, iter_samples, sample_count
from rawview.core.errors import InvalidMetadataError, OutOfBoundsError, UnsupportedTypeError


class TestTypeCatalog:
    """bytes_per_pixel and ElementType.parse"""

    @pytest.mark.parametrize("name,width", [
        ("uint8", 1), ("int8", 1), ("uint16", 2), ("int16", 2),
        ("uint32", 4), ("int32", 4), ("float32", 4), ("float64", 8),
    ])
    def test_widths(self, name, width):
        assert bytes_per_pixel(name) == width
        assert ElementType(name).bytes_per_pixel == width

    def test_width_matches_numpy(self):
        for etype in ElementType:
            assert etype.bytes_per_pixel == np.dtype(etype.value).itemsize

    @pytest.mark.parametrize("name", ["unknown", "uint64", "float16", ""])
    def test_unsupported(self, name):
        with pytest.raises(UnsupportedTypeError):
            bytes_per_pixel(name)

    def test_unsupported_is_invalid_metadata(self):
        assert issubclass(UnsupportedTypeError, InvalidMetadataError)

    def test_parse_is_case_insensitive(self):
        assert ElementType.parse(" Float32 ") is ElementType.FLOAT32
        assert ElementType.parse(ElementType.INT8) is ElementType.INT8

    def test_single_byte_dtype_ignores_order(self):
        assert ElementType.UINT8.dtype(True) == ElementType.UINT8.dtype(False)
        assert ElementType.UINT16.dtype(False).byteorder == '>'


class TestDecode:
    """Scalar decode"""

    def test_uint16_both_orders(self):
        buf = bytes([0x01, 0x02])
        assert decode(buf, 0, "uint16", True) == 0x0201
        assert decode(buf, 0, "uint16", False) == 0x0102

    def test_signed(self):
        assert decode(b"\xff", 0, "int8") == -1
        assert decode(b"\xff", 0, "uint8") == 255
        assert decode(struct.pack(">i", -123456), 0, "int32", False) == -123456

    def test_uint32_exact(self):
        assert decode(struct.pack("<I", 2**32 - 1), 0, "uint32") == 4294967295.0

    def test_floats(self):
        assert decode(struct.pack("<f", 1.5), 0, "float32") == 1.5
        assert decode(struct.pack(">d", -2.25), 0, "float64", False) == -2.25
        assert math.isnan(decode(struct.pack("<f", float("nan")), 0, "float32"))

    def test_offset(self):
        buf = struct.pack("<hhh", 1, -2, 3)
        assert decode(buf, 2, "int16") == -2

    @pytest.mark.parametrize("offset", [-1, 3, 4])
    def test_out_of_bounds(self, offset):
        with pytest.raises(OutOfBoundsError):
            decode(b"\x00\x00\x00\x00", offset, "uint16")

    def test_returns_float(self):
        assert isinstance(decode(b"\x07", 0, "uint8"), float)


class TestDecodeAll:
    """Bulk and lazy decoding"""

    def test_ascending_order(self):
        buf = struct.pack("<4H", 10, 20, 30, 40)
        assert decode_all(buf, "uint16").tolist() == [10, 20, 30, 40]

    def test_trailing_partial_element_dropped(self):
        buf = struct.pack("<2f", 1.0, 2.0) + b"\x01\x02\x03"
        values = decode_all(buf, "float32")
        assert values.tolist() == [1.0, 2.0]
        assert sample_count(buf, "float32") == 2

    def test_empty(self):
        assert decode_all(b"\x01", "uint16").size == 0
        assert decode_all(b"", "uint8").size == 0

    def test_big_endian(self):
        buf = struct.pack(">3i", -1, 0, 7)
        assert decode_all(buf, "int32", little_endian=False).tolist() == [-1, 0, 7]

    def test_iter_samples_matches_decode_all(self):
        buf = np.arange(1000, dtype='<u2').tobytes() + b"\x00"
        chunks = list(iter_samples(buf, "uint16", chunk_size=128))
        assert len(chunks) == 8
        assert np.concatenate(chunks).tolist() == list(range(1000))

    def test_iter_samples_rejects_bad_chunk(self):
        with pytest.raises(ValueError):
            list(iter_samples(b"\x00", "uint8", chunk_size=0))


class TestEncode:
    """encode is the inverse of decode"""

    @pytest.mark.parametrize("name,value", [
        ("uint8", 255), ("int8", -128), ("uint16", 65535), ("int16", -32768),
        ("uint32", 4294967295), ("int32", -2147483648),
        ("float32", 3.5), ("float32", -0.0), ("float64", 1e-300), ("float64", float("inf")),
    ])
    @pytest.mark.parametrize("little_endian", [True, False])
    def test_round_trip(self, name, value, little_endian):
        raw = encode(value, name, little_endian)
        assert len(raw) == bytes_per_pixel(name)
        decoded = decode(raw, 0, name, little_endian)
        assert decoded == value
        assert encode(decoded, name, little_endian) == raw

    def test_float_bit_pattern_preserved(self):
        raw = struct.pack("<f", 1.1754943508222875e-38)  # smallest normal float32
        assert encode(decode(raw, 0, "float32"), "float32") == raw

    def test_out_of_range_integer(self):
        with pytest.raises(ValueError):
            encode(256, "uint8")
        with pytest.raises(ValueError):
            encode(1.5, "int16")
