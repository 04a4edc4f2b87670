"""
8-bit Floating Point Tests
==========================

Tests for the sign / excess-4 exponent / 4-bit mantissa byte format used
by the FLOATING_POINT_ADD instruction.
"""

import pytest

from simpsim.cpu.floating import decode_float, encode_float, float_add


class TestDecode:

    @pytest.mark.parametrize("byte,expected", [
        (0x00, 0.0),
        (0x48, 0.5),
        (0x58, 1.0),
        (0x6B, 2.75),
        (0x7F, 7.5),
        (0xC8, -0.5),
        (0x01, 1 / 256),
    ])
    def test_decode(self, byte, expected):
        assert decode_float(byte) == expected


class TestEncode:

    @pytest.mark.parametrize("value,expected", [
        (0.0, 0x00),
        (0.5, 0x48),
        (1.0, 0x58),
        (2.75, 0x6B),
        (-0.5, 0xC8),
        (7.5, 0x7F),
    ])
    def test_exact_values(self, value, expected):
        assert encode_float(value) == expected

    def test_truncates_toward_zero(self):
        # 2.9 needs more than four mantissa bits; the extra bits are dropped.
        assert encode_float(2.9) == 0x6B
        assert encode_float(-2.9) == 0xEB

    def test_overflow_saturates(self):
        assert encode_float(100.0) == 0x7F
        assert encode_float(-100.0) == 0xFF
        assert encode_float(float("inf")) == 0x7F

    def test_underflow_flushes_to_zero(self):
        assert encode_float(1 / 1024) == 0x00

    def test_nan_encodes_as_zero(self):
        assert encode_float(float("nan")) == 0x00


class TestFloatAdd:

    def test_half_plus_half(self):
        assert float_add(0x48, 0x48) == 0x58

    def test_one_plus_one(self):
        # 1.0 + 1.0 = 2.0 = 0.1000 * 2^2
        assert float_add(0x58, 0x58) == 0x68

    def test_opposite_signs_cancel(self):
        assert float_add(0x58, 0xD8) == 0x00

    def test_zero_is_identity(self):
        assert float_add(0x6B, 0x00) == 0x6B

    def test_saturates(self):
        assert float_add(0x7F, 0x7F) == 0x7F
