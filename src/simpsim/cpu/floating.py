"""
8-bit Floating Point Format
===========================

The FLOATING_POINT_ADD instruction treats register bytes as tiny floating
point numbers with the layout used in introductory computer-science texts:

    7   6 5 4   3 2 1 0
    +---+-------+-------+
    | s |  exp  | mant  |
    +---+-------+-------+

- s:    sign bit (1 = negative)
- exp:  3-bit exponent in excess-4 notation (stored 0..7 means -4..+3)
- mant: 4-bit mantissa with the radix point to its left (0.mmmm)

    value = (-1)^s * 0.mmmm(binary) * 2^(exp - 4)

Examples:
    0x48  0 100 1000  = +0.1000 * 2^0  = 0.5
    0x58  0 101 1000  = +0.1000 * 2^1  = 1.0
    0x6B  0 110 1011  = +0.1011 * 2^2  = 2.75
    0xC8  1 100 1000  = -0.1000 * 2^0  = -0.5

Encoding normalizes the mantissa so that its top bit is set, truncates any
bits that do not fit (round toward zero), saturates at the largest
magnitude (7.5) and flushes values below 1/256 to zero. Zero always
encodes as 0x00.
"""

import math

SIGN_BIT = 0x80
EXPONENT_BIAS = 4
MAX_EXPONENT = 7
MANTISSA_BITS = 4

# 0 111 1111 = 0.1111 * 2^3
MAX_MAGNITUDE = 0x7F


def decode_float(value: int) -> float:
    """Convert an 8-bit float encoding into a Python float."""
    value &= 0xFF
    exponent = (value >> MANTISSA_BITS) & 0x07
    mantissa = value & 0x0F
    magnitude = math.ldexp(mantissa, exponent - EXPONENT_BIAS - MANTISSA_BITS)
    return -magnitude if value & SIGN_BIT else magnitude


def encode_float(value: float) -> int:
    """Convert a Python float into the nearest 8-bit encoding toward zero."""
    if value == 0 or math.isnan(value):
        return 0x00

    sign = SIGN_BIT if value < 0 else 0
    magnitude = abs(value)

    if math.isinf(magnitude):
        return sign | MAX_MAGNITUDE

    fraction, power = math.frexp(magnitude)  # magnitude = fraction * 2^power
    exponent = power + EXPONENT_BIAS

    if exponent > MAX_EXPONENT:
        return sign | MAX_MAGNITUDE

    if exponent < 0:
        # Too small to normalize: store denormalized at the lowest exponent.
        mantissa = int(math.ldexp(magnitude, EXPONENT_BIAS + MANTISSA_BITS))
        if mantissa == 0:
            return 0x00
        return sign | mantissa

    mantissa = int(fraction * (1 << MANTISSA_BITS))
    return sign | (exponent << MANTISSA_BITS) | mantissa


def float_add(a: int, b: int) -> int:
    """Add two 8-bit floats, returning the 8-bit encoding of the sum."""
    return encode_float(decode_float(a) + decode_float(b))
