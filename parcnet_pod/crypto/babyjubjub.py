"""
parcnet_pod/crypto/babyjubjub.py

BabyJubjub twisted Edwards curve over the BN254 scalar field:

    a*x^2 + y^2 = 1 + d*x^2*y^2,   a = 168700, d = 168696

Points are affine (x, y) tuples; the identity is (0, 1). Packing follows
circomlib: y as 32 little-endian bytes with the top bit of the last byte
set when x is "negative" (x > (p-1)/2).
"""

from typing import Tuple

from parcnet_pod.core.exceptions import DecodeError
from parcnet_pod.crypto.field import FIELD_MODULUS, inv, is_negative, sqrt

Point = Tuple[int, int]

A = 168700
D = 168696

ORDER     = 21888242871839275222246405745257275088614511777268538073601725287587578984328
SUB_ORDER = ORDER >> 3

IDENTITY: Point = (0, 1)

BASE8: Point = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)

PACKED_POINT_SIZE = 32


def add(p1: Point, p2: Point) -> Point:
    x1, y1 = p1
    x2, y2 = p2
    q   = FIELD_MODULUS
    dxy = D * x1 * x2 * y1 * y2 % q
    x3  = (x1 * y2 + y1 * x2) * inv(1 + dxy) % q
    y3  = (y1 * y2 - A * x1 * x2) * inv(1 - dxy) % q
    return x3, y3


def mul(point: Point, scalar: int) -> Point:
    """Double-and-add scalar multiplication, scalar >= 0."""
    if scalar < 0:
        raise ValueError("Scalar must be non-negative")
    result = IDENTITY
    addend = point
    while scalar:
        if scalar & 1:
            result = add(result, addend)
        addend = add(addend, addend)
        scalar >>= 1
    return result


def in_curve(point: Point) -> bool:
    x, y = point
    q  = FIELD_MODULUS
    x2 = x * x % q
    y2 = y * y % q
    return (A * x2 + y2) % q == (1 + D * x2 * y2) % q


def pack_point(point: Point) -> bytes:
    x, y = point
    packed = bytearray(y.to_bytes(PACKED_POINT_SIZE, "little"))
    if is_negative(x):
        packed[31] |= 0x80
    return bytes(packed)


def unpack_point(packed: bytes) -> Point:
    """
    Decompress a packed point. Raises DecodeError when the bytes are not
    32 long, y is not canonical, or no x satisfies the curve equation.
    """
    if len(packed) != PACKED_POINT_SIZE:
        raise DecodeError("Packed point must be 32 bytes", {"length": len(packed)})
    buf  = bytearray(packed)
    sign = bool(buf[31] & 0x80)
    buf[31] &= 0x7F
    y = int.from_bytes(buf, "little")
    if y >= FIELD_MODULUS:
        raise DecodeError("Packed point y is not a field element")

    q   = FIELD_MODULUS
    y2  = y * y % q
    den = (A - D * y2) % q
    if den == 0:
        raise DecodeError("Packed point has no x coordinate")
    x = sqrt((1 - y2) * inv(den))
    if x is None:
        raise DecodeError("Packed point is not on the curve")
    if sign:
        x = (q - x) % q
    return x, y
