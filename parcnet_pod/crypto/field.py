"""
parcnet_pod/crypto/field.py

Arithmetic in the BN254 scalar field, which is the base field of
BabyJubjub and the field Poseidon hashes over.
"""

from typing import Optional

FIELD_MODULUS = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)

# p - 1 = 2^28 * odd
_TWO_ADICITY = 28
_ODD_PART    = (FIELD_MODULUS - 1) >> _TWO_ADICITY
_HALF        = (FIELD_MODULUS - 1) // 2


def inv(value: int) -> int:
    value %= FIELD_MODULUS
    if value == 0:
        raise ZeroDivisionError("0 has no inverse in the field")
    return pow(value, FIELD_MODULUS - 2, FIELD_MODULUS)


def is_negative(value: int) -> bool:
    """Sign convention for point compression: x > (p-1)/2."""
    return value % FIELD_MODULUS > _HALF


def _non_residue() -> int:
    candidate = 2
    while pow(candidate, _HALF, FIELD_MODULUS) != FIELD_MODULUS - 1:
        candidate += 1
    return candidate


_Z = pow(_non_residue(), _ODD_PART, FIELD_MODULUS)


def sqrt(value: int) -> Optional[int]:
    """
    Tonelli-Shanks square root. Returns the root that is not negative
    under is_negative(), or None when value is a non-residue.
    """
    value %= FIELD_MODULUS
    if value == 0:
        return 0
    if pow(value, _HALF, FIELD_MODULUS) != 1:
        return None

    m = _TWO_ADICITY
    c = _Z
    t = pow(value, _ODD_PART, FIELD_MODULUS)
    r = pow(value, (_ODD_PART + 1) // 2, FIELD_MODULUS)
    while t != 1:
        i  = 1
        t2 = t * t % FIELD_MODULUS
        while t2 != 1:
            t2 = t2 * t2 % FIELD_MODULUS
            i += 1
        b = pow(c, 1 << (m - i - 1), FIELD_MODULUS)
        m = i
        c = b * b % FIELD_MODULUS
        t = t * c % FIELD_MODULUS
        r = r * b % FIELD_MODULUS

    if is_negative(r):
        r = FIELD_MODULUS - r
    return r
