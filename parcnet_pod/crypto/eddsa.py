"""
parcnet_pod/crypto/eddsa.py

EdDSA over BabyJubjub with Poseidon as the challenge hash, as produced by
circomlibjs signPoseidon and @zk-kit/eddsa-poseidon.

    private key : 32 arbitrary bytes
    public key  : Base8 * (s >> 3), s from the pruned BLAKE-512 of the key
    signature   : pack(R8) || S as 32-byte little-endian (64 bytes)
    message     : one field element
"""

from typing import Tuple

from parcnet_pod.crypto import babyjubjub
from parcnet_pod.crypto.babyjubjub import BASE8, SUB_ORDER, Point
from parcnet_pod.crypto.blake512 import blake512
from parcnet_pod.crypto.field import FIELD_MODULUS
from parcnet_pod.crypto.poseidon import poseidon_hash

PRIVATE_KEY_SIZE = 32
SIGNATURE_SIZE   = 64


def _prune(digest: bytes) -> bytes:
    buf = bytearray(digest[:32])
    buf[0]  &= 0xF8
    buf[31] &= 0x7F
    buf[31] |= 0x40
    return bytes(buf)


def _secret_scalar(private_key: bytes) -> Tuple[int, bytes]:
    if len(private_key) != PRIVATE_KEY_SIZE:
        raise ValueError(f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(private_key)}")
    digest = blake512(private_key)
    s = int.from_bytes(_prune(digest), "little")
    return s, digest[32:]


def derive_public_key(private_key: bytes) -> Point:
    s, _ = _secret_scalar(private_key)
    return babyjubjub.mul(BASE8, s >> 3)


def sign(private_key: bytes, message: int) -> Tuple[Point, int]:
    """Sign a field element. Returns (R8, S)."""
    if not 0 <= message < FIELD_MODULUS:
        raise ValueError("Message must be a field element")
    s, prefix = _secret_scalar(private_key)
    a  = babyjubjub.mul(BASE8, s >> 3)
    r  = int.from_bytes(blake512(prefix + message.to_bytes(32, "little")), "little") % SUB_ORDER
    r8 = babyjubjub.mul(BASE8, r)
    hm = poseidon_hash([r8[0], r8[1], a[0], a[1], message])
    return r8, (r + hm * s) % SUB_ORDER


def verify(public_key: Point, message: int, r8: Point, s: int) -> bool:
    """Check Base8*S == R8 + A*(8*hm). Malformed points or S give False."""
    if not babyjubjub.in_curve(public_key) or not babyjubjub.in_curve(r8):
        return False
    if not 0 <= s < SUB_ORDER:
        return False
    hm    = poseidon_hash([r8[0], r8[1], public_key[0], public_key[1], message])
    left  = babyjubjub.mul(BASE8, s)
    right = babyjubjub.add(r8, babyjubjub.mul(public_key, 8 * hm))
    return left == right


def pack_signature(r8: Point, s: int) -> bytes:
    return babyjubjub.pack_point(r8) + s.to_bytes(32, "little")


def unpack_signature(signature: bytes) -> Tuple[Point, int]:
    """Split a 64-byte signature into (R8, S). Raises DecodeError on a bad R8."""
    if len(signature) != SIGNATURE_SIZE:
        raise ValueError(f"Signature must be {SIGNATURE_SIZE} bytes, got {len(signature)}")
    r8 = babyjubjub.unpack_point(signature[:32])
    return r8, int.from_bytes(signature[32:], "little")
