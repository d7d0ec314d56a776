"""
parcnet_pod/core/hashing.py

Content addressing for POD entries.

    name hash      = SHA-256(utf8(name))[:31] as a big-endian integer
    value hash     = per-kind rule below
    content ID     = lean Poseidon IMT root over
                     [nameHash_0, valueHash_0, nameHash_1, valueHash_1, ...]
                     with names sorted byte-wise

    string, bytes  : SHA-256 truncated to 31 bytes, big-endian
    boolean        : Poseidon([0 | 1])
    int            : Poseidon([v mod p])
    cryptographic  : Poseidon([v])
    date           : Poseidon([ms mod p])
    null           : 0x1d repeated 32 times, reduced mod p
    eddsa_pubkey   : Poseidon([x, y]) of the decompressed point
"""

import hashlib
import logging
from typing import List, Mapping

from parcnet_pod.core.exceptions import EmptyEntriesError, ValueFormatError
from parcnet_pod.core.values import PodValue, PodValueKind
from parcnet_pod.crypto.babyjubjub import unpack_point
from parcnet_pod.crypto.field import FIELD_MODULUS
from parcnet_pod.crypto.lean_imt import lean_poseidon_imt
from parcnet_pod.crypto.poseidon import poseidon_hash

logger = logging.getLogger(__name__)

NULL_HASH = int.from_bytes(b"\x1d" * 32, "big") % FIELD_MODULUS


def hash_bytes(data: bytes) -> int:
    return int.from_bytes(hashlib.sha256(data).digest()[:31], "big")


def hash_string(text: str) -> int:
    return hash_bytes(text.encode("utf-8"))


def hash_name(name: str) -> int:
    return hash_string(name)


def hash_value(value: PodValue) -> int:
    kind, payload = value.kind, value.value
    if kind == PodValueKind.STRING:
        return hash_string(payload)
    if kind == PodValueKind.BYTES:
        return hash_bytes(payload)
    if kind == PodValueKind.BOOLEAN:
        return poseidon_hash([1 if payload else 0])
    if kind in (PodValueKind.INT, PodValueKind.DATE):
        return poseidon_hash([payload % FIELD_MODULUS])
    if kind == PodValueKind.CRYPTOGRAPHIC:
        return poseidon_hash([payload])
    if kind == PodValueKind.NULL:
        return NULL_HASH
    if kind == PodValueKind.EDDSA_PUBKEY:
        x, y = unpack_point(value.pubkey_bytes())
        return poseidon_hash([x, y])
    raise ValueFormatError("Unknown POD value kind", {"kind": kind})


def sorted_names(entries: Mapping[str, PodValue]) -> List[str]:
    return sorted(entries, key=lambda name: name.encode("utf-8"))


def compute_content_id(entries: Mapping[str, PodValue]) -> int:
    """
    Content ID of an already-validated entry mapping.
    Raises EmptyEntriesError for an empty mapping.
    """
    if not entries:
        raise EmptyEntriesError("Cannot compute content ID of empty entries")
    leaves: List[int] = []
    for name in sorted_names(entries):
        leaves.append(hash_name(name))
        leaves.append(hash_value(entries[name]))
    content_id = lean_poseidon_imt(leaves)
    logger.debug("Computed content ID over %d entries: %d", len(entries), content_id)
    return content_id
