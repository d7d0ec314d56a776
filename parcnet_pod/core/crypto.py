"""
parcnet_pod/core/crypto.py

POD Signing Layer: EdDSA-Poseidon over BabyJubjub

Key contracts:
    public_key          : @property → encoded 32-byte packed point
    sign(entries)       : PodEntries → signed Pod
    sign_content_id(id) : field element → encoded 64-byte signature
    verify_detached(..) : @staticmethod, verifies with ONLY the encoded
                          public key and signature, as stored on a Pod

Encodings:
    private key in  : 64 hex chars, or base64 padded/unpadded, or raw bytes
    output          : base64 unpadded (default) or lowercase hex
"""

import logging
import secrets
from pathlib import Path
from typing import Any, Mapping, Union

from parcnet_pod.core.encoding import (
    ENCODING_BASE64,
    ENCODINGS,
    decode_fixed,
    encode_fixed,
)
from parcnet_pod.core.exceptions import KeyFormatError, SignatureFormatError
from parcnet_pod.crypto import eddsa
from parcnet_pod.crypto.babyjubjub import pack_point, unpack_point

logger = logging.getLogger(__name__)

PRIVATE_KEY_SIZE = eddsa.PRIVATE_KEY_SIZE
PUBLIC_KEY_SIZE  = 32
SIGNATURE_SIZE   = eddsa.SIGNATURE_SIZE


def parse_private_key(private_key: Union[str, bytes]) -> bytes:
    """Decode a private key to its 32 raw bytes. Raises KeyFormatError."""
    if isinstance(private_key, (bytes, bytearray)):
        if len(private_key) != PRIVATE_KEY_SIZE:
            raise KeyFormatError(
                f"Private key must be {PRIVATE_KEY_SIZE} bytes",
                {"length": len(private_key)},
            )
        return bytes(private_key)
    return decode_fixed(private_key, PRIVATE_KEY_SIZE, "private key", KeyFormatError)


def decode_public_key(public_key: str) -> bytes:
    return decode_fixed(public_key, PUBLIC_KEY_SIZE, "signer public key", KeyFormatError)


def decode_signature(signature: str) -> bytes:
    return decode_fixed(signature, SIGNATURE_SIZE, "signature", SignatureFormatError)


class Signer:
    """
    POD signer holding one parsed private key.

    Public surface:
        Signer(private_key, encoding="base64")  → parse key eagerly
        Signer.generate()                       → new random key
        Signer.from_file(path)                  → key text from a file
        Signer.verify_detached(id, sig, pk)     → @staticmethod

        signer.public_key           (@property) → encoded public key
        signer.sign(entries)                    → Pod
        signer.sign_content_id(content_id)      → encoded signature

    Holds no mutable state after construction, so one instance may be
    shared between threads.
    """

    def __init__(
        self,
        private_key: Union[str, bytes],
        encoding:    str = ENCODING_BASE64,
    ) -> None:
        if encoding not in ENCODINGS:
            raise ValueError(f"Unknown encoding {encoding!r}, expected one of {ENCODINGS}")
        self._private_key: bytes = parse_private_key(private_key)
        self._encoding:    str   = encoding
        self._public_key:  str   = encode_fixed(
            pack_point(eddsa.derive_public_key(self._private_key)), encoding
        )

    # ── Construction ──────────────────────────────────────────

    @classmethod
    def generate(cls, encoding: str = ENCODING_BASE64) -> "Signer":
        """Generate a new random private key."""
        return cls(secrets.token_bytes(PRIVATE_KEY_SIZE), encoding=encoding)

    @classmethod
    def from_file(cls, path: Path, encoding: str = ENCODING_BASE64) -> "Signer":
        """
        Load a private key stored as hex or base64 text.
        Raises FileNotFoundError if path does not exist.
        Raises KeyFormatError if the text is not a 32-byte key.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Key file not found: {path}")
        return cls(path.read_text(encoding="utf-8").strip(), encoding=encoding)

    # ── Public Key ────────────────────────────────────────────

    @property
    def public_key(self) -> str:
        return self._public_key

    # ── Signing ───────────────────────────────────────────────

    def sign_content_id(self, content_id: int) -> str:
        r8, s = eddsa.sign(self._private_key, content_id)
        return encode_fixed(eddsa.pack_signature(r8, s), self._encoding)

    def sign(self, entries: Union[Mapping[str, Any], "PodEntries"]) -> "Pod":
        """
        Validate entries, compute their content ID and sign it.

        Args:
            entries: PodEntries, or a mapping of names to PodValue / plain
                     Python values.

        Returns:
            A signed Pod owning its own copy of the entries.
        """
        from parcnet_pod.core.entries import PodEntries
        from parcnet_pod.core.models import Pod

        pod_entries = PodEntries.coerce(entries).check()
        content_id  = pod_entries.content_id()
        signature   = self.sign_content_id(content_id)
        logger.debug(
            "Signed POD with %d entries, content ID %d", len(pod_entries), content_id
        )
        return Pod(
            entries=           pod_entries,
            signature=         signature,
            signer_public_key= self._public_key,
        )

    # ── Verification (static) ──────────────────────────────────

    @staticmethod
    def verify_detached(content_id: int, signature: str, public_key: str) -> bool:
        """
        Verify an encoded signature over a content ID.

        Returns:
            True if the signature is valid for the content ID and key.
            False when both decode but the signature does not match.

        Raises:
            KeyFormatError       public key is not 32 bytes in any encoding
            SignatureFormatError signature is not 64 bytes in any encoding
            DecodeError          public key or R8 is not a curve point
        """
        point  = unpack_point(decode_public_key(public_key))
        r8, s  = eddsa.unpack_signature(decode_signature(signature))
        result = eddsa.verify(point, content_id, r8, s)
        if not result:
            logger.debug("Signature does not match content ID %d", content_id)
        return result

    def __repr__(self) -> str:
        return f"Signer(public_key={self._public_key[:16]}...)"


def sign_pod(
    private_key: Union[str, bytes],
    entries:     Union[Mapping[str, Any], "PodEntries"],
    encoding:    str = ENCODING_BASE64,
) -> "Pod":
    """One-shot signing: parse the key, validate entries, return the Pod."""
    return Signer(private_key, encoding=encoding).sign(entries)
