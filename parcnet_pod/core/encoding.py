"""
parcnet_pod/core/encoding.py

Fixed-length byte encodings used on the POD wire.

Keys, signatures and packed points travel as text in one of three forms:

    hex              : exactly 2*n lowercase or uppercase hex characters
    base64 padded    : standard alphabet, '=' padding
    base64 unpadded  : standard alphabet, padding stripped

Decoders accept all three. Encoders emit base64 unpadded unless hex is
requested. Variable-length bytes values use padded base64 on output and
accept either base64 form on input.
"""

import base64
import binascii
import re
from typing import Type

from parcnet_pod.core.exceptions import KeyFormatError, PODError, ValueFormatError

ENCODING_BASE64 = "base64"
ENCODING_HEX    = "hex"
ENCODINGS       = (ENCODING_BASE64, ENCODING_HEX)

_HEX_RE    = re.compile(r"[0-9a-fA-F]*")
_BASE64_RE = re.compile(r"[A-Za-z0-9+/]*={0,2}")


def decode_base64(text: str) -> bytes:
    """
    Decode standard base64 with or without '=' padding.
    Raises ValueFormatError on any other alphabet or a truncated quantum.
    """
    if not isinstance(text, str) or not _BASE64_RE.fullmatch(text):
        raise ValueFormatError("Invalid base64 text", {"value": repr(text)[:40]})
    stripped = text.rstrip("=")
    if len(stripped) % 4 == 1:
        raise ValueFormatError("Invalid base64 length", {"length": len(text)})
    if text != stripped and len(text) % 4 != 0:
        raise ValueFormatError("Invalid base64 padding", {"length": len(text)})
    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except binascii.Error as exc:
        raise ValueFormatError(f"Invalid base64 text: {exc}") from exc


def encode_base64(data: bytes, padded: bool = True) -> str:
    text = base64.b64encode(bytes(data)).decode("ascii")
    return text if padded else text.rstrip("=")


def decode_fixed(
    text:       str,
    length:     int,
    what:       str = "key",
    error_type: Type[PODError] = KeyFormatError,
) -> bytes:
    """
    Decode text holding exactly `length` bytes as hex or base64.

    Hex is tried only when the text is exactly 2*length characters, so a
    base64 string can never be misread as hex.
    """
    if not isinstance(text, str):
        raise error_type(
            f"{what} must be a string", {"type": type(text).__name__}
        )
    if len(text) == 2 * length and _HEX_RE.fullmatch(text):
        return bytes.fromhex(text)
    try:
        raw = decode_base64(text)
    except ValueFormatError as exc:
        raise error_type(
            f"{what} is neither hex nor base64", {"length": len(text)}
        ) from exc
    if len(raw) != length:
        raise error_type(
            f"{what} must decode to {length} bytes",
            {"decoded_length": len(raw)},
        )
    return raw


def encode_fixed(data: bytes, encoding: str = ENCODING_BASE64) -> str:
    """Encode key or signature bytes as unpadded base64 (default) or hex."""
    if encoding == ENCODING_HEX:
        return bytes(data).hex()
    if encoding == ENCODING_BASE64:
        return encode_base64(data, padded=False)
    raise ValueError(f"Unknown encoding {encoding!r}, expected one of {ENCODINGS}")
