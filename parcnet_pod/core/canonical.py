"""
parcnet_pod/core/canonical.py

POD JSON codec and canonical text, RFC 8785 (JCS)

Every value decodes from any accepted wire shape and encodes to exactly
one canonical shape, so a decode/encode pass normalizes legacy input.

Canonical value shapes:

    null            null
    boolean         true | false
    string          "text"
    bytes           {"bytes": "<base64, padded>"}
    int             123                          when |v| <= 2^53-1
                    {"int": "0x..." | "-123..."} otherwise
    cryptographic   {"cryptographic": 123}       when v <= 2^53-1
                    {"cryptographic": "0x..."}   otherwise
    eddsa_pubkey    {"eddsa_pubkey": "<encoded key>"}
    date            {"date": "YYYY-MM-DDTHH:MM:SS.mmmZ"}

Also accepted on input: legacy {"type": <kind>, "value": <payload>}
objects, numeric payloads as JSON numbers or decimal/0x-hex strings, and
unpadded base64 for bytes.

RFC 8785: https://www.rfc-editor.org/rfc/rfc8785
"""

import re
from typing import Any, Dict, Mapping, Union

import jcs

from parcnet_pod.core.encoding import decode_base64, encode_base64
from parcnet_pod.core.exceptions import ValueFormatError
from parcnet_pod.core.time import format_date_ms, parse_date_ms
from parcnet_pod.core.values import PodValue, PodValueKind, VALUE_KINDS

MAX_SAFE_INTEGER = (1 << 53) - 1

_DECIMAL_RE = re.compile(r"-?[0-9]+")
_HEX_RE     = re.compile(r"0[xX][0-9a-fA-F]+")

_LEGACY_KEYS = frozenset({"type", "value"})


def canonicalize(obj: Any) -> bytes:
    """
    Encode a JSON-compatible object to RFC 8785 canonical JSON bytes.

    Output is deterministic regardless of key insertion order. Integers
    must already be within the JavaScript safe range; format_json_bigint
    takes care of that for POD values.
    """
    return jcs.canonicalize(obj)


def canonical_json(obj: Any) -> str:
    return canonicalize(obj).decode("utf-8")


def format_json_bigint(value: int) -> Union[int, str]:
    """
    JSON form of an arbitrary-size integer.

    Safe integers stay numbers. Larger non-negative values become
    lowercase 0x hex strings, larger negative values decimal strings.
    """
    if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
        return value
    if value >= 0:
        return hex(value)
    return str(value)


def parse_json_bigint(payload: Any) -> int:
    """Inverse of format_json_bigint, also accepting decimal strings."""
    if isinstance(payload, bool):
        raise ValueFormatError("Expected a number, got a boolean")
    if isinstance(payload, int):
        return payload
    if isinstance(payload, float):
        if not payload.is_integer():
            raise ValueFormatError("Number must be integral", {"value": payload})
        return int(payload)
    if isinstance(payload, str):
        try:
            if _DECIMAL_RE.fullmatch(payload):
                return int(payload, 10)
            if _HEX_RE.fullmatch(payload):
                return int(payload, 16)
        except ValueError as exc:
            raise ValueFormatError(
                "Numeric string too long", {"digits": len(payload)}
            ) from exc
        raise ValueFormatError("Invalid numeric string", {"value": payload})
    raise ValueFormatError(
        "Expected a number or numeric string",
        {"type": type(payload).__name__},
    )


# ─────────────────────────────────────────────────────────────
# Values
# ─────────────────────────────────────────────────────────────

def value_to_json(value: PodValue) -> Any:
    kind, payload = value.kind, value.value
    if kind in (PodValueKind.NULL, PodValueKind.BOOLEAN, PodValueKind.STRING):
        return payload
    if kind == PodValueKind.INT:
        encoded = format_json_bigint(payload)
        return encoded if isinstance(encoded, int) else {kind: encoded}
    if kind == PodValueKind.CRYPTOGRAPHIC:
        return {kind: format_json_bigint(payload)}
    if kind == PodValueKind.BYTES:
        return {kind: encode_base64(payload)}
    if kind == PodValueKind.DATE:
        return {kind: format_date_ms(payload)}
    if kind == PodValueKind.EDDSA_PUBKEY:
        return {kind: payload}
    raise ValueFormatError("Unknown POD value kind", {"kind": kind})


def value_from_json(obj: Any) -> PodValue:
    """Decode one JSON value in any accepted shape and validate it."""
    if obj is None:
        return PodValue.null()
    if isinstance(obj, bool):
        return PodValue.boolean(obj)
    if isinstance(obj, str):
        return PodValue.string(obj)
    if isinstance(obj, (int, float)):
        return PodValue.int_value(parse_json_bigint(obj))
    if isinstance(obj, dict):
        if len(obj) == 1:
            ((kind, payload),) = obj.items()
            return _value_from_payload(kind, payload)
        if set(obj) == _LEGACY_KEYS:
            return _value_from_payload(obj["type"], obj["value"])
        raise ValueFormatError(
            "Value object must have one kind key or exactly type/value",
            {"keys": sorted(obj)},
        )
    raise ValueFormatError(
        "Unsupported JSON type for POD value",
        {"type": type(obj).__name__},
    )


def _require(payload: Any, expected: type, kind: str) -> None:
    if not isinstance(payload, expected) or (expected is not bool and isinstance(payload, bool)):
        raise ValueFormatError(
            f"{kind} payload must be {expected.__name__}",
            {"type": type(payload).__name__},
        )


def _value_from_payload(kind: Any, payload: Any) -> PodValue:
    if kind not in VALUE_KINDS:
        raise ValueFormatError("Unknown POD value kind", {"kind": kind})

    if kind == PodValueKind.NULL:
        if payload is not None:
            raise ValueFormatError("null payload must be null")
        return PodValue.null()
    if kind == PodValueKind.STRING:
        _require(payload, str, kind)
        return PodValue.string(payload)
    if kind == PodValueKind.BOOLEAN:
        _require(payload, bool, kind)
        return PodValue.boolean(payload)
    if kind == PodValueKind.BYTES:
        _require(payload, str, kind)
        return PodValue.bytes_value(decode_base64(payload))
    if kind == PodValueKind.INT:
        return PodValue.int_value(parse_json_bigint(payload))
    if kind == PodValueKind.CRYPTOGRAPHIC:
        return PodValue.cryptographic(parse_json_bigint(payload))
    if kind == PodValueKind.DATE:
        return PodValue.date(parse_date_ms(payload))
    # eddsa_pubkey
    _require(payload, str, kind)
    return PodValue.eddsa_pubkey(payload)


# ─────────────────────────────────────────────────────────────
# Entries
# ─────────────────────────────────────────────────────────────

def entries_to_json(entries: Mapping[str, PodValue]) -> Dict[str, Any]:
    return {name: value_to_json(value) for name, value in entries.items()}


def entries_from_json(obj: Any) -> Dict[str, PodValue]:
    """Decode an entries object. Names are validated by PodEntries."""
    if not isinstance(obj, dict):
        raise ValueFormatError(
            "Entries must be a JSON object",
            {"type": type(obj).__name__},
        )
    return {name: value_from_json(value) for name, value in obj.items()}
