"""
parcnet_pod/core/values.py

POD Value Model

A PodValue is an immutable (kind, payload) pair. Every constructor
validates; check() re-validates a value built some other way, e.g. by a
decoder that fills the payload before knowing whether it is legal.

Payload representation per kind:

    null            None
    string          str
    bytes           bytes
    int             int in [POD_INT_MIN, POD_INT_MAX]
    cryptographic   int in [POD_CRYPTOGRAPHIC_MIN, POD_CRYPTOGRAPHIC_MAX]
    boolean         bool
    eddsa_pubkey    str, the encoded 32-byte packed point as received
    date            int milliseconds since the epoch, UTC
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

from parcnet_pod.core.exceptions import ValueFormatError, ValueRangeError
from parcnet_pod.core.encoding import decode_base64
from parcnet_pod.core.time import datetime_to_ms, ms_to_datetime
from parcnet_pod.crypto.field import FIELD_MODULUS

POD_INT_MIN = -(1 << 63)
POD_INT_MAX = (1 << 63) - 1

POD_CRYPTOGRAPHIC_MIN = 0
POD_CRYPTOGRAPHIC_MAX = FIELD_MODULUS - 1

POD_DATE_MIN_MS = -8_640_000_000_000_000
POD_DATE_MAX_MS = 8_640_000_000_000_000

_HEX64_RE = re.compile(r"[0-9a-fA-F]{64}")


class PodValueKind:
    """Wire names of the eight POD value kinds."""
    NULL          = "null"
    STRING        = "string"
    BYTES         = "bytes"
    INT           = "int"
    CRYPTOGRAPHIC = "cryptographic"
    BOOLEAN       = "boolean"
    EDDSA_PUBKEY  = "eddsa_pubkey"
    DATE          = "date"


VALUE_KINDS = frozenset({
    PodValueKind.NULL,
    PodValueKind.STRING,
    PodValueKind.BYTES,
    PodValueKind.INT,
    PodValueKind.CRYPTOGRAPHIC,
    PodValueKind.BOOLEAN,
    PodValueKind.EDDSA_PUBKEY,
    PodValueKind.DATE,
})


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class PodValue:
    kind:  str
    value: Any = None

    # ── Construction ──────────────────────────────────────────

    @classmethod
    def null(cls) -> "PodValue":
        return cls(PodValueKind.NULL, None)

    @classmethod
    def string(cls, value: str) -> "PodValue":
        return cls(PodValueKind.STRING, value).check()

    @classmethod
    def bytes_value(cls, value: Union[bytes, bytearray]) -> "PodValue":
        if isinstance(value, bytearray):
            value = bytes(value)
        return cls(PodValueKind.BYTES, value).check()

    @classmethod
    def int_value(cls, value: int) -> "PodValue":
        return cls(PodValueKind.INT, value).check()

    @classmethod
    def cryptographic(cls, value: int) -> "PodValue":
        return cls(PodValueKind.CRYPTOGRAPHIC, value).check()

    @classmethod
    def boolean(cls, value: bool) -> "PodValue":
        return cls(PodValueKind.BOOLEAN, value).check()

    @classmethod
    def eddsa_pubkey(cls, encoded: str) -> "PodValue":
        return cls(PodValueKind.EDDSA_PUBKEY, encoded).check()

    @classmethod
    def date(cls, value: Union[datetime, int]) -> "PodValue":
        """Date from an aware datetime or from epoch milliseconds."""
        if isinstance(value, datetime):
            value = datetime_to_ms(value)
        return cls(PodValueKind.DATE, value).check()

    @classmethod
    def from_native(cls, obj: Any) -> "PodValue":
        """
        Map a plain Python value to its natural POD kind.

        int always maps to the int kind; field elements must be built
        explicitly with PodValue.cryptographic().
        """
        if isinstance(obj, PodValue):
            return obj.check()
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            return cls.int_value(obj)
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, (bytes, bytearray)):
            return cls.bytes_value(obj)
        if isinstance(obj, datetime):
            return cls.date(obj)
        raise ValueFormatError(
            "No POD value kind for Python type",
            {"type": type(obj).__name__},
        )

    # ── Validation ────────────────────────────────────────────

    def check(self) -> "PodValue":
        """
        Validate payload type and range for this kind.
        Returns self so constructors can chain. Raises ValueFormatError or
        ValueRangeError.
        """
        kind, value = self.kind, self.value

        if kind == PodValueKind.NULL:
            if value is not None:
                raise ValueFormatError("null value must carry no payload")
        elif kind == PodValueKind.STRING:
            self._require_type(isinstance(value, str), "str")
        elif kind == PodValueKind.BYTES:
            self._require_type(isinstance(value, bytes), "bytes")
        elif kind == PodValueKind.BOOLEAN:
            self._require_type(isinstance(value, bool), "bool")
        elif kind == PodValueKind.INT:
            self._require_type(_is_integer(value), "int")
            self._require_range(POD_INT_MIN, POD_INT_MAX)
        elif kind == PodValueKind.CRYPTOGRAPHIC:
            self._require_type(_is_integer(value), "int")
            self._require_range(POD_CRYPTOGRAPHIC_MIN, POD_CRYPTOGRAPHIC_MAX)
        elif kind == PodValueKind.DATE:
            self._require_type(_is_integer(value), "int")
            self._require_range(POD_DATE_MIN_MS, POD_DATE_MAX_MS)
        elif kind == PodValueKind.EDDSA_PUBKEY:
            self._require_type(isinstance(value, str), "str")
            self._check_pubkey_encoding(value)
        else:
            raise ValueFormatError("Unknown POD value kind", {"kind": kind})
        return self

    def _require_type(self, ok: bool, expected: str) -> None:
        if not ok:
            raise ValueFormatError(
                f"{self.kind} value must be {expected}",
                {"type": type(self.value).__name__},
            )

    def _require_range(self, low: int, high: int) -> None:
        if not low <= self.value <= high:
            raise ValueRangeError(
                f"{self.kind} value out of range",
                {"value": self.value, "min": low, "max": high},
            )

    @staticmethod
    def _check_pubkey_encoding(encoded: str) -> None:
        if _HEX64_RE.fullmatch(encoded):
            return
        raw = decode_base64(encoded)
        if len(raw) != 32:
            raise ValueRangeError(
                "eddsa_pubkey must decode to 32 bytes",
                {"decoded_length": len(raw)},
            )

    # ── Accessors ─────────────────────────────────────────────

    def as_datetime(self) -> datetime:
        if self.kind != PodValueKind.DATE:
            raise ValueFormatError("Not a date value", {"kind": self.kind})
        return ms_to_datetime(self.value)

    def pubkey_bytes(self) -> bytes:
        if self.kind != PodValueKind.EDDSA_PUBKEY:
            raise ValueFormatError("Not an eddsa_pubkey value", {"kind": self.kind})
        if _HEX64_RE.fullmatch(self.value):
            return bytes.fromhex(self.value)
        return decode_base64(self.value)

    def __repr__(self) -> str:
        return f"PodValue({self.kind}, {self.value!r})"
