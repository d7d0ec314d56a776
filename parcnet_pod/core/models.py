"""
parcnet_pod/core/models.py

POD Data Model

═══════════════════════════════════════════════════════════════════
CONTRACTS
═══════════════════════════════════════════════════════════════════

CONTRACT 1: Content ID
    content_id = lean Poseidon IMT over sorted (nameHash, valueHash) pairs
    computed by PodEntries.content_id(), nowhere else

CONTRACT 2: Signing
    message   = content_id as a field element
    algorithm = EdDSA-Poseidon over BabyJubjub
    signature = pack(R8) || S little-endian, 64 bytes

CONTRACT 3: Wire shape
    {"entries": {...}, "signature": "...", "signerPublicKey": "..."}
    signature and signerPublicKey: hex, base64, or base64 unpadded

CONTRACT 4: Immutability
    A Pod never changes after construction. It owns its own PodEntries.
    verify() recomputes everything from the stored fields.

CONTRACT 5: Verify outcome
    True   signature matches
    False  well-formed inputs, signature does not match
    raise  anything malformed (key, signature, point, entries)

CONTRACT 6: PCD
    {"id": uuid4, "claim": {entries, signerPublicKey}, "proof": {signature}}
    to_zupass_url() wraps it as an Add request for type "pod-pcd"
═══════════════════════════════════════════════════════════════════
"""

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

from parcnet_pod.core.canonical import canonical_json
from parcnet_pod.core.crypto import Signer, decode_public_key, decode_signature
from parcnet_pod.core.entries import PodEntries
from parcnet_pod.core.exceptions import PODError, ValueFormatError
from parcnet_pod.core.values import PodValue

logger = logging.getLogger(__name__)

POD_PCD_TYPE      = "pod-pcd"
ZUPASS_ADD_URL    = "https://zupass.org/#/add?request="
ZUPASS_RETURN_URL = "https://zupass.org/"


# ─────────────────────────────────────────────────────────────
# Schema Validation Result
# ─────────────────────────────────────────────────────────────

@dataclass
class SchemaValidationResult:
    """
    Result of Pod.validate_schema().

    Returned, not raised, so callers can choose hard fail vs log.
    bool(result) is True iff valid.
    """
    valid:  bool
    errors: List[str]

    def __bool__(self) -> bool:
        return self.valid

    def __repr__(self) -> str:
        if self.valid:
            return "SchemaValidationResult(VALID)"
        return f"SchemaValidationResult(INVALID, errors={self.errors})"


# ─────────────────────────────────────────────────────────────
# Pod
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Pod:
    """
    A signed POD: entries, the signature over their content ID, and the
    signer's public key.

    Build one with Signer.sign() / sign_pod(), or load one with
    Pod.from_dict() / Pod.from_json() / Pod.from_pcd_dict(). Loading
    checks formats but not the signature; call verify() for that.
    """
    entries:           PodEntries
    signature:         str
    signer_public_key: str

    def __post_init__(self) -> None:
        # Private copy even when handed an existing PodEntries
        object.__setattr__(self, "entries", PodEntries(self.entries))

    # ── Construction ──────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pod":
        """Load from the wire shape and check formats. Raises PODError."""
        if not isinstance(data, dict):
            raise ValueFormatError("POD must be a JSON object", {"type": type(data).__name__})
        missing = [k for k in ("entries", "signature", "signerPublicKey") if k not in data]
        if missing:
            raise ValueFormatError("POD is missing fields", {"missing": missing})
        for field_name in ("signature", "signerPublicKey"):
            if not isinstance(data[field_name], str):
                raise ValueFormatError(f"{field_name} must be a string")
        pod = cls(
            entries=           PodEntries.from_json_dict(data["entries"]),
            signature=         data["signature"],
            signer_public_key= data["signerPublicKey"],
        )
        return pod.check()

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "Pod":
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ValueFormatError(f"POD is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_pcd_dict(cls, data: Dict[str, Any]) -> "Pod":
        """Load from the PCD shape {id, claim: {entries, signerPublicKey}, proof: {signature}}."""
        try:
            claim = data["claim"]
            proof = data["proof"]
            return cls.from_dict({
                "entries":         claim["entries"],
                "signerPublicKey": claim["signerPublicKey"],
                "signature":       proof["signature"],
            })
        except (KeyError, TypeError) as exc:
            raise ValueFormatError(f"Malformed POD PCD: {exc}") from exc

    # ── Validation ────────────────────────────────────────────

    def check(self) -> "Pod":
        """Check entry, signature and key formats. Raises the first PODError."""
        self.entries.check()
        decode_signature(self.signature)
        decode_public_key(self.signer_public_key)
        return self

    def validate_schema(self) -> SchemaValidationResult:
        """Collect every format problem without raising."""
        errors: List[str] = []
        for name, value in self.entries.items():
            try:
                value.check()
            except PODError as exc:
                errors.append(f"entry {name}: {exc}")
        if len(self.entries) == 0:
            errors.append("entries: must not be empty")
        for label, check in (
            ("signature",       lambda: decode_signature(self.signature)),
            ("signerPublicKey", lambda: decode_public_key(self.signer_public_key)),
        ):
            try:
                check()
            except PODError as exc:
                errors.append(f"{label}: {exc}")
        return SchemaValidationResult(valid=not errors, errors=errors)

    # ── Accessors ─────────────────────────────────────────────

    def get(self, name: str) -> Optional[PodValue]:
        return self.entries.get(name)

    def content_id(self) -> int:
        return self.entries.content_id()

    def signature_bytes(self) -> bytes:
        return decode_signature(self.signature)

    def signer_public_key_bytes(self) -> bytes:
        return decode_public_key(self.signer_public_key)

    # ── Verification ──────────────────────────────────────────

    def verify(self) -> bool:
        """
        Verify the signature against a freshly computed content ID.

        Returns False only for a well-formed signature that does not
        match. Malformed keys, signatures, points or entries raise.
        """
        content_id = self.entries.check().content_id()
        valid = Signer.verify_detached(content_id, self.signature, self.signer_public_key)
        logger.debug("POD %d verification: %s", content_id, "valid" if valid else "invalid")
        return valid

    # ── Serialization ─────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries":         self.entries.to_json_dict(),
            "signature":       self.signature,
            "signerPublicKey": self.signer_public_key,
        }

    def to_json(self) -> str:
        """Canonical JSON text of the wire shape."""
        return canonical_json(self.to_dict())

    def to_pcd_dict(self, id: Optional[str] = None) -> Dict[str, Any]:
        return {
            "id":    id or str(uuid.uuid4()),
            "claim": {
                "entries":         self.entries.to_json_dict(),
                "signerPublicKey": self.signer_public_key,
            },
            "proof": {
                "signature": self.signature,
            },
        }

    def to_zupass_url(
        self,
        return_url: str = ZUPASS_RETURN_URL,
        id:         Optional[str] = None,
    ) -> str:
        """
        Zupass link that adds this POD as a pod-pcd.

        The request {type: Add, returnUrl, pcd: {type: pod-pcd, pcd: <PCD JSON text>}}
        is percent-encoded into the fragment query of the add page.
        """
        request = {
            "type":      "Add",
            "returnUrl": return_url,
            "pcd": {
                "type": POD_PCD_TYPE,
                "pcd":  canonical_json(self.to_pcd_dict(id)),
            },
        }
        return ZUPASS_ADD_URL + quote(canonical_json(request), safe="")

    def __repr__(self) -> str:
        return (
            f"Pod(entries={len(self.entries)}, "
            f"signer_public_key={self.signer_public_key[:16]}...)"
        )

