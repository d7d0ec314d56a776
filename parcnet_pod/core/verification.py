"""
parcnet_pod/core/verification.py

POD Verification Reports

Pod.verify() is the ONLY signature verification path. This module wraps
it for callers that want a report instead of an exception, e.g. the CLI:

    valid=True                      signature matches
    valid=False, error=False        well-formed POD, signature does not match
    valid=False, error=True         malformed input (reason says why)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from parcnet_pod.core.exceptions import PODError
from parcnet_pod.core.models import Pod


@dataclass
class VerificationResult:
    valid:      bool
    error:      bool = False
    reason:     str = ""
    content_id: Optional[int] = None
    details:    Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.valid

    def __repr__(self) -> str:
        status = "VALID" if self.valid else ("ERROR" if self.error else "INVALID")
        return f"VerificationResult({status}, {self.reason!r})"

    def to_dict(self) -> dict:
        return {
            "valid":      self.valid,
            "error":      self.error,
            "reason":     self.reason,
            "content_id": None if self.content_id is None else str(self.content_id),
            "details":    self.details,
        }


def verify_pod(pod: Pod) -> VerificationResult:
    """Verify a loaded Pod, reporting malformed input instead of raising."""
    try:
        content_id = pod.content_id()
        valid      = pod.verify()
    except PODError as exc:
        return VerificationResult(
            valid=   False,
            error=   True,
            reason=  exc.message,
            details= dict(exc.details),
        )
    return VerificationResult(
        valid=      valid,
        reason=     "signature valid" if valid else "signature does not match",
        content_id= content_id,
    )


def verify_pod_dict(data: Dict[str, Any]) -> VerificationResult:
    """Load a wire-shape dict and verify it in one step."""
    try:
        pod = Pod.from_dict(data)
    except PODError as exc:
        return VerificationResult(
            valid=   False,
            error=   True,
            reason=  exc.message,
            details= dict(exc.details),
        )
    return verify_pod(pod)
