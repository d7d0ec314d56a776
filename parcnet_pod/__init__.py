"""
parcnet_pod/__init__.py

parcnet-pod: Provable Object Datatypes

A POD is a signed, content-addressed key/value record. Its identity is a
single field element derived from its entries, independent of the order
they were written in, and its signature is EdDSA-Poseidon over that
identity, byte-compatible with the other POD implementations.
"""

__version__ = "0.3.0"

from parcnet_pod.core.values import (
    PodValue,
    PodValueKind,
    POD_INT_MIN,
    POD_INT_MAX,
    POD_CRYPTOGRAPHIC_MIN,
    POD_CRYPTOGRAPHIC_MAX,
    POD_DATE_MIN_MS,
    POD_DATE_MAX_MS,
)
from parcnet_pod.core.entries import PodEntries
from parcnet_pod.core.models import Pod, SchemaValidationResult
from parcnet_pod.core.crypto import Signer, sign_pod
from parcnet_pod.core.canonical import canonicalize, format_json_bigint
from parcnet_pod.core.exceptions import (
    PODError,
    KeyFormatError,
    SignatureFormatError,
    EntryNameError,
    ValueRangeError,
    ValueFormatError,
    DecodeError,
    EmptyEntriesError,
)

__all__ = [
    # Core POD types
    "Pod",
    "PodEntries",
    "PodValue",
    "PodValueKind",
    "Signer",
    "SchemaValidationResult",
    # Helpers
    "sign_pod",
    "canonicalize",
    "format_json_bigint",
    # Errors
    "PODError",
    "KeyFormatError",
    "SignatureFormatError",
    "EntryNameError",
    "ValueRangeError",
    "ValueFormatError",
    "DecodeError",
    "EmptyEntriesError",
    # Constants
    "POD_INT_MIN",
    "POD_INT_MAX",
    "POD_CRYPTOGRAPHIC_MIN",
    "POD_CRYPTOGRAPHIC_MAX",
    "POD_DATE_MIN_MS",
    "POD_DATE_MAX_MS",
]
