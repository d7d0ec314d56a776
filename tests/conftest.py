"""
tests/conftest.py

Shared fixtures: the reference signing key and the two reference entry
sets used by the other POD implementations' test suites.
"""

from datetime import datetime, timezone

import pytest

from parcnet_pod.core.crypto import Signer
from parcnet_pod.core.entries import PodEntries
from parcnet_pod.core.values import PodValue

REFERENCE_KEY = bytes([0, 1, 2, 3, 4, 5, 6, 7, 8, 9] * 3 + [0, 1])

REFERENCE_PUBLIC_KEY = "xDP3ppa3qjpSJO+zmTuvDM2eku7O4MKaP2yCCKnoHZ4"

ATTENDEE = 18711405342588116796533073928767088921854096266145046362753928030796553161041


@pytest.fixture
def reference_key() -> bytes:
    return REFERENCE_KEY


@pytest.fixture
def signer() -> Signer:
    """Signer over the reference key, base64 output."""
    return Signer(REFERENCE_KEY)


@pytest.fixture
def entries1() -> PodEntries:
    return PodEntries({
        "C": False,
        "D": "foobar",
        "A": 123,
        "B": 321,
        "G": -7,
    })


@pytest.fixture
def entries2() -> PodEntries:
    return PodEntries({
        "attendee":   PodValue.cryptographic(ATTENDEE),
        "eventID":    PodValue.cryptographic(456),
        "ticketID":   PodValue.cryptographic(999),
        "isConsumed": True,
        "issueDate":  datetime(2024, 1, 1, tzinfo=timezone.utc),
        "image":      bytes([1, 2, 3]),
        "vipStatus":  None,
    })
