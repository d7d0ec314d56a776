"""
tests/test_pod_invariants.py

POD Invariant Test Suite

  SIGNING
    Reference PODs reproduce the published signatures and public key
    Signed PODs verify
    Signing is deterministic for a given key and entry set
  TAMPERING
    Changed value, changed name, flipped signature or key bit → False
  ERRORS
    Malformed key/signature → raise, never False
    Undecompressable point → DecodeError
  SERIALIZATION
    JSON and PCD round trips, legacy input normalizes
"""

import base64
import json
from urllib.parse import unquote

import pytest

from parcnet_pod import sign_pod
from parcnet_pod.core.crypto import Signer, parse_private_key
from parcnet_pod.core.encoding import decode_fixed, encode_fixed
from parcnet_pod.core.entries import PodEntries
from parcnet_pod.core.exceptions import (
    DecodeError,
    EmptyEntriesError,
    EntryNameError,
    KeyFormatError,
    SignatureFormatError,
    ValueFormatError,
)
from parcnet_pod.core.models import Pod
from parcnet_pod.core.values import PodValue
from parcnet_pod.core.verification import verify_pod, verify_pod_dict

REFERENCE_KEY        = bytes([0, 1, 2, 3, 4, 5, 6, 7, 8, 9] * 3 + [0, 1])
REFERENCE_PUBLIC_KEY = "xDP3ppa3qjpSJO+zmTuvDM2eku7O4MKaP2yCCKnoHZ4"

POD2_SIGNATURE = (
    "XsPL63NJKkq59CiO8VC3vDFNGPeNfnDsN3ugn68aOQjOvAMLiRqE2ISEBQSJ"
    "lAxb9eokyyauUuKlGyD98FeSBQ"
)
POD1_SIGNATURE = (
    "/XXcdvVe6yflGO1eusp4orJp4n1wzAEGufHoIzgJla2KIhY1FJO6P1BwTvPa"
    "roa1Fj1gVdDGZExKHmTwOtwnBA"
)


def _flip(encoded: str, length: int, index: int, mask: int) -> str:
    raw = bytearray(decode_fixed(encoded, length))
    raw[index] ^= mask
    return encode_fixed(bytes(raw))


# ─────────────────────────────────────────────────────────────
# SIGNING
# ─────────────────────────────────────────────────────────────

class TestSigning:

    def test_reference_pod2(self, signer, entries2):
        pod = signer.sign(entries2)
        assert pod.signature == POD2_SIGNATURE
        assert pod.signer_public_key == REFERENCE_PUBLIC_KEY
        assert pod.verify()

    def test_reference_pod1(self, signer, entries1):
        pod = signer.sign(entries1)
        assert pod.signature == POD1_SIGNATURE
        assert pod.verify(), "Reference POD must verify"

    def test_sign_pod_accepts_plain_mapping(self, reference_key):
        pod = sign_pod(reference_key, {"A": 123, "B": 321, "C": False, "D": "foobar", "G": -7})
        assert pod.verify()
        assert pod.entries.to_json() == '{"A":123,"B":321,"C":false,"D":"foobar","G":-7}'

    def test_deterministic(self, signer, entries1):
        assert signer.sign(entries1) == signer.sign(entries1)

    def test_hex_encoding(self, entries1):
        pod = Signer(REFERENCE_KEY, encoding="hex").sign(entries1)
        assert len(pod.signature) == 128
        assert len(pod.signer_public_key) == 64
        assert pod.signature_bytes() == base64.b64decode(POD1_SIGNATURE + "==")
        assert pod.verify()

    @pytest.mark.parametrize("encoded", [
        REFERENCE_KEY.hex(),
        base64.b64encode(REFERENCE_KEY).decode(),
        base64.b64encode(REFERENCE_KEY).decode().rstrip("="),
    ])
    def test_private_key_encodings(self, encoded):
        assert parse_private_key(encoded) == REFERENCE_KEY
        assert Signer(encoded).public_key == REFERENCE_PUBLIC_KEY

    def test_generated_key_roundtrip(self):
        signer = Signer.generate()
        assert signer.sign({"x": 1}).verify()

    def test_key_from_file(self, tmp_path):
        path = tmp_path / "key.txt"
        path.write_text(REFERENCE_KEY.hex() + "\n")
        assert Signer.from_file(path).public_key == REFERENCE_PUBLIC_KEY

    def test_key_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Signer.from_file(tmp_path / "missing.txt")

    @pytest.mark.parametrize("bad", ["", "00" * 31, "zz" * 32, "AQID", b"\x00" * 31])
    def test_bad_private_key(self, bad):
        with pytest.raises(KeyFormatError):
            Signer(bad)

    def test_empty_entries(self, signer):
        with pytest.raises(EmptyEntriesError):
            signer.sign({})

    def test_invalid_name(self, signer):
        with pytest.raises(EntryNameError):
            signer.sign({"bad name": 1})

    def test_pod_owns_entries(self, signer):
        source = {"A": 1}
        pod = signer.sign(source)
        source["A"] = 2
        assert pod.get("A") == PodValue.int_value(1)
        assert pod.verify()


# ─────────────────────────────────────────────────────────────
# TAMPERING
# ─────────────────────────────────────────────────────────────

class TestTampering:

    @pytest.fixture
    def pod(self, signer, entries1) -> Pod:
        return signer.sign(entries1)

    def test_changed_value(self, pod):
        tampered = Pod(
            entries=           PodEntries({**pod.entries, "A": 124}),
            signature=         pod.signature,
            signer_public_key= pod.signer_public_key,
        )
        assert tampered.verify() is False

    def test_changed_name(self, pod):
        entries = dict(pod.entries)
        entries["H"] = entries.pop("G")
        tampered = Pod(PodEntries(entries), pod.signature, pod.signer_public_key)
        assert tampered.verify() is False

    def test_flipped_s_bit(self, pod):
        tampered = Pod(pod.entries, _flip(pod.signature, 64, 32, 0x01), pod.signer_public_key)
        assert tampered.verify() is False

    def test_flipped_r8_sign_bit(self, pod):
        tampered = Pod(pod.entries, _flip(pod.signature, 64, 31, 0x80), pod.signer_public_key)
        assert tampered.verify() is False

    def test_flipped_public_key_sign_bit(self, pod):
        tampered = Pod(pod.entries, pod.signature, _flip(pod.signer_public_key, 32, 31, 0x80))
        assert tampered.verify() is False

    def test_other_signer(self, pod, entries1):
        other = Signer(bytes(32)).sign(entries1)
        swapped = Pod(pod.entries, pod.signature, other.signer_public_key)
        assert swapped.verify() is False

    def test_oversized_s(self, pod):
        raw = bytearray(pod.signature_bytes())
        raw[32:] = b"\xff" * 32
        tampered = Pod(pod.entries, encode_fixed(bytes(raw)), pod.signer_public_key)
        assert tampered.verify() is False


# ─────────────────────────────────────────────────────────────
# ERRORS
# ─────────────────────────────────────────────────────────────

class TestVerifyErrors:

    def test_short_signature(self, signer, entries1):
        pod = Pod(entries1, "AQID", signer.public_key)
        with pytest.raises(SignatureFormatError):
            pod.verify()

    def test_short_public_key(self, signer, entries1):
        pod = Pod(entries1, signer.sign(entries1).signature, "AQID")
        with pytest.raises(KeyFormatError):
            pod.verify()

    def test_public_key_off_curve(self, signer, entries1):
        off_curve = (2).to_bytes(32, "little").hex()
        pod = Pod(entries1, signer.sign(entries1).signature, off_curve)
        with pytest.raises(DecodeError):
            pod.verify()

    def test_r8_off_curve(self, signer, entries1):
        raw = bytearray(signer.sign(entries1).signature_bytes())
        raw[:32] = (2).to_bytes(32, "little")
        pod = Pod(entries1, encode_fixed(bytes(raw)), signer.public_key)
        with pytest.raises(DecodeError):
            pod.verify()

    def test_empty_entries(self, signer, entries1):
        pod = Pod(PodEntries(), signer.sign(entries1).signature, signer.public_key)
        with pytest.raises(EmptyEntriesError):
            pod.verify()

    def test_report_distinguishes_invalid_from_error(self, signer, entries1):
        pod = signer.sign(entries1)
        assert verify_pod(pod).valid
        invalid = verify_pod(Pod(PodEntries({"A": 1}), pod.signature, pod.signer_public_key))
        assert not invalid.valid and not invalid.error
        error = verify_pod(Pod(entries1, "AQID", pod.signer_public_key))
        assert not error.valid and error.error


# ─────────────────────────────────────────────────────────────
# SERIALIZATION
# ─────────────────────────────────────────────────────────────

class TestSerialization:

    def test_json_roundtrip(self, signer, entries2):
        pod = signer.sign(entries2)
        loaded = Pod.from_json(pod.to_json())
        assert loaded == pod
        assert loaded.verify()

    def test_wire_shape(self, signer, entries1):
        data = json.loads(signer.sign(entries1).to_json())
        assert set(data) == {"entries", "signature", "signerPublicKey"}
        assert data["signerPublicKey"] == REFERENCE_PUBLIC_KEY

    def test_legacy_entries_normalize(self, signer, entries1):
        pod = signer.sign(entries1)
        legacy = {
            "entries": {
                "A": {"type": "int", "value": "123"},
                "B": {"type": "int", "value": 321},
                "C": {"type": "boolean", "value": False},
                "D": {"type": "string", "value": "foobar"},
                "G": {"type": "int", "value": "-7"},
            },
            "signature":       base64.b64encode(pod.signature_bytes()).decode(),
            "signerPublicKey": pod.signer_public_key_bytes().hex(),
        }
        loaded = Pod.from_dict(legacy)
        assert loaded.verify()
        assert loaded.entries.to_json() == pod.entries.to_json()

    def test_pcd_roundtrip(self, signer, entries2):
        pod = signer.sign(entries2)
        pcd = pod.to_pcd_dict(id="4a7bc0f0-0b3d-4c8e-9f55-2f3d1c4f5a6b")
        assert pcd["id"] == "4a7bc0f0-0b3d-4c8e-9f55-2f3d1c4f5a6b"
        assert pcd["proof"] == {"signature": pod.signature}
        assert Pod.from_pcd_dict(pcd) == pod

    def test_pcd_generates_id(self, signer, entries1):
        pcd = signer.sign(entries1).to_pcd_dict()
        assert len(pcd["id"]) == 36

    def test_pcd_malformed(self):
        with pytest.raises(ValueFormatError):
            Pod.from_pcd_dict({"claim": {}})

    def test_zupass_url_carries_pcd(self, signer, entries1):
        pod = signer.sign(entries1)
        url = pod.to_zupass_url(id="4a7bc0f0-0b3d-4c8e-9f55-2f3d1c4f5a6b")
        prefix = "https://zupass.org/#/add?request="
        assert url.startswith(prefix)
        encoded = url[len(prefix):]
        assert not set(encoded) & set("{}\":,/ "), "request must be fully percent-encoded"

        request = json.loads(unquote(encoded))
        assert request["type"] == "Add"
        assert request["returnUrl"] == "https://zupass.org/"
        assert request["pcd"]["type"] == "pod-pcd"
        pcd = json.loads(request["pcd"]["pcd"])
        assert pcd["id"] == "4a7bc0f0-0b3d-4c8e-9f55-2f3d1c4f5a6b"
        assert Pod.from_pcd_dict(pcd) == pod

    def test_zupass_url_custom_return_url(self, signer, entries1):
        url = signer.sign(entries1).to_zupass_url("https://example.org/done?x=1&y=2")
        request = json.loads(unquote(url.split("request=", 1)[1]))
        assert request["returnUrl"] == "https://example.org/done?x=1&y=2"

    def test_missing_field(self, signer, entries1):
        data = signer.sign(entries1).to_dict()
        del data["signature"]
        with pytest.raises(ValueFormatError):
            Pod.from_dict(data)

    def test_from_dict_checks_formats(self, signer, entries1):
        data = signer.sign(entries1).to_dict()
        data["signerPublicKey"] = "AQID"
        with pytest.raises(KeyFormatError):
            Pod.from_dict(data)
        assert verify_pod_dict(data).error

    def test_validate_schema_collects_errors(self, signer, entries1):
        pod = Pod(PodEntries(), "AQID", "AQID")
        result = pod.validate_schema()
        assert not result
        assert len(result.errors) == 3
        assert signer.sign(entries1).validate_schema()
