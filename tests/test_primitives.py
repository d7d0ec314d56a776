"""
tests/test_primitives.py

Hash and curve primitives against published vectors.

  BLAKE-512     "hello world" digest
  Poseidon      circomlib constants and outputs
  Lean IMT      odd/even level folding
  BabyJubjub    pack/unpack, curve membership
  EdDSA         circomlibjs signPoseidon vector
"""

import hashlib

import pytest

from parcnet_pod.core.exceptions import DecodeError
from parcnet_pod.crypto import babyjubjub, eddsa
from parcnet_pod.crypto.blake512 import blake512
from parcnet_pod.crypto.field import FIELD_MODULUS, inv, is_negative, sqrt
from parcnet_pod.crypto.lean_imt import lean_poseidon_imt
from parcnet_pod.crypto.poseidon import poseidon_hash, poseidon_parameters


class TestBlake512:

    def test_hello_world(self):
        assert blake512(b"hello world").hex() == (
            "1891a7b5ee05c04555d892303801784de65937a18d15dc08bc37f7c832c6892f"
            "46f5d7f1705a463534e1c18088f1b779dbd775002c7b8e14cf0de613e54c56e6"
        )

    def test_is_not_blake2b(self):
        assert blake512(b"hello world") != hashlib.blake2b(b"hello world").digest()

    @pytest.mark.parametrize("length", [0, 1, 110, 111, 112, 127, 128, 129, 256])
    def test_padding_boundaries_are_deterministic(self, length):
        data = bytes(range(256))[:length]
        digest = blake512(data)
        assert len(digest) == 64
        assert digest == blake512(data)

    def test_one_byte_changes_digest(self):
        assert blake512(b"\x00" * 111) != blake512(b"\x00" * 112)


class TestPoseidon:

    def test_t3_first_round_constant(self):
        constants, _ = poseidon_parameters(3)
        assert constants[0] == 0x0EE9A592BA9A9518D05986D656F40C2114C4993C11BB29938D21D47304CD8E6E

    def test_t3_mds_first_entry(self):
        _, mds = poseidon_parameters(3)
        assert mds[0][0] == 0x109B7F411BA0E4C9B2B70CAF5C36A7B194BE7C11AD24378BFEDB68592BA8118B

    def test_parameter_sizes(self):
        constants, mds = poseidon_parameters(6)
        assert len(constants) == (8 + 60) * 6
        assert len(mds) == 6 and all(len(row) == 6 for row in mds)

    @pytest.mark.parametrize("inputs, expected", [
        ([1, 2], 7853200120776062878684798364095072458815029376092732009249414926327459813530),
        ([10, 20], 18520321019059006606511285595387750999043784958310087972051959520693448686063),
        ([10, 20, 30, 40, 50], 14653700270114866156633892456692636108484330116476754215161758865742162164337),
        ([10], 17853941289740592551682164141790101668489478619664963356488634739728685875777),
    ])
    def test_known_outputs(self, inputs, expected):
        assert poseidon_hash(inputs) == expected

    def test_inputs_reduced_mod_p(self):
        assert poseidon_hash([-1]) == poseidon_hash([FIELD_MODULUS - 1])

    @pytest.mark.parametrize("count", [0, 17])
    def test_input_count_bounds(self, count):
        with pytest.raises(ValueError):
            poseidon_hash([1] * count)


class TestLeanIMT:

    def test_single_leaf_is_root(self):
        assert lean_poseidon_imt([42]) == 42

    def test_two_leaves(self):
        assert lean_poseidon_imt([1, 2]) == poseidon_hash([1, 2])

    def test_odd_leaf_carried_up(self):
        expected = poseidon_hash([poseidon_hash([1, 2]), 3])
        assert lean_poseidon_imt([1, 2, 3]) == expected

    def test_five_leaves(self):
        assert lean_poseidon_imt([1, 2, 3, 4, 5]) == (
            11512324111804726054755717642058292259866309947044530224809882918003853859592
        )

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            lean_poseidon_imt([])


class TestField:

    def test_inverse(self):
        assert 7 * inv(7) % FIELD_MODULUS == 1

    def test_inverse_of_zero(self):
        with pytest.raises(ZeroDivisionError):
            inv(0)

    def test_sqrt_roundtrip(self):
        root = sqrt(16)
        assert root * root % FIELD_MODULUS == 16
        assert not is_negative(root)

    def test_sqrt_of_non_residue(self):
        assert sqrt(5) is None


class TestBabyJubjub:

    def test_base8_on_curve(self):
        assert babyjubjub.in_curve(babyjubjub.BASE8)

    def test_base8_times_suborder_is_identity(self):
        assert babyjubjub.mul(babyjubjub.BASE8, babyjubjub.SUB_ORDER) == babyjubjub.IDENTITY

    def test_pack_unpack(self):
        point = babyjubjub.mul(babyjubjub.BASE8, 123456789)
        assert babyjubjub.unpack_point(babyjubjub.pack_point(point)) == point

    def test_known_public_key_point(self):
        packed = bytes.fromhex(
            "c433f7a696b7aa3a5224efb3993baf0ccd9e92eecee0c29a3f6c8208a9e81d9e"
        )
        x, y = babyjubjub.unpack_point(packed)
        assert x == 13277427435165878497778222415993513565335242147425444199013288855685581939618
        assert y == 13622229784656158136036771217484571176836296686641868549125388198837476602820

    def test_sign_bit_negates_x(self):
        point  = babyjubjub.mul(babyjubjub.BASE8, 5)
        packed = bytearray(babyjubjub.pack_point(point))
        packed[31] ^= 0x80
        x, y = babyjubjub.unpack_point(bytes(packed))
        assert (x, y) == ((FIELD_MODULUS - point[0]) % FIELD_MODULUS, point[1])

    def test_non_canonical_y_rejected(self):
        packed = bytearray(FIELD_MODULUS.to_bytes(32, "little"))
        with pytest.raises(DecodeError):
            babyjubjub.unpack_point(bytes(packed))

    def test_wrong_length_rejected(self):
        with pytest.raises(DecodeError):
            babyjubjub.unpack_point(b"\x00" * 31)

    def test_off_curve_y_rejected(self):
        with pytest.raises(DecodeError):
            babyjubjub.unpack_point((2).to_bytes(32, "little"))


class TestEdDSA:

    def test_circomlib_vector(self):
        private_key = bytes(32)
        message     = poseidon_hash([10])
        r8, s       = eddsa.sign(private_key, message)
        public_key  = babyjubjub.pack_point(eddsa.derive_public_key(private_key))

        assert public_key.hex() == (
            "91f1095ac019b50610b5cb56e5db3889177fee8b6422fca3dac04ee1932431a9"
        )
        assert eddsa.pack_signature(r8, s).hex() == (
            "7fd6ab0bb4d859041339dde68d4a8e0ca15dd2e69e93ce074d465dbe048d1781"
            "6ea920722a6e45fc03e21f5ce134dc7e87fe286b75290c88715643899fd68305"
        )

    def test_sign_then_verify(self):
        private_key = bytes(range(32))
        public_key  = eddsa.derive_public_key(private_key)
        r8, s       = eddsa.sign(private_key, 1234567890)
        assert eddsa.verify(public_key, 1234567890, r8, s)
        assert not eddsa.verify(public_key, 1234567891, r8, s)

    def test_s_at_suborder_rejected(self):
        private_key = bytes(range(32))
        public_key  = eddsa.derive_public_key(private_key)
        r8, _       = eddsa.sign(private_key, 1)
        assert not eddsa.verify(public_key, 1, r8, babyjubjub.SUB_ORDER)

    def test_signature_roundtrip(self):
        r8, s = eddsa.sign(bytes(32), 99)
        assert eddsa.unpack_signature(eddsa.pack_signature(r8, s)) == (r8, s)

    def test_wrong_private_key_length(self):
        with pytest.raises(ValueError):
            eddsa.derive_public_key(b"\x00" * 31)
