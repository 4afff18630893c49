"""
Tests for errors, fields, curves, the transcript and Pedersen openings.
"""

import random

import pytest
from py_ecc import optimized_bn128 as bn128

from primitives.commitment import OpeningProof, PedersenParams, prove_opening, verify_opening
from primitives.curves import BN128, CURVES, PALLAS, get_curve
from primitives.errors import ExecutionFailure, FormatError, ProofError, ProverError
from primitives.field import PALLAS_FP, from_hex, parse_decimal, to_hex
from primitives.transcript import Transcript


class TestErrors:
    """Test error context rendering."""

    def test_plain_message(self):
        assert str(FormatError("bad")) == "bad"

    def test_context_rendered(self):
        err = ProofError("failed", artifact="dir/out", step=3)
        assert str(err) == "failed (artifact dir/out, step 3)"

    def test_with_context_keeps_existing(self):
        err = ExecutionFailure("boom", step=1).with_context(step=5, artifact="x")
        assert err.step == 1
        assert err.artifact == "x"

    def test_hierarchy(self):
        assert issubclass(FormatError, ProverError)
        assert not issubclass(ProverError, ValueError)


class TestField:
    """Test field text conversion."""

    def test_parse_decimal(self):
        assert parse_decimal("42", 97) == 42

    @pytest.mark.parametrize("text", ["", "-1", "+1", " 1", "1.5", "0x10", "97", "\u0661\u0662"])
    def test_parse_decimal_rejects(self, text):
        with pytest.raises(ValueError):
            parse_decimal(text, 97)

    def test_hex_round_trip(self):
        assert to_hex(255) == "0x" + "0" * 62 + "ff"
        assert from_hex(to_hex(12345)) == 12345

    def test_from_hex_requires_prefix(self):
        with pytest.raises(ValueError):
            from_hex("ff")

    @pytest.mark.parametrize("text", ["0x", "0x-1", "0x+ff", "0x f", "0xg"])
    def test_from_hex_rejects_non_canonical(self, text):
        with pytest.raises(ValueError):
            from_hex(text)


class TestCurves:
    """Test the BN128 and Pallas groups."""

    @pytest.mark.parametrize("curve", [BN128, PALLAS])
    def test_generator_on_curve(self, curve):
        x, y = curve.to_affine(curve.generator)
        assert curve.eq(curve.from_affine(x, y), curve.generator)

    @pytest.mark.parametrize("curve", [BN128, PALLAS])
    def test_order(self, curve):
        minus_g = curve.multiply(curve.generator, curve.order - 1)
        assert not curve.is_identity(minus_g)
        assert curve.is_identity(curve.add(minus_g, curve.generator))

    def test_pallas_generator(self):
        # (-1)^3 + 5 = 2^2
        assert PALLAS.to_affine(PALLAS.generator) == (PALLAS_FP.order - 1, 2)

    def test_bn128_matches_py_ecc(self):
        assert BN128.to_affine(BN128.multiply(BN128.generator, 7)) == \
            tuple(c.n for c in bn128.normalize(bn128.multiply(bn128.G1, 7)))

    @pytest.mark.parametrize("curve", [BN128, PALLAS])
    def test_hash_to_point(self, curve):
        h1 = curve.hash_to_point(b"label")
        h2 = curve.hash_to_point(b"label")
        h3 = curve.hash_to_point(b"other")
        assert curve.eq(h1, h2)
        assert not curve.eq(h1, h3)
        assert curve.eq(curve.from_hex(curve.to_hex(h1)), h1)

    def test_identity_serialization(self):
        assert PALLAS.to_affine(PALLAS.identity()) == (0, 0)
        assert PALLAS.is_identity(PALLAS.from_affine(0, 0))

    def test_from_affine_rejects_off_curve(self):
        with pytest.raises(ValueError, match="not on"):
            PALLAS.from_affine(1, 1)

    def test_from_hex_rejects_shape(self):
        with pytest.raises(ValueError):
            BN128.from_hex(["0x01"])

    def test_registry(self):
        assert set(CURVES) == {"bn128", "pallas"}
        assert get_curve("pallas") is PALLAS
        with pytest.raises(KeyError):
            get_curve("secp256k1")


class TestTranscript:
    """Test Fiat-Shamir challenge derivation."""

    def test_deterministic(self):
        t1, t2 = Transcript(b"a"), Transcript(b"a")
        t1.put([1, 2])
        t2.put([1, 2])
        assert t1.get_scalar(1000003) == t2.get_scalar(1000003)

    def test_order_matters(self):
        t1, t2 = Transcript(b"a"), Transcript(b"a")
        t1.put([1, 2])
        t2.put([2, 1])
        assert t1.get_scalar(PALLAS.order) != t2.get_scalar(PALLAS.order)

    def test_label_separates_domains(self):
        assert Transcript(b"a").get_scalar(PALLAS.order) != Transcript(b"b").get_scalar(PALLAS.order)

    def test_consecutive_challenges_differ(self):
        t = Transcript(b"a")
        assert t.get_scalar(PALLAS.order) != t.get_scalar(PALLAS.order)


class TestPedersenOpening:
    """Test commitments and the sigma-protocol opening proof."""

    @pytest.fixture(params=[BN128, PALLAS], ids=lambda c: c.name)
    def params(self, request) -> PedersenParams:
        curve = request.param
        return PedersenParams(curve, curve.generator, curve.hash_to_point(b"test-h"))

    def test_commit_is_homomorphic(self, params):
        curve = params.curve
        lhs = curve.add(params.commit(3, 5), params.commit(4, 6))
        assert curve.eq(lhs, params.commit(7, 11))

    def test_opening_verifies(self, params):
        proof = prove_opening(params, 123, 456, Transcript(b"stmt"), random.Random(1))
        assert curve_eq(params, proof.commitment, params.commit(123, 456))
        assert verify_opening(params, proof, Transcript(b"stmt"))

    def test_opening_bound_to_statement(self, params):
        proof = prove_opening(params, 123, 456, Transcript(b"stmt"), random.Random(1))
        assert not verify_opening(params, proof, Transcript(b"other"))

    def test_tampered_response(self, params):
        proof = prove_opening(params, 123, 456, Transcript(b"stmt"), random.Random(1))
        proof.value_response = (proof.value_response + 1) % params.curve.order
        assert not verify_opening(params, proof, Transcript(b"stmt"))

    def test_serialization(self, params):
        proof = prove_opening(params, 1, 2, Transcript(b"stmt"), random.Random(1))
        restored = OpeningProof.from_dict(params.curve, proof.to_dict(params.curve))
        assert verify_opening(params, restored, Transcript(b"stmt"))

    def test_non_canonical_response_rejected(self, params):
        j = prove_opening(params, 1, 2, Transcript(b"stmt"), random.Random(1)).to_dict(params.curve)
        j["value_response"] = to_hex(params.curve.order)
        with pytest.raises(ValueError):
            OpeningProof.from_dict(params.curve, j)


def curve_eq(params: PedersenParams, p, q) -> bool:
    return params.curve.eq(p, q)
