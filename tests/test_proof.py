"""
Tests for the per-step proof system: keys, proofs and proof documents.
"""

import io
import json
import random

import pytest

from primitives.curves import BN128, PALLAS
from primitives.errors import FormatError, ProofError
from protocol.proof import (
    KEY_MAGIC,
    ProvingKey,
    TaggedProof,
    generate_proof,
    setup,
    verify_proof,
)
from protocol.state import CircuitInput, make_hash_inputs
from tests.circuits import hash_step_abi, hash_step_expected, hash_step_program
from witness.abi import Abi
from witness.compute import compute_witness
from witness.program import Program


@pytest.fixture(scope="module")
def program() -> Program:
    return Program.from_dict(hash_step_program())


@pytest.fixture(scope="module")
def proving_key(program) -> ProvingKey:
    return setup(program, random.Random(1))


def prove_step(program: Program, key: ProvingKey, x: int, y: int, rng) -> TaggedProof:
    signature = Abi.from_dict(hash_step_abi()).signature()
    witness = compute_witness(program, CircuitInput(make_hash_inputs(x, y)), signature,
                              io.StringIO())
    return TaggedProof.from_proof(generate_proof(program, witness, key, rng), key.curve)


class TestProvingKey:
    """Test key setup and the binary key format."""

    def test_setup_binds_program(self, program, proving_key):
        assert proving_key.curve is BN128
        assert proving_key.program_digest == program.digest()

    def test_serialize_round_trip(self, proving_key):
        data = proving_key.serialize()
        assert data.startswith(KEY_MAGIC)
        restored = ProvingKey.deserialize(data)
        assert restored.curve is BN128
        assert restored.program_digest == proving_key.program_digest
        assert BN128.eq(restored.h, proving_key.h)

    def test_rejects_bad_magic(self, proving_key):
        data = b"XXXX" + proving_key.serialize()[4:]
        with pytest.raises(FormatError, match="bad magic"):
            ProvingKey.deserialize(data)

    def test_rejects_truncated(self, proving_key):
        with pytest.raises(FormatError):
            ProvingKey.deserialize(proving_key.serialize()[:-1])
        with pytest.raises(FormatError, match="truncated"):
            ProvingKey.deserialize(b"HC")

    def test_rejects_off_curve_generator(self, proving_key):
        data = bytearray(proving_key.serialize())
        data[-1] ^= 1
        with pytest.raises(FormatError, match="generator"):
            ProvingKey.deserialize(bytes(data))

    def test_rejects_unknown_curve(self, proving_key):
        data = proving_key.serialize().replace(b"bn128", b"bn999")
        with pytest.raises(FormatError, match="unsupported curve"):
            ProvingKey.deserialize(data)


class TestPerStepProofs:
    """Test proof generation and verification."""

    def test_proof_verifies(self, program, proving_key, rng):
        tagged = prove_step(program, proving_key, 1, 2, rng)
        assert tagged.inputs == [hash_step_expected(1, 2)]
        assert verify_proof(proving_key.verification_key(), tagged)

    def test_document_round_trip(self, program, proving_key, rng):
        text = prove_step(program, proving_key, 1, 2, rng).to_json()
        j = json.loads(text)
        assert set(j) == {"scheme", "curve", "proof", "inputs"}
        assert j["curve"] == "bn128"
        assert all(v.startswith("0x") and len(v) == 66 for v in j["inputs"])
        assert verify_proof(proving_key.verification_key(), TaggedProof.from_json(text))

    def test_fresh_randomness_per_proof(self, program, proving_key, rng):
        first = prove_step(program, proving_key, 1, 2, rng)
        second = prove_step(program, proving_key, 1, 2, rng)
        assert first.to_json() != second.to_json()

    def test_tampered_inputs_fail(self, program, proving_key, rng):
        tagged = prove_step(program, proving_key, 1, 2, rng)
        tagged.inputs = [tagged.inputs[0] + 1]
        assert not verify_proof(proving_key.verification_key(), tagged)

    def test_other_program_key_fails_verification(self, program, proving_key, rng):
        tagged = prove_step(program, proving_key, 1, 2, rng)
        other = ProvingKey(BN128, bytes(32), proving_key.h)
        assert not verify_proof(other.verification_key(), tagged)

    def test_wrong_scheme_fails(self, program, proving_key, rng):
        tagged = prove_step(program, proving_key, 1, 2, rng)
        tagged.scheme = "groth16"
        assert not verify_proof(proving_key.verification_key(), tagged)

    def test_key_for_other_program(self, program, proving_key, rng):
        key = ProvingKey(BN128, bytes(32), proving_key.h)
        with pytest.raises(ProofError, match="different program"):
            prove_step(program, key, 1, 2, rng)

    def test_key_for_other_curve(self, program, proving_key, rng):
        key = ProvingKey(PALLAS, program.digest(), PALLAS.generator)
        with pytest.raises(ProofError, match="pallas"):
            prove_step(program, key, 1, 2, rng)

    @pytest.mark.parametrize("text", [
        "not json",
        "{}",
        '{"scheme": "sigma", "curve": "secp256k1", "proof": {}, "inputs": []}',
    ])
    def test_malformed_document(self, text):
        with pytest.raises(FormatError):
            TaggedProof.from_json(text)
