"""
Tests for the commitment-folding scheme.
"""

import io
import random

import pytest

from primitives.curves import PALLAS
from primitives.encoding import ByteText, encode_u256
from primitives.errors import ProofError, SetupError
from protocol.folding import RecursiveProof, generate_public_parameters, prove, verify
from protocol.state import State, genesis_state, make_hash_inputs
from tests.circuits import (
    fold_step_abi,
    fold_step_program,
    hash_step_abi,
    hash_step_program,
    state_type,
)
from witness.abi import Abi
from witness.program import Program

STEPS = [make_hash_inputs(0x0F, 0xF0), make_hash_inputs(1 << 255, 3)]


@pytest.fixture(scope="module")
def step_function():
    program = Program.from_dict(fold_step_program(2))
    signature = Abi.from_dict(fold_step_abi(2)).signature()
    return program, signature, generate_public_parameters(program, signature)


def fold(step_function, steps, seed=7, init=None) -> RecursiveProof:
    program, signature, pp = step_function
    init = init if init is not None else genesis_state(2)
    return prove(pp, program, signature, init, steps, random.Random(seed), io.StringIO())


class TestPublicParameters:
    """Test public parameter generation."""

    def test_deterministic(self, step_function):
        program, signature, pp = step_function
        again = generate_public_parameters(program, signature)
        assert again.digest() == pp.digest()

    def test_arities(self, step_function):
        _, _, pp = step_function
        assert pp.curve is PALLAS
        assert pp.state_arity == 1 + 2 * 32
        assert pp.step_arity == 64

    def test_rejects_non_step_function(self):
        program = Program.from_dict(hash_step_program())
        signature = Abi.from_dict(hash_step_abi()).signature()
        with pytest.raises(SetupError, match="takes \\(state, step\\)"):
            generate_public_parameters(program, signature)

    def test_rejects_wrong_return_type(self):
        program = Program.from_dict(fold_step_program(2))
        abi = fold_step_abi(2)
        abi["output"] = {"type": "field"}
        with pytest.raises(SetupError, match="state type"):
            generate_public_parameters(program, Abi.from_dict(abi).signature())

    def test_rejects_arity_mismatch(self):
        program = Program.from_dict(fold_step_program(2))
        signature = Abi.from_dict(fold_step_abi(3)).signature()
        with pytest.raises(SetupError):
            generate_public_parameters(program, signature)


class TestFolding:
    """Test proving and verifying step sequences."""

    def test_proof_verifies(self, step_function):
        proof = fold(step_function, STEPS)
        assert proof.num_steps == 2
        assert verify(step_function[2], proof)

    def test_final_state(self, step_function):
        proof = fold(step_function, STEPS)
        state = State.from_abi(proof.final_state(state_type(2)))
        assert state.idx == ByteText(2)
        assert state.outputs == (encode_u256(0xFF), encode_u256((1 << 255) ^ 3))

    def test_initial_state_recorded(self, step_function):
        proof = fold(step_function, STEPS)
        assert proof.z0 == [0] * (1 + 2 * 32)

    def test_order_sensitive(self, step_function):
        forward = fold(step_function, STEPS)
        backward = fold(step_function, list(reversed(STEPS)))
        assert verify(step_function[2], forward)
        assert verify(step_function[2], backward)
        assert forward.zn != backward.zn
        assert forward.to_dict(PALLAS) != backward.to_dict(PALLAS)

    def test_constant_size(self, step_function):
        one = fold(step_function, STEPS[:1])
        two = fold(step_function, STEPS)
        assert len(one.zn) == len(two.zn) == len(one.z0)
        assert one.to_dict(PALLAS)["opening"].keys() == two.to_dict(PALLAS)["opening"].keys()

    def test_custom_initial_state(self, step_function):
        init = State(ByteText(1), (encode_u256(9), encode_u256(0)))
        proof = fold(step_function, STEPS[:1], init=init)
        state = State.from_abi(proof.final_state(state_type(2)))
        assert state.outputs == (encode_u256(9), encode_u256(0xFF))
        assert verify(step_function[2], proof)

    def test_tampered_final_state_fails(self, step_function):
        proof = fold(step_function, STEPS)
        proof.zn[0] += 1
        assert not verify(step_function[2], proof)

    def test_tampered_step_count_fails(self, step_function):
        proof = fold(step_function, STEPS)
        proof.num_steps = 3
        assert not verify(step_function[2], proof)

    def test_serialization(self, step_function):
        proof = fold(step_function, STEPS)
        restored = RecursiveProof.from_dict(PALLAS, proof.to_dict(PALLAS))
        assert verify(step_function[2], restored)

    def test_empty_sequence(self, step_function):
        with pytest.raises(ProofError, match="empty"):
            fold(step_function, [])

    def test_bad_step_carries_index(self, step_function):
        bad = {"words": [encode_u256(1).to_abi()]}
        with pytest.raises(ProofError) as exc_info:
            fold(step_function, [STEPS[0], bad])
        assert exc_info.value.step == 1
        assert "step 1" in str(exc_info.value)

    def test_bad_initial_state(self, step_function):
        with pytest.raises(ProofError, match="initial state"):
            fold(step_function, STEPS, init=genesis_state(3))

    def test_program_mismatch(self, step_function):
        _, signature, pp = step_function
        other = Program.from_dict(fold_step_program(3))
        with pytest.raises(ProofError, match="different program"):
            prove(pp, other, signature, genesis_state(2), STEPS, random.Random(1), io.StringIO())
