"""Commitment-folding scheme for step functions.

A step function F takes (state, step) and returns the next state. Proving a
sequence z_{i+1} = F(z_i, step_i) folds every step into one accumulator:

    C_i = v_i*G + r_i*H          v_i: witness digest of step i, r_i: fresh blinding
    e_i = transcript(pp, z_0, C_0, ..., C_i, step inputs so far)
    U   = sum(e_i * C_i)

Since commitments are additively homomorphic, U opens to (sum e_i*v_i,
sum e_i*r_i). The proof is the opening of U, bound by Fiat-Shamir to
(pp, num_steps, z_0, z_n), so its size does not depend on the step count.
Every challenge depends on all earlier steps: folding is order sensitive.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, Optional, TextIO

from primitives.commitment import (
    OpeningProof,
    PedersenParams,
    RandomSource,
    prove_opening,
    verify_opening,
)
from primitives.curves import Curve, Point
from primitives.errors import ProofError, ProverError, SetupError
from primitives.transcript import Transcript
from witness.abi import Signature, Type, decode, encode, flat_size, parse_value
from witness.compute import to_abi_value
from witness.interpreter import Interpreter
from witness.program import Program

# Domain label for the blinding generator derivation
H_LABEL = b"fold-h"


# --- Public Parameters ---

@dataclass(frozen=True, eq=False)
class PublicParameters:
    """Parameters of one step function.

    Attributes:
        curve: Curve of the commitments (the program's curve)
        program_digest: Program.digest() of the step function
        state_arity: Flattened size of the state
        step_arity: Flattened size of the per-step input
        h: Blinding generator, hashed to the curve
    """
    curve: Curve
    program_digest: bytes
    state_arity: int
    step_arity: int
    h: Point

    def pedersen(self) -> PedersenParams:
        return PedersenParams(self.curve, self.curve.generator, self.h)

    def digest(self) -> bytes:
        hasher = hashlib.sha256()
        hasher.update(self.curve.name.encode())
        hasher.update(self.program_digest)
        hasher.update(self.state_arity.to_bytes(4, "big"))
        hasher.update(self.step_arity.to_bytes(4, "big"))
        for c in self.curve.to_affine(self.h):
            hasher.update(c.to_bytes(32, "big"))
        return hasher.digest()


def generate_public_parameters(program: Program, signature: Signature) -> PublicParameters:
    """Derive the public parameters of a step function. Deterministic.

    Raises:
        SetupError: If the program is not a step function (state, step) -> state
    """
    if len(signature.inputs) != 2:
        raise SetupError(f"step function takes (state, step), program declares "
                         f"{len(signature.inputs)} parameter(s)")
    state_ty, step_ty = signature.inputs
    if signature.output != state_ty:
        raise SetupError(f"step function returns {signature.output}, expected its state type {state_ty}")

    state_arity = flat_size(state_ty)
    step_arity = flat_size(step_ty)
    if state_arity + step_arity != len(program.arguments):
        raise SetupError(f"program takes {len(program.arguments)} arguments, "
                         f"signature flattens to {state_arity + step_arity}")
    if program.return_count != state_arity:
        raise SetupError(f"program returns {program.return_count} values, state has {state_arity}")

    curve = program.variant.curve
    digest = program.digest()
    return PublicParameters(curve, digest, state_arity, step_arity,
                            curve.hash_to_point(H_LABEL + digest))


# --- Proofs ---

@dataclass
class RecursiveProof:
    """Constant-size proof of num_steps applications of the step function."""
    num_steps: int
    z0: list[int]
    zn: list[int]
    opening: OpeningProof

    def final_state(self, state_type: Type) -> Any:
        """Decode z_n into the JSON shape of the state type."""
        return decode(self.zn, state_type)

    def to_dict(self, curve: Curve) -> dict[str, Any]:
        return {
            "num_steps": self.num_steps,
            "z0": [str(v) for v in self.z0],
            "zn": [str(v) for v in self.zn],
            "opening": self.opening.to_dict(curve),
        }

    @classmethod
    def from_dict(cls, curve: Curve, j: dict[str, Any]) -> 'RecursiveProof':
        return cls(
            num_steps=int(j["num_steps"]),
            z0=[int(v) for v in j["z0"]],
            zn=[int(v) for v in j["zn"]],
            opening=OpeningProof.from_dict(curve, j["opening"]),
        )


def _final_transcript(pp: PublicParameters, num_steps: int,
                      z0: list[int], zn: list[int]) -> Transcript:
    transcript = Transcript(b"fold-final")
    transcript.put_bytes(pp.digest())
    transcript.put([num_steps])
    transcript.put(z0)
    transcript.put(zn)
    return transcript


def _encode_value(value: Any, ty: Type, modulus: int, path: str) -> list[int]:
    return encode([parse_value(to_abi_value(value), ty, modulus, path)], (ty,))


def prove(pp: PublicParameters, program: Program, signature: Signature, init_value: Any,
          step_values: list[Any], rng: RandomSource,
          log_stream: Optional[TextIO] = None) -> RecursiveProof:
    """Fold every step of the sequence, in order, into one proof.

    Args:
        pp: Public parameters from generate_public_parameters
        program: The step function
        signature: Its (state, step) -> state signature
        init_value: Initial state, JSON-shaped or exposing to_abi()
        step_values: Per-step inputs, applied in array order
        rng: Randomness for blinding factors and sigma nonces
        log_stream: Sink for program log statements (default: sys.stdout)

    Returns:
        RecursiveProof over (z_0, z_n)

    Raises:
        ProofError: If the sequence is empty, the initial state is malformed,
            or any step fails; step failures carry the step index
    """
    if not step_values:
        raise ProofError("cannot fold an empty step sequence")
    if program.digest() != pp.program_digest:
        raise ProofError("public parameters were generated for a different program")

    state_ty, step_ty = signature.inputs
    curve = pp.curve
    params = pp.pedersen()
    modulus = program.modulus
    interpreter = Interpreter(log_stream)

    try:
        z0 = _encode_value(init_value, state_ty, modulus, "state")
    except ProverError as e:
        raise ProofError(f"invalid initial state: {e}") from e

    transcript = Transcript(b"fold")
    transcript.put_bytes(pp.digest())
    transcript.put(z0)

    acc = curve.identity()
    acc_value = 0
    acc_blinding = 0
    z = z0
    for i, step in enumerate(step_values):
        try:
            step_flat = _encode_value(step, step_ty, modulus, "step")
            witness = interpreter.execute(program, z + step_flat)
        except ProverError as e:
            raise ProofError(f"step failed: {e}", step=i) from e
        z_next = witness.return_values()
        if len(z_next) != len(z):
            raise ProofError(f"state arity changed from {len(z)} to {len(z_next)}", step=i)

        value = witness.digest(curve.order)
        blinding = rng.randrange(1, curve.order)
        commitment = params.commit(value, blinding)

        transcript.put([i])
        transcript.put(step_flat)
        transcript.put_point(curve, commitment)
        transcript.put(z_next)
        challenge = transcript.get_scalar(curve.order)

        acc = curve.add(acc, curve.multiply(commitment, challenge))
        acc_value = (acc_value + challenge * value) % curve.order
        acc_blinding = (acc_blinding + challenge * blinding) % curve.order
        z = z_next

    num_steps = len(step_values)
    opening = prove_opening(params, acc_value, acc_blinding,
                            _final_transcript(pp, num_steps, z0, z), rng)
    if not curve.eq(opening.commitment, acc):
        raise ProofError("folded commitment does not match its opening")
    return RecursiveProof(num_steps, z0, z, opening)


def verify(pp: PublicParameters, proof: RecursiveProof) -> bool:
    """Check the opening of the folded commitment against (pp, num_steps, z0, zn)."""
    if proof.num_steps < 1:
        return False
    if len(proof.z0) != pp.state_arity or len(proof.zn) != pp.state_arity:
        return False
    if any(not 0 <= v < pp.curve.order for v in proof.z0 + proof.zn):
        return False
    transcript = _final_transcript(pp, proof.num_steps, proof.z0, proof.zn)
    return verify_opening(pp.pedersen(), proof.opening, transcript)
