"""Pedersen commitments and a Schnorr proof of knowledge of their opening.

A commitment to value v with blinding r is C = v*G + r*H. The opening proof
is the standard sigma protocol made non-interactive with a transcript:

    T = k1*G + k2*H                      (fresh k1, k2)
    c = transcript(C, T)
    s1 = k1 + c*v,  s2 = k2 + c*r        (mod group order)

and verifies as s1*G + s2*H == T + c*C. Commitments are additively
homomorphic, which is what the folding scheme relies on.
"""

from dataclasses import dataclass
from typing import Any, Protocol

from primitives.curves import Curve, Point
from primitives.field import from_hex, to_hex
from primitives.transcript import Transcript


class RandomSource(Protocol):
    """Injectable randomness: random.Random, secrets.SystemRandom, ..."""

    def randrange(self, start: int, stop: int) -> int: ...


@dataclass(frozen=True, eq=False)
class PedersenParams:
    """Generators for one commitment key. H must have unknown log base G."""
    curve: Curve
    g: Point
    h: Point

    def commit(self, value: int, blinding: int) -> Point:
        return self.curve.add(self.curve.multiply(self.g, value),
                              self.curve.multiply(self.h, blinding))


@dataclass(eq=False)
class OpeningProof:
    """Commitment plus the sigma-protocol transcript proving its opening."""
    commitment: Point
    nonce_commitment: Point
    value_response: int
    blinding_response: int

    def to_dict(self, curve: Curve) -> dict[str, Any]:
        return {
            "commitment": curve.to_hex(self.commitment),
            "nonce_commitment": curve.to_hex(self.nonce_commitment),
            "value_response": to_hex(self.value_response),
            "blinding_response": to_hex(self.blinding_response),
        }

    @classmethod
    def from_dict(cls, curve: Curve, j: dict[str, Any]) -> 'OpeningProof':
        """Parse a serialized opening proof.

        Raises:
            KeyError: If a field is missing
            ValueError: If a point or scalar is malformed
        """
        value_response = from_hex(j["value_response"])
        blinding_response = from_hex(j["blinding_response"])
        if value_response >= curve.order or blinding_response >= curve.order:
            raise ValueError("response is not a canonical scalar")
        return cls(
            commitment=curve.from_hex(j["commitment"]),
            nonce_commitment=curve.from_hex(j["nonce_commitment"]),
            value_response=value_response,
            blinding_response=blinding_response,
        )


def prove_opening(params: PedersenParams, value: int, blinding: int,
                  transcript: Transcript, rng: RandomSource) -> OpeningProof:
    """Commit to (value, blinding) and prove knowledge of the opening.

    Args:
        params: Commitment generators
        value: Committed scalar
        blinding: Blinding scalar
        transcript: Transcript already seeded with the statement
        rng: Source of the sigma-protocol nonces; must never repeat them

    Returns:
        OpeningProof whose commitment is value*G + blinding*H
    """
    order = params.curve.order
    commitment = params.commit(value, blinding)

    k_value = rng.randrange(1, order)
    k_blinding = rng.randrange(1, order)
    nonce_commitment = params.commit(k_value, k_blinding)

    transcript.put_point(params.curve, commitment)
    transcript.put_point(params.curve, nonce_commitment)
    challenge = transcript.get_scalar(order)

    return OpeningProof(
        commitment=commitment,
        nonce_commitment=nonce_commitment,
        value_response=(k_value + challenge * value) % order,
        blinding_response=(k_blinding + challenge * blinding) % order,
    )


def verify_opening(params: PedersenParams, proof: OpeningProof,
                   transcript: Transcript) -> bool:
    """Check s1*G + s2*H == T + c*C for a transcript seeded like the prover's."""
    curve = params.curve
    transcript.put_point(curve, proof.commitment)
    transcript.put_point(curve, proof.nonce_commitment)
    challenge = transcript.get_scalar(curve.order)

    lhs = params.commit(proof.value_response, proof.blinding_response)
    rhs = curve.add(proof.nonce_commitment, curve.multiply(proof.commitment, challenge))
    return curve.eq(lhs, rhs)
