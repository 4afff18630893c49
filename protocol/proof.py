"""Per-step proof system: keys, proof generation, tagged proof documents.

A proof commits to the digest of the full witness under the proving key's
Pedersen generators and proves knowledge of the opening. The sigma protocol
transcript is seeded with the program digest and the public inputs, so a proof
only verifies for the statement it was generated for.
"""

import json
import struct
from dataclasses import dataclass
from typing import Any

from primitives.commitment import (
    OpeningProof,
    PedersenParams,
    RandomSource,
    prove_opening,
    verify_opening,
)
from primitives.curves import Curve, Point, get_curve
from primitives.errors import FormatError, ProofError
from primitives.field import ELEMENT_BYTES, from_hex, to_hex
from primitives.transcript import Transcript
from witness.interpreter import Witness
from witness.program import Program

PROOF_SCHEME = "sigma"

# --- Proving Key Binary Layout ---
# magic | version (u16) | curve name length (u8) | curve name | program digest | h.x | h.y
KEY_MAGIC = b"HCPK"
KEY_VERSION = 1
_KEY_HEADER = struct.Struct(">4sHB")
DIGEST_BYTES = 32


# --- Keys ---

@dataclass(frozen=True, eq=False)
class VerificationKey:
    """Public data needed to check proofs of one program."""
    curve: Curve
    program_digest: bytes
    h: Point

    def pedersen(self) -> PedersenParams:
        return PedersenParams(self.curve, self.curve.generator, self.h)


@dataclass(frozen=True, eq=False)
class ProvingKey:
    """Commitment key bound to one program.

    Attributes:
        curve: Curve the commitments live on
        program_digest: Program.digest() of the program the key was set up for
        h: Blinding generator
    """
    curve: Curve
    program_digest: bytes
    h: Point

    def pedersen(self) -> PedersenParams:
        return PedersenParams(self.curve, self.curve.generator, self.h)

    def verification_key(self) -> VerificationKey:
        return VerificationKey(self.curve, self.program_digest, self.h)

    def serialize(self) -> bytes:
        name = self.curve.name.encode()
        x, y = self.curve.to_affine(self.h)
        return b"".join([
            _KEY_HEADER.pack(KEY_MAGIC, KEY_VERSION, len(name)),
            name,
            self.program_digest,
            x.to_bytes(ELEMENT_BYTES, "big"),
            y.to_bytes(ELEMENT_BYTES, "big"),
        ])

    @classmethod
    def deserialize(cls, data: bytes) -> 'ProvingKey':
        """Parse the binary proving.key layout.

        Raises:
            FormatError: On bad magic/version, an unknown curve, truncation,
                or a blinding generator that is not on the curve
        """
        if len(data) < _KEY_HEADER.size:
            raise FormatError("proving key is truncated")
        magic, version, name_len = _KEY_HEADER.unpack_from(data)
        if magic != KEY_MAGIC:
            raise FormatError("not a proving key (bad magic)")
        if version != KEY_VERSION:
            raise FormatError(f"unsupported proving key version {version}")

        offset = _KEY_HEADER.size
        expected = offset + name_len + DIGEST_BYTES + 2 * ELEMENT_BYTES
        if len(data) != expected:
            raise FormatError(f"proving key has {len(data)} bytes, expected {expected}")

        name = data[offset:offset + name_len].decode(errors="replace")
        offset += name_len
        try:
            curve = get_curve(name)
        except KeyError as e:
            raise FormatError(f"proving key for unsupported curve '{name}'") from e

        digest = data[offset:offset + DIGEST_BYTES]
        offset += DIGEST_BYTES
        x = int.from_bytes(data[offset:offset + ELEMENT_BYTES], "big")
        y = int.from_bytes(data[offset + ELEMENT_BYTES:], "big")
        try:
            h = curve.from_affine(x, y)
        except ValueError as e:
            raise FormatError(f"invalid proving key generator: {e}") from e
        return cls(curve, digest, h)


def setup(program: Program, rng: RandomSource) -> ProvingKey:
    """Generate a proving key for a program. The trapdoor is discarded."""
    curve = program.variant.curve
    trapdoor = rng.randrange(1, curve.order)
    return ProvingKey(curve, program.digest(), curve.multiply(curve.generator, trapdoor))


# --- Proofs ---

@dataclass
class Proof:
    """Proof of one witness plus the public inputs it is bound to."""
    opening: OpeningProof
    inputs: list[int]


def _statement_transcript(program_digest: bytes, inputs: list[int]) -> Transcript:
    transcript = Transcript(b"step-proof")
    transcript.put_bytes(program_digest)
    transcript.put([len(inputs)])
    transcript.put(inputs)
    return transcript


def generate_proof(program: Program, witness: Witness, proving_key: ProvingKey,
                   rng: RandomSource) -> Proof:
    """Prove one witness of a program.

    Args:
        program: Program the witness was computed for
        witness: Full assignment from compute_witness
        proving_key: Key set up for this program
        rng: Randomness for the blinding factor and sigma nonces

    Returns:
        Proof bound to the program and the witness' public inputs

    Raises:
        ProofError: If the key belongs to another program or curve
    """
    curve = proving_key.curve
    if curve is not program.variant.curve:
        raise ProofError(f"proving key is for {curve.name}, program targets "
                         f"{program.variant.value}")
    digest = program.digest()
    if proving_key.program_digest != digest:
        raise ProofError("proving key was generated for a different program")

    inputs = witness.public_values(program)
    transcript = _statement_transcript(digest, inputs)
    blinding = rng.randrange(1, curve.order)
    opening = prove_opening(proving_key.pedersen(), witness.digest(curve.order),
                            blinding, transcript, rng)
    return Proof(opening, inputs)


@dataclass
class TaggedProof:
    """Self-describing proof document: scheme, curve, proof, public inputs."""
    scheme: str
    curve: str
    proof: OpeningProof
    inputs: list[int]

    @classmethod
    def from_proof(cls, proof: Proof, curve: Curve) -> 'TaggedProof':
        return cls(PROOF_SCHEME, curve.name, proof.opening, list(proof.inputs))

    def to_dict(self) -> dict[str, Any]:
        return {
            "scheme": self.scheme,
            "curve": self.curve,
            "proof": self.proof.to_dict(get_curve(self.curve)),
            "inputs": [to_hex(v) for v in self.inputs],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> 'TaggedProof':
        """Parse a proof document.

        Raises:
            FormatError: If the document is malformed
        """
        try:
            j = json.loads(text)
            curve = get_curve(j["curve"])
            inputs = [from_hex(v) for v in j["inputs"]]
            if any(v >= curve.order for v in inputs):
                raise ValueError("public input is not a field element")
            return cls(
                scheme=j["scheme"],
                curve=curve.name,
                proof=OpeningProof.from_dict(curve, j["proof"]),
                inputs=inputs,
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise FormatError(f"malformed proof document: {e!r}") from e


def verify_proof(vk: VerificationKey, tagged: TaggedProof) -> bool:
    """Check a proof document against a verification key."""
    if tagged.scheme != PROOF_SCHEME or tagged.curve != vk.curve.name:
        return False
    transcript = _statement_transcript(vk.program_digest, tagged.inputs)
    return verify_opening(vk.pedersen(), tagged.proof, transcript)
