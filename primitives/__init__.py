"""Primitives - Fields, encodings, curves and commitments."""

from primitives.commitment import (
    OpeningProof,
    PedersenParams,
    RandomSource,
    prove_opening,
    verify_opening,
)
from primitives.curves import BN128, CURVES, PALLAS, Curve, Point, get_curve
from primitives.encoding import (
    WORD_BYTES,
    ByteText,
    Word256,
    encode_u128,
    encode_u256,
)
from primitives.errors import (
    AbiMismatch,
    ArtifactIOError,
    ExecutionFailure,
    FormatError,
    ProofError,
    ProverError,
    SetupError,
)
from primitives.field import (
    BN128_FQ,
    BN128_FR,
    BN128_SCALAR_MODULUS,
    PALLAS_FP,
    PALLAS_FQ,
    PALLAS_SCALAR_MODULUS,
)
from primitives.transcript import Transcript

__all__ = [
    # Errors
    "ProverError",
    "ArtifactIOError",
    "FormatError",
    "AbiMismatch",
    "ExecutionFailure",
    "SetupError",
    "ProofError",
    # Fields
    "BN128_FR",
    "BN128_FQ",
    "PALLAS_FQ",
    "PALLAS_FP",
    "BN128_SCALAR_MODULUS",
    "PALLAS_SCALAR_MODULUS",
    # Encoding
    "ByteText",
    "Word256",
    "WORD_BYTES",
    "encode_u256",
    "encode_u128",
    # Curves
    "Curve",
    "Point",
    "BN128",
    "PALLAS",
    "CURVES",
    "get_curve",
    # Transcript
    "Transcript",
    # Commitments
    "PedersenParams",
    "OpeningProof",
    "RandomSource",
    "prove_opening",
    "verify_opening",
]
