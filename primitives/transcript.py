"""Fiat-Shamir transcript over SHA-256.

The transcript absorbs integers, byte strings and curve points and squeezes
challenges reduced into a scalar field. Prover and verifier derive identical
challenges as long as they absorb the same data in the same order; any change
in content or order changes every later challenge.
"""

import hashlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from primitives.curves import Curve, Point

# Integers are absorbed as fixed 32-byte big-endian words
WORD_BYTES = 32


class Transcript:
    """Hash-chained Fiat-Shamir transcript.

    Attributes:
        state: Every byte absorbed so far, prefixed by the domain label
    """

    def __init__(self, label: bytes):
        self.state = bytearray()
        self.put_bytes(label)

    def put(self, values: list[int]) -> None:
        """Absorb unsigned integers below 2^256."""
        for value in values:
            self.state.extend(int(value).to_bytes(WORD_BYTES, "big"))

    def put_bytes(self, data: bytes) -> None:
        """Absorb a length-prefixed byte string."""
        self.state.extend(len(data).to_bytes(8, "big"))
        self.state.extend(data)

    def put_point(self, curve: 'Curve', point: 'Point') -> None:
        self.put(list(curve.to_affine(point)))

    def get_scalar(self, modulus: int) -> int:
        """Squeeze one challenge in [0, modulus).

        Draws 512 bits so the reduction bias is negligible, then ratchets the
        state with the output so consecutive squeezes differ.
        """
        wide = b"".join(
            hashlib.sha256(bytes(self.state) + bytes([i])).digest() for i in range(2)
        )
        self.state.extend(wide)
        return int.from_bytes(wide, "big") % modulus
