"""Decimal-text encoding of unsigned integers for constraint program inputs.

Constraint programs read their arguments as numeric text. Every byte of a
256-bit word travels as its decimal string ("0" to "255"), which the field
element parser accepts without any sign or width convention attached.

ByteText is the adapter at that boundary: numbers go in, decimal text comes out.
"""

from dataclasses import dataclass

WORD_BYTES = 32
U128_MAX = (1 << 128) - 1
U256_MAX = (1 << 256) - 1


@dataclass(frozen=True)
class ByteText:
    """A single byte carried as its decimal text."""
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFF:
            raise ValueError(f"byte out of range: {self.value}")

    def __str__(self) -> str:
        return str(self.value)

    def to_abi(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Word256:
    """A 256-bit unsigned integer as 32 big-endian ByteText limbs."""
    limbs: tuple[ByteText, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "limbs", tuple(self.limbs))
        if len(self.limbs) != WORD_BYTES:
            raise ValueError(f"Word256 needs {WORD_BYTES} limbs, got {len(self.limbs)}")

    def to_bytes(self) -> bytes:
        return bytes(limb.value for limb in self.limbs)

    def to_int(self) -> int:
        """Reassemble the big-endian integer."""
        return int.from_bytes(self.to_bytes(), "big")

    def to_abi(self) -> dict[str, list[str]]:
        return {"limbs": [limb.to_abi() for limb in self.limbs]}

    @classmethod
    def from_abi(cls, value: dict) -> 'Word256':
        return cls(tuple(ByteText(int(limb)) for limb in value["limbs"]))


def encode_u256(value: int) -> Word256:
    """Split a 256-bit unsigned integer into 32 big-endian decimal-text bytes.

    Raises:
        ValueError: If value is outside [0, 2^256)
    """
    if not 0 <= value <= U256_MAX:
        raise ValueError(f"value does not fit in 256 bits: {value}")
    return Word256(tuple(ByteText(b) for b in value.to_bytes(WORD_BYTES, "big")))


def encode_u128(value: int) -> Word256:
    """Zero-extend a 128-bit unsigned integer to 256 bits and encode it."""
    if not 0 <= value <= U128_MAX:
        raise ValueError(f"value does not fit in 128 bits: {value}")
    return encode_u256(value)
