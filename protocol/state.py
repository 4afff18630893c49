"""Values exchanged with the hash-chain programs.

HashInputs is the per-step input, State is the value threaded through the
folded computation, and CircuitInput is the full argument list of the
per-step program. All serialize to the JSON shapes the ABI expects via
to_abi().
"""

from dataclasses import dataclass
from typing import Any

from primitives.encoding import ByteText, Word256, encode_u256
from protocol.config import DEFAULT_SEQ_LEN


@dataclass(frozen=True)
class HashInputs:
    """The two words hashed in one step."""
    words: tuple[Word256, Word256]

    def __post_init__(self) -> None:
        object.__setattr__(self, "words", tuple(self.words))
        if len(self.words) != 2:
            raise ValueError(f"HashInputs takes exactly 2 words, got {len(self.words)}")

    def to_abi(self) -> dict[str, Any]:
        return {"words": [w.to_abi() for w in self.words]}


@dataclass(frozen=True)
class State:
    """Folded state: next output index plus one output word per step."""
    idx: ByteText
    outputs: tuple[Word256, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "outputs", tuple(self.outputs))

    @property
    def seq_len(self) -> int:
        return len(self.outputs)

    def to_abi(self) -> dict[str, Any]:
        return {"idx": self.idx.to_abi(), "outputs": [o.to_abi() for o in self.outputs]}

    @classmethod
    def from_abi(cls, value: dict[str, Any]) -> 'State':
        """Rebuild from the JSON shape produced by to_abi() or ABI decoding."""
        return cls(ByteText(int(value["idx"])),
                   tuple(Word256.from_abi(o) for o in value["outputs"]))


@dataclass(frozen=True)
class CircuitInput:
    """Argument list of the per-step program: a single HashInputs."""
    w: HashInputs

    def to_abi(self) -> list[Any]:
        return [self.w.to_abi()]


def genesis_state(seq_len: int = DEFAULT_SEQ_LEN) -> State:
    """Index 0 with seq_len zero words."""
    if seq_len < 1:
        raise ValueError(f"seq_len must be positive, got {seq_len}")
    return State(ByteText(0), tuple(encode_u256(0) for _ in range(seq_len)))


def make_hash_inputs(x: int, y: int) -> HashInputs:
    return HashInputs((encode_u256(x), encode_u256(y)))
