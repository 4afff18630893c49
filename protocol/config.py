"""Prover session configuration."""

from dataclasses import dataclass

# Number of hash steps proved per session unless configured otherwise
DEFAULT_SEQ_LEN = 2


@dataclass(frozen=True)
class ProverConfig:
    """Settings shared by both proving pipelines.

    Attributes:
        seq_len: Exact number of steps every proving call takes; also the
                 number of outputs in the folded State
        program_file: Program artifact name inside the program directory
        abi_file: ABI descriptor name inside the program directory
        proving_key_file: Per-step proving key name inside the program directory
        verbose: Print progress and timings
    """
    seq_len: int = DEFAULT_SEQ_LEN
    program_file: str = "out"
    abi_file: str = "abi.json"
    proving_key_file: str = "proving.key"
    verbose: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.seq_len, int) or self.seq_len < 1:
            raise ValueError(f"seq_len must be a positive integer, got {self.seq_len!r}")
