"""Top-level proving pipelines over a chain of hash steps.

RecursivePipeline folds the whole sequence into one constant-size proof;
PerStepPipeline produces one tagged proof document per step. Each call loads
its artifacts, generates what it needs and keeps no state between calls.
"""

import json
import secrets
import time
from pathlib import Path
from typing import Optional, TextIO, Union

from primitives.commitment import RandomSource
from primitives.errors import ProverError
from protocol import folding
from protocol.artifacts import ProgramArtifacts
from protocol.config import ProverConfig
from protocol.folding import RecursiveProof
from protocol.proof import TaggedProof, generate_proof
from protocol.state import CircuitInput, HashInputs, State, genesis_state
from witness.compute import compute_witness, decode_outputs
from witness.program import ProgramVariant

# --- Type Aliases ---
PathLike = Union[str, Path]


class _Pipeline:
    """Session settings shared by both pipelines.

    Args:
        config: Session configuration (default: ProverConfig())
        rng: Randomness source with randrange (default: secrets.SystemRandom())
        log_stream: Sink for program log statements (default: sys.stdout)
    """

    def __init__(self, config: Optional[ProverConfig] = None,
                 rng: Optional[RandomSource] = None,
                 log_stream: Optional[TextIO] = None):
        self.config = config if config is not None else ProverConfig()
        self.rng = rng if rng is not None else secrets.SystemRandom()
        self.log_stream = log_stream

    def _log(self, message: str) -> None:
        if self.config.verbose:
            print(message)

    def _check_length(self, hash_input_seq: list[HashInputs]) -> None:
        if len(hash_input_seq) != self.config.seq_len:
            raise ValueError(f"expected {self.config.seq_len} hash inputs, "
                             f"got {len(hash_input_seq)}")


class RecursivePipeline(_Pipeline):
    """Proves a hash sequence with the folding scheme on Pallas."""

    def prove(self, hash_input_seq: list[HashInputs], program_dir: PathLike,
              init_state: Optional[State] = None) -> RecursiveProof:
        """Fold the hash sequence into one proof.

        Args:
            hash_input_seq: Exactly config.seq_len step inputs, applied in order
            program_dir: Directory holding the step function artifacts
            init_state: Initial state (default: genesis_state(config.seq_len))

        Returns:
            RecursiveProof of the whole sequence

        Raises:
            ValueError: If the sequence or initial state has the wrong length
            ArtifactIOError: If an artifact is missing or unreadable
            FormatError: If an artifact is malformed or not a Pallas program
            SetupError: If the program is not a step function
            ProofError: If folding fails; carries the failing step index
        """
        self._check_length(hash_input_seq)
        if init_state is None:
            init_state = genesis_state(self.config.seq_len)
        elif init_state.seq_len != self.config.seq_len:
            raise ValueError(f"initial state has {init_state.seq_len} outputs, "
                             f"expected {self.config.seq_len}")

        artifacts = ProgramArtifacts.from_dir(program_dir, ProgramVariant.PALLAS, self.config)
        signature = artifacts.signature

        self._log("Generating public parameters...")
        start = time.perf_counter()
        pp = folding.generate_public_parameters(artifacts.program, signature)
        self._log(f"Time spent in public parameters setup: {time.perf_counter() - start:.3f}s")

        self._log("Proving...")
        start = time.perf_counter()
        proof = folding.prove(pp, artifacts.program, signature, init_state,
                              list(hash_input_seq), self.rng, self.log_stream)
        self._log(f"Time spent in proving: {time.perf_counter() - start:.3f}s")
        return proof


class PerStepPipeline(_Pipeline):
    """Proves every hash step separately on BN128."""

    def prove(self, hash_input_seq: list[HashInputs], program_dir: PathLike) -> list[str]:
        """Generate one proof document per step.

        Aborts on the first failing step: nothing is returned for the steps
        that did succeed.

        Args:
            hash_input_seq: Exactly config.seq_len step inputs
            program_dir: Directory holding the per-step program and proving key

        Returns:
            One TaggedProof JSON document per step, in input order

        Raises:
            ValueError: If the sequence has the wrong length
            ArtifactIOError: If an artifact is missing or unreadable
            FormatError: If an artifact is malformed or not a BN128 program
            AbiMismatch, ExecutionFailure, ProofError: From the failing step,
                with its index attached
        """
        self._check_length(hash_input_seq)
        artifacts = ProgramArtifacts.from_dir(program_dir, ProgramVariant.BN128, self.config,
                                              with_proving_key=True)
        program = artifacts.program
        signature = artifacts.signature

        documents = []
        for i, hash_inputs in enumerate(hash_input_seq):
            try:
                witness = compute_witness(program, CircuitInput(hash_inputs), signature,
                                          self.log_stream)
                if self.config.verbose:
                    outputs = json.dumps(decode_outputs(witness, signature))
                    self._log(f"\nWitness: \n{outputs}\n")

                start = time.perf_counter()
                proof = generate_proof(program, witness, artifacts.proving_key, self.rng)
                self._log(f"Time spent proving step {i}: {time.perf_counter() - start:.3f}s")
            except ProverError as e:
                raise e.with_context(step=i)
            documents.append(TaggedProof.from_proof(proof, program.variant.curve).to_json())
        return documents
