"""Loading program artifacts from a program directory.

A program directory holds the compiled program (`out`), its ABI descriptor
(`abi.json`) and, for the per-step pipeline, a proving key (`proving.key`).
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from primitives.errors import ArtifactIOError, FormatError
from protocol.config import ProverConfig
from protocol.proof import ProvingKey
from witness.abi import Abi, Signature, flat_size
from witness.program import Program, ProgramVariant


def _read(path: Path, binary: bool = False) -> Union[str, bytes]:
    try:
        return path.read_bytes() if binary else path.read_text(encoding="utf-8")
    except OSError as e:
        raise ArtifactIOError(f"Could not open {path}: {e.strerror or e}",
                              artifact=str(path)) from e
    except UnicodeDecodeError as e:
        raise FormatError(f"artifact is not valid UTF-8: {e}", artifact=str(path)) from e


@dataclass
class ProgramArtifacts:
    """Program, ABI and optional proving key loaded from one directory."""
    program: Program
    abi: Abi
    proving_key: Optional[ProvingKey] = None

    @property
    def signature(self) -> Signature:
        return self.abi.signature()

    @classmethod
    def from_dir(cls, program_dir: Union[str, Path], variant: ProgramVariant,
                 config: ProverConfig, with_proving_key: bool = False) -> 'ProgramArtifacts':
        """Load and cross-check the artifacts of a program directory.

        Args:
            program_dir: Directory holding the artifacts
            variant: Curve the caller needs the program compiled for
            config: Supplies the artifact file names
            with_proving_key: Also load the per-step proving key

        Raises:
            ArtifactIOError: If a file is missing or unreadable
            FormatError: If a file does not parse, the program targets another
                curve, or the ABI does not describe the program's arguments
        """
        program_dir = Path(program_dir)

        program_path = program_dir / config.program_file
        try:
            program = Program.deserialize(_read(program_path))
        except FormatError as e:
            raise e.with_context(artifact=str(program_path))
        if program.variant is not variant:
            raise FormatError(f"program targets {program.variant.value}, "
                              f"expected {variant.value}", artifact=str(program_path))

        abi_path = program_dir / config.abi_file
        try:
            abi = Abi.from_dict(json.loads(_read(abi_path)))
        except json.JSONDecodeError as e:
            raise FormatError(f"ABI is not valid JSON: {e}", artifact=str(abi_path)) from e
        except FormatError as e:
            raise e.with_context(artifact=str(abi_path))
        n_flat = sum(flat_size(i.ty) for i in abi.inputs)
        if n_flat != len(program.arguments):
            raise FormatError(f"ABI inputs flatten to {n_flat} elements, program takes "
                              f"{len(program.arguments)} arguments", artifact=str(abi_path))
        if flat_size(abi.output) != program.return_count:
            raise FormatError(f"ABI output flattens to {flat_size(abi.output)} elements, "
                              f"program returns {program.return_count}", artifact=str(abi_path))

        proving_key = None
        if with_proving_key:
            key_path = program_dir / config.proving_key_file
            try:
                proving_key = ProvingKey.deserialize(_read(key_path, binary=True))
            except FormatError as e:
                raise e.with_context(artifact=str(key_path))

        return cls(program, abi, proving_key)
