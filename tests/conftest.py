"""
Pytest fixtures: program directories for the test circuits.
"""

import random
from pathlib import Path

import pytest

from tests.circuits import (
    fold_step_abi,
    fold_step_program,
    hash_step_abi,
    hash_step_program,
    write_program_dir,
)


@pytest.fixture
def rng() -> random.Random:
    """Seeded randomness so proofs are reproducible within a test."""
    return random.Random(42)


@pytest.fixture(scope="session")
def hash_step_json() -> dict:
    return hash_step_program()


@pytest.fixture(scope="session")
def fold_step_json() -> dict:
    return fold_step_program(2)


@pytest.fixture
def hash_step_dir(tmp_path: Path, hash_step_json: dict) -> Path:
    """Per-step program directory with a proving key."""
    return write_program_dir(tmp_path / "hash_step", hash_step_json, hash_step_abi(),
                             proving_key=True)


@pytest.fixture
def fold_step_dir(tmp_path: Path, fold_step_json: dict) -> Path:
    """Step function program directory."""
    return write_program_dir(tmp_path / "fold_step", fold_step_json, fold_step_abi(2))
