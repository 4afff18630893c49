"""Proving protocol: state model, artifacts, proof systems and pipelines."""

from .config import DEFAULT_SEQ_LEN, ProverConfig
from .folding import PublicParameters, RecursiveProof
from .proof import ProvingKey, TaggedProof, VerificationKey
from .prover import PerStepPipeline, RecursivePipeline
from .state import CircuitInput, HashInputs, State, genesis_state, make_hash_inputs

__all__ = [
    'DEFAULT_SEQ_LEN',
    'ProverConfig',
    'HashInputs',
    'State',
    'CircuitInput',
    'genesis_state',
    'make_hash_inputs',
    'ProvingKey',
    'VerificationKey',
    'TaggedProof',
    'PublicParameters',
    'RecursiveProof',
    'RecursivePipeline',
    'PerStepPipeline',
]
