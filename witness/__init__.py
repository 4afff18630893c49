"""Witness computation.

Programs are loaded from their JSON artifact (program.py), their inputs are
described by a zokrates-style ABI (abi.py), and the interpreter executes them
into a full variable assignment (interpreter.py). compute.py ties the three
together for the proving pipelines.
"""

from .abi import Abi, Signature, parse_strict
from .compute import compute_witness, decode_outputs
from .interpreter import SOLVERS, Interpreter, Witness
from .program import Program, ProgramVariant

__all__ = [
    'Abi',
    'Signature',
    'parse_strict',
    'Program',
    'ProgramVariant',
    'Interpreter',
    'Witness',
    'SOLVERS',
    'compute_witness',
    'decode_outputs',
]
