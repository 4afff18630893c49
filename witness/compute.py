"""Witness computation from typed input values.

compute_witness() is the single entry point both proving pipelines use:
serialize the input to JSON text, check it against the parameter signature,
flatten it and execute the program.
"""

import json
from typing import Any, Optional, TextIO

from witness.abi import Signature, decode, encode, parse_strict
from witness.interpreter import Interpreter, Witness
from witness.program import Program


def to_abi_value(value: Any) -> Any:
    """Convert a value to its JSON shape. Objects with to_abi() serialize through it."""
    if hasattr(value, "to_abi"):
        return value.to_abi()
    if isinstance(value, (list, tuple)):
        return [to_abi_value(v) for v in value]
    if isinstance(value, dict):
        return {k: to_abi_value(v) for k, v in value.items()}
    return value


def serialize_input(value: Any) -> str:
    """Canonical JSON text of an argument list."""
    return json.dumps(to_abi_value(value), separators=(",", ":"))


def compute_witness(program: Program, input_value: Any, signature: Signature,
                    log_stream: Optional[TextIO] = None) -> Witness:
    """Compute the full witness of a program for one input.

    Args:
        program: Program to execute
        input_value: Argument list, either JSON-shaped or objects exposing to_abi()
        signature: Parameter types the input is checked against
        log_stream: Sink for program log statements (default: sys.stdout)

    Returns:
        Witness of every program variable

    Raises:
        AbiMismatch: If the input does not match the signature
        ExecutionFailure: If execution fails on the parsed input
    """
    text = serialize_input(input_value)
    values = parse_strict(text, signature.inputs, program.modulus)
    flat = encode(values, signature.inputs)
    return Interpreter(log_stream).execute(program, flat)


def decode_outputs(witness: Witness, signature: Signature) -> Any:
    """Decode the return values into the JSON shape of the output type."""
    return decode(witness.return_values(), signature.output)
