"""Program interpreter: executes a constraint program into a full witness."""

import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional, TextIO

from primitives.errors import ExecutionFailure
from primitives.transcript import Transcript
from witness.program import ONE, Constraint, Directive, LinComb, Log, Program, Solver

# --- Type Aliases ---
FieldElement = Any  # 0-d galois FieldArray


# --- Witness ---

@dataclass
class Witness:
    """Assignment of a field value to every program variable.

    Attributes:
        values: Variable -> value, in assignment order (~one first, then
                arguments, then statement outputs)
        return_ids: The program's return variables, in order
    """
    values: dict[str, FieldElement]
    return_ids: list[str]

    def return_values(self) -> list[int]:
        return [int(self.values[v]) for v in self.return_ids]

    def public_values(self, program: Program) -> list[int]:
        return [int(self.values[v]) for v in program.public_input_ids()]

    def digest(self, modulus: int) -> int:
        """Bind the whole assignment, names and order included, to one scalar."""
        transcript = Transcript(b"witness")
        for var, val in self.values.items():
            transcript.put_bytes(var.encode())
            transcript.put([int(val)])
        return transcript.get_scalar(modulus)


# --- Solvers ---

def _solve_bits(F: type, inputs: list[FieldElement], d: Directive) -> list[int]:
    value = int(inputs[0])
    if value >> d.bitwidth:
        raise ExecutionFailure(f"value {value} does not fit in {d.bitwidth} bits")
    return [(value >> (d.bitwidth - 1 - i)) & 1 for i in range(d.bitwidth)]


def _solve_div(F: type, inputs: list[FieldElement], d: Directive) -> list[FieldElement]:
    num, den = inputs
    if den == 0:
        raise ExecutionFailure("division by zero")
    return [num / den]


def _bit(value: FieldElement) -> int:
    v = int(value)
    if v not in (0, 1):
        raise ExecutionFailure(f"expected a bit, found {v}")
    return v


def _solve_xor(F: type, inputs: list[FieldElement], d: Directive) -> list[int]:
    return [_bit(inputs[0]) ^ _bit(inputs[1])]


def _solve_or(F: type, inputs: list[FieldElement], d: Directive) -> list[int]:
    return [_bit(inputs[0]) | _bit(inputs[1])]


def _solve_condition_eq(F: type, inputs: list[FieldElement], d: Directive) -> list[Any]:
    x = inputs[0]
    if x == 0:
        return [0, 0]
    return [1, F(1) / x]


# Registry mapping solver names to their implementations
SOLVERS: dict[Solver, Callable[[type, list[FieldElement], Directive], list[Any]]] = {
    Solver.BITS: _solve_bits,
    Solver.DIV: _solve_div,
    Solver.XOR: _solve_xor,
    Solver.OR: _solve_or,
    Solver.CONDITION_EQ: _solve_condition_eq,
}


# --- Interpreter ---

class Interpreter:
    """Executes programs, writing log statements to a text sink.

    Args:
        log_stream: Destination of log statement output (default: sys.stdout)
    """

    def __init__(self, log_stream: Optional[TextIO] = None):
        self.log_stream = log_stream

    def execute(self, program: Program, inputs: list[int]) -> Witness:
        """Run every statement in order and return the complete assignment.

        Args:
            program: Program to execute
            inputs: Flattened argument values, one per program argument

        Returns:
            Witness holding every variable, returns included

        Raises:
            ExecutionFailure: On arity mismatch, an unsatisfied constraint,
                a solver failure, or a return value that was never assigned
        """
        F = program.variant.field
        if len(inputs) != len(program.arguments):
            raise ExecutionFailure(
                f"program takes {len(program.arguments)} arguments, {len(inputs)} given")

        values: dict[str, FieldElement] = {ONE: F(1)}
        for arg, value in zip(program.arguments, inputs):
            if not 0 <= value < program.modulus:
                raise ExecutionFailure(f"argument {arg.id} is not a field element: {value}")
            values[arg.id] = F(value)

        for index, statement in enumerate(program.statements):
            if isinstance(statement, Constraint):
                self._constraint(F, values, statement, index)
            elif isinstance(statement, Directive):
                self._directive(F, values, statement)
            elif isinstance(statement, Log):
                self._log(F, values, statement)

        missing = [v for v in program.return_ids() if v not in values]
        if missing:
            raise ExecutionFailure(f"return value(s) never assigned: {missing}")
        return Witness(values, program.return_ids())

    # --- Statement Handlers ---

    @staticmethod
    def _eval(F: type, values: dict[str, FieldElement], lc: LinComb) -> FieldElement:
        acc = F(0)
        for var, coeff in lc:
            if var not in values:
                raise ExecutionFailure(f"variable {var} is read before it is assigned")
            acc = acc + F(coeff) * values[var]
        return acc

    def _constraint(self, F: type, values: dict[str, FieldElement],
                    c: Constraint, index: int) -> None:
        product = self._eval(F, values, c.left) * self._eval(F, values, c.right)
        if len(c.out) == 1 and c.out[0][0] not in values and c.out[0][1] != 0:
            var, coeff = c.out[0]
            values[var] = product / F(coeff)
            return
        if self._eval(F, values, c.out) != product:
            raise ExecutionFailure(c.error or f"constraint {index} is not satisfied")

    def _directive(self, F: type, values: dict[str, FieldElement], d: Directive) -> None:
        inputs = [self._eval(F, values, lc) for lc in d.inputs]
        outputs = SOLVERS[d.solver](F, inputs, d)
        for var, value in zip(d.outputs, outputs):
            if var in values:
                raise ExecutionFailure(f"variable {var} is assigned twice")
            values[var] = F(int(value))

    def _log(self, F: type, values: dict[str, FieldElement], log: Log) -> None:
        pieces = log.format.split("{}")
        rendered = [str(int(self._eval(F, values, e))) for e in log.expressions]
        message = pieces[0] + "".join(r + p for r, p in zip(rendered, pieces[1:]))
        stream = self.log_stream if self.log_stream is not None else sys.stdout
        stream.write(message + "\n")
