"""Constraint program representation and its JSON artifact format.

A program is a flat list of statements over named variables:

- Constraint: left * right == out, for linear combinations left/right/out.
  When `out` is a single term on a not yet assigned variable the interpreter
  solves for that variable instead of checking.
- Directive: a named solver that assigns output variables from input
  combinations (bit decomposition, division, boolean ops, zero test).
  Directives only compute values; constraints are what pin them down.
- Log: a message with {} placeholders printed at execution time.

Arguments are assigned from the flattened input vector; return values are the
variables ~out_0 .. ~out_{n-1}. The constant 1 is the variable ~one.
"""

import hashlib
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from primitives.curves import BN128, PALLAS, Curve
from primitives.errors import FormatError
from primitives.field import BN128_FR, BN128_SCALAR_MODULUS, PALLAS_FQ, PALLAS_SCALAR_MODULUS

ONE = "~one"
RETURN_PREFIX = "~out_"

# --- Type Aliases ---
LinComb = tuple[tuple[str, int], ...]  # ((variable, coefficient), ...)


# --- Variants ---

class ProgramVariant(Enum):
    """Curve a program is compiled for. Closed: anything else is a FormatError."""
    BN128 = "bn128"
    PALLAS = "pallas"

    @classmethod
    def parse(cls, tag: Any) -> 'ProgramVariant':
        try:
            return cls(tag)
        except ValueError as e:
            supported = [v.value for v in cls]
            raise FormatError(f"Unsupported program curve {tag!r}. Supported: {supported}") from e

    @property
    def modulus(self) -> int:
        return _VARIANT_MODULI[self]

    @property
    def field(self) -> type:
        """galois field the program computes over."""
        return _VARIANT_FIELDS[self]

    @property
    def curve(self) -> Curve:
        """Curve whose group order equals the program field."""
        return _VARIANT_CURVES[self]


_VARIANT_MODULI = {ProgramVariant.BN128: BN128_SCALAR_MODULUS,
                   ProgramVariant.PALLAS: PALLAS_SCALAR_MODULUS}
_VARIANT_FIELDS = {ProgramVariant.BN128: BN128_FR, ProgramVariant.PALLAS: PALLAS_FQ}
_VARIANT_CURVES = {ProgramVariant.BN128: BN128, ProgramVariant.PALLAS: PALLAS}


# --- Statements ---

class Solver(Enum):
    BITS = "bits"
    DIV = "div"
    XOR = "xor"
    OR = "or"
    CONDITION_EQ = "condition_eq"


# (inputs, outputs) per solver; BITS outputs depend on the bitwidth
SOLVER_ARITY: dict[Solver, tuple[int, Optional[int]]] = {
    Solver.BITS: (1, None),
    Solver.DIV: (2, 1),
    Solver.XOR: (2, 1),
    Solver.OR: (2, 1),
    Solver.CONDITION_EQ: (1, 2),
}


@dataclass(frozen=True)
class Constraint:
    left: LinComb
    right: LinComb
    out: LinComb
    error: Optional[str] = None


@dataclass(frozen=True)
class Directive:
    solver: Solver
    inputs: tuple[LinComb, ...]
    outputs: tuple[str, ...]
    bitwidth: Optional[int] = None


@dataclass(frozen=True)
class Log:
    format: str
    expressions: tuple[LinComb, ...]


Statement = Union[Constraint, Directive, Log]


@dataclass(frozen=True)
class Argument:
    id: str
    private: bool


# --- Program ---

@dataclass
class Program:
    """A compiled constraint program.

    Attributes:
        variant: Curve the program targets; fixes the field modulus
        arguments: Input variables, in flattened ABI order
        return_count: Number of ~out_i return variables
        statements: Constraints, directives and logs in execution order
    """
    variant: ProgramVariant
    arguments: list[Argument]
    return_count: int
    statements: list[Statement]

    @property
    def modulus(self) -> int:
        return self.variant.modulus

    def return_ids(self) -> list[str]:
        return [f"{RETURN_PREFIX}{i}" for i in range(self.return_count)]

    def public_input_ids(self) -> list[str]:
        """Public arguments followed by every return variable."""
        return [a.id for a in self.arguments if not a.private] + self.return_ids()

    def digest(self) -> bytes:
        """SHA-256 of the canonical JSON form. Keys and parameters bind to it."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).digest()

    # --- Serialization ---

    def to_dict(self) -> dict[str, Any]:
        return {
            "curve": self.variant.value,
            "arguments": [{"id": a.id, "private": a.private} for a in self.arguments],
            "return_count": self.return_count,
            "statements": [_statement_to_dict(s) for s in self.statements],
        }

    @classmethod
    def deserialize(cls, text: str) -> 'Program':
        """Parse the `out` artifact.

        Raises:
            FormatError: If the text is not a well-formed program
        """
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise FormatError(f"program is not valid JSON: {e}") from e
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: Any) -> 'Program':
        """Build from parsed program JSON.

        Raises:
            FormatError: On an unsupported curve or a malformed statement
        """
        if not isinstance(raw, dict):
            raise FormatError("program must be a JSON object")
        variant = ProgramVariant.parse(raw.get("curve"))
        modulus = variant.modulus
        try:
            arguments = [Argument(str(a["id"]), bool(a["private"])) for a in raw["arguments"]]
            return_count = raw["return_count"]
            statements = [_parse_statement(s, modulus) for s in raw["statements"]]
        except (KeyError, TypeError) as e:
            raise FormatError(f"malformed program: {e!r}") from e
        if not isinstance(return_count, int) or return_count < 0:
            raise FormatError(f"invalid return_count: {return_count!r}")
        return cls(variant, arguments, return_count, statements)


def _parse_lincomb(raw: Any, modulus: int) -> LinComb:
    terms = []
    for term in raw:
        if not isinstance(term, list) or len(term) != 2:
            raise FormatError(f"malformed term {term!r}")
        var, coeff = term
        if not isinstance(var, str) or not isinstance(coeff, str):
            raise FormatError(f"malformed term {term!r}")
        try:
            terms.append((var, int(coeff) % modulus))
        except ValueError as e:
            raise FormatError(f"malformed coefficient {coeff!r}") from e
    return tuple(terms)


def _parse_statement(raw: dict, modulus: int) -> Statement:
    kind = raw["type"]
    if kind == "constraint":
        return Constraint(
            left=_parse_lincomb(raw["left"], modulus),
            right=_parse_lincomb(raw["right"], modulus),
            out=_parse_lincomb(raw["out"], modulus),
            error=raw.get("error"),
        )

    if kind == "directive":
        try:
            solver = Solver(raw["solver"])
        except ValueError as e:
            raise FormatError(f"unknown solver {raw['solver']!r}") from e
        inputs = tuple(_parse_lincomb(i, modulus) for i in raw["inputs"])
        outputs = tuple(str(o) for o in raw["outputs"])
        bitwidth = raw.get("bitwidth")
        n_in, n_out = SOLVER_ARITY[solver]
        if solver is Solver.BITS:
            if not isinstance(bitwidth, int) or bitwidth <= 0:
                raise FormatError(f"bits solver needs a positive bitwidth, got {bitwidth!r}")
            n_out = bitwidth
        if len(inputs) != n_in or len(outputs) != n_out:
            raise FormatError(
                f"solver {solver.value} expects {n_in} inputs and {n_out} outputs, "
                f"got {len(inputs)} and {len(outputs)}")
        return Directive(solver, inputs, outputs, bitwidth)

    if kind == "log":
        fmt = raw["format"]
        expressions = tuple(_parse_lincomb(e, modulus) for e in raw["expressions"])
        if not isinstance(fmt, str) or fmt.count("{}") != len(expressions):
            raise FormatError(f"log format {fmt!r} does not match {len(expressions)} expression(s)")
        return Log(fmt, expressions)

    raise FormatError(f"unknown statement type {kind!r}")


def _lincomb_to_list(lc: LinComb) -> list[list[str]]:
    return [[var, str(coeff)] for var, coeff in lc]


def _statement_to_dict(s: Statement) -> dict[str, Any]:
    if isinstance(s, Constraint):
        d = {"type": "constraint", "left": _lincomb_to_list(s.left),
             "right": _lincomb_to_list(s.right), "out": _lincomb_to_list(s.out)}
        if s.error is not None:
            d["error"] = s.error
        return d
    if isinstance(s, Directive):
        d = {"type": "directive", "solver": s.solver.value,
             "inputs": [_lincomb_to_list(i) for i in s.inputs], "outputs": list(s.outputs)}
        if s.bitwidth is not None:
            d["bitwidth"] = s.bitwidth
        return d
    return {"type": "log", "format": s.format,
            "expressions": [_lincomb_to_list(e) for e in s.expressions]}
