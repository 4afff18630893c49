"""Constraint program ABI: parameter types, strict parsing and flattening.

An ABI descriptor (abi.json) declares the typed parameters a program reads and
the type it returns, in the zokrates layout:

    {"inputs": [{"name": "w", "public": false, "type": "struct",
                 "components": {"name": "HashInputs", "members": [...]}}],
     "output": {"type": "field"}}

Input values arrive as JSON text in which every number is a string.
parse_strict() checks that text against the declared types exactly: no missing,
extra or mistyped fields. encode() flattens the typed values into the field
element vector the program's arguments expect, and decode() turns a flat
vector back into JSON text values.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterator, Union

from primitives.errors import AbiMismatch, FormatError
from primitives.field import from_hex, parse_decimal

UINT_BITWIDTHS = (8, 16, 32, 64)


# --- Types ---

@dataclass(frozen=True)
class FieldType:
    def __str__(self) -> str:
        return "field"


@dataclass(frozen=True)
class BooleanType:
    def __str__(self) -> str:
        return "bool"


@dataclass(frozen=True)
class UintType:
    bitwidth: int

    def __str__(self) -> str:
        return f"u{self.bitwidth}"


@dataclass(frozen=True)
class ArrayType:
    size: int
    element: 'Type'

    def __str__(self) -> str:
        return f"{self.element}[{self.size}]"


@dataclass(frozen=True)
class StructMember:
    name: str
    ty: 'Type'


@dataclass(frozen=True)
class StructType:
    name: str
    members: tuple[StructMember, ...]

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TupleType:
    elements: tuple['Type', ...]

    def __str__(self) -> str:
        return f"({', '.join(str(e) for e in self.elements)})"


Type = Union[FieldType, BooleanType, UintType, ArrayType, StructType, TupleType]


def flat_size(ty: Type) -> int:
    """Number of field elements a value of this type flattens to."""
    if isinstance(ty, ArrayType):
        return ty.size * flat_size(ty.element)
    if isinstance(ty, StructType):
        return sum(flat_size(m.ty) for m in ty.members)
    if isinstance(ty, TupleType):
        return sum(flat_size(e) for e in ty.elements)
    return 1


# --- Descriptor (de)serialization ---

def type_from_json(j: dict) -> Type:
    """Parse a zokrates-style type descriptor.

    Raises:
        FormatError: If the descriptor is malformed or names an unknown type
    """
    try:
        kind = j["type"]
        if kind == "field":
            return FieldType()
        if kind == "bool":
            return BooleanType()
        if kind in {f"u{b}" for b in UINT_BITWIDTHS}:
            return UintType(int(kind[1:]))
        if kind == "array":
            components = j["components"]
            size = components["size"]
            if not isinstance(size, int) or size < 0:
                raise FormatError(f"invalid array size: {size!r}")
            return ArrayType(size, type_from_json(components))
        if kind == "struct":
            components = j["components"]
            members = tuple(StructMember(m["name"], type_from_json(m))
                            for m in components["members"])
            return StructType(components["name"], members)
        if kind == "tuple":
            return TupleType(tuple(type_from_json(e) for e in j["components"]["elements"]))
    except (KeyError, TypeError, AttributeError) as e:
        raise FormatError(f"malformed type descriptor: {e!r}") from e
    raise FormatError(f"unknown type '{kind}'")


def type_to_json(ty: Type) -> dict[str, Any]:
    """Inverse of type_from_json."""
    if isinstance(ty, ArrayType):
        return {"type": "array", "components": {"size": ty.size, **type_to_json(ty.element)}}
    if isinstance(ty, StructType):
        members = [{"name": m.name, **type_to_json(m.ty)} for m in ty.members]
        return {"type": "struct",
                "components": {"name": ty.name, "generics": [], "members": members}}
    if isinstance(ty, TupleType):
        return {"type": "tuple",
                "components": {"elements": [type_to_json(e) for e in ty.elements]}}
    return {"type": str(ty)}


@dataclass(frozen=True)
class AbiInput:
    name: str
    public: bool
    ty: Type


@dataclass(frozen=True)
class Signature:
    """Ordered parameter types and the return type of a program."""
    inputs: tuple[Type, ...]
    output: Type


@dataclass
class Abi:
    """Parsed abi.json descriptor."""
    inputs: list[AbiInput]
    output: Type

    def signature(self) -> Signature:
        return Signature(tuple(i.ty for i in self.inputs), self.output)

    @classmethod
    def from_dict(cls, j: dict) -> 'Abi':
        """Build from parsed abi.json.

        Raises:
            FormatError: If the descriptor is malformed
        """
        try:
            inputs = [AbiInput(i["name"], bool(i["public"]), type_from_json(i))
                      for i in j["inputs"]]
            output = type_from_json(j["output"])
        except (KeyError, TypeError) as e:
            raise FormatError(f"malformed ABI descriptor: {e!r}") from e
        return cls(inputs, output)

    def to_dict(self) -> dict[str, Any]:
        return {
            "inputs": [{"name": i.name, "public": i.public, **type_to_json(i.ty)}
                       for i in self.inputs],
            "output": type_to_json(self.output),
        }


# --- Strict Parsing ---

def parse_strict(text: str, types: tuple[Type, ...], modulus: int) -> list[Any]:
    """Parse a JSON argument list against the parameter types.

    Args:
        text: JSON array with one entry per parameter
        types: Declared parameter types, in order
        modulus: Field modulus bounding `field` values

    Returns:
        Typed values: int for field/uint, bool, list for arrays and tuples,
        dict (in member order) for structs

    Raises:
        AbiMismatch: On any arity, type or range mismatch
    """
    try:
        values = json.loads(text)
    except json.JSONDecodeError as e:
        raise AbiMismatch(f"Could not parse argument: {e}") from e
    if not isinstance(values, list):
        raise AbiMismatch("expected a JSON array of arguments")
    if len(values) != len(types):
        raise AbiMismatch(f"expected {len(types)} arguments, found {len(values)}")
    return [parse_value(v, ty, modulus, f"[{i}]") for i, (v, ty) in enumerate(zip(values, types))]


def parse_value(value: Any, ty: Type, modulus: int, path: str = "") -> Any:
    """Parse one JSON value against a type. See parse_strict."""
    where = path or "value"

    if isinstance(ty, FieldType):
        if not isinstance(value, str):
            raise AbiMismatch(f"{where}: expected field element as a string, found {value!r}")
        try:
            return parse_decimal(value, modulus)
        except ValueError as e:
            raise AbiMismatch(f"{where}: {e}") from e

    if isinstance(ty, UintType):
        if not isinstance(value, str):
            raise AbiMismatch(f"{where}: expected {ty} as a string, found {value!r}")
        try:
            n = from_hex(value) if value.startswith("0x") else parse_decimal(value, modulus)
        except ValueError as e:
            raise AbiMismatch(f"{where}: invalid {ty} {value!r}") from e
        if n >= 1 << ty.bitwidth:
            raise AbiMismatch(f"{where}: {value} does not fit in {ty}")
        return n

    if isinstance(ty, BooleanType):
        if not isinstance(value, bool):
            raise AbiMismatch(f"{where}: expected bool, found {value!r}")
        return value

    if isinstance(ty, ArrayType):
        if not isinstance(value, list):
            raise AbiMismatch(f"{where}: expected array of {ty.size}, found {type(value).__name__}")
        if len(value) != ty.size:
            raise AbiMismatch(f"{where}: expected {ty.size} elements, found {len(value)}")
        return [parse_value(v, ty.element, modulus, f"{path}[{i}]") for i, v in enumerate(value)]

    if isinstance(ty, StructType):
        if not isinstance(value, dict):
            raise AbiMismatch(f"{where}: expected struct {ty.name}, found {type(value).__name__}")
        names = [m.name for m in ty.members]
        missing = [n for n in names if n not in value]
        if missing:
            raise AbiMismatch(f"{where}: missing member(s) {missing} of {ty.name}")
        extra = [k for k in value if k not in names]
        if extra:
            raise AbiMismatch(f"{where}: unexpected member(s) {extra} for {ty.name}")
        return {m.name: parse_value(value[m.name], m.ty, modulus, f"{path}.{m.name}")
                for m in ty.members}

    if isinstance(ty, TupleType):
        if not isinstance(value, list) or len(value) != len(ty.elements):
            raise AbiMismatch(f"{where}: expected tuple {ty}")
        return [parse_value(v, e, modulus, f"{path}.{i}") for i, (v, e) in enumerate(zip(value, ty.elements))]

    raise AbiMismatch(f"{where}: unsupported type {ty!r}")


# --- Flattening ---

def encode(values: list[Any], types: tuple[Type, ...]) -> list[int]:
    """Flatten typed values into field elements, declaration order, depth first."""
    out: list[int] = []
    for value, ty in zip(values, types):
        _encode_into(value, ty, out)
    return out


def _encode_into(value: Any, ty: Type, out: list[int]) -> None:
    if isinstance(ty, ArrayType):
        for v in value:
            _encode_into(v, ty.element, out)
    elif isinstance(ty, StructType):
        for m in ty.members:
            _encode_into(value[m.name], m.ty, out)
    elif isinstance(ty, TupleType):
        for v, e in zip(value, ty.elements):
            _encode_into(v, e, out)
    elif isinstance(ty, BooleanType):
        out.append(1 if value else 0)
    else:
        out.append(int(value))


def decode(flat: list[int], ty: Type) -> Any:
    """Rebuild a JSON text value of type `ty` from flattened field elements.

    Raises:
        ValueError: If the vector length does not match the type
    """
    if len(flat) != flat_size(ty):
        raise ValueError(f"expected {flat_size(ty)} elements for {ty}, found {len(flat)}")
    return _decode_from(iter(flat), ty)


def _decode_from(it: Iterator[int], ty: Type) -> Any:
    if isinstance(ty, ArrayType):
        return [_decode_from(it, ty.element) for _ in range(ty.size)]
    if isinstance(ty, StructType):
        return {m.name: _decode_from(it, m.ty) for m in ty.members}
    if isinstance(ty, TupleType):
        return [_decode_from(it, e) for e in ty.elements]
    if isinstance(ty, BooleanType):
        return int(next(it)) == 1
    return str(int(next(it)))
