"""Prime fields of the supported curves.

Uses galois for all field arithmetic. Each curve contributes two fields: the
scalar field constraint programs compute over (and the order of the curve
group), and the base field its points are defined over.

The multiplicative generators are passed explicitly so galois does not have to
factor p - 1 to find a primitive root for these 255-bit primes.
"""

import re

import galois

# --- Field Construction ---

BN128_SCALAR_MODULUS = 21888242871839275222246405745257275088548364400416034343698204186575808495617
BN128_BASE_MODULUS = 21888242871839275222246405745257275088696311157297823662689037894645226208583

PALLAS_SCALAR_MODULUS = 0x40000000000000000000000000000000224698FC0994A8DD8C46EB2100000001
PALLAS_BASE_MODULUS = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001

BN128_FR = galois.GF(BN128_SCALAR_MODULUS, primitive_element=5, verify=False)
"""BN128 scalar field. Per-step programs compute over it."""

BN128_FQ = galois.GF(BN128_BASE_MODULUS, primitive_element=3, verify=False)
"""BN128 base field (G1 coordinates)."""

PALLAS_FQ = galois.GF(PALLAS_SCALAR_MODULUS, primitive_element=5, verify=False)
"""Pallas scalar field. Folding programs compute over it."""

PALLAS_FP = galois.GF(PALLAS_BASE_MODULUS, primitive_element=5, verify=False)
"""Pallas base field (curve coordinates)."""

# Serialized field elements and coordinates are 32 bytes wide
ELEMENT_BYTES = 32


# --- Text Conversion ---

# Canonical numeric text: ASCII digits only, no sign, no whitespace
_DECIMAL = re.compile(r"[0-9]+")
_HEX = re.compile(r"0x[0-9a-fA-F]+")


def parse_decimal(text: str, modulus: int) -> int:
    """Parse a canonical decimal field element.

    Raises:
        ValueError: If the text is not an unsigned ASCII decimal or is >= modulus
    """
    if not isinstance(text, str) or not _DECIMAL.fullmatch(text):
        raise ValueError(f"not a decimal field element: {text!r}")
    value = int(text)
    if value >= modulus:
        raise ValueError(f"{text} is not below the field modulus")
    return value


def to_hex(value: int) -> str:
    """Render a field element as 0x-prefixed, zero-padded 32-byte hex."""
    return f"0x{int(value):0{2 * ELEMENT_BYTES}x}"


def from_hex(text: str) -> int:
    """Inverse of to_hex: 0x-prefixed unsigned ASCII hex. Raises ValueError otherwise."""
    if not isinstance(text, str) or not _HEX.fullmatch(text):
        raise ValueError(f"expected 0x-prefixed hex, got {text!r}")
    return int(text[2:], 16)
