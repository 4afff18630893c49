"""Prime-order curve groups used for commitments.

BN128 G1 comes straight from py_ecc's optimized implementation. Pallas
(y^2 = x^3 + 5) reuses the same projective formulas, which only assume a = 0,
over a py_ecc field class bound to the Pallas base modulus.

Points are py_ecc projective triples (x, y, z); z == 0 is the identity.
"""

import hashlib
from dataclasses import dataclass
from typing import Any

import numpy as np
from py_ecc import optimized_bn128 as bn128
from py_ecc.fields.optimized_field_elements import FQ as OptimizedFQ

from primitives.field import (
    BN128_FQ,
    BN128_SCALAR_MODULUS,
    PALLAS_BASE_MODULUS,
    PALLAS_FP,
    PALLAS_SCALAR_MODULUS,
    from_hex,
    to_hex,
)

# --- Type Aliases ---
Point = tuple[Any, Any, Any]


class PallasFQ(OptimizedFQ):
    """Pallas base field element in py_ecc representation."""
    field_modulus = PALLAS_BASE_MODULUS


# --- Curve ---

@dataclass(frozen=True, eq=False)
class Curve:
    """Short Weierstrass curve y^2 = x^3 + b of prime order.

    Attributes:
        name: Tag used in serialized keys and proofs
        coord: py_ecc field class for point coordinates
        base_field: galois field over the same modulus (square roots)
        order: Group order, equal to the scalar field modulus
        b: Curve constant
        generator: Fixed generator in projective form
    """
    name: str
    coord: type
    base_field: type
    order: int
    b: int
    generator: Point

    def identity(self) -> Point:
        return (self.coord.one(), self.coord.one(), self.coord.zero())

    def add(self, p: Point, q: Point) -> Point:
        return bn128.add(p, q)

    def multiply(self, point: Point, scalar: int) -> Point:
        return bn128.multiply(point, scalar % self.order)

    def eq(self, p: Point, q: Point) -> bool:
        return bn128.eq(p, q)

    def is_identity(self, point: Point) -> bool:
        return point[2] == self.coord.zero()

    def to_affine(self, point: Point) -> tuple[int, int]:
        """Affine coordinates; the identity maps to (0, 0), which is never on the curve."""
        if self.is_identity(point):
            return 0, 0
        x, y = bn128.normalize(point)
        return x.n, y.n

    def from_affine(self, x: int, y: int) -> Point:
        """Build a point from affine coordinates.

        Raises:
            ValueError: If the coordinates are out of range or not on the curve
        """
        if (x, y) == (0, 0):
            return self.identity()
        modulus = self.coord.field_modulus
        if not (0 <= x < modulus and 0 <= y < modulus):
            raise ValueError(f"coordinates out of range for {self.name}")
        point = (self.coord(x), self.coord(y), self.coord.one())
        if not bn128.is_on_curve(point, self.coord(self.b)):
            raise ValueError(f"point is not on {self.name}")
        return point

    def to_hex(self, point: Point) -> list[str]:
        return [to_hex(c) for c in self.to_affine(point)]

    def from_hex(self, pair: list[str]) -> Point:
        if not isinstance(pair, list) or len(pair) != 2:
            raise ValueError(f"expected an [x, y] pair, got {pair!r}")
        return self.from_affine(from_hex(pair[0]), from_hex(pair[1]))

    def hash_to_point(self, label: bytes) -> Point:
        """Derive a point with unknown discrete log by try-and-increment.

        x = SHA-256(label || counter) mod p is accepted as soon as x^3 + b is a
        square in the base field.
        """
        counter = 0
        while True:
            digest = hashlib.sha256(label + counter.to_bytes(4, "big")).digest()
            x = self.base_field([int.from_bytes(digest, "big") % self.base_field.order])
            rhs = x ** 3 + self.base_field(self.b)
            if rhs.is_square()[0]:
                y = np.sqrt(rhs)
                return self.from_affine(int(x[0]), int(y[0]))
            counter += 1


BN128 = Curve(
    name="bn128",
    coord=bn128.FQ,
    base_field=BN128_FQ,
    order=BN128_SCALAR_MODULUS,
    b=3,
    generator=bn128.G1,
)

PALLAS = Curve(
    name="pallas",
    coord=PallasFQ,
    base_field=PALLAS_FP,
    order=PALLAS_SCALAR_MODULUS,
    b=5,
    # (-1, 2): (-1)^3 + 5 = 4 = 2^2
    generator=(PallasFQ(-1), PallasFQ(2), PallasFQ.one()),
)

CURVES: dict[str, Curve] = {c.name: c for c in (BN128, PALLAS)}


def get_curve(name: str) -> Curve:
    """Look up a curve by tag.

    Raises:
        KeyError: If the tag names no supported curve
    """
    if name not in CURVES:
        raise KeyError(f"Unsupported curve '{name}'. Available: {list(CURVES.keys())}")
    return CURVES[name]
