# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""
2-D point primitive for SegVec-JIT.

``Point2`` is the simplest manifold a :class:`VectorValues` block can hold:
its tangent space is ℝ², so the exponential map, logarithm, retraction and
local coordinates all reduce to vector addition/subtraction. It is used to
exercise the narrow contract between geometry types and the container:

    • ``Point2.dimension``          number of scalars per block (2)
    • ``p.vector()``                 Point2 -> flat block (jnp array)
    • ``Point2.from_vector(v)``      flat block -> Point2
    • ``p.retract(delta)``           p ⊕ δ
    • ``p.local_coordinates(q)``     q ⊖ p

Group structure
---------------
Points form a group under addition: ``compose`` adds, ``inverse`` negates,
``between(q) = q - p``, and ``identity()`` is the origin.

Notes
-----
All conversions go through ``jax.numpy`` so blocks produced here can be
fed straight into JIT-compiled residuals. Coordinates are kept as Python
floats; a Point2 is immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import jax.numpy as jnp


@dataclass(frozen=True)
class Point2:
    """Immutable 2-D point."""
    dimension: ClassVar[int] = 2

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_vector(cls, v: jnp.ndarray) -> "Point2":
        v = jnp.asarray(v)
        if v.shape != (cls.dimension,):
            raise ValueError(f"Point2 needs a vector of shape (2,), got {v.shape}")
        return cls(float(v[0]), float(v[1]))

    def vector(self) -> jnp.ndarray:
        return jnp.array([self.x, self.y], dtype=jnp.float64)

    # --- Group ---

    @staticmethod
    def identity() -> "Point2":
        return Point2()

    def inverse(self) -> "Point2":
        return Point2(-self.x, -self.y)

    def compose(self, other: "Point2") -> "Point2":
        return self + other

    def between(self, other: "Point2") -> "Point2":
        """Relative offset ``other - self``."""
        return other - self

    # --- Manifold ---

    @staticmethod
    def expmap(v: jnp.ndarray) -> "Point2":
        return Point2.from_vector(v)

    @staticmethod
    def logmap(p: "Point2") -> jnp.ndarray:
        return p.vector()

    def retract(self, delta: jnp.ndarray) -> "Point2":
        return self + Point2.expmap(delta)

    def local_coordinates(self, other: "Point2") -> jnp.ndarray:
        return Point2.logmap(self.between(other))

    # --- Vector operators ---

    def norm(self) -> float:
        return float(jnp.linalg.norm(self.vector()))

    def unit(self) -> "Point2":
        return self / self.norm()

    def dist(self, other: "Point2") -> float:
        return (other - self).norm()

    def __neg__(self) -> "Point2":
        return self.inverse()

    def __add__(self, other: "Point2") -> "Point2":
        return Point2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point2") -> "Point2":
        return Point2(self.x - other.x, self.y - other.y)

    def __mul__(self, s: float) -> "Point2":
        return Point2(self.x * s, self.y * s)

    __rmul__ = __mul__

    def __truediv__(self, s: float) -> "Point2":
        return Point2(self.x / s, self.y / s)

    # --- Testable ---

    def equals(self, other: "Point2", tol: float = 1e-9) -> bool:
        return abs(self.x - other.x) <= tol and abs(self.y - other.y) <= tol
