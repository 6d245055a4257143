# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""
State packing between geometry values, VectorValues and flat JAX arrays.

Solvers in a JAX factor-graph stack work on one flat state vector ``x``
plus an index ``NodeId -> (start, dim)`` describing where each variable
lives (the layout ``FactorGraph.pack_state()`` returns). This module
converts between that representation, :class:`VectorValues`, and lists of
geometry primitives.

Primary Functions
-----------------
pack_values(values)
    Reserve once, then append each primitive's ``vector()`` as a block.

unpack_values(vv, types)
    Turn every block back into a primitive via ``from_vector``.

retract_values(values, delta)
    Apply a tangent-space update block by block: ``values[j].retract(delta[j])``.
    This is the per-variable update step of a manifold Gauss–Newton loop.

to_jax(vv) / from_jax(x, dims)
    Used range as a ``jnp`` array, and back.

packed_state_index(vv) / from_packed_state(x, index)
    Convert to and from the ``(x, index)`` pair used by factor-graph solvers.

block_slices(vv)
    ``{j: slice(start, stop)}`` for solvers that update ``x[sl]`` per block.

Notes
-----
``to_jax`` copies the used range; later writes to the container are not
visible in the returned array, and vice versa.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Protocol, Sequence, Tuple, Type

import jax.numpy as jnp
import numpy as np

from ..core.types import DimensionMismatchError, Index
from ..core.vector_values import VectorValues

logger = logging.getLogger(__name__)


class Manifold(Protocol):
    """What a geometry type must provide to live in a VectorValues block."""
    dimension: int

    def vector(self) -> jnp.ndarray: ...

    def retract(self, delta: jnp.ndarray) -> "Manifold": ...

    @classmethod
    def from_vector(cls, v: jnp.ndarray) -> "Manifold": ...


# --- Geometry values <-> VectorValues ---

def pack_values(values: Sequence[Manifold]) -> VectorValues:
    vv = VectorValues()
    vv.reserve(len(values), sum(type(v).dimension for v in values))
    for value in values:
        vv.append_preallocated(np.asarray(value.vector()))
    return vv


def unpack_values(vv: VectorValues, types: Sequence[Type[Manifold]]) -> list:
    if len(types) != vv.size():
        raise DimensionMismatchError(
            f"Got {len(types)} value types for {vv.size()} variables"
        )
    values = []
    for j, (block, cls) in enumerate(zip(vv, types)):
        if block.shape[0] != cls.dimension:
            raise DimensionMismatchError(
                f"Variable {j} has dimension {block.shape[0]}, "
                f"{cls.__name__} needs {cls.dimension}"
            )
        values.append(cls.from_vector(jnp.asarray(block)))
    return values


def retract_values(values: Sequence[Manifold], delta: VectorValues) -> list:
    """
    Update every value along its block of ``delta``.

    ``delta`` must hold exactly one block per value, each of the value's
    dimension.
    """
    if len(values) != delta.size():
        raise DimensionMismatchError(
            f"Got {len(values)} values for a delta with {delta.size()} variables"
        )
    updated = []
    for j, value in enumerate(values):
        d_j = delta[j]
        if d_j.shape[0] != type(value).dimension:
            raise DimensionMismatchError(
                f"Delta block {j} has dimension {d_j.shape[0]}, "
                f"expected {type(value).dimension}"
            )
        updated.append(value.retract(jnp.asarray(d_j)))
    return updated


# --- VectorValues <-> flat JAX state ---

def to_jax(vv: VectorValues) -> jnp.ndarray:
    return jnp.array(vv.vector(), dtype=jnp.float64)


def from_jax(x: jnp.ndarray, dims: Sequence[int]) -> VectorValues:
    return VectorValues(dims, np.asarray(x, dtype=np.float64))


def packed_state_index(vv: VectorValues) -> Dict[Index, Tuple[int, int]]:
    """
    Returns a mapping: Index -> (start_index, dim), the same layout a
    factor graph's ``pack_state()`` reports.
    """
    starts = vv.boundaries
    return {
        Index(j): (starts[j], starts[j + 1] - starts[j])
        for j in range(vv.size())
    }


def from_packed_state(
    x: jnp.ndarray,
    index: Mapping[int, Tuple[int, int]],
) -> VectorValues:
    """
    Build a VectorValues from a packed state ``(x, index)``.

    Variables are ordered by sorted key, mirroring how the packer walks its
    variables, and must tile ``x`` contiguously from 0.
    """
    x = np.asarray(x, dtype=np.float64)
    dims = []
    offset = 0
    for node_id in sorted(index.keys()):
        start, dim = index[node_id]
        if start != offset:
            raise DimensionMismatchError(
                f"Variable {node_id} starts at {start}, expected {offset}"
            )
        dims.append(dim)
        offset += dim
    if offset != x.shape[0]:
        raise DimensionMismatchError(
            f"Index covers {offset} entries but state has {x.shape[0]}"
        )
    logger.debug("Unpacked state of %d entries into %d variables", offset, len(dims))
    return VectorValues(dims, x)


def block_slices(vv: VectorValues) -> Dict[Index, slice]:
    starts = vv.boundaries
    return {Index(j): slice(starts[j], starts[j + 1]) for j in range(vv.size())}
