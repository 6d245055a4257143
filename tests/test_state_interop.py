from __future__ import annotations

import jax.numpy as jnp
import numpy as np
import pytest

from segvec.core.types import DimensionMismatchError
from segvec.core.vector_values import VectorValues
from segvec.geometry.point2 import Point2
from segvec.optimization.state import (
    block_slices,
    from_jax,
    from_packed_state,
    pack_values,
    packed_state_index,
    retract_values,
    to_jax,
    unpack_values,
)


def test_pack_and_unpack_points():
    """Three points packed into 6 scalars unpack to the same points."""
    points = [Point2(0.0, 1.0), Point2(2.0, 3.0), Point2(-1.0, 0.5)]

    vv = pack_values(points)

    assert vv.size() == 3
    assert vv.dim() == 6
    assert vv.dim_capacity() == 6
    np.testing.assert_allclose(vv[1], [2.0, 3.0])

    back = unpack_values(vv, [Point2] * 3)
    for p, q in zip(points, back):
        assert p.equals(q)


def test_unpack_checks_types_and_dims():
    """Unpacking needs one type per block, each of the block's dimension."""
    vv = VectorValues([2, 3], np.zeros(5))

    with pytest.raises(DimensionMismatchError):
        unpack_values(vv, [Point2])
    with pytest.raises(DimensionMismatchError):
        unpack_values(vv, [Point2, Point2])


def test_retract_values_applies_each_block():
    """Each value moves by its own block of the delta."""
    points = [Point2(0.0, 0.0), Point2(1.0, 1.0)]
    delta = VectorValues([2, 2], [0.5, -0.5, 1.0, 2.0])

    updated = retract_values(points, delta)

    assert updated[0].equals(Point2(0.5, -0.5))
    assert updated[1].equals(Point2(2.0, 3.0))


def test_retract_values_with_zero_delta_is_identity():
    """A zeroed same-structure delta leaves every value unchanged."""
    points = [Point2(1.0, 2.0), Point2(3.0, 4.0)]
    delta = VectorValues.same_structure(pack_values(points))
    delta.make_zero()

    for p, q in zip(points, retract_values(points, delta)):
        assert p.equals(q, 0.0)


def test_retract_values_rejects_mismatched_delta():
    """Wrong variable count or block size in the delta raises."""
    points = [Point2(1.0, 2.0)]

    with pytest.raises(DimensionMismatchError):
        retract_values(points, VectorValues([2, 2], np.zeros(4)))
    with pytest.raises(DimensionMismatchError):
        retract_values(points, VectorValues([3], np.zeros(3)))


def test_jax_round_trip():
    """to_jax gives a float64 copy; from_jax rebuilds an independent container."""
    vv = VectorValues([2, 1], [1.0, 2.0, 3.0])

    x = to_jax(vv)
    assert isinstance(x, jnp.ndarray)
    assert x.dtype == jnp.float64
    assert jnp.allclose(x, jnp.array([1.0, 2.0, 3.0]))

    back = from_jax(x * 2.0, vv.dims())
    assert back.has_same_structure(vv)
    np.testing.assert_allclose(back.vector(), [2.0, 4.0, 6.0])

    # Copies, not aliases: the container is writeable and independent.
    back[0] = [0.0, 0.0]
    assert float(x[0]) == 1.0


def test_packed_state_index_and_slices():
    """Index and slices describe the same (start, dim) layout as the buffer."""
    vv = VectorValues([6, 1, 3], np.arange(10, dtype=float))

    index = packed_state_index(vv)
    assert index == {0: (0, 6), 1: (6, 1), 2: (7, 3)}

    slices = block_slices(vv)
    x = to_jax(vv)
    for j, sl in slices.items():
        assert jnp.allclose(x[sl], jnp.asarray(vv[j]))


def test_from_packed_state_orders_by_key():
    """Variables are laid out by sorted key, not insertion order."""
    x = jnp.array([1.0, 2.0, 3.0, 4.0, 5.0])
    index = {7: (2, 3), 3: (0, 2)}

    vv = from_packed_state(x, index)

    assert vv.dims() == [2, 3]
    np.testing.assert_allclose(vv[0], [1.0, 2.0])
    np.testing.assert_allclose(vv[1], [3.0, 4.0, 5.0])

    assert from_packed_state(x, packed_state_index(vv)).equals(vv)


def test_from_packed_state_rejects_gaps_and_length_mismatch():
    """The index must tile the state vector exactly."""
    x = jnp.zeros(5)

    with pytest.raises(DimensionMismatchError):
        from_packed_state(x, {0: (0, 2), 1: (3, 2)})
    with pytest.raises(DimensionMismatchError):
        from_packed_state(x, {0: (0, 2), 1: (2, 2)})
