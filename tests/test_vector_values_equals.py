from __future__ import annotations

import numpy as np
import pytest

from segvec.core.types import VectorValuesConfig
from segvec.core.vector_values import VectorValues


@pytest.mark.parametrize("tol", [0.0, 1e-12, 1e-9, 1.0])
def test_equals_is_reflexive(tol):
    """Every container equals itself for any non-negative tolerance."""
    vv = VectorValues([2, 3, 1], np.linspace(-1.0, 1.0, 6))
    assert vv.equals(vv, tol)


def test_different_variable_counts_are_not_equal():
    """Different variable counts are never equal."""
    a = VectorValues([2, 2], [1.0, 2.0, 3.0, 4.0])
    b = VectorValues([2], [1.0, 2.0])

    assert not a.equals(b)
    assert not b.equals(a)


def test_same_count_different_dimensions_are_not_equal():
    """Same flat values, same count, but the blocks are split differently."""
    values = [1.0, 2.0, 3.0, 4.0, 5.0]
    a = VectorValues([2, 3], values)
    b = VectorValues([3, 2], values)

    assert not a.equals(b, 1.0)


def test_absolute_tolerance():
    """The tolerance is absolute and inclusive."""
    a = VectorValues([2], [1.0, 2.0])
    b = VectorValues([2], [1.0, 2.0 + 1e-6])

    assert not a.equals(b)
    assert a.equals(b, 1e-5)
    assert not a.equals(b, 1e-7)


def test_equals_is_reflexive_with_nan_and_inf():
    """NaN matches NaN and infinities match themselves at any tolerance."""
    a = VectorValues([1, 2], [np.nan, np.inf, 1.0])
    b = VectorValues([1, 2], [np.nan, np.inf, 1.0])

    for tol in (0.0, 1e-9, 1.0):
        assert a.equals(a, tol)
        assert a.equals(b, tol)


def test_equals_is_reflexive_on_uninitialized_storage():
    """Whatever np.empty leaves in the buffer, a container equals itself."""
    src = VectorValues([3, 2], np.arange(5, dtype=float))
    fresh = VectorValues.same_structure(src)

    assert fresh.equals(fresh, 0.0)


def test_nan_and_inf_only_match_themselves():
    """Non-finite entries never match finite or opposite values."""
    finite = VectorValues([2], [1.0, 1.0])
    nan = VectorValues([2], [1.0, np.nan])
    pos_inf = VectorValues([2], [1.0, np.inf])
    neg_inf = VectorValues([2], [1.0, -np.inf])

    assert not nan.equals(finite, 1e6)
    assert not finite.equals(nan, 1e6)
    assert not pos_inf.equals(finite, 1e6)
    assert not pos_inf.equals(neg_inf, 1e6)
    assert not nan.equals(pos_inf, 1e6)


def test_default_tolerance_from_config():
    """Without tol, equals uses the receiver's configured tolerance."""
    cfg = VectorValuesConfig(equals_tol=1e-3)
    a = VectorValues([1], [1.0], config=cfg)
    b = VectorValues([1], [1.0005])

    assert a.equals(b)
    assert not b.equals(a)


def test_equals_ignores_slack():
    """Reserved but unused storage is not compared."""
    a = VectorValues()
    a.reserve(1, 4)
    a.append_preallocated([1.0, 2.0])
    a._values[2:] = 5.0
    b = VectorValues([2], [1.0, 2.0])

    assert a.equals(b)


def test_print_writes_count_and_blocks(capsys):
    """print() writes the label, variable count and one line per block."""
    vv = VectorValues([2, 1], [1.0, 2.0, 3.0])

    vv.print("delta")

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "delta: 2 elements"
    assert out[1].startswith("  0 ")
    assert out[2].startswith("  1 ")
    assert "3." in out[2]


def test_str_and_repr():
    """str() lists blocks; repr() summarizes sizes."""
    vv = VectorValues([2], [1.0, 2.0])

    assert str(vv).startswith("VectorValues: 1 elements")
    assert repr(vv) == "VectorValues(size=1, dim=2, capacity=2, var_capacity=1)"
