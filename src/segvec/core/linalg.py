# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""
BLAS-style kernels over :class:`~core.vector_values.VectorValues`.

All kernels ignore the block structure and treat the used range
``[0, dim())`` of each operand as one flat float64 vector. Slack capacity
beyond ``dim()`` is never read or written here.

    dot(a, b)          -> float          requires a.dim() == b.dim()
    scal(alpha, x)                       x *= alpha, in place
    axpy(alpha, x, y)                    y += alpha * x, in place
    add(a, b)          -> VectorValues   requires identical boundaries

Structure checks
----------------
``dot`` and ``axpy`` only need equal total dimension, so they accept two
containers whose blocks are laid out differently; ``add`` produces a result
with ``a``'s structure and therefore insists on identical boundary lists.
Both checks are always performed and raise
:class:`~core.types.DimensionMismatchError` /
:class:`~core.types.StructuralMismatchError`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from .types import DimensionMismatchError, StructuralMismatchError

if TYPE_CHECKING:
    from .vector_values import VectorValues

logger = logging.getLogger(__name__)


def check_same_dim(a: "VectorValues", b: "VectorValues") -> None:
    if a.dim() != b.dim():
        logger.debug("Dimension mismatch: %d vs %d", a.dim(), b.dim())
        raise DimensionMismatchError(
            f"Operands have different dimensions: {a.dim()} vs {b.dim()}"
        )


def check_same_structure(a: "VectorValues", b: "VectorValues") -> None:
    """Raise :class:`StructuralMismatchError` unless the boundary lists match."""
    if not a.has_same_structure(b):
        logger.debug("Structure mismatch: %r vs %r", a, b)
        raise StructuralMismatchError(
            f"Operands have different block structure: {a.size()} variables "
            f"(dim {a.dim()}) vs {b.size()} variables (dim {b.dim()})"
        )


def dot(a: "VectorValues", b: "VectorValues") -> float:
    """Inner product of the used ranges of ``a`` and ``b``."""
    check_same_dim(a, b)
    return float(np.dot(a.vector(), b.vector()))


def scal(alpha: float, x: "VectorValues") -> None:
    """Scale every used entry of ``x`` by ``alpha`` in place."""
    v = x.vector()
    v *= alpha


def axpy(alpha: float, x: "VectorValues", y: "VectorValues") -> None:
    """``y += alpha * x`` over the used range, in place on ``y``."""
    check_same_dim(x, y)
    y_vec = y.vector()
    # alpha * x is materialized first, so x may alias y.
    y_vec += alpha * x.vector()


def add(a: "VectorValues", b: "VectorValues") -> "VectorValues":
    """Element-wise sum of two structurally identical containers."""
    check_same_structure(a, b)
    result = type(a).same_structure(a)
    np.add(a.vector(), b.vector(), out=result.vector())
    return result
