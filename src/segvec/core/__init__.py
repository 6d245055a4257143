# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""Segmented vector container, its error types and BLAS-style kernels."""

from .types import (
    DEFAULT_CONFIG,
    CapacityExceededError,
    DimensionMismatchError,
    Index,
    IteratorMismatchError,
    OutOfRangeError,
    StructuralMismatchError,
    VectorValuesConfig,
    VectorValuesError,
)
from .vector_values import VectorValues, VectorValuesIterator
from .linalg import add, axpy, check_same_structure, dot, scal

__all__ = [
    "DEFAULT_CONFIG",
    "CapacityExceededError",
    "DimensionMismatchError",
    "Index",
    "IteratorMismatchError",
    "OutOfRangeError",
    "StructuralMismatchError",
    "VectorValuesConfig",
    "VectorValuesError",
    "VectorValues",
    "VectorValuesIterator",
    "add",
    "axpy",
    "check_same_structure",
    "dot",
    "scal",
]
