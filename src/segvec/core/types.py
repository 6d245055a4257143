# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""
Core typed data structures for SegVec-JIT.

This module holds the small, dependency-free pieces shared by the
segmented vector container and its linear-algebra kernels:

Types
-----
Index
    Integer index of a variable (block) inside a :class:`VectorValues`.
    Indices are assigned sequentially from 0 in the order variables are
    declared or appended.

VectorValuesConfig
    Dataclass holding construction-time behaviour:
    - zero_initialize: allocate storage with zeros instead of leaving it
      uninitialized
    - equals_tol: default absolute tolerance used by ``equals``

Errors
------
All errors derive from :class:`VectorValuesError`, itself a ``ValueError``:

    VectorValuesError
    ├── StructuralMismatchError     operands have different boundary lists
    │   └── DimensionMismatchError  operands / inputs disagree on length
    ├── OutOfRangeError             block index outside [0, size())
    ├── CapacityExceededError       append beyond reserved capacity
    └── IteratorMismatchError       iterators from different containers

Notes
-----
Every public operation checks its preconditions and raises one of these.
There is no "release build" in which a violated precondition silently
reads or writes the wrong memory.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import NewType

Index = NewType("Index", int)


@dataclass(frozen=True)
class VectorValuesConfig:
    """Construction-time options for :class:`VectorValues`."""
    zero_initialize: bool = False  # np.zeros instead of np.empty
    equals_tol: float = 1e-9


DEFAULT_CONFIG = VectorValuesConfig()


class VectorValuesError(ValueError):
    """Base class for contract violations on segmented vectors."""


class StructuralMismatchError(VectorValuesError):
    """Two containers were combined but their boundary lists differ."""


class DimensionMismatchError(StructuralMismatchError):
    """A length does not match what the structure requires."""


class OutOfRangeError(VectorValuesError, IndexError):
    """A block index is not in ``[0, size())``."""


class CapacityExceededError(VectorValuesError):
    """An append would write past the allocated storage; call reserve() first."""


class IteratorMismatchError(VectorValuesError):
    """Two iterators over different containers were compared."""
