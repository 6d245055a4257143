# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""
Segmented vector container for SegVec-JIT.

A :class:`VectorValues` stores one scalar entry per degree of freedom of a
factor graph in a single flat float64 buffer, partitioned into contiguous
blocks, one block per variable. Blocks may differ in size (2-D points next
to 6-D poses), so the container keeps a boundary list ``var_starts`` of
length ``size() + 1``:

    var_starts[0] == 0
    var_starts[j + 1] - var_starts[j] == dimension of variable j
    var_starts[-1] == dim() <= dim_capacity()

Storage may be longer than ``dim()``; the slack is capacity that
``append_preallocated`` fills without reallocating.

Construction
------------
VectorValues()
    Empty: no variables, no capacity.

VectorValues(dims)
    One variable per entry of ``dims``; storage uninitialized unless the
    config asks for zeros.

VectorValues(dims, values)
    Same structure, with ``values`` (length ``sum(dims)``) copied in.

VectorValues.uniform(n_vars, var_dim)
    ``n_vars`` variables of identical dimension.

VectorValues.same_structure(other)
    Same boundary list as ``other``, fresh uninitialized storage.

reserve(n_vars, total_dims) + append_preallocated(v)
    Incremental assembly: reserve once, then append blocks one by one like
    a bump allocator over the reserved buffer.

Block views
-----------
``vv[j]`` returns a numpy view into the owning buffer; writing into it
updates the container. A view does not own memory. ``reserve`` may
reallocate the buffer, after which previously obtained views keep pointing
at the old storage; re-acquire them. :attr:`VectorValues.generation`
changes on every reallocation.

Iteration
---------
``iter(vv)`` yields block views in index order. For explicit cursor-style
traversal, ``vv.begin()`` / ``vv.end()`` return :class:`VectorValuesIterator`
objects that can step forward and backward and measure distances.

Notes
-----
All numeric kernels (dot, axpy, scal, addition) live in
``core.linalg`` and operate on the used range ``[0, dim())`` as a flat
vector. Every public entry point validates indices and structure; the only
unchecked path is :meth:`VectorValues.block_unchecked`.
"""

from __future__ import annotations

import functools
import logging
import math
import operator
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from . import linalg
from .types import (
    DEFAULT_CONFIG,
    CapacityExceededError,
    DimensionMismatchError,
    Index,
    IteratorMismatchError,
    OutOfRangeError,
    VectorValuesConfig,
)

logger = logging.getLogger(__name__)


def _running_starts(dimensions: Iterable[int]) -> List[int]:
    """Prefix sums of ``dimensions`` with a leading 0."""
    starts = [0]
    for dim in dimensions:
        dim = operator.index(dim)
        if dim < 0:
            raise ValueError(f"Variable dimensions must be non-negative, got {dim}")
        starts.append(starts[-1] + dim)
    return starts


class VectorValues:
    """Flat float64 buffer partitioned into per-variable blocks."""

    # numpy scalars defer to our reflected operators (alpha * vv).
    __array_ufunc__ = None

    def __init__(
        self,
        dimensions: Optional[Iterable[int]] = None,
        values: Optional[Sequence[float]] = None,
        *,
        config: VectorValuesConfig = DEFAULT_CONFIG,
    ) -> None:
        self._config = config
        self._generation = 0
        self._reserved_vars = 0

        if dimensions is None:
            if values is not None:
                raise ValueError("Values given without variable dimensions")
            self._var_starts: List[int] = [0]
            self._values = self._allocate(0)
            return

        self._var_starts = _running_starts(dimensions)
        total = self._var_starts[-1]

        if values is None:
            self._values = self._allocate(total)
            return

        flat = np.array(values, dtype=np.float64)
        if flat.ndim != 1:
            raise DimensionMismatchError(
                f"Values must be a flat 1-D sequence, got shape {flat.shape}"
            )
        if flat.shape[0] != total:
            raise DimensionMismatchError(
                f"Dimensions sum to {total} but {flat.shape[0]} values were given"
            )
        self._values = flat

    @classmethod
    def uniform(
        cls,
        n_vars: int,
        var_dim: int,
        *,
        config: VectorValuesConfig = DEFAULT_CONFIG,
    ) -> "VectorValues":
        """Hold ``n_vars`` variables of ``var_dim`` scalars each."""
        n_vars = operator.index(n_vars)
        if n_vars < 0:
            raise ValueError(f"Number of variables must be non-negative, got {n_vars}")
        return cls([var_dim] * n_vars, config=config)

    @classmethod
    def same_structure(cls, other: "VectorValues") -> "VectorValues":
        """
        Create a container with ``other``'s boundary list and freshly
        allocated storage of size ``other.dim()``.

        The values are not copied (and not initialized unless ``other``'s
        config zero-initializes), so the result never shares state with
        ``other``.
        """
        result = cls(config=other._config)
        result._var_starts = list(other._var_starts)
        result._values = result._allocate(other.dim())
        return result

    def _allocate(self, n: int) -> np.ndarray:
        if self._config.zero_initialize:
            return np.zeros(n, dtype=np.float64)
        return np.empty(n, dtype=np.float64)

    # --- Structure ---

    def size(self) -> int:
        """Number of variables."""
        return len(self._var_starts) - 1

    def __len__(self) -> int:
        return self.size()

    def dim(self) -> int:
        """Total dimensionality in use (may be below :meth:`dim_capacity`)."""
        return self._var_starts[-1]

    def dim_capacity(self) -> int:
        """Number of scalars allocated."""
        return self._values.shape[0]

    def var_dim(self, variable: int) -> int:
        variable = self._check_variable(variable)
        return self._var_starts[variable + 1] - self._var_starts[variable]

    def dims(self) -> List[int]:
        """Per-variable dimensions in variable order."""
        starts = self._var_starts
        return [starts[j + 1] - starts[j] for j in range(len(starts) - 1)]

    @property
    def boundaries(self) -> Tuple[int, ...]:
        return tuple(self._var_starts)

    @property
    def config(self) -> VectorValuesConfig:
        return self._config

    @property
    def generation(self) -> int:
        """Incremented each time the storage buffer is reallocated."""
        return self._generation

    def var_capacity(self) -> int:
        """Number of variables room was reserved for (at least :meth:`size`)."""
        return max(self._reserved_vars, self.size())

    def has_same_structure(self, other: "VectorValues") -> bool:
        """True iff both containers have identical boundary lists."""
        return self._var_starts == other._var_starts

    # --- Preallocation ---

    def reserve(self, n_vars: int, total_dims: int) -> None:
        """
        Make room for ``n_vars`` variables spanning ``total_dims`` scalars.

        Capacity grows to ``max(dim_capacity(), total_dims)`` and never
        shrinks. Existing contents are preserved; the logical structure is
        unchanged. Growing the buffer invalidates outstanding block views.
        """
        self._reserved_vars = max(self._reserved_vars, operator.index(n_vars))
        total_dims = operator.index(total_dims)
        capacity = self.dim_capacity()
        if total_dims <= capacity:
            return

        grown = self._allocate(total_dims)
        grown[:capacity] = self._values
        self._values = grown
        self._generation += 1
        logger.debug(
            "Reallocated storage from %d to %d scalars for %d variables (generation %d)",
            capacity, total_dims, self._reserved_vars, self._generation,
        )

    def append_preallocated(self, vector: Sequence[float]) -> Index:
        """
        Append a variable holding ``vector`` and return its index.

        The block is written into already reserved storage; raises
        :class:`CapacityExceededError` (leaving the container unchanged) if
        there is not enough room.
        """
        block = np.asarray(vector, dtype=np.float64)
        if block.ndim != 1:
            raise DimensionMismatchError(
                f"Appended block must be 1-D, got shape {block.shape}"
            )

        var = self.size()
        start = self.dim()
        stop = start + block.shape[0]
        if stop > self.dim_capacity():
            logger.debug(
                "Append of variable %d needs %d scalars, capacity is %d",
                var, stop, self.dim_capacity(),
            )
            raise CapacityExceededError(
                f"Appending a {block.shape[0]}-dimensional variable needs {stop} "
                f"scalars but only {self.dim_capacity()} are allocated; "
                f"call reserve() first"
            )

        self._values[start:stop] = block
        self._var_starts.append(stop)
        return Index(var)

    # --- Element access ---

    def _check_variable(self, variable: int) -> int:
        variable = operator.index(variable)
        if not 0 <= variable < self.size():
            raise OutOfRangeError(
                f"Variable index {variable} out of range for {self.size()} variables"
            )
        return variable

    def __getitem__(self, variable: int) -> np.ndarray:
        variable = self._check_variable(variable)
        return self._values[self._var_starts[variable]:self._var_starts[variable + 1]]

    def __setitem__(self, variable: int, block: Sequence[float]) -> None:
        view = self[variable]
        block = np.asarray(block, dtype=np.float64)
        if block.shape != view.shape:
            raise DimensionMismatchError(
                f"Variable {variable} has dimension {view.shape[0]}, "
                f"got block of shape {block.shape}"
            )
        view[:] = block

    def block_unchecked(self, variable: int) -> np.ndarray:
        """
        Block view without bounds checking, for trusted inner loops.

        Passing an invalid index yields an empty or wrong view instead of an
        error; callers must guarantee ``0 <= variable < size()``.
        """
        return self._values[self._var_starts[variable]:self._var_starts[variable + 1]]

    def vector(self) -> np.ndarray:
        """View of the used range ``[0, dim())`` as one flat vector."""
        return self._values[:self.dim()]

    # --- Iteration ---

    def begin(self) -> "VectorValuesIterator":
        return VectorValuesIterator(self, 0)

    def end(self) -> "VectorValuesIterator":
        return VectorValuesIterator(self, self.size())

    def __iter__(self) -> "VectorValuesIterator":
        return self.begin()

    # --- Whole-buffer operations ---

    def make_zero(self) -> None:
        """Set the full allocated capacity, slack included, to zero."""
        self._values.fill(0.0)

    def copy(self) -> "VectorValues":
        result = type(self).same_structure(self)
        result._values[:] = self.vector()
        return result

    def dot(self, other: "VectorValues") -> float:
        return linalg.dot(self, other)

    def norm(self) -> float:
        return math.sqrt(linalg.dot(self, self))

    def __add__(self, other: "VectorValues") -> "VectorValues":
        if not isinstance(other, VectorValues):
            return NotImplemented
        return linalg.add(self, other)

    def __sub__(self, other: "VectorValues") -> "VectorValues":
        if not isinstance(other, VectorValues):
            return NotImplemented
        linalg.check_same_structure(self, other)
        result = self.copy()
        linalg.axpy(-1.0, other, result)
        return result

    def __mul__(self, alpha: float) -> "VectorValues":
        if isinstance(alpha, VectorValues):
            return NotImplemented
        result = self.copy()
        linalg.scal(float(alpha), result)
        return result

    __rmul__ = __mul__

    def __neg__(self) -> "VectorValues":
        return self * -1.0

    # --- Testable ---

    def equals(self, expected: "VectorValues", tol: Optional[float] = None) -> bool:
        """
        Compare against ``expected`` with an absolute tolerance.

        Containers with a different number of variables, or with any
        variable of a different dimension, are never equal. Otherwise every
        entry must satisfy ``|a - b| <= tol``, or be exactly equal (so
        matching infinities compare equal), or be NaN on both sides. Hence
        ``v.equals(v, tol)`` holds for every ``tol >= 0``, whatever the
        buffer holds.
        """
        if tol is None:
            tol = self._config.equals_tol
        if self.size() != expected.size():
            return False
        if not self.has_same_structure(expected):
            return False
        # Identical boundaries: blockwise comparison is a flat comparison.
        a = self.vector()
        b = expected.vector()
        with np.errstate(invalid="ignore"):
            close = np.abs(a - b) <= tol
        ok = close | (a == b) | (np.isnan(a) & np.isnan(b))
        return bool(np.all(ok))

    def _format(self, label: str) -> str:
        lines = [f"{label}: {self.size()} elements"]
        for var, block in enumerate(self):
            lines.append(f"  {var} {block}")
        return "\n".join(lines)

    def print(self, label: str = "VectorValues: ") -> None:
        """Write the number of variables and every block to stdout."""
        print(self._format(label), flush=True)

    def __str__(self) -> str:
        return self._format("VectorValues")

    def __repr__(self) -> str:
        return (
            f"VectorValues(size={self.size()}, dim={self.dim()}, "
            f"capacity={self.dim_capacity()}, var_capacity={self.var_capacity()})"
        )


@functools.total_ordering
class VectorValuesIterator:
    """
    Cursor over the blocks of one :class:`VectorValues`.

    Moves forward/backward by one or many variables, measures the distance
    to another cursor over the same container, and dereferences to the same
    block view ``container[j]`` returns. It also implements the Python
    iterator protocol, yielding views from the current position onward.
    Like any Python iterator, looping over a cursor consumes it: the cursor
    is left at ``end()``. Loop over the container, or over ``it + 0``, to
    keep the cursor where it is.

    Positions outside ``[0, size()]`` are allowed transiently; only
    dereferencing checks the range.
    """

    __slots__ = ("_container", "_var")

    def __init__(self, container: VectorValues, variable: int) -> None:
        self._container = container
        self._var = operator.index(variable)

    @property
    def container(self) -> VectorValues:
        return self._container

    @property
    def position(self) -> int:
        return self._var

    def _check_compat(self, other: "VectorValuesIterator") -> None:
        if other._container is not self._container:
            raise IteratorMismatchError(
                "Cannot compare iterators over different VectorValues"
            )

    # --- Movement ---

    def increment(self) -> "VectorValuesIterator":
        self._var += 1
        return self

    def decrement(self) -> "VectorValuesIterator":
        self._var -= 1
        return self

    def advance(self, step: int) -> "VectorValuesIterator":
        self._var += operator.index(step)
        return self

    def retreat(self, step: int) -> "VectorValuesIterator":
        self._var -= operator.index(step)
        return self

    __iadd__ = advance
    __isub__ = retreat

    def __add__(self, step: int) -> "VectorValuesIterator":
        return VectorValuesIterator(self._container, self._var + operator.index(step))

    def __sub__(self, other):
        if isinstance(other, VectorValuesIterator):
            self._check_compat(other)
            return self._var - other._var
        return VectorValuesIterator(self._container, self._var - operator.index(other))

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VectorValuesIterator):
            return NotImplemented
        self._check_compat(other)
        return self._var == other._var

    def __lt__(self, other: "VectorValuesIterator") -> bool:
        if not isinstance(other, VectorValuesIterator):
            return NotImplemented
        self._check_compat(other)
        return self._var < other._var

    __hash__ = None

    # --- Access ---

    def deref(self) -> np.ndarray:
        return self._container[self._var]

    @property
    def value(self) -> np.ndarray:
        return self.deref()

    def __iter__(self) -> "VectorValuesIterator":
        """Return the cursor itself; iterating advances it."""
        return self

    def __next__(self) -> np.ndarray:
        if not 0 <= self._var < self._container.size():
            raise StopIteration
        block = self._container.block_unchecked(self._var)
        self._var += 1
        return block

    def __repr__(self) -> str:
        return f"VectorValuesIterator(position={self._var}, size={self._container.size()})"
