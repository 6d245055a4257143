# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""
SegVec-JIT: variable-indexed vector storage for factor-graph optimizers.

Subpackages
-----------
core
    ``VectorValues`` (flat buffer + boundary list), its block iterator,
    error types and the dot / axpy / scal / add kernels.

geometry
    ``Point2``, a minimal manifold primitive that converts to and from a
    flat block.

optimization
    Interop with flat JAX state vectors and per-block retraction.
"""

import jax

# Blocks are float64; keep JAX arrays built from them in double precision.
jax.config.update("jax_enable_x64", True)

from .core import VectorValues, VectorValuesConfig  # noqa: E402

__version__ = "0.1.0"

__all__ = ["VectorValues", "VectorValuesConfig", "__version__"]
