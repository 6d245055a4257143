# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""Bridges between VectorValues and JAX-based solvers."""
