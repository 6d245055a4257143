# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""Geometry primitives stored as blocks of a VectorValues."""

from .point2 import Point2

__all__ = ["Point2"]
