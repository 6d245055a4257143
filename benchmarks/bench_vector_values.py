# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.

import time

import jax
import jax.numpy as jnp
import numpy as np

from segvec.core.linalg import axpy, dot, scal
from segvec.core.vector_values import VectorValues
from segvec.optimization.state import to_jax
from segvec.logging_config import setup_logging


def build_mixed_vector(num_poses: int, num_points: int, seed: int = 0) -> VectorValues:
    """
    Interleaved 6-D poses and 2-D points, assembled with reserve + append
    the way a solver fills its update vector.
    """
    rng = np.random.default_rng(seed)
    vv = VectorValues()
    vv.reserve(num_poses + num_points, 6 * num_poses + 2 * num_points)

    for i in range(max(num_poses, num_points)):
        if i < num_poses:
            vv.append_preallocated(rng.normal(size=6))
        if i < num_points:
            vv.append_preallocated(rng.normal(size=2))
    return vv


def _timed(label: str, fn, repeats: int = 10):
    fn()  # warmup
    t0 = time.perf_counter()
    for _ in range(repeats):
        out = fn()
    if hasattr(out, "block_until_ready"):
        out.block_until_ready()
    t1 = time.perf_counter()
    print(f"{label:<24s} {(t1 - t0) * 1000.0 / repeats:9.3f} ms")


def run_benchmark(num_poses: int = 100_000, num_points: int = 500_000):
    print("=== VectorValues kernel benchmark ===")
    t0 = time.perf_counter()
    x = build_mixed_vector(num_poses, num_points, seed=0)
    t1 = time.perf_counter()
    print(f"variables = {x.size()}, dim = {x.dim()}")
    print(f"{'assemble':<24s} {(t1 - t0) * 1000.0:9.3f} ms")

    y = VectorValues.same_structure(x)
    y.make_zero()

    _timed("dot", lambda: dot(x, x))
    _timed("axpy", lambda: axpy(0.5, x, y))
    _timed("scal", lambda: scal(0.999, y))
    _timed("add", lambda: x + y)

    xj = to_jax(x)
    jit_dot = jax.jit(jnp.dot)
    _timed("dot (jax.jit)", lambda: jit_dot(xj, xj))

    print(f"dot agreement: {dot(x, x):.6f} vs {float(jit_dot(xj, xj)):.6f}")


if __name__ == "__main__":
    # Example:
    #   pip install -e . && python3 benchmarks/bench_vector_values.py
    setup_logging()
    run_benchmark()
