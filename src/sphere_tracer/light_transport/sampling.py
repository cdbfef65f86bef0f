"""Random sampling kernels.

All draws use Numba's NumPy-compatible generator, which keeps one
independent state per thread. ``seed_rng`` seeds the calling thread only,
so a worker that seeds itself at the start of a task produces the same
stream no matter which thread runs the task.
"""

import numpy as np
from numba import njit

from ..geometry.vector import dot, length_squared, unit_vector, vec_neg


@njit(cache=True)
def seed_rng(seed):
    """Seed the calling thread's kernel RNG (seed must fit in 32 bits)."""
    np.random.seed(seed)


@njit(cache=True)
def random_double():
    """Uniform float in [0, 1)."""
    return np.random.random()


@njit(cache=True)
def random_range(lo, hi):
    return lo + (hi - lo) * np.random.random()


@njit(cache=True)
def random_vector(lo, hi):
    return (random_range(lo, hi), random_range(lo, hi), random_range(lo, hi))


@njit(cache=True)
def random_in_unit_sphere():
    while True:
        p = random_vector(-1.0, 1.0)
        if length_squared(p) < 1.0:
            return p


@njit(cache=True)
def random_unit_vector():
    while True:
        p = random_vector(-1.0, 1.0)
        lsq = length_squared(p)
        if lsq > 1e-160 and lsq < 1.0:
            return unit_vector(p)


@njit(cache=True)
def random_in_hemisphere(normal):
    p = random_in_unit_sphere()
    if dot(p, normal) > 0.0:
        return p
    return vec_neg(p)


@njit(cache=True)
def random_in_unit_disk():
    while True:
        p = (random_range(-1.0, 1.0), random_range(-1.0, 1.0), 0.0)
        if length_squared(p) < 1.0:
            return p

