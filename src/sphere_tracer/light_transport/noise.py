"""Perlin gradient noise and turbulence.

The gradient and permutation tables are generated once per ``Perlin``
instance and frozen; kernels read them through the ``NoiseArrays`` arena
packed by the material table.
"""

import math
from collections import namedtuple
from typing import Optional, Sequence

import numpy as np
from numba import njit

from ..geometry.vector import as_vec3

POINT_COUNT = 256
DEFAULT_TURBULENCE_DEPTH = 7

NoiseArrays = namedtuple("NoiseArrays", ["gradients", "permutations"])


@njit(cache=True)
def _hermite(t):
    return t * t * (3.0 - 2.0 * t)


@njit(cache=True)
def perlin_noise(gradients, permutations, p):
    """Gradient noise at point p, roughly in [-1, 1].

    Args:
        gradients: (256, 3) unit gradient vectors
        permutations: (3, 256) permutation tables for x, y, z
        p: Sample point
    """
    fx = math.floor(p[0])
    fy = math.floor(p[1])
    fz = math.floor(p[2])

    u = _hermite(p[0] - fx)
    v = _hermite(p[1] - fy)
    w = _hermite(p[2] - fz)

    i = int(fx)
    j = int(fy)
    k = int(fz)

    # Weights are smoothed again during interpolation
    uu = _hermite(u)
    vv = _hermite(v)
    ww = _hermite(w)

    accum = 0.0
    for di in range(2):
        for dj in range(2):
            for dk in range(2):
                g = gradients[
                    permutations[0, (i + di) & 255]
                    ^ permutations[1, (j + dj) & 255]
                    ^ permutations[2, (k + dk) & 255]
                ]
                wx = u - di
                wy = v - dj
                wz = w - dk
                accum += (
                    (di * uu + (1 - di) * (1.0 - uu))
                    * (dj * vv + (1 - dj) * (1.0 - vv))
                    * (dk * ww + (1 - dk) * (1.0 - ww))
                    * (g[0] * wx + g[1] * wy + g[2] * wz)
                )
    return accum


@njit(cache=True)
def turbulence(gradients, permutations, p, depth):
    """Sum of ``depth`` noise octaves at halving weight and doubling frequency."""
    accum = 0.0
    temp_p = p
    weight = 1.0
    for _ in range(depth):
        accum += weight * perlin_noise(gradients, permutations, temp_p)
        weight *= 0.5
        temp_p = (temp_p[0] * 2.0, temp_p[1] * 2.0, temp_p[2] * 2.0)
    return abs(accum)


class Perlin:
    """Immutable Perlin noise field.

    Args:
        seed: Seed for table generation; None draws fresh OS entropy

    Example:
        >>> field = Perlin(seed=3)
        >>> value = field.noise((0.3, 1.7, -2.2))
    """

    def __init__(self, seed: Optional[int] = None):
        rng = np.random.default_rng(seed)

        gradients = rng.uniform(-1.0, 1.0, size=(POINT_COUNT, 3))
        norms = np.linalg.norm(gradients, axis=1, keepdims=True)
        gradients = np.where(norms > 1e-12, gradients / np.maximum(norms, 1e-12), 0.0)

        permutations = np.stack(
            [rng.permutation(POINT_COUNT) for _ in range(3)]
        ).astype(np.int64)

        self._gradients = np.ascontiguousarray(gradients, dtype=np.float64)
        self._permutations = np.ascontiguousarray(permutations)
        self._gradients.flags.writeable = False
        self._permutations.flags.writeable = False

    @property
    def gradients(self) -> np.ndarray:
        return self._gradients

    @property
    def permutations(self) -> np.ndarray:
        return self._permutations

    def noise(self, point: Sequence[float]) -> float:
        return float(perlin_noise(self._gradients, self._permutations, as_vec3(point, "point")))

    def turbulence(self, point: Sequence[float], depth: int = DEFAULT_TURBULENCE_DEPTH) -> float:
        if depth < 1:
            raise ValueError(f"depth must be >= 1, got {depth}")
        return float(turbulence(
            self._gradients, self._permutations, as_vec3(point, "point"), int(depth)
        ))


def pack_noise(fields: Sequence[Perlin]) -> NoiseArrays:
    """Stack noise fields into (k, 256, 3) and (k, 3, 256) arena arrays."""
    gradients = np.zeros((len(fields), POINT_COUNT, 3), dtype=np.float64)
    permutations = np.zeros((len(fields), 3, POINT_COUNT), dtype=np.int64)
    for i, field in enumerate(fields):
        gradients[i] = field.gradients
        permutations[i] = field.permutations
    gradients.flags.writeable = False
    permutations.flags.writeable = False
    return NoiseArrays(gradients, permutations)
