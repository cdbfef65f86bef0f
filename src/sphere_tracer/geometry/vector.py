"""Tuple-based 3-vector algebra shared by Python code and Numba kernels.

Vectors are plain ``(x, y, z)`` float tuples so the same helpers compile
inside ``nopython`` kernels and can be called directly from Python. The same
type is used for points, directions and RGB colors.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
from numba import njit

Vector3 = Tuple[float, float, float]


def as_vec3(value: Sequence[float], name: str = "vector") -> Vector3:
    """Convert a length-3 sequence into a float tuple.

    Args:
        value: Any sequence of three numbers (tuple, list, numpy array)
        name: Name used in error messages

    Returns:
        Tuple of three Python floats

    Raises:
        ValueError: If the value does not have three finite components
    """
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape[0] != 3:
        raise ValueError(f"{name} must have 3 components, got {arr.shape[0]}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} components must be finite, got {tuple(arr)}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


@njit(cache=True)
def vec_add(a, b):
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


@njit(cache=True)
def vec_sub(a, b):
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


@njit(cache=True)
def vec_scale(v, s):
    return (v[0] * s, v[1] * s, v[2] * s)


@njit(cache=True)
def vec_mul(a, b):
    """Component-wise product (used for color attenuation)."""
    return (a[0] * b[0], a[1] * b[1], a[2] * b[2])


@njit(cache=True)
def vec_neg(v):
    return (-v[0], -v[1], -v[2])


@njit(cache=True)
def dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


@njit(cache=True)
def cross(a, b):
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


@njit(cache=True)
def length_squared(v):
    return v[0] * v[0] + v[1] * v[1] + v[2] * v[2]


@njit(cache=True)
def length(v):
    return math.sqrt(length_squared(v))


@njit(cache=True)
def unit_vector(v):
    """Normalize v; the zero vector is returned unchanged."""
    l = length(v)
    if l > 0.0:
        return (v[0] / l, v[1] / l, v[2] / l)
    return v


@njit(cache=True)
def near_zero(v):
    s = 1e-8
    return abs(v[0]) < s and abs(v[1]) < s and abs(v[2]) < s


@njit(cache=True)
def reflect(v, n):
    """Mirror v about the plane with normal n."""
    return vec_sub(v, vec_scale(n, 2.0 * dot(v, n)))


@njit(cache=True)
def refract(uv, n, etai_over_etat):
    """Snell refraction of unit vector uv through a surface with normal n."""
    cos_theta = -dot(uv, n)
    r_out_perp = vec_scale(vec_add(uv, vec_scale(n, cos_theta)), etai_over_etat)
    r_out_parallel = vec_scale(n, -math.sqrt(abs(1.0 - length_squared(r_out_perp))))
    return vec_add(r_out_perp, r_out_parallel)


@dataclass(frozen=True)
class Ray:
    """A ray with origin, direction and a time stamp for motion blur."""

    origin: Vector3
    direction: Vector3
    time: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "origin", as_vec3(self.origin, "origin"))
        object.__setattr__(self, "direction", as_vec3(self.direction, "direction"))
        object.__setattr__(self, "time", float(self.time))

    def at(self, t: float) -> Vector3:
        """Point along the ray at parameter t."""
        return vec_add(self.origin, vec_scale(self.direction, float(t)))
