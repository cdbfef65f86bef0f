"""Axis-aligned bounding boxes and the ray-slab overlap test."""

import math
from dataclasses import dataclass

from numba import njit

from .vector import Ray, Vector3, as_vec3


@njit(cache=True)
def safe_inverse(d):
    """Reciprocal of a direction component; zero maps to signed infinity."""
    if d == 0.0:
        return math.copysign(math.inf, d)
    return 1.0 / d


@njit(cache=True)
def inverse_direction(direction):
    return (
        safe_inverse(direction[0]),
        safe_inverse(direction[1]),
        safe_inverse(direction[2]),
    )


@njit(cache=True)
def aabb_hit(box_min, box_max, origin, inv_dir, t_min, t_max):
    """Slab test: does the ray overlap the box anywhere in [t_min, t_max]?

    ``inv_dir`` holds the reciprocal direction components. A parallel ray
    whose origin lies on a slab plane produces ``0 * inf = nan``; nan
    comparisons are false, so that axis leaves the interval untouched.
    Touching intervals count as overlap, which keeps zero-extent boxes
    hittable.
    """
    for axis in range(3):
        inv_d = inv_dir[axis]
        t0 = (box_min[axis] - origin[axis]) * inv_d
        t1 = (box_max[axis] - origin[axis]) * inv_d
        if inv_d < 0.0:
            t0, t1 = t1, t0
        if t0 > t_min:
            t_min = t0
        if t1 < t_max:
            t_max = t1
        if t_max < t_min:
            return False
    return True


@dataclass(frozen=True)
class AABB:
    """Axis-aligned bounding box with ``minimum <= maximum`` on every axis."""

    minimum: Vector3
    maximum: Vector3

    def __post_init__(self):
        minimum = as_vec3(self.minimum, "minimum")
        maximum = as_vec3(self.maximum, "maximum")
        for axis in range(3):
            if minimum[axis] > maximum[axis]:
                raise ValueError(
                    f"AABB minimum must not exceed maximum on axis {axis}, "
                    f"got {minimum[axis]} > {maximum[axis]}"
                )
        object.__setattr__(self, "minimum", minimum)
        object.__setattr__(self, "maximum", maximum)

    @staticmethod
    def surrounding_box(a: "AABB", b: "AABB") -> "AABB":
        """Smallest box enclosing both a and b."""
        return AABB(
            tuple(min(a.minimum[i], b.minimum[i]) for i in range(3)),
            tuple(max(a.maximum[i], b.maximum[i]) for i in range(3)),
        )

    def union(self, other: "AABB") -> "AABB":
        return AABB.surrounding_box(self, other)

    @property
    def extent(self) -> Vector3:
        return tuple(self.maximum[i] - self.minimum[i] for i in range(3))

    @property
    def centroid(self) -> Vector3:
        return tuple(0.5 * (self.minimum[i] + self.maximum[i]) for i in range(3))

    def hit(self, ray: Ray, t_min: float, t_max: float) -> bool:
        return aabb_hit(
            self.minimum, self.maximum, ray.origin,
            inverse_direction(ray.direction), float(t_min), float(t_max)
        )
