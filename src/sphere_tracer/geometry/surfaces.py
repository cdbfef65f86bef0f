"""Sphere surfaces, hit records and the packed surface table used by kernels.

Surfaces form a closed set: ``Sphere`` and ``MovingSphere``. For the hot
path they are packed into a struct-of-arrays (``SurfaceArrays``) tagged by
kind code, and the kernels below dispatch on that tag exhaustively.
"""

import math
from collections import namedtuple
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

import numpy as np
from numba import njit

from .aabb import AABB
from .vector import (
    Ray, Vector3, as_vec3, dot, vec_add, vec_neg, vec_scale, vec_sub,
)

SURFACE_SPHERE = 0
SURFACE_MOVING_SPHERE = 1

SurfaceArrays = namedtuple(
    "SurfaceArrays",
    ["kind", "center0", "center1", "time0", "time1", "radius", "material"],
)


@dataclass
class HitRecord:
    """Result of a successful ray-surface intersection.

    Attributes:
        point: Intersection point
        normal: Unit normal, oriented against the incoming ray
        t: Ray parameter of the intersection
        front_face: True if the ray hit the outside of the surface
        u: Surface texture coordinate in [0, 1]
        v: Surface texture coordinate in [0, 1]
        material: Material of the surface that was hit
    """
    point: Vector3
    normal: Vector3
    t: float
    front_face: bool
    u: float
    v: float
    material: Any = None


# ---------------------------------------------------------------------------
# Kernels
# ---------------------------------------------------------------------------

@njit(cache=True)
def sphere_hit_distance(center, radius, origin, direction, t_min, t_max):
    """Nearest root of the ray-sphere quadratic strictly inside (t_min, t_max).

    Returns:
        (found, t)
    """
    oc = vec_sub(origin, center)
    a = dot(direction, direction)
    if a == 0.0:
        return False, 0.0
    half_b = dot(oc, direction)
    c = dot(oc, oc) - radius * radius
    discriminant = half_b * half_b - a * c
    if discriminant <= 0.0:
        return False, 0.0

    sqrtd = math.sqrt(discriminant)
    root = (-half_b - sqrtd) / a
    if root > t_min and root < t_max:
        return True, root
    root = (-half_b + sqrtd) / a
    if root > t_min and root < t_max:
        return True, root
    return False, 0.0


@njit(cache=True)
def sphere_uv(outward_normal):
    """Spherical (u, v) of a point on the unit sphere.

    u: azimuth around Y from X=-1, v: polar angle from Y=-1 to Y=+1.
    """
    y = min(1.0, max(-1.0, -outward_normal[1]))
    theta = math.acos(y)
    phi = math.atan2(-outward_normal[2], outward_normal[0]) + math.pi
    return phi / (2.0 * math.pi), theta / math.pi


@njit(cache=True)
def sphere_record(center, radius, origin, direction, t):
    """Geometry of a hit at parameter t.

    Returns:
        (point, normal, front_face, u, v) with the normal facing the ray
    """
    point = vec_add(origin, vec_scale(direction, t))
    outward_normal = vec_scale(vec_sub(point, center), 1.0 / radius)
    u, v = sphere_uv(outward_normal)
    front_face = dot(direction, outward_normal) < 0.0
    if front_face:
        normal = outward_normal
    else:
        normal = vec_neg(outward_normal)
    return point, normal, front_face, u, v


@njit(cache=True)
def moving_center(center0, center1, time0, time1, time):
    # Held at the keyframe positions outside the interval so the bounding
    # box covers every ray time.
    s = min(max((time - time0) / (time1 - time0), 0.0), 1.0)
    return vec_add(center0, vec_scale(vec_sub(center1, center0), s))


@njit(cache=True)
def surface_center(surfaces, index, time):
    center0 = (
        surfaces.center0[index, 0],
        surfaces.center0[index, 1],
        surfaces.center0[index, 2],
    )
    if surfaces.kind[index] == SURFACE_MOVING_SPHERE:
        center1 = (
            surfaces.center1[index, 0],
            surfaces.center1[index, 1],
            surfaces.center1[index, 2],
        )
        return moving_center(
            center0, center1, surfaces.time0[index], surfaces.time1[index], time
        )
    return center0


@njit(cache=True)
def surface_hit_distance(surfaces, index, origin, direction, time, t_min, t_max):
    center = surface_center(surfaces, index, time)
    return sphere_hit_distance(
        center, surfaces.radius[index], origin, direction, t_min, t_max
    )


@njit(cache=True)
def surface_record(surfaces, index, origin, direction, time, t):
    center = surface_center(surfaces, index, time)
    return sphere_record(center, surfaces.radius[index], origin, direction, t)


@njit(cache=True, nogil=True)
def linear_closest_hit(surfaces, origin, direction, time, t_min, t_max):
    """Unaccelerated nearest hit over every surface.

    Returns:
        (index, t); index is -1 when nothing was hit
    """
    hit_index = -1
    closest = t_max
    for i in range(surfaces.kind.shape[0]):
        found, t = surface_hit_distance(
            surfaces, i, origin, direction, time, t_min, closest
        )
        if found:
            hit_index = i
            closest = t
    return hit_index, closest


# ---------------------------------------------------------------------------
# Python-level surfaces
# ---------------------------------------------------------------------------

def _check_radius(radius: float) -> float:
    radius = float(radius)
    if not math.isfinite(radius) or radius <= 0:
        raise ValueError(f"radius must be a positive finite number, got {radius}")
    return radius


def _make_record(geometry, t: float, material) -> HitRecord:
    point, normal, front_face, u, v = geometry
    return HitRecord(
        point=point, normal=normal, t=float(t), front_face=bool(front_face),
        u=float(u), v=float(v), material=material,
    )


@dataclass(frozen=True)
class Sphere:
    """Static sphere."""

    center: Vector3
    radius: float
    material: Any

    def __post_init__(self):
        object.__setattr__(self, "center", as_vec3(self.center, "center"))
        object.__setattr__(self, "radius", _check_radius(self.radius))

    def center_at(self, time: float) -> Vector3:
        return self.center

    def bounding_box(self) -> AABB:
        r = (self.radius, self.radius, self.radius)
        return AABB(vec_sub(self.center, r), vec_add(self.center, r))

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        found, t = sphere_hit_distance(
            self.center, self.radius, ray.origin, ray.direction,
            float(t_min), float(t_max)
        )
        if not found:
            return None
        geometry = sphere_record(self.center, self.radius, ray.origin, ray.direction, t)
        return _make_record(geometry, t, self.material)


@dataclass(frozen=True)
class MovingSphere:
    """Sphere whose center moves linearly from center1 at time1 to center2 at time2."""

    center1: Vector3
    center2: Vector3
    time1: float
    time2: float
    radius: float
    material: Any

    def __post_init__(self):
        object.__setattr__(self, "center1", as_vec3(self.center1, "center1"))
        object.__setattr__(self, "center2", as_vec3(self.center2, "center2"))
        object.__setattr__(self, "radius", _check_radius(self.radius))
        time1, time2 = float(self.time1), float(self.time2)
        if not (math.isfinite(time1) and math.isfinite(time2)):
            raise ValueError(f"keyframe times must be finite, got {time1}, {time2}")
        if time1 == time2:
            raise ValueError(f"MovingSphere keyframe times must differ, got {time1} twice")
        object.__setattr__(self, "time1", time1)
        object.__setattr__(self, "time2", time2)

    def center_at(self, time: float) -> Vector3:
        return moving_center(self.center1, self.center2, self.time1, self.time2, float(time))

    def bounding_box(self) -> AABB:
        r = (self.radius, self.radius, self.radius)
        box1 = AABB(vec_sub(self.center1, r), vec_add(self.center1, r))
        box2 = AABB(vec_sub(self.center2, r), vec_add(self.center2, r))
        return AABB.surrounding_box(box1, box2)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        center = self.center_at(ray.time)
        found, t = sphere_hit_distance(
            center, self.radius, ray.origin, ray.direction, float(t_min), float(t_max)
        )
        if not found:
            return None
        geometry = sphere_record(center, self.radius, ray.origin, ray.direction, t)
        return _make_record(geometry, t, self.material)


Surface = Union[Sphere, MovingSphere]


def pack_surfaces(
    surfaces: Sequence[Surface],
    material_index: Callable[[Any], int]
) -> SurfaceArrays:
    """Pack surfaces into read-only arrays for the intersection kernels.

    Args:
        surfaces: Sphere / MovingSphere instances
        material_index: Maps a surface's material to its table handle

    Raises:
        TypeError: For any surface type outside the supported set
    """
    n = len(surfaces)
    kind = np.zeros(n, dtype=np.int64)
    center0 = np.zeros((n, 3), dtype=np.float64)
    center1 = np.zeros((n, 3), dtype=np.float64)
    time0 = np.zeros(n, dtype=np.float64)
    time1 = np.ones(n, dtype=np.float64)
    radius = np.zeros(n, dtype=np.float64)
    material = np.zeros(n, dtype=np.int64)

    for i, surface in enumerate(surfaces):
        if isinstance(surface, Sphere):
            kind[i] = SURFACE_SPHERE
            center0[i] = surface.center
            center1[i] = surface.center
        elif isinstance(surface, MovingSphere):
            kind[i] = SURFACE_MOVING_SPHERE
            center0[i] = surface.center1
            center1[i] = surface.center2
            time0[i] = surface.time1
            time1[i] = surface.time2
        else:
            raise TypeError(f"Unsupported surface type: {type(surface).__name__}")
        radius[i] = surface.radius
        material[i] = material_index(surface.material)

    arrays = SurfaceArrays(kind, center0, center1, time0, time1, radius, material)
    for arr in arrays:
        arr.flags.writeable = False
    return arrays


def surface_boxes(surfaces: Sequence[Surface]):
    """Per-surface bounding boxes as (n, 3) min and max arrays."""
    n = len(surfaces)
    box_min = np.zeros((n, 3), dtype=np.float64)
    box_max = np.zeros((n, 3), dtype=np.float64)
    for i, surface in enumerate(surfaces):
        box = surface.bounding_box()
        box_min[i] = box.minimum
        box_max[i] = box.maximum
    return box_min, box_max
