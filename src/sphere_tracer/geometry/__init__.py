"""Vectors, rays, bounding boxes and sphere surfaces."""

from .vector import Ray, Vector3, as_vec3
from .aabb import AABB
from .surfaces import (
    HitRecord,
    MovingSphere,
    Sphere,
    Surface,
    SurfaceArrays,
    pack_surfaces,
)

__all__ = [
    "Ray",
    "Vector3",
    "as_vec3",
    "AABB",
    "HitRecord",
    "MovingSphere",
    "Sphere",
    "Surface",
    "SurfaceArrays",
    "pack_surfaces",
]
