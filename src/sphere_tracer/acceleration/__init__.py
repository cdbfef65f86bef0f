"""Spatial acceleration structures."""

from .bvh import BVH, BVHArrays, bvh_closest_hit

__all__ = ["BVH", "BVHArrays", "bvh_closest_hit"]
