"""Path-tracing integrator.

A camera ray bounces through the world until it escapes to the sky, is
absorbed, or runs out of depth. Attenuation is accumulated multiplicatively
along the path, so the loop is iterative rather than recursive.
"""

import math

from numba import njit

from ..acceleration.bvh import bvh_closest_hit
from ..geometry.surfaces import surface_record
from ..geometry.vector import Ray, Vector3, unit_vector, vec_mul
from .materials import scatter

# Offset that keeps a scattered ray from re-hitting the surface it left
T_MIN = 0.001


@njit(cache=True)
def background(direction):
    """Sky gradient from white at the horizon to light blue overhead."""
    unit_direction = unit_vector(direction)
    t = 0.5 * (unit_direction[1] + 1.0)
    return (
        (1.0 - t) * 1.0 + t * 0.5,
        (1.0 - t) * 1.0 + t * 0.7,
        (1.0 - t) * 1.0 + t * 1.0,
    )


@njit(cache=True, nogil=True)
def trace_path(surfaces, nodes, materials, textures, noise,
               origin, direction, time, max_depth, stack):
    """Radiance carried back along one ray.

    Args:
        surfaces, nodes, materials, textures, noise: Packed world arrays
        origin: Ray origin
        direction: Ray direction
        time: Ray time
        max_depth: Maximum number of surface interactions
        stack: Private BVH traversal buffer

    Returns:
        RGB color tuple
    """
    attenuation = (1.0, 1.0, 1.0)
    depth = max_depth
    while depth > 0:
        index, t = bvh_closest_hit(
            nodes, surfaces, origin, direction, time, T_MIN, math.inf, stack
        )
        if index < 0:
            return vec_mul(attenuation, background(direction))

        point, normal, front_face, u, v = surface_record(
            surfaces, index, origin, direction, time, t
        )
        scattered, new_direction, color = scatter(
            materials, textures, noise, surfaces.material[index],
            direction, point, normal, front_face, u, v
        )
        if not scattered:
            return (0.0, 0.0, 0.0)

        attenuation = vec_mul(attenuation, color)
        origin = point
        direction = new_direction
        depth -= 1

    return (0.0, 0.0, 0.0)


def radiance(ray: Ray, world, depth: int) -> Vector3:
    """Estimate the color seen along ``ray`` in a built world.

    Raises:
        RuntimeError: If the world has not been built
    """
    surfaces, nodes, materials, textures, noise = world.kernel_args()
    return trace_path(
        surfaces, nodes, materials, textures, noise,
        ray.origin, ray.direction, ray.time, int(depth), world.bvh.new_stack()
    )
