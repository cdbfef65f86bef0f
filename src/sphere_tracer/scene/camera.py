"""Thin-lens perspective camera with a shutter interval."""

import math
from collections import namedtuple
from typing import Optional, Sequence

from numba import njit

from ..geometry.vector import (
    Ray, Vector3, as_vec3, cross, length, unit_vector, vec_add, vec_scale, vec_sub,
)
from ..light_transport.sampling import random_in_unit_disk, random_range

CameraParams = namedtuple(
    "CameraParams",
    ["origin", "lower_left_corner", "horizontal", "vertical", "u", "v",
     "lens_radius", "time0", "time1"],
)


@njit(cache=True)
def camera_ray(camera, s, t):
    """Ray through viewport coordinates (s, t), jittered across the lens.

    Returns:
        (origin, direction, time)
    """
    rd = vec_scale(random_in_unit_disk(), camera.lens_radius)
    offset = vec_add(vec_scale(camera.u, rd[0]), vec_scale(camera.v, rd[1]))
    origin = vec_add(camera.origin, offset)
    target = vec_add(
        camera.lower_left_corner,
        vec_add(vec_scale(camera.horizontal, s), vec_scale(camera.vertical, t)),
    )
    direction = vec_sub(target, origin)
    time = random_range(camera.time0, camera.time1)
    return origin, direction, time


class Camera:
    """Positionable camera with depth of field.

    Args:
        lookfrom: Eye position
        lookat: Point the camera looks at
        vup: Approximate up direction
        vfov: Vertical field of view in degrees
        aspect_ratio: Viewport width / height
        aperture: Lens diameter; 0 gives a pinhole camera
        focus_dist: Distance to the plane of focus (default |lookfrom - lookat|)
        time0: Shutter open time
        time1: Shutter close time
    """

    def __init__(
        self,
        lookfrom: Sequence[float],
        lookat: Sequence[float],
        vup: Sequence[float] = (0.0, 1.0, 0.0),
        vfov: float = 90.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: Optional[float] = None,
        time0: float = 0.0,
        time1: float = 0.0,
    ):
        lookfrom = as_vec3(lookfrom, "lookfrom")
        lookat = as_vec3(lookat, "lookat")
        vup = as_vec3(vup, "vup")

        if not 0.0 < vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {vfov}")
        if aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
        if aperture < 0:
            raise ValueError(f"aperture must be non-negative, got {aperture}")
        if time1 < time0:
            raise ValueError(f"time1 must be >= time0, got {time0} > {time1}")

        view = vec_sub(lookfrom, lookat)
        if length(view) == 0.0:
            raise ValueError("lookfrom and lookat must differ")
        w = unit_vector(view)
        side = cross(vup, w)
        if length(side) < 1e-12:
            raise ValueError("vup must not be parallel to the viewing direction")
        u = unit_vector(side)
        v = cross(w, u)

        if focus_dist is None:
            focus_dist = length(view)
        if focus_dist <= 0:
            raise ValueError(f"focus_dist must be positive, got {focus_dist}")

        h = math.tan(math.radians(vfov) / 2.0)
        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        horizontal = vec_scale(u, focus_dist * viewport_width)
        vertical = vec_scale(v, focus_dist * viewport_height)
        lower_left_corner = vec_sub(
            vec_sub(vec_sub(lookfrom, vec_scale(horizontal, 0.5)), vec_scale(vertical, 0.5)),
            vec_scale(w, focus_dist),
        )

        self.vfov = float(vfov)
        self.aspect_ratio = float(aspect_ratio)
        self.focus_dist = float(focus_dist)
        self.w = w
        self.params = CameraParams(
            origin=lookfrom,
            lower_left_corner=lower_left_corner,
            horizontal=horizontal,
            vertical=vertical,
            u=u,
            v=v,
            lens_radius=float(aperture) / 2.0,
            time0=float(time0),
            time1=float(time1),
        )

    @property
    def origin(self) -> Vector3:
        return self.params.origin

    def get_ray(self, s: float, t: float) -> Ray:
        """Ray for viewport coordinates s, t in [0, 1] (bottom-left origin)."""
        origin, direction, time = camera_ray(self.params, float(s), float(t))
        return Ray(origin, direction, time)
