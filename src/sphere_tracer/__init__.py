"""Monte Carlo path tracer for sphere scenes with Numba-compiled kernels."""

from .geometry import AABB, HitRecord, MovingSphere, Ray, Sphere
from .light_transport import (
    Dielectric, Lambertian, Metal, Perlin,
    CheckerTexture, NoiseTexture, SolidColor,
)
from .scene import Camera, Scene, World, load_scene
from .render import RenderError, render, write_ppm
from .utils.config import Config

__version__ = "0.1.0"
__all__ = [
    "AABB", "HitRecord", "MovingSphere", "Ray", "Sphere",
    "Dielectric", "Lambertian", "Metal", "Perlin",
    "CheckerTexture", "NoiseTexture", "SolidColor",
    "Camera", "Scene", "World", "load_scene",
    "RenderError", "render", "write_ppm",
    "Config",
]
