"""Light transport: sampling, textures, materials and the path integrator.

Main Components:
    Lambertian, Metal, Dielectric: Surface materials
    SolidColor, CheckerTexture, NoiseTexture: Procedural textures
    Perlin: Gradient noise field used by NoiseTexture
    radiance: Path-traced color along a ray

Example:
    >>> from sphere_tracer.light_transport import Lambertian, Metal, radiance
    >>> ground = Lambertian.from_colors((0.2, 0.3, 0.1), (0.9, 0.9, 0.9))
    >>> mirror = Metal((0.7, 0.6, 0.5), fuzz=0.0)
"""

from .noise import Perlin
from .textures import CheckerTexture, NoiseTexture, SolidColor, Texture
from .materials import (
    Dielectric,
    Lambertian,
    Material,
    MaterialTable,
    Metal,
    schlick,
)
from .integrator import T_MIN, background, radiance

__all__ = [
    # Materials
    "Material",
    "Lambertian",
    "Metal",
    "Dielectric",
    "MaterialTable",
    "schlick",

    # Textures
    "Texture",
    "SolidColor",
    "CheckerTexture",
    "NoiseTexture",
    "Perlin",

    # Integrator
    "T_MIN",
    "background",
    "radiance",
]
