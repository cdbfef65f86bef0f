"""Procedural textures: solid color, 3-D checker and Perlin marble.

Textures are referenced by small integer handles inside the packed
``TextureArrays`` arena. A checker stores the handles of its two
sub-textures, which are always packed before it, so lookup walks the
handles iteratively.
"""

import math
from collections import namedtuple
from dataclasses import dataclass, field
from typing import Sequence

from numba import njit

from ..geometry.vector import Vector3, as_vec3
from .noise import DEFAULT_TURBULENCE_DEPTH, Perlin, turbulence

TEXTURE_SOLID = 0
TEXTURE_CHECKER = 1
TEXTURE_NOISE = 2

TextureArrays = namedtuple(
    "TextureArrays", ["kind", "color", "odd", "even", "scale", "noise"]
)


@njit(cache=True)
def texture_value(textures, noise, index, u, v, p):
    """Color of texture ``index`` at surface coordinates (u, v) and point p."""
    while True:
        kind = textures.kind[index]
        if kind == TEXTURE_CHECKER:
            sines = math.sin(10.0 * p[0]) * math.sin(10.0 * p[1]) * math.sin(10.0 * p[2])
            if sines < 0.0:
                index = textures.odd[index]
            else:
                index = textures.even[index]
        elif kind == TEXTURE_NOISE:
            field_index = textures.noise[index]
            turb = turbulence(
                noise.gradients[field_index], noise.permutations[field_index],
                p, DEFAULT_TURBULENCE_DEPTH
            )
            level = 0.5 * (1.0 + math.sin(textures.scale[index] * p[2] + 10.0 * turb))
            return (level, level, level)
        else:
            return (
                textures.color[index, 0],
                textures.color[index, 1],
                textures.color[index, 2],
            )


class Texture:
    """Base class for textures; ``value`` evaluates through the kernel."""

    def value(self, u: float, v: float, point: Sequence[float]) -> Vector3:
        from .materials import MaterialTable

        table = MaterialTable()
        index = table.add_texture(self)
        _, textures, noise = table.pack()
        return texture_value(
            textures, noise, index, float(u), float(v), as_vec3(point, "point")
        )


@dataclass(frozen=True)
class SolidColor(Texture):
    color: Vector3

    def __post_init__(self):
        object.__setattr__(self, "color", as_vec3(self.color, "color"))


@dataclass(frozen=True)
class CheckerTexture(Texture):
    """Alternates between ``odd`` and ``even`` by the sign of sin(10x)sin(10y)sin(10z)."""

    odd: Texture
    even: Texture

    def __post_init__(self):
        for name in ("odd", "even"):
            if not isinstance(getattr(self, name), Texture):
                raise TypeError(f"{name} must be a Texture, got {type(getattr(self, name)).__name__}")

    @classmethod
    def from_colors(cls, odd: Sequence[float], even: Sequence[float]) -> "CheckerTexture":
        return cls(SolidColor(odd), SolidColor(even))


@dataclass(frozen=True)
class NoiseTexture(Texture):
    """Marble-like bands: 0.5 * (1 + sin(scale * z + 10 * turbulence(p)))."""

    scale: float = 1.0
    noise: Perlin = field(default_factory=Perlin)

    def __post_init__(self):
        scale = float(self.scale)
        if not math.isfinite(scale):
            raise ValueError(f"scale must be finite, got {scale}")
        object.__setattr__(self, "scale", scale)
        if not isinstance(self.noise, Perlin):
            raise TypeError(f"noise must be a Perlin field, got {type(self.noise).__name__}")
