"""Surface materials and the scatter kernel.

The material set is closed: Lambertian, Metal and Dielectric. Python
objects describe materials; ``MaterialTable`` assigns each distinct
material, texture and noise field a small integer handle and packs them
into flat arrays for the kernels.
"""

import math
import warnings
from collections import namedtuple
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from numba import njit

from ..geometry.vector import (
    Ray, Vector3, as_vec3, dot, near_zero, reflect, refract,
    unit_vector, vec_add, vec_neg, vec_scale,
)
from .noise import NoiseArrays, Perlin, pack_noise
from .sampling import random_double, random_in_unit_sphere, random_unit_vector
from .textures import (
    TEXTURE_CHECKER, TEXTURE_NOISE, TEXTURE_SOLID,
    CheckerTexture, NoiseTexture, SolidColor, Texture, TextureArrays, texture_value,
)

MATERIAL_LAMBERTIAN = 0
MATERIAL_METAL = 1
MATERIAL_DIELECTRIC = 2

MaterialArrays = namedtuple(
    "MaterialArrays", ["kind", "albedo", "fuzz", "refractive_index", "texture"]
)


# ---------------------------------------------------------------------------
# Kernels
# ---------------------------------------------------------------------------

@njit(cache=True)
def schlick(cosine, ref_idx):
    """Schlick's approximation of Fresnel reflectance."""
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


@njit(cache=True)
def scatter(materials, textures, noise, index, direction, point, normal, front_face, u, v):
    """Scatter an incoming ray at a hit.

    Returns:
        (scattered, new_direction, attenuation). ``scattered`` is False when
        the material absorbs the ray. The scattered ray starts at the hit
        point and keeps the incoming ray's time.
    """
    kind = materials.kind[index]

    if kind == MATERIAL_LAMBERTIAN:
        scatter_direction = vec_add(normal, random_unit_vector())
        if near_zero(scatter_direction):
            scatter_direction = normal
        attenuation = texture_value(textures, noise, materials.texture[index], u, v, point)
        return True, scatter_direction, attenuation

    if kind == MATERIAL_METAL:
        reflected = reflect(unit_vector(direction), normal)
        fuzz = materials.fuzz[index]
        if fuzz > 0.0:
            reflected = vec_add(reflected, vec_scale(random_in_unit_sphere(), fuzz))
        attenuation = (
            materials.albedo[index, 0],
            materials.albedo[index, 1],
            materials.albedo[index, 2],
        )
        return dot(reflected, normal) > 0.0, reflected, attenuation

    # MATERIAL_DIELECTRIC
    attenuation = (1.0, 1.0, 1.0)
    ir = materials.refractive_index[index]
    refraction_ratio = 1.0 / ir if front_face else ir
    unit_direction = unit_vector(direction)

    cos_theta = min(dot(vec_neg(unit_direction), normal), 1.0)
    sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

    if refraction_ratio * sin_theta > 1.0:
        return True, reflect(unit_direction, normal), attenuation
    if random_double() < schlick(cos_theta, refraction_ratio):
        return True, reflect(unit_direction, normal), attenuation
    return True, refract(unit_direction, normal, refraction_ratio), attenuation


# ---------------------------------------------------------------------------
# Python-level materials
# ---------------------------------------------------------------------------

class Material:
    """Base class for materials; ``scatter`` runs the scatter kernel."""

    def scatter(self, ray: Ray, hit) -> Optional[Tuple[Ray, Vector3]]:
        """Scatter ``ray`` at ``hit``.

        Returns:
            (scattered_ray, attenuation), or None if the ray is absorbed
        """
        table = MaterialTable()
        index = table.add_material(self)
        materials, textures, noise = table.pack()
        scattered, direction, attenuation = scatter(
            materials, textures, noise, index, ray.direction,
            as_vec3(hit.point, "point"), as_vec3(hit.normal, "normal"),
            bool(hit.front_face), float(hit.u), float(hit.v)
        )
        if not scattered:
            return None
        return Ray(hit.point, direction, ray.time), attenuation


@dataclass(frozen=True)
class Lambertian(Material):
    """Ideal diffuse reflector colored by a texture."""

    texture: Texture

    def __post_init__(self):
        if not isinstance(self.texture, Texture):
            raise TypeError(f"texture must be a Texture, got {type(self.texture).__name__}")

    @classmethod
    def from_color(cls, color: Sequence[float]) -> "Lambertian":
        return cls(SolidColor(color))

    @classmethod
    def from_colors(cls, odd: Sequence[float], even: Sequence[float]) -> "Lambertian":
        """Checkered Lambertian alternating between two colors."""
        return cls(CheckerTexture.from_colors(odd, even))


@dataclass(frozen=True)
class Metal(Material):
    """Specular reflector; ``fuzz`` in [0, 1] roughens the reflection."""

    albedo: Vector3
    fuzz: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "albedo", as_vec3(self.albedo, "albedo"))
        fuzz = float(self.fuzz)
        if not math.isfinite(fuzz) or fuzz < 0:
            raise ValueError(f"fuzz must be a non-negative finite number, got {fuzz}")
        if fuzz > 1.0:
            warnings.warn(f"Metal fuzz {fuzz} clamped to 1.0", UserWarning)
            fuzz = 1.0
        object.__setattr__(self, "fuzz", fuzz)


@dataclass(frozen=True)
class Dielectric(Material):
    """Clear refractive material such as glass (index ~1.5) or water (~1.33)."""

    refractive_index: float

    def __post_init__(self):
        ir = float(self.refractive_index)
        if not math.isfinite(ir) or ir <= 0:
            raise ValueError(f"refractive_index must be a positive finite number, got {ir}")
        object.__setattr__(self, "refractive_index", ir)


class MaterialTable:
    """Arena of materials, textures and noise fields addressed by handles.

    Shared instances (the same texture used by several materials, the same
    noise field used by several textures) are stored once. A texture's
    sub-textures always receive smaller handles than the texture itself.
    """

    def __init__(self):
        # Lists keep the objects alive so their id() keys stay unique
        self._materials: List[Material] = []
        self._textures: List[Texture] = []
        self._noise_fields: List[Perlin] = []
        self._material_ids: Dict[int, int] = {}
        self._texture_ids: Dict[int, int] = {}
        self._noise_ids: Dict[int, int] = {}
        self._texture_children: Dict[int, Tuple[int, int]] = {}

    def __len__(self) -> int:
        return len(self._materials)

    def material(self, index: int) -> Material:
        return self._materials[index]

    def add_material(self, material: Any) -> int:
        key = id(material)
        if key in self._material_ids:
            return self._material_ids[key]
        if isinstance(material, Lambertian):
            self.add_texture(material.texture)
        elif not isinstance(material, (Metal, Dielectric)):
            raise TypeError(f"Unsupported material type: {type(material).__name__}")
        index = len(self._materials)
        self._materials.append(material)
        self._material_ids[key] = index
        return index

    def add_texture(self, texture: Any) -> int:
        key = id(texture)
        if key in self._texture_ids:
            return self._texture_ids[key]
        if isinstance(texture, CheckerTexture):
            children = (self.add_texture(texture.odd), self.add_texture(texture.even))
            self._texture_children[key] = children
        elif isinstance(texture, NoiseTexture):
            self.add_noise(texture.noise)
        elif not isinstance(texture, SolidColor):
            raise TypeError(f"Unsupported texture type: {type(texture).__name__}")
        index = len(self._textures)
        self._textures.append(texture)
        self._texture_ids[key] = index
        return index

    def add_noise(self, field: Perlin) -> int:
        key = id(field)
        if key not in self._noise_ids:
            self._noise_ids[key] = len(self._noise_fields)
            self._noise_fields.append(field)
        return self._noise_ids[key]

    def pack(self) -> Tuple[MaterialArrays, TextureArrays, NoiseArrays]:
        """Flatten the arena into read-only kernel arrays."""
        n_mat = len(self._materials)
        kind = np.zeros(n_mat, dtype=np.int64)
        albedo = np.zeros((n_mat, 3), dtype=np.float64)
        fuzz = np.zeros(n_mat, dtype=np.float64)
        refractive_index = np.ones(n_mat, dtype=np.float64)
        texture = np.full(n_mat, -1, dtype=np.int64)

        for i, material in enumerate(self._materials):
            if isinstance(material, Lambertian):
                kind[i] = MATERIAL_LAMBERTIAN
                texture[i] = self._texture_ids[id(material.texture)]
            elif isinstance(material, Metal):
                kind[i] = MATERIAL_METAL
                albedo[i] = material.albedo
                fuzz[i] = material.fuzz
            else:
                kind[i] = MATERIAL_DIELECTRIC
                refractive_index[i] = material.refractive_index

        n_tex = len(self._textures)
        tex_kind = np.zeros(n_tex, dtype=np.int64)
        color = np.zeros((n_tex, 3), dtype=np.float64)
        odd = np.full(n_tex, -1, dtype=np.int64)
        even = np.full(n_tex, -1, dtype=np.int64)
        scale = np.zeros(n_tex, dtype=np.float64)
        noise_index = np.full(n_tex, -1, dtype=np.int64)

        for i, tex in enumerate(self._textures):
            if isinstance(tex, CheckerTexture):
                tex_kind[i] = TEXTURE_CHECKER
                odd[i], even[i] = self._texture_children[id(tex)]
            elif isinstance(tex, NoiseTexture):
                tex_kind[i] = TEXTURE_NOISE
                scale[i] = tex.scale
                noise_index[i] = self._noise_ids[id(tex.noise)]
            else:
                tex_kind[i] = TEXTURE_SOLID
                color[i] = tex.color

        materials = MaterialArrays(kind, albedo, fuzz, refractive_index, texture)
        textures = TextureArrays(tex_kind, color, odd, even, scale, noise_index)
        for arr in (*materials, *textures):
            arr.flags.writeable = False
        return materials, textures, pack_noise(self._noise_fields)
