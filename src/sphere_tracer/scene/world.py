"""Scene container: surfaces plus the packed arrays the kernels read."""

import math
from typing import Iterator, List, Optional, Tuple

from ..acceleration.bvh import BVH, BVHArrays, bvh_closest_hit
from ..geometry.aabb import AABB
from ..geometry.surfaces import (
    HitRecord, MovingSphere, Sphere, Surface, SurfaceArrays,
    linear_closest_hit, pack_surfaces, surface_boxes, surface_record,
)
from ..geometry.vector import Ray
from ..light_transport.integrator import T_MIN
from ..light_transport.materials import MaterialArrays, MaterialTable
from ..light_transport.noise import NoiseArrays
from ..light_transport.textures import TextureArrays


class World:
    """Collection of surfaces with a BVH for fast closest-hit queries.

    Surfaces are added first, then ``build`` packs everything into read-only
    arrays. A built world is never mutated, so any number of threads can
    query it at once. Adding a surface discards the built state.

    Example:
        >>> world = World()
        >>> world.add(Sphere((0, 0, -1), 0.5, Lambertian.from_color((0.7, 0.3, 0.3))))
        >>> world.build()
        >>> hit = world.hit(Ray((0, 0, 0), (0, 0, -1)))
    """

    def __init__(self, surfaces: Optional[List[Surface]] = None):
        self._surfaces: List[Surface] = []
        self._packed = None
        self._bvh: Optional[BVH] = None
        for surface in surfaces or []:
            self.add(surface)

    def add(self, surface: Surface) -> "World":
        if not isinstance(surface, (Sphere, MovingSphere)):
            raise TypeError(f"Unsupported surface type: {type(surface).__name__}")
        self._surfaces.append(surface)
        self._packed = None
        self._bvh = None
        return self

    def build(self) -> "World":
        """Pack surfaces, materials, textures and noise fields, then build the BVH."""
        table = MaterialTable()
        surfaces = pack_surfaces(self._surfaces, table.add_material)
        materials, textures, noise = table.pack()
        box_min, box_max = surface_boxes(self._surfaces)
        bvh = BVH(box_min, box_max)
        self._packed = (surfaces, bvh.arrays, materials, textures, noise)
        self._bvh = bvh
        return self

    @property
    def is_built(self) -> bool:
        return self._packed is not None

    def __len__(self) -> int:
        return len(self._surfaces)

    def __iter__(self) -> Iterator[Surface]:
        return iter(self._surfaces)

    @property
    def bvh(self) -> BVH:
        self._require_built()
        return self._bvh

    @property
    def stack_size(self) -> int:
        return self.bvh.stack_size

    def bounding_box(self) -> Optional[AABB]:
        """Box around every surface over its whole motion, or None if empty."""
        box = None
        for surface in self._surfaces:
            surface_box = surface.bounding_box()
            box = surface_box if box is None else box.union(surface_box)
        return box

    def kernel_args(self) -> Tuple[SurfaceArrays, BVHArrays, MaterialArrays, TextureArrays, NoiseArrays]:
        """Packed (surfaces, nodes, materials, textures, noise) arrays.

        Raises:
            RuntimeError: If the world has not been built since the last ``add``
        """
        self._require_built()
        return self._packed

    def hit(self, ray: Ray, t_min: float = T_MIN, t_max: float = math.inf) -> Optional[HitRecord]:
        """Closest hit strictly inside (t_min, t_max), found through the BVH."""
        surfaces, nodes = self.kernel_args()[:2]
        index, t = bvh_closest_hit(
            nodes, surfaces, ray.origin, ray.direction, ray.time,
            float(t_min), float(t_max), self._bvh.new_stack()
        )
        return self._record(surfaces, ray, index, t)

    def hit_linear(self, ray: Ray, t_min: float = T_MIN, t_max: float = math.inf) -> Optional[HitRecord]:
        """Same query as ``hit`` using a scan over every surface."""
        surfaces = self.kernel_args()[0]
        index, t = linear_closest_hit(
            surfaces, ray.origin, ray.direction, ray.time, float(t_min), float(t_max)
        )
        return self._record(surfaces, ray, index, t)

    def _record(self, surfaces: SurfaceArrays, ray: Ray, index: int, t: float) -> Optional[HitRecord]:
        if index < 0:
            return None
        point, normal, front_face, u, v = surface_record(
            surfaces, index, ray.origin, ray.direction, ray.time, t
        )
        return HitRecord(
            point=point, normal=normal, t=float(t), front_face=bool(front_face),
            u=float(u), v=float(v), material=self._surfaces[index].material,
        )

    def _require_built(self):
        if self._packed is None:
            raise RuntimeError("World has not been built; call build() after adding surfaces")
