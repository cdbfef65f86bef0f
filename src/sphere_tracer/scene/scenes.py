"""Built-in scenes.

Each scene function returns a ``Scene`` whose world is already built. Scenes
that place objects at random take a seed so they are reproducible.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from ..geometry.surfaces import MovingSphere, Sphere
from ..geometry.vector import Vector3, length, vec_sub
from ..light_transport.materials import Dielectric, Lambertian, Metal
from ..light_transport.noise import Perlin
from ..light_transport.textures import NoiseTexture
from .camera import Camera
from .world import World


@dataclass
class Scene:
    """A built world plus the viewpoint it is meant to be rendered from.

    Attributes:
        world: Built world
        lookfrom: Eye position
        lookat: Point the camera looks at
        vfov: Vertical field of view in degrees
        aperture: Lens diameter
        vup: Up direction
        focus_dist: Distance to the plane of focus (None = |lookfrom - lookat|)
    """

    world: World
    lookfrom: Vector3
    lookat: Vector3
    vfov: float = 20.0
    aperture: float = 0.0
    vup: Vector3 = (0.0, 1.0, 0.0)
    focus_dist: Optional[float] = 10.0

    def make_camera(self, aspect_ratio: float, time0: float = 0.0, time1: float = 1.0) -> Camera:
        return Camera(
            lookfrom=self.lookfrom,
            lookat=self.lookat,
            vup=self.vup,
            vfov=self.vfov,
            aspect_ratio=aspect_ratio,
            aperture=self.aperture,
            focus_dist=self.focus_dist,
            time0=time0,
            time1=time1,
        )


def random_spheres(seed: Optional[int] = 0) -> Scene:
    """Checkered ground, a grid of small random spheres and three large ones.

    Diffuse spheres in the grid bounce upward during the shutter interval.
    """
    rng = np.random.default_rng(seed)
    world = World()

    ground = Lambertian.from_colors((0.2, 0.3, 0.1), (0.9, 0.9, 0.9))
    world.add(Sphere((0.0, -1000.0, 0.0), 1000.0, ground))

    clearing = (4.0, 0.2, 0.0)
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = (a + 0.9 * rng.random(), 0.2, b + rng.random())
            if length(vec_sub(center, clearing)) <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = tuple(rng.random(3) * rng.random(3))
                center2 = (center[0], center[1] + rng.uniform(0.0, 0.5), center[2])
                world.add(MovingSphere(
                    center, center2, 0.0, 1.0, 0.2, Lambertian.from_color(albedo)
                ))
            elif choose_mat < 0.95:
                albedo = tuple(rng.uniform(0.5, 1.0, size=3))
                fuzz = rng.uniform(0.0, 0.5)
                world.add(Sphere(center, 0.2, Metal(albedo, fuzz)))
            else:
                world.add(Sphere(center, 0.2, Dielectric(1.5)))

    world.add(Sphere((0.0, 1.0, 0.0), 1.0, Dielectric(1.5)))
    world.add(Sphere((-4.0, 1.0, 0.0), 1.0, Lambertian.from_color((0.4, 0.2, 0.1))))
    world.add(Sphere((4.0, 1.0, 0.0), 1.0, Metal((0.7, 0.6, 0.5), 0.0)))

    return Scene(
        world=world.build(),
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vfov=20.0,
        aperture=0.1,
    )


def two_spheres(seed: Optional[int] = None) -> Scene:
    """Two large spheres sharing one checker texture."""
    world = World()
    checker = Lambertian.from_colors((0.2, 0.3, 0.1), (0.9, 0.9, 0.9))
    world.add(Sphere((0.0, -10.0, 0.0), 10.0, checker))
    world.add(Sphere((0.0, 10.0, 0.0), 10.0, checker))
    return Scene(
        world=world.build(),
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vfov=20.0,
    )


def two_perlin_spheres(seed: Optional[int] = 0) -> Scene:
    """Ground and sphere sharing one marble noise texture."""
    world = World()
    marble = Lambertian(NoiseTexture(scale=4.0, noise=Perlin(seed)))
    world.add(Sphere((0.0, -1000.0, 0.0), 1000.0, marble))
    world.add(Sphere((0.0, 2.0, 0.0), 2.0, marble))
    return Scene(
        world=world.build(),
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vfov=20.0,
    )


def materials(seed: Optional[int] = None) -> Scene:
    """Diffuse sphere between a polished and a brushed metal sphere."""
    world = World()
    world.add(Sphere((0.0, -100.5, -1.0), 100.0, Lambertian.from_color((0.8, 0.8, 0.0))))
    world.add(Sphere((0.0, 0.0, -1.0), 0.5, Lambertian.from_color((0.7, 0.3, 0.3))))
    world.add(Sphere((-1.0, 0.0, -1.0), 0.5, Metal((0.8, 0.8, 0.8), 0.3)))
    world.add(Sphere((1.0, 0.0, -1.0), 0.5, Metal((0.8, 0.6, 0.2), 1.0)))
    return Scene(
        world=world.build(),
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vfov=90.0,
        focus_dist=None,
    )


SCENES: Dict[str, Callable[[Optional[int]], Scene]] = {
    "random_spheres": random_spheres,
    "two_spheres": two_spheres,
    "two_perlin_spheres": two_perlin_spheres,
    "materials": materials,
}


def load_scene(name: str, seed: Optional[int] = None) -> Scene:
    """Build a registered scene by name.

    Raises:
        ValueError: If no scene has that name
    """
    if name not in SCENES:
        raise ValueError(
            f"Unknown scene '{name}'. Available scenes: {', '.join(sorted(SCENES))}"
        )
    return SCENES[name](seed)
