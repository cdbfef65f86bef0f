"""Basic usage example for the sphere path tracer."""

from pathlib import Path

from sphere_tracer import (
    Camera, Config, Dielectric, Lambertian, Metal, Sphere, World, write_ppm,
)
from sphere_tracer.pipeline import RenderPipeline
from sphere_tracer.render import render


def example_custom_world():
    """Build a small world by hand and render it."""
    config = Config(
        image_width=200,
        samples_per_pixel=20,
        max_depth=10,
        output_path=Path("output/custom_world.ppm")
    )

    world = World()
    world.add(Sphere((0.0, -100.5, -1.0), 100.0, Lambertian.from_color((0.8, 0.8, 0.0))))
    world.add(Sphere((0.0, 0.0, -1.0), 0.5, Lambertian.from_color((0.1, 0.2, 0.5))))
    world.add(Sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(1.5)))
    world.add(Sphere((1.0, 0.0, -1.0), 0.5, Metal((0.8, 0.6, 0.2), 0.0)))
    world.build()

    camera = Camera(
        lookfrom=(-2.0, 2.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        vfov=20.0,
        aspect_ratio=config.aspect_ratio,
    )

    image = render(world, camera, config)
    path = write_ppm(config.output_path, image)
    print(f"Saved {image.shape[1]}x{image.shape[0]} image to {path}")


def example_builtin_scene():
    """Render one of the built-in scenes through the pipeline."""
    config = Config(
        image_width=300,
        samples_per_pixel=30,
        num_workers=4,
        output_path=Path("output/two_perlin_spheres.ppm")
    )

    stats = RenderPipeline(config).run("two_perlin_spheres")
    print(f"Rendered {stats['surfaces']} surfaces in {stats['seconds']:.2f}s")


if __name__ == "__main__":
    print("Sphere Tracer - Basic Usage Examples")
    print("=" * 50)

    print("\n1. Custom world:")
    example_custom_world()

    print("\n2. Built-in scene:")
    example_builtin_scene()
