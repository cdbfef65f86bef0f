"""Main pipeline for rendering built-in scenes to PPM images."""

import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .render.driver import RenderError, render
from .render.ppm import write_ppm
from .scene.scenes import SCENES, Scene, load_scene
from .utils.config import Config


class RenderPipeline:
    """Render pipeline.

    This class orchestrates the entire process:
    1. Building the scene world and its BVH
    2. Placing the camera for the configured aspect ratio and shutter
    3. Rendering in parallel row chunks
    4. Writing the PPM image
    """

    def __init__(self, config: Optional[Config] = None):
        """Initialize the pipeline.

        Args:
            config: Configuration object (uses defaults if not provided)
        """
        self.config = config or Config()

    def render_scene(self, scene: Scene) -> np.ndarray:
        """Render a scene to a gamma-corrected float image."""
        camera = scene.make_camera(
            self.config.aspect_ratio, self.config.time0, self.config.time1
        )
        return render(scene.world, camera, self.config)

    def run(self, scene_name: str = "random_spheres") -> Dict[str, Any]:
        """Load, render and save a named scene.

        Args:
            scene_name: Key in ``SCENES``

        Returns:
            Summary statistics of the render
        """
        config = self.config
        scene = load_scene(scene_name, config.seed)
        world = scene.world

        print(f"Rendering '{scene_name}': {config.image_width}x{config.image_height}, "
              f"{config.samples_per_pixel} samples/pixel, max depth {config.max_depth}")
        print(f"  Surfaces: {len(world)}, BVH nodes: {world.bvh.node_count}, "
              f"workers: {config.workers}")

        start = time.perf_counter()
        image = self.render_scene(scene)
        elapsed = time.perf_counter() - start

        output = write_ppm(config.output_path, image)

        print(f"\nRender complete in {elapsed:.2f}s")
        print(f"Saved image to {output}")

        return {
            "scene": scene_name,
            "width": config.image_width,
            "height": config.image_height,
            "samples": config.samples_per_pixel,
            "surfaces": len(world),
            "bvh_nodes": world.bvh.node_count,
            "seconds": elapsed,
            "output": output,
        }


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    import argparse

    defaults = Config.__dataclass_fields__

    parser = argparse.ArgumentParser(
        description="Render a sphere scene with a Monte Carlo path tracer"
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="random_spheres",
        choices=sorted(SCENES),
        help="Scene to render"
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults["image_width"].default,
        help="Image width in pixels"
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=defaults["aspect_ratio"].default,
        help="Image width / height"
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults["samples_per_pixel"].default,
        help="Samples per pixel"
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=defaults["max_depth"].default,
        help="Maximum bounces per ray"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults["seed"].default,
        help="Random seed for scene layout and sampling"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads (default: one per CPU)"
    )
    parser.add_argument(
        "--chunk-rows",
        type=int,
        default=defaults["chunk_rows"].default,
        help="Image rows per work item"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=defaults["output_path"].default,
        help="Output PPM file"
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar"
    )
    parser.add_argument(
        "--list-scenes",
        action="store_true",
        help="List available scenes and exit"
    )

    args = parser.parse_args(argv)

    if args.list_scenes:
        for name in sorted(SCENES):
            doc = (SCENES[name].__doc__ or "").strip().splitlines()
            print(f"{name}: {doc[0] if doc else ''}")
        return 0

    try:
        config = Config(
            image_width=args.width,
            aspect_ratio=args.aspect_ratio,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            num_workers=args.workers,
            chunk_rows=args.chunk_rows,
            output_path=args.output,
            show_progress=not args.no_progress,
        )
        RenderPipeline(config).run(args.scene)
    except (ValueError, RenderError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
