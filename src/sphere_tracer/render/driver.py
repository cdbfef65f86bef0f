"""Parallel render driver.

The image is split into chunks of consecutive rows. Each chunk is rendered
by a ``nogil`` Numba kernel on a thread pool with its own RNG seed, its own
BVH traversal stack and its own output block, so the result depends only on
the seed and the chunk size, never on the number of workers or on the
order in which chunks finish.
"""

import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Tuple

import numpy as np
from numba import njit
from tqdm import tqdm

from ..light_transport.integrator import trace_path
from ..light_transport.sampling import random_double, seed_rng
from ..scene.camera import camera_ray


class RenderError(RuntimeError):
    """One or more row chunks failed; no image is produced.

    Attributes:
        failures: (chunk_index, row_start, row_stop, exception) per failed chunk
    """

    def __init__(self, failures: List[Tuple[int, int, int, BaseException]]):
        self.failures = failures
        chunks = ", ".join(
            f"{index} (rows {start}-{stop - 1}): {exc!r}"
            for index, start, stop, exc in failures
        )
        super().__init__(f"{len(failures)} render chunk(s) failed: {chunks}")


@njit(cache=True, nogil=True)
def render_rows(surfaces, nodes, materials, textures, noise, camera,
                row_start, row_stop, width, height, samples, max_depth,
                seed, stack_size):
    """Render image rows [row_start, row_stop), row 0 being the top.

    Returns:
        (row_stop - row_start, width, 3) float array, averaged over samples
        and gamma corrected with gamma 2
    """
    seed_rng(seed)
    stack = np.empty(stack_size, dtype=np.int64)
    out = np.zeros((row_stop - row_start, width, 3), dtype=np.float64)

    x_span = max(width - 1, 1)
    y_span = max(height - 1, 1)
    scale = 1.0 / samples

    for row in range(row_start, row_stop):
        j = height - 1 - row
        for i in range(width):
            r = 0.0
            g = 0.0
            b = 0.0
            for _ in range(samples):
                s = (i + random_double()) / x_span
                t = (j + random_double()) / y_span
                origin, direction, time = camera_ray(camera, s, t)
                color = trace_path(
                    surfaces, nodes, materials, textures, noise,
                    origin, direction, time, max_depth, stack
                )
                r += color[0]
                g += color[1]
                b += color[2]
            out[row - row_start, i, 0] = math.sqrt(r * scale)
            out[row - row_start, i, 1] = math.sqrt(g * scale)
            out[row - row_start, i, 2] = math.sqrt(b * scale)

    return out


def chunk_bounds(height: int, chunk_rows: int) -> List[Tuple[int, int]]:
    """Row ranges [start, stop) covering the image top to bottom."""
    return [
        (start, min(start + chunk_rows, height))
        for start in range(0, height, chunk_rows)
    ]


def chunk_seeds(seed: int, n_chunks: int) -> List[int]:
    """One independent 32-bit seed per chunk, derived from the render seed."""
    children = np.random.SeedSequence(seed).spawn(n_chunks)
    return [int(child.generate_state(1)[0]) for child in children]


def render(world, camera, config) -> np.ndarray:
    """Render a built world through a camera.

    Args:
        world: Built ``World``
        camera: ``Camera`` with the same aspect ratio as the image
        config: ``Config`` with image size, sampling and worker settings

    Returns:
        (height, width, 3) float64 image, gamma corrected, row 0 at the top

    Raises:
        RuntimeError: If the world has not been built
        RenderError: If any chunk fails
    """
    surfaces, nodes, materials, textures, noise = world.kernel_args()
    stack_size = world.stack_size
    width = config.image_width
    height = config.image_height

    chunks = chunk_bounds(height, config.chunk_rows)
    seeds = chunk_seeds(config.seed, len(chunks))
    image = np.zeros((height, width, 3), dtype=np.float64)
    failures = []

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        futures = {
            executor.submit(
                render_rows, surfaces, nodes, materials, textures, noise,
                camera.params, start, stop, width, height,
                config.samples_per_pixel, config.max_depth, seed, stack_size
            ): (index, start, stop)
            for index, ((start, stop), seed) in enumerate(zip(chunks, seeds))
        }

        with tqdm(total=height, desc="Rendering", unit="row",
                  disable=not config.show_progress) as pbar:
            for future in as_completed(futures):
                index, start, stop = futures[future]
                try:
                    image[start:stop] = future.result()
                except Exception as exc:
                    failures.append((index, start, stop, exc))
                pbar.update(stop - start)

    if failures:
        failures.sort(key=lambda failure: failure[0])
        raise RenderError(failures) from failures[0][3]

    return image
