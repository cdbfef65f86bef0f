#!/usr/bin/env python3
"""Quick timing test comparing BVH and linear closest-hit queries."""

import time

import numpy as np

from sphere_tracer.acceleration import bvh_closest_hit
from sphere_tracer.geometry.surfaces import linear_closest_hit
from sphere_tracer.scene.scenes import random_spheres


def main(num_rays: int = 20000):
    print("Quick Intersection Timing Test")
    print("=" * 60)

    # 1. Scene construction
    print("\n1. Building random_spheres scene...")
    start = time.perf_counter()
    scene = random_spheres(seed=0)
    build_time = time.perf_counter() - start
    world = scene.world
    surfaces, nodes = world.kernel_args()[:2]
    print(f"   Time: {build_time:.4f}s")
    print(f"   Surfaces: {len(world)}, BVH nodes: {world.bvh.node_count}, "
          f"depth: {world.bvh.depth}")

    rng = np.random.default_rng(1)
    origins = rng.uniform(-12.0, 12.0, size=(num_rays, 3))
    origins[:, 1] = rng.uniform(0.5, 3.0, size=num_rays)
    directions = rng.normal(size=(num_rays, 3))
    stack = world.bvh.new_stack()

    # Compile both kernels before timing
    bvh_closest_hit(nodes, surfaces, tuple(origins[0]), tuple(directions[0]),
                    0.0, 0.001, np.inf, stack)
    linear_closest_hit(surfaces, tuple(origins[0]), tuple(directions[0]),
                       0.0, 0.001, np.inf)

    # 2. BVH queries
    print(f"\n2. {num_rays:,} BVH queries...")
    start = time.perf_counter()
    bvh_results = [
        bvh_closest_hit(nodes, surfaces, tuple(o), tuple(d), 0.0, 0.001, np.inf, stack)
        for o, d in zip(origins, directions)
    ]
    bvh_time = time.perf_counter() - start
    print(f"   Time: {bvh_time:.4f}s")

    # 3. Linear queries
    print(f"\n3. {num_rays:,} linear queries...")
    start = time.perf_counter()
    linear_results = [
        linear_closest_hit(surfaces, tuple(o), tuple(d), 0.0, 0.001, np.inf)
        for o, d in zip(origins, directions)
    ]
    linear_time = time.perf_counter() - start
    print(f"   Time: {linear_time:.4f}s")

    mismatches = sum(a != b for a, b in zip(bvh_results, linear_results))
    hits = sum(index >= 0 for index, _ in bvh_results)
    print("\n" + "=" * 60)
    print(f"Hit rate: {hits / num_rays:.2%}")
    print(f"Speedup: {linear_time / bvh_time:.1f}x")
    print(f"Mismatches: {mismatches}")


if __name__ == "__main__":
    main()
