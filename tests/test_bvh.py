"""Tests for the BVH and the world container."""

import math

import numpy as np
import pytest

from sphere_tracer.acceleration import BVH, bvh_closest_hit
from sphere_tracer.geometry import MovingSphere, Ray, Sphere
from sphere_tracer.geometry.surfaces import linear_closest_hit
from sphere_tracer.light_transport import Dielectric, Lambertian, Metal
from sphere_tracer.scene import World


def random_world(n_spheres, seed):
    """Create a built world of randomly placed spheres with mixed materials."""
    rng = np.random.default_rng(seed)
    materials = [
        Lambertian.from_color((0.5, 0.5, 0.5)),
        Metal((0.8, 0.8, 0.8), 0.1),
        Dielectric(1.5),
    ]
    world = World()
    for i in range(n_spheres):
        center = tuple(rng.uniform(-10.0, 10.0, size=3))
        radius = rng.uniform(0.1, 1.5)
        material = materials[i % len(materials)]
        if i % 5 == 0:
            center2 = tuple(np.array(center) + rng.uniform(-1.0, 1.0, size=3))
            world.add(MovingSphere(center, center2, 0.0, 1.0, radius, material))
        else:
            world.add(Sphere(center, radius, material))
    return world.build()


@pytest.fixture(scope="module")
def world():
    return random_world(150, seed=7)


class TestBVHStructure:
    """Tests for tree construction."""

    def test_node_count(self):
        """Test that n leaves give 2n - 1 nodes."""
        rng = np.random.default_rng(0)
        lo = rng.uniform(-5, 5, size=(37, 3))
        bvh = BVH(lo, lo + 0.5)
        assert bvh.num_primitives == 37
        assert bvh.node_count == 73

        arrays = bvh.arrays
        leaves = arrays.primitive[arrays.primitive >= 0]
        assert sorted(leaves.tolist()) == list(range(37))

    def test_balanced_depth(self):
        """Test median splits keep the tree logarithmic."""
        rng = np.random.default_rng(1)
        lo = rng.uniform(-5, 5, size=(1024, 3))
        bvh = BVH(lo, lo + 0.1)
        assert bvh.depth == 10
        assert bvh.new_stack().shape == (bvh.stack_size,)
        assert bvh.stack_size >= bvh.depth + 1

    def test_parent_boxes_enclose_children(self):
        rng = np.random.default_rng(2)
        lo = rng.uniform(-5, 5, size=(50, 3))
        arrays = BVH(lo, lo + rng.uniform(0, 2, size=(50, 3))).arrays
        for node in np.flatnonzero(arrays.primitive < 0):
            for child in (arrays.left[node], arrays.right[node]):
                assert np.all(arrays.box_min[node] <= arrays.box_min[child])
                assert np.all(arrays.box_max[node] >= arrays.box_max[child])

    def test_single_and_empty(self):
        """Test degenerate trees."""
        single = BVH(np.zeros((1, 3)), np.ones((1, 3)))
        assert single.node_count == 1
        assert single.depth == 0
        assert single.stack_size == 2

        empty = BVH(np.zeros((0, 3)), np.zeros((0, 3)))
        assert empty.node_count == 0
        assert empty.bounding_box() is None

    def test_identical_boxes(self):
        """Test that coincident primitives still build a valid tree."""
        lo = np.zeros((8, 3))
        bvh = BVH(lo, lo + 1.0)
        assert bvh.node_count == 15
        assert bvh.depth == 3

    def test_invalid_boxes(self):
        with pytest.raises(ValueError):
            BVH(np.ones((2, 3)), np.zeros((2, 3)))
        with pytest.raises(ValueError):
            BVH(np.zeros((2, 3)), np.zeros((3, 3)))


class TestBVHTraversal:
    """Tests that BVH queries agree with the linear scan."""

    def test_matches_linear_scan(self, world):
        """Test 10,000 random rays return identical hits with and without the BVH."""
        surfaces, nodes = world.kernel_args()[:2]
        stack = world.bvh.new_stack()
        rng = np.random.default_rng(11)

        origins = rng.uniform(-15.0, 15.0, size=(10000, 3))
        directions = rng.normal(size=(10000, 3))
        times = rng.uniform(0.0, 1.0, size=10000)

        hits = 0
        for origin, direction, time in zip(origins, directions, times):
            o = tuple(origin.tolist())
            d = tuple(direction.tolist())
            expected = linear_closest_hit(surfaces, o, d, float(time), 0.001, math.inf)
            actual = bvh_closest_hit(nodes, surfaces, o, d, float(time), 0.001, math.inf, stack)
            assert actual == expected
            hits += expected[0] >= 0

        # Sanity check that the comparison covers both hits and misses
        assert 0 < hits < 10000

    def test_world_hit_matches_linear(self, world):
        """Test full hit records agree between the two query paths."""
        rng = np.random.default_rng(3)
        for _ in range(500):
            ray = Ray(
                tuple(rng.uniform(-15, 15, size=3)),
                tuple(rng.normal(size=3)),
                float(rng.uniform()),
            )
            assert world.hit(ray) == world.hit_linear(ray)

    def test_ray_times_outside_keyframes(self, world):
        """Test moving spheres stay inside their boxes for any ray time."""
        matte = Lambertian.from_color((0.5, 0.5, 0.5))
        mover = World([
            MovingSphere((0, 0, 0), (2, 0, 0), 0.0, 1.0, 0.5, matte),
            Sphere((0, 0, -50), 1.0, matte),
        ]).build()

        past_end = Ray((2, 0, 3), (0, 0, -1), time=2.0)
        hit = mover.hit(past_end)
        assert hit is not None
        assert hit.t == 2.5
        assert hit == mover.hit_linear(past_end)

        beyond_box = Ray((4, 0, 3), (0, 0, -1), time=2.0)
        assert mover.hit(beyond_box) is None
        assert mover.hit_linear(beyond_box) is None

        before_start = Ray((0, 0, 3), (0, 0, -1), time=-1.0)
        assert mover.hit(before_start) == mover.hit_linear(before_start)
        assert mover.hit(before_start).t == 2.5

        rng = np.random.default_rng(5)
        for _ in range(500):
            ray = Ray(
                tuple(rng.uniform(-15, 15, size=3)),
                tuple(rng.normal(size=3)),
                float(rng.uniform(-3.0, 4.0)),
            )
            assert world.hit(ray) == world.hit_linear(ray)

    def test_empty_tree(self):
        """Test that an empty world never reports a hit."""
        world = World().build()
        surfaces, nodes = world.kernel_args()[:2]
        index, t = bvh_closest_hit(
            nodes, surfaces, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0.0,
            0.001, math.inf, world.bvh.new_stack()
        )
        assert index == -1
        assert t == math.inf
        assert world.hit(Ray((0, 0, 0), (0, 0, -1))) is None


class TestWorld:
    """Tests for the world container."""

    @pytest.fixture
    def matte(self):
        return Lambertian.from_color((0.5, 0.5, 0.5))

    def test_unit_sphere_hit(self, matte):
        """Test the canonical unit-sphere hit through the world."""
        world = World([Sphere((0, 0, 0), 1.0, matte)]).build()
        hit = world.hit(Ray((0, 0, 3), (0, 0, -1)))
        assert hit.t == 2.0
        assert hit.normal == (0.0, 0.0, 1.0)
        assert hit.front_face
        assert hit.material is matte

    def test_closest_of_two(self, matte):
        """Test the nearer of two overlapping spheres is reported."""
        near = Metal((0.9, 0.9, 0.9))
        world = World()
        world.add(Sphere((0, 0, -5), 1.0, matte))
        world.add(Sphere((0, 0, -2), 0.5, near))
        world.build()
        hit = world.hit(Ray((0, 0, 0), (0, 0, -1)))
        assert hit.t == 1.5
        assert hit.material is near

    def test_requires_build(self, matte):
        """Test that queries before build raise."""
        world = World()
        world.add(Sphere((0, 0, 0), 1.0, matte))
        with pytest.raises(RuntimeError):
            world.hit(Ray((0, 0, 3), (0, 0, -1)))
        with pytest.raises(RuntimeError):
            world.kernel_args()

        world.build()
        assert world.is_built
        world.add(Sphere((0, 5, 0), 1.0, matte))
        assert not world.is_built
        with pytest.raises(RuntimeError):
            world.hit_linear(Ray((0, 0, 3), (0, 0, -1)))

    def test_rejects_unknown_surface(self):
        with pytest.raises(TypeError):
            World().add("not a surface")

    def test_container_protocol(self, matte):
        spheres = [Sphere((i, 0, 0), 0.5, matte) for i in range(3)]
        world = World(spheres)
        assert len(world) == 3
        assert list(world) == spheres
        box = world.bounding_box()
        assert box.minimum == (-0.5, -0.5, -0.5)
        assert box.maximum == (2.5, 0.5, 0.5)
        assert World().bounding_box() is None

    def test_shared_material_packed_once(self, matte):
        """Test that a material shared by many surfaces gets one handle."""
        world = World([Sphere((i, 0, 0), 0.5, matte) for i in range(4)]).build()
        surfaces, _, materials, textures, _ = world.kernel_args()
        assert materials.kind.shape == (1,)
        assert textures.kind.shape == (1,)
        assert surfaces.material.tolist() == [0, 0, 0, 0]
