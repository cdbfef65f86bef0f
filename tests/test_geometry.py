"""Tests for sphere surfaces and hit records."""

import math

import numpy as np
import pytest

from sphere_tracer.geometry import AABB, MovingSphere, Ray, Sphere, pack_surfaces
from sphere_tracer.light_transport import Lambertian


@pytest.fixture
def matte():
    return Lambertian.from_color((0.5, 0.5, 0.5))


@pytest.fixture
def unit_sphere(matte):
    """Create a unit sphere at the origin."""
    return Sphere((0.0, 0.0, 0.0), 1.0, matte)


class TestSphere:
    """Tests for static spheres."""

    def test_hit_from_outside(self, unit_sphere):
        """Test the front hit of a ray along -z."""
        hit = unit_sphere.hit(Ray((0, 0, 3), (0, 0, -1)), 0.001, math.inf)
        assert hit is not None
        assert hit.t == 2.0
        assert hit.point == (0.0, 0.0, 1.0)
        assert hit.normal == (0.0, 0.0, 1.0)
        assert hit.front_face
        assert hit.material is unit_sphere.material

    def test_hit_from_inside(self, unit_sphere):
        """Test that an inner ray gets an inward normal."""
        hit = unit_sphere.hit(Ray((0, 0, 0), (0, 0, 1)), 0.001, math.inf)
        assert hit is not None
        assert hit.t == 1.0
        assert not hit.front_face
        assert hit.normal == (-0.0, -0.0, -1.0)

    def test_tangent_ray_misses(self, unit_sphere):
        """Test that a zero discriminant counts as a miss."""
        assert unit_sphere.hit(Ray((0, 1, -5), (0, 0, 1)), 0.001, math.inf) is None

    def test_interval_is_strict(self, unit_sphere):
        """Test hits outside (t_min, t_max) are rejected."""
        ray = Ray((0, 0, 3), (0, 0, -1))
        assert unit_sphere.hit(ray, 0.001, 2.0) is None
        hit = unit_sphere.hit(ray, 2.0, math.inf)
        assert hit is not None
        assert hit.t == 4.0

    def test_zero_direction_misses(self, unit_sphere):
        assert unit_sphere.hit(Ray((0, 0, 3), (0, 0, 0)), 0.001, math.inf) is None

    def test_uv(self, unit_sphere):
        """Test spherical texture coordinates at the +z pole of the equator."""
        hit = unit_sphere.hit(Ray((0, 0, 3), (0, 0, -1)), 0.001, math.inf)
        assert np.isclose(hit.u, 0.25)
        assert np.isclose(hit.v, 0.5)

        top = unit_sphere.hit(Ray((0, 3, 0), (0, -1, 0)), 0.001, math.inf)
        assert np.isclose(top.v, 1.0)

    def test_bounding_box(self, matte):
        sphere = Sphere((1.0, 2.0, 3.0), 0.5, matte)
        assert sphere.bounding_box() == AABB((0.5, 1.5, 2.5), (1.5, 2.5, 3.5))

    def test_invalid_radius(self, matte):
        """Test that non-positive and non-finite radii are rejected."""
        with pytest.raises(ValueError):
            Sphere((0, 0, 0), 0.0, matte)
        with pytest.raises(ValueError):
            Sphere((0, 0, 0), -1.0, matte)
        with pytest.raises(ValueError):
            Sphere((0, 0, 0), float("nan"), matte)

    def test_invalid_center(self, matte):
        with pytest.raises(ValueError):
            Sphere((0, float("inf"), 0), 1.0, matte)


class TestMovingSphere:
    """Tests for linearly moving spheres."""

    @pytest.fixture
    def mover(self, matte):
        """Create a sphere moving from the origin to (2, 0, 0) over [0, 1]."""
        return MovingSphere((0, 0, 0), (2, 0, 0), 0.0, 1.0, 1.0, matte)

    def test_center_interpolation(self, mover):
        """Test center positions inside and outside the keyframe interval."""
        assert mover.center_at(0.0) == (0.0, 0.0, 0.0)
        assert mover.center_at(0.5) == (1.0, 0.0, 0.0)
        assert mover.center_at(1.0) == (2.0, 0.0, 0.0)
        assert mover.center_at(2.0) == (2.0, 0.0, 0.0)
        assert mover.center_at(-1.0) == (0.0, 0.0, 0.0)

    def test_hit_depends_on_time(self, mover):
        """Test that the same ray hits at time 1 and misses at time 0."""
        assert mover.hit(Ray((2, 0, 3), (0, 0, -1), time=0.0), 0.001, math.inf) is None
        hit = mover.hit(Ray((2, 0, 3), (0, 0, -1), time=1.0), 0.001, math.inf)
        assert hit is not None
        assert hit.t == 2.0

    def test_bounding_box_covers_motion(self, mover):
        box = mover.bounding_box()
        assert box.minimum == (-1.0, -1.0, -1.0)
        assert box.maximum == (3.0, 1.0, 1.0)

    def test_equal_times_rejected(self, matte):
        """Test that identical keyframe times are rejected."""
        with pytest.raises(ValueError):
            MovingSphere((0, 0, 0), (1, 0, 0), 0.5, 0.5, 1.0, matte)


class TestPackSurfaces:
    """Tests for packing surfaces into kernel arrays."""

    def test_pack(self, unit_sphere, matte):
        mover = MovingSphere((0, 0, 0), (0, 1, 0), 0.0, 1.0, 0.2, matte)
        arrays = pack_surfaces([unit_sphere, mover], lambda material: 7)

        assert arrays.kind.tolist() == [0, 1]
        assert arrays.radius.tolist() == [1.0, 0.2]
        assert arrays.material.tolist() == [7, 7]
        np.testing.assert_array_equal(arrays.center1[1], [0.0, 1.0, 0.0])
        assert not arrays.center0.flags.writeable

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            pack_surfaces([object()], lambda material: 0)
