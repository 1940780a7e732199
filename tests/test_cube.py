"""Unit tests for the axis-aligned Cube.

Tests cover:
- Face hits and their normals
- Edge and vertex normals (first axis in X, Y, Z order wins ties)
- The multiplicative bounds tolerance on grazing rays
"""

import pytest
import taichi as ti


def _face_normal(point):
    """Evaluate cube_face_normal for a cube-local point."""
    from src.rt.geometry.cube import cube_face_normal, vec3

    result = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(p: vec3):
        result[None] = cube_face_normal(p)

    test_kernel(vec3(*point))
    n = result[None]
    return (float(n[0]), float(n[1]), float(n[2]))


class TestCubeFaceNormal:
    """Tests for the face normal rule."""

    def test_face_centers(self):
        assert _face_normal((0.5, 0.1, -0.2)) == (1.0, 0.0, 0.0)
        assert _face_normal((0.1, -0.5, 0.2)) == (0.0, -1.0, 0.0)
        assert _face_normal((0.1, 0.2, -0.5)) == (0.0, 0.0, -1.0)

    def test_edge_between_x_and_y_prefers_x(self):
        assert _face_normal((0.5, 0.5, 0.0)) == (1.0, 0.0, 0.0)

    def test_edge_between_y_and_z_prefers_y(self):
        assert _face_normal((0.0, 0.5, 0.5)) == (0.0, 1.0, 0.0)

    def test_vertex_prefers_x(self):
        assert _face_normal((0.5, 0.5, 0.5)) == (1.0, 0.0, 0.0)
        assert _face_normal((-0.5, 0.5, -0.5)) == (-1.0, 0.0, 0.0)


class TestCubeIntersection:
    """Tests for hit_cube through the host-side intersection."""

    def test_front_face_hit(self):
        from src.rt.core.tracer import TracedRay
        from src.rt.geometry.cube import Cube

        cube = Cube(center=(0.0, 0.0, -5.0), size=2.0)
        hit = cube.intersection(TracedRay((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)))

        assert hit is not None
        assert abs(hit.distance - 4.0) < 1e-5
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0))

    def test_side_face_hit(self):
        from src.rt.core.tracer import TracedRay
        from src.rt.geometry.cube import Cube

        cube = Cube(center=(0.0, 0.0, -5.0), size=2.0)
        hit = cube.intersection(TracedRay((-4.0, 0.3, -5.0), (1.0, 0.0, 0.0)))

        assert hit is not None
        assert abs(hit.distance - 3.0) < 1e-5
        assert hit.normal == pytest.approx((-1.0, 0.0, 0.0))

    def test_miss(self):
        from src.rt.core.tracer import TracedRay
        from src.rt.geometry.cube import Cube

        cube = Cube(center=(0.0, 0.0, -5.0), size=2.0)
        assert cube.intersection(TracedRay((1.5, 0.0, 0.0), (0.0, 0.0, -1.0))) is None

    def test_grazing_ray_within_tolerance_hits(self):
        """A ray just outside the half size still hits the front face."""
        from src.rt.core.tracer import TracedRay
        from src.rt.geometry.cube import Cube

        cube = Cube(center=(0.0, 0.0, -5.0), size=2.0)
        assert cube.intersection(TracedRay((1.0001, 0.0, 0.0), (0.0, 0.0, -1.0))) is not None
        assert cube.intersection(TracedRay((1.01, 0.0, 0.0), (0.0, 0.0, -1.0))) is None

    def test_ray_from_inside_hits_a_face(self):
        from src.rt.core.tracer import TracedRay
        from src.rt.geometry.cube import Cube

        cube = Cube(center=(0.0, 0.0, 0.0), size=2.0)
        hit = cube.intersection(TracedRay((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)))

        assert hit is not None
        assert abs(hit.distance - 1.0) < 1e-5
        assert hit.normal == pytest.approx((0.0, 1.0, 0.0))

    def test_storage_params_use_size(self):
        from src.rt.geometry.cube import Cube

        assert Cube((0.0, 0.0, 0.0), 3.0).storage_params() == (3.0, 0.0)
