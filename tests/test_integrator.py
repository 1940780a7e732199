"""Tests for the recursive path tracer.

Tests cover:
- Secondary ray fan-out per depth
- Misses, direct light hits and mirror bounces
- Background folding for secondary rays that escape
- Streamed color resolution matching the collision-list average
"""

import pytest


def _trace(objects, origin, direction, brightness=0.5, **kwargs):
    """Upload a scene and trace one probe ray through it."""
    from src.rt.core.integrator import trace_probe
    from src.rt.scene.scene import Scene

    scene = Scene(objects, brightness=brightness)
    scene.upload()
    return trace_probe(origin, direction, **kwargs)


class TestSecondaryRayCount:
    """Tests for the per-depth fan-out."""

    def test_default_fanout(self):
        from src.rt.core.integrator import secondary_ray_count

        assert [secondary_ray_count(d) for d in range(6)] == [4, 2, 1, 1, 1, 1]

    def test_custom_fanout(self):
        from src.rt.core.integrator import secondary_ray_count

        assert [secondary_ray_count(d, 8) for d in range(4)] == [8, 4, 2, 1]

    def test_never_below_one(self):
        from src.rt.core.integrator import secondary_ray_count

        assert secondary_ray_count(2, 2) == 1
        assert secondary_ray_count(0, 1) == 1


class TestTraceProbe:
    """Tests for single-ray tracing against uploaded scenes."""

    def test_empty_scene(self):
        from src.rt.core.ray import T_MAX

        result = _trace([], (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), brightness=0.4)

        assert result["collisions"] == []
        assert result["hit_light_source"] is False
        assert result["distance"] == pytest.approx(T_MAX)
        assert result["color"] == pytest.approx((102.0, 102.0, 102.0))

    def test_direct_light_hit(self):
        from src.rt.core.color import LIGHT_YELLOW
        from src.rt.geometry.sphere import Sphere
        from src.rt.materials.texture import Light

        light = Sphere((0.0, 0.0, -5.0), 1.0, Light(LIGHT_YELLOW))
        result = _trace([light], (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert result["collisions"] == [LIGHT_YELLOW]
        assert result["hit_light_source"] is True
        assert result["distance"] == pytest.approx(4.0, abs=1e-5)
        # A single collision is returned unchanged
        assert result["color"] == pytest.approx(LIGHT_YELLOW)

    def test_mirror_then_light(self):
        """A reflective surface adds no color of its own."""
        from src.rt.core.color import LIGHT_YELLOW
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.geometry.sphere import Sphere
        from src.rt.materials.texture import Light, Reflective

        mirror = FlatPlane((0.0, 0.0, 0.0), 10.0, Reflective())
        light = Sphere((0.0, 4.0, -5.0), 1.0, Light(LIGHT_YELLOW))
        result = _trace([mirror, light], (0.0, 1.0, 0.0), (0.0, -1.0, -1.0))

        assert result["collisions"] == [LIGHT_YELLOW]
        assert result["hit_light_source"] is True
        assert result["distance"] == pytest.approx(2.0**0.5, abs=1e-5)

    def test_mirror_into_nothing_yields_background(self):
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.materials.texture import Reflective

        mirror = FlatPlane((0.0, 0.0, 0.0), 10.0, Reflective())
        result = _trace([mirror], (0.0, 1.0, 0.0), (0.0, -1.0, -1.0), brightness=0.5)

        assert result["collisions"] == [(127.5, 127.5, 127.5)]
        assert result["hit_light_source"] is False

    def test_escaping_secondary_rays_contribute_background(self):
        """Every secondary ray off a lone plane escapes upward."""
        from src.rt.core.color import WHITE
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.materials.texture import Diffusive

        plane = FlatPlane((0.0, 0.0, 0.0), 100.0, Diffusive(WHITE))
        result = _trace([plane], (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), brightness=0.5)

        background = (127.5, 127.5, 127.5)
        assert result["collisions"] == [WHITE] + [background] * 4
        assert result["hit_light_source"] is False

    def test_glossy_surface_collects_its_color_first(self):
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.materials.texture import Glossy

        color = (10.0, 20.0, 30.0)
        plane = FlatPlane((0.0, 0.0, 0.0), 100.0, Glossy(color))
        result = _trace([plane], (0.0, 1.0, 0.0), (0.0, -1.0, -1.0))

        assert result["collisions"][0] == color
        assert len(result["collisions"]) == 5

    def test_path_between_two_mirrors_is_bounded(self):
        """Facing mirrors would bounce forever without the depth limit."""
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.materials.texture import Reflective

        floor = FlatPlane((0.0, 0.0, 0.0), 10.0, Reflective())
        ceiling = FlatPlane((0.0, 2.0, 0.0), 10.0, Reflective())
        result = _trace([floor, ceiling], (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), brightness=0.5)

        assert result["collisions"] == [(127.5, 127.5, 127.5)]
        assert result["hit_light_source"] is False


class TestStartDepth:
    """Tests for rays that start below depth 0."""

    BACKGROUND = (127.5, 127.5, 127.5)

    def _floor(self):
        from src.rt.core.color import WHITE
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.materials.texture import Diffusive

        return FlatPlane((0.0, 0.0, 0.0), 100.0, Diffusive(WHITE))

    @pytest.mark.parametrize("depth, escaping", [(0, 4), (1, 2), (2, 1), (3, 1), (10, 1)])
    def test_fanout_follows_start_depth(self, depth, escaping):
        """A floor hit spawns secondary_ray_count(depth) escaping rays."""
        from src.rt.core.color import WHITE

        result = _trace([self._floor()], (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), depth=depth)

        assert result["collisions"] == [WHITE] + [self.BACKGROUND] * escaping

    def test_light_hit_ignores_remaining_depth(self):
        from src.rt.core.color import LIGHT_YELLOW
        from src.rt.core.integrator import MAX_DEPTH
        from src.rt.geometry.sphere import Sphere
        from src.rt.materials.texture import Light

        light = Sphere((0.0, 0.0, -5.0), 1.0, Light(LIGHT_YELLOW))
        shallow = _trace([light], (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=0)
        deep = _trace([light], (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=MAX_DEPTH - 1)

        assert shallow["collisions"] == deep["collisions"] == [LIGHT_YELLOW]
        assert deep["hit_light_source"] is True

    def test_last_depth_child_contributes_background(self):
        from src.rt.core.color import WHITE
        from src.rt.core.integrator import MAX_DEPTH

        result = _trace(
            [self._floor()], (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), depth=MAX_DEPTH - 1
        )

        assert result["collisions"] == [WHITE, self.BACKGROUND]

    @pytest.mark.parametrize("extra", [0, 7])
    def test_ray_at_max_depth_collects_nothing(self, extra):
        from src.rt.core.integrator import MAX_DEPTH
        from src.rt.core.ray import T_MAX

        result = _trace(
            [self._floor()],
            (0.0, 1.0, 0.0),
            (0.0, -1.0, 0.0),
            brightness=0.5,
            depth=MAX_DEPTH + extra,
        )

        assert result["collisions"] == []
        assert result["hit_light_source"] is False
        assert result["distance"] == pytest.approx(T_MAX)
        assert result["color"] == pytest.approx(self.BACKGROUND)

    def test_negative_depth_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            _trace([], (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=-1)


class TestDistanceBound:
    """Tests for the first ray's upper distance bound."""

    def test_hit_beyond_bound_is_ignored(self):
        from src.rt.core.ray import T_MAX
        from src.rt.geometry.sphere import Sphere
        from src.rt.materials.texture import Light

        light = Sphere((0.0, 0.0, -5.0), 1.0, Light())
        result = _trace([light], (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_distance=3.0)

        assert result["collisions"] == []
        assert result["hit_light_source"] is False
        assert result["distance"] == pytest.approx(T_MAX)

    def test_hit_inside_bound_is_kept(self):
        from src.rt.geometry.sphere import Sphere
        from src.rt.materials.texture import Light

        light = Sphere((0.0, 0.0, -5.0), 1.0, Light())
        result = _trace([light], (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_distance=5.0)

        assert result["hit_light_source"] is True
        assert result["distance"] == pytest.approx(4.0, abs=1e-5)

    def test_bound_does_not_limit_secondary_rays(self):
        """Secondary rays off the floor still reach a light farther than the bound."""
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.geometry.sphere import Sphere
        from src.rt.materials.texture import Diffusive, Light

        floor = FlatPlane((0.0, 0.0, 0.0), 100.0, Diffusive((90.0, 90.0, 90.0)))
        dome = Sphere((0.0, 0.0, 0.0), 50.0, Light((255.0, 255.0, 255.0)))
        result = _trace(
            [floor, dome], (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), max_distance=1.5
        )

        assert result["collisions"] == [(90.0, 90.0, 90.0)] + [(255.0, 255.0, 255.0)] * 4


class TestColorResolution:
    """Tests that streamed resolution matches the collision-list average."""

    def test_streamed_color_matches_recorded_list(self):
        from src.rt.core.tracer import average_colors
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.geometry.sphere import Sphere
        from src.rt.materials.texture import Diffusive, Light

        floor = FlatPlane((0.0, 0.0, 0.0), 100.0, Diffusive((200.0, 100.0, 50.0)))
        sky = Sphere((0.0, 6.0, 0.0), 4.0, Light((255.0, 255.0, 224.0)))
        result = _trace([floor, sky], (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), brightness=0.7)

        expected = average_colors(result["collisions"], result["hit_light_source"], 0.7)
        assert result["color"] == pytest.approx(expected, rel=1e-4)

    def test_lit_path_uses_light_boost(self):
        from src.rt.core.color import LIGHT_BOOST
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.geometry.sphere import Sphere
        from src.rt.materials.texture import Diffusive, Light

        floor = FlatPlane((0.0, 0.0, 0.0), 100.0, Diffusive((90.0, 90.0, 90.0)))
        # Large light enclosing the space above the floor
        dome = Sphere((0.0, 0.0, 0.0), 50.0, Light((255.0, 255.0, 255.0)))
        result = _trace([floor, dome], (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), brightness=0.2)

        assert result["hit_light_source"] is True
        assert result["collisions"] == [(90.0, 90.0, 90.0)] + [(255.0, 255.0, 255.0)] * 4

        weighted = 90.0 + 255.0 * (1 / 2 + 1 / 3 + 1 / 4 + 1 / 5)
        expected = weighted / 5 * LIGHT_BOOST
        assert result["color"] == pytest.approx((expected, expected, expected), rel=1e-4)
