"""Unit tests for the Scene container and scene storage.

Tests cover:
- Brightness clamping into (0, 1]
- Background color
- Uploading primitives to the Taichi storage fields
- Nearest-hit selection independent of insertion order
- Dictionary and JSON serialization
"""

import pytest


def _two_lights(near_first: bool):
    """A red light in front of a blue one along -z."""
    from src.rt.core.color import BLUE, RED
    from src.rt.geometry.sphere import Sphere
    from src.rt.materials.texture import Light

    near = Sphere((0.0, 0.0, -3.0), 1.0, Light(RED))
    far = Sphere((0.0, 0.0, -8.0), 1.0, Light(BLUE))
    return [near, far] if near_first else [far, near]


class TestBrightness:
    """Tests for brightness handling."""

    @pytest.mark.parametrize(
        "value, expected",
        [(0.0, 1e-3), (-2.0, 1e-3), (float("nan"), 1e-3), (0.25, 0.25), (1.0, 1.0), (2.0, 1.0)],
    )
    def test_clamp(self, value, expected):
        from src.rt.scene.scene import Scene

        assert Scene([], brightness=value).brightness == expected

    def test_default(self):
        from src.rt.scene.scene import DEFAULT_BRIGHTNESS, Scene

        assert Scene([]).brightness == DEFAULT_BRIGHTNESS

    def test_background_is_scaled_white(self):
        from src.rt.scene.scene import Scene

        assert Scene([], brightness=0.5).background() == (127.5, 127.5, 127.5)
        assert Scene([], brightness=5.0).background() == (255.0, 255.0, 255.0)


class TestSceneContainer:
    """Tests for the Scene collection behaviour."""

    def test_objects_keep_order(self):
        from src.rt.scene.scene import Scene

        objects = _two_lights(near_first=False)
        scene = Scene(objects)

        assert scene.objects == tuple(objects)
        assert list(scene) == objects
        assert len(scene) == 2

    def test_light_sources(self):
        from src.rt.geometry.cube import Cube
        from src.rt.scene.scene import Scene

        lights = _two_lights(near_first=True)
        scene = Scene([Cube((0.0, 0.0, 0.0), 1.0), *lights])

        assert scene.light_sources == tuple(lights)

    def test_objects_are_read_only(self):
        from src.rt.scene.scene import Scene

        scene = Scene([])
        with pytest.raises(AttributeError):
            scene.objects = ()


class TestUpload:
    """Tests for copying a scene into the storage fields."""

    def test_upload_sets_count_and_brightness(self):
        from src.rt.scene.demo import create_demo_scene
        from src.rt.scene.storage import get_object_count, scene_brightness

        scene = create_demo_scene(brightness=0.8)
        scene.upload()

        assert get_object_count() == 5
        assert abs(scene_brightness[None] - 0.8) < 1e-6

    def test_upload_replaces_previous_scene(self):
        from src.rt.geometry.sphere import Sphere
        from src.rt.scene.scene import Scene
        from src.rt.scene.storage import get_object_count

        Scene(_two_lights(near_first=True)).upload()
        Scene([Sphere((0.0, 0.0, 0.0), 1.0)]).upload()

        assert get_object_count() == 1

    def test_upload_stores_parameters(self):
        from src.rt.geometry.cylinder import Cylinder
        from src.rt.geometry.shape import ShapeKind
        from src.rt.materials.texture import Glossy, TextureKind
        from src.rt.scene.scene import Scene
        from src.rt.scene import storage

        Scene([Cylinder((1.0, 2.0, 3.0), 0.5, 4.0, Glossy((10.0, 20.0, 30.0)))]).upload()

        assert storage.object_kinds[0] == ShapeKind.CYLINDER
        assert storage.object_radii[0] == 0.5
        assert storage.object_heights[0] == 4.0
        assert storage.texture_kinds[0] == TextureKind.GLOSSY
        assert storage.object_centers[0].to_numpy().tolist() == [1.0, 2.0, 3.0]
        assert storage.texture_colors[0].to_numpy().tolist() == [10.0, 20.0, 30.0]

    def test_too_many_objects(self):
        from src.rt.geometry.sphere import Sphere
        from src.rt.scene.scene import Scene
        from src.rt.scene.storage import MAX_OBJECTS

        spheres = [Sphere((float(i), 0.0, 0.0), 0.1) for i in range(MAX_OBJECTS + 1)]
        with pytest.raises(RuntimeError, match="Maximum number of objects"):
            Scene(spheres).upload()


class TestNearestHit:
    """Tests for scene-level nearest-hit selection."""

    @pytest.mark.parametrize("near_first", [True, False])
    def test_nearest_object_wins(self, near_first):
        from src.rt.core.color import RED
        from src.rt.core.tracer import TracedRay
        from src.rt.scene.scene import Scene

        ray = TracedRay((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        ray.trace(Scene(_two_lights(near_first)))

        assert ray.collisions == [RED]
        assert abs(ray.intersection_dist - 2.0) < 1e-5


class TestSerialization:
    """Tests for dictionary and JSON round trips."""

    def test_dict_round_trip(self):
        from src.rt.scene.demo import create_demo_scene
        from src.rt.scene.scene import Scene

        scene = create_demo_scene(brightness=0.3)
        loaded = Scene.from_dict(scene.to_dict())

        assert loaded.objects == scene.objects
        assert loaded.brightness == scene.brightness

    def test_json_round_trip(self, tmp_path):
        from src.rt.scene.demo import create_demo_scene
        from src.rt.scene.scene import Scene

        scene = create_demo_scene()
        path = tmp_path / "scene.json"
        scene.save_json(path)

        assert Scene.load_json(path).objects == scene.objects

    def test_shape_from_dict_defaults(self):
        from src.rt.geometry.flat_plane import FlatPlane
        from src.rt.materials.texture import Diffusive
        from src.rt.scene.scene import shape_from_dict

        shape = shape_from_dict({"type": "flat_plane", "radius": 3})
        assert shape == FlatPlane((0.0, 0.0, 0.0), 3.0, Diffusive())

    def test_unknown_object_type(self):
        from src.rt.scene.scene import shape_from_dict

        with pytest.raises(ValueError, match="Unknown object type"):
            shape_from_dict({"type": "torus", "radius": 1.0})

    def test_missing_dimension(self):
        from src.rt.scene.scene import shape_from_dict

        with pytest.raises(ValueError, match="Missing 'height'"):
            shape_from_dict({"type": "cylinder", "radius": 1.0})

    def test_load_bundled_scene_file(self):
        from pathlib import Path

        from src.rt.materials.texture import Reflective
        from src.rt.scene.scene import Scene

        path = Path(__file__).parent.parent / "examples" / "scenes" / "demo.json"
        scene = Scene.load_json(path)

        assert len(scene.light_sources) == 1
        assert any(obj.texture == Reflective() for obj in scene)
