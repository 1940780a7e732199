"""Scene container: the primitives plus an ambient brightness.

A Scene is built once and is read-only for the whole render. Before kernels
run, ``upload`` copies it into the storage fields of ``src.rt.scene.storage``.

Brightness is clamped into (0, 1] rather than rejected; non-positive values
become MIN_BRIGHTNESS so that rays escaping the scene never resolve to exact
black.

Example:
    >>> from src.rt.scene.scene import Scene
    >>> from src.rt.geometry.sphere import Sphere
    >>> scene = Scene([Sphere((0.0, 0.0, -5.0), 1.0)], brightness=2.0)
    >>> scene.brightness
    1.0
    >>> scene.background()
    (255.0, 255.0, 255.0)
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from src.rt.core.color import RGB, WHITE, scale
from src.rt.geometry.cube import Cube
from src.rt.geometry.cylinder import Cylinder
from src.rt.geometry.flat_plane import FlatPlane
from src.rt.geometry.shape import Shape
from src.rt.geometry.sphere import Sphere
from src.rt.materials.texture import Diffusive, texture_from_dict

# Brightness used in place of non-positive input
MIN_BRIGHTNESS = 1e-3

# Brightness used when none is given
DEFAULT_BRIGHTNESS = 0.5


def clamp_brightness(brightness: float) -> float:
    """Clamp a brightness value into (0, 1]. NaN counts as non-positive."""
    brightness = float(brightness)
    if not brightness > 0.0:
        return MIN_BRIGHTNESS
    return min(brightness, 1.0)


class Scene:
    """An immutable collection of primitives with an ambient brightness.

    Attributes:
        objects: The primitives, in the order they were given.
        brightness: Ambient brightness in (0, 1].
    """

    def __init__(self, objects: Iterable[Shape], brightness: float = DEFAULT_BRIGHTNESS) -> None:
        self._objects = tuple(objects)
        self._brightness = clamp_brightness(brightness)

    @property
    def objects(self) -> tuple[Shape, ...]:
        """The primitives of the scene."""
        return self._objects

    @property
    def brightness(self) -> float:
        """Ambient brightness in (0, 1]."""
        return self._brightness

    @property
    def light_sources(self) -> tuple[Shape, ...]:
        """The primitives whose texture is a light."""
        return tuple(obj for obj in self._objects if obj.is_light)

    def background(self) -> RGB:
        """Color of rays that hit nothing: white scaled by brightness."""
        return scale(WHITE, self._brightness)

    def upload(self) -> None:
        """Copy the scene into the Taichi storage fields.

        Raises:
            RuntimeError: If the scene has more primitives than storage slots.
        """
        from src.rt.scene.storage import add_object, clear_scene, set_brightness

        clear_scene()
        for obj in self._objects:
            radius, height = obj.storage_params()
            add_object(
                obj.kind,
                obj.center,
                radius,
                height,
                obj.texture.kind,
                obj.texture.rgb,
            )
        set_brightness(self._brightness)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {
            "brightness": self._brightness,
            "objects": [obj.to_dict() for obj in self._objects],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scene:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'objects' and optional 'brightness' keys.

        Returns:
            The loaded scene.

        Raises:
            ValueError: If an object or texture description is invalid.
        """
        objects = [shape_from_dict(obj) for obj in data.get("objects", [])]
        return cls(objects, brightness=data.get("brightness", DEFAULT_BRIGHTNESS))

    @classmethod
    def load_json(cls, path: str | Path) -> Scene:
        """Load a scene from a JSON file."""
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def save_json(self, path: str | Path) -> None:
        """Write the scene to a JSON file."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __repr__(self) -> str:
        return f"Scene(objects={len(self._objects)}, brightness={self._brightness})"


def shape_from_dict(data: dict[str, Any]) -> Shape:
    """Build a primitive from its dictionary description.

    Args:
        data: Dictionary with 'type', 'center', the type's dimensions
            ('radius', 'size', 'height') and an optional 'texture'.

    Returns:
        The primitive.

    Raises:
        ValueError: If the type is unknown or a dimension is missing/invalid.
    """
    shape_type = str(data.get("type", "")).lower()
    center = data.get("center", [0.0, 0.0, 0.0])
    texture = texture_from_dict(data["texture"]) if "texture" in data else Diffusive()

    try:
        if shape_type == "sphere":
            return Sphere(center, float(data["radius"]), texture)
        if shape_type == "cube":
            return Cube(center, float(data["size"]), texture)
        if shape_type == "cylinder":
            return Cylinder(center, float(data["radius"]), float(data["height"]), texture)
        if shape_type == "flat_plane":
            return FlatPlane(center, float(data["radius"]), texture)
    except KeyError as e:
        raise ValueError(f"Missing {e.args[0]!r} for {shape_type}") from e

    raise ValueError(f"Unknown object type: {shape_type}")
