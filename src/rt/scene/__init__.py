"""Scene module.

Components:
    scene: Immutable Scene container, brightness clamping, JSON I/O
    storage: Taichi field storage and scene-level intersection
    demo: Stock demo scene and camera

storage and demo allocate Taichi fields (directly or through the camera) and
are not imported here.
"""

from .scene import DEFAULT_BRIGHTNESS, MIN_BRIGHTNESS, Scene, clamp_brightness, shape_from_dict

__all__ = [
    "Scene",
    "shape_from_dict",
    "clamp_brightness",
    "DEFAULT_BRIGHTNESS",
    "MIN_BRIGHTNESS",
]
