"""Host-side ray with an explicit collision list.

TracedRay is the inspectable counterpart of the kernel path tracer: tracing
it runs one path through the integrator in recording mode and exposes every
color the path collected, in order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.core.tracer import TracedRay
    >>> from src.rt.scene.scene import Scene
    >>> ray = TracedRay(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, -1.0))
    >>> ray.trace(Scene([]))
    >>> ray.collisions, ray.hit_light_source
    ([], False)
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from src.rt.core.color import LIGHT_BOOST, RGB
from src.rt.core.ray import T_MAX
from src.rt.geometry.shape import Vec3, to_point

if TYPE_CHECKING:
    from src.rt.scene.scene import Scene


def average_colors(collisions: Sequence[RGB], hit_light_source: bool, brightness: float) -> RGB:
    """Average a collision list the way the tracer resolves a path.

    The first color is the primary and keeps weight 1; color i (i >= 1) is
    weighted 1 / (i + 1). The sum is divided by the number of colors and
    scaled by LIGHT_BOOST when the path hit a light, or by
    LIGHT_BOOST * brightness when it did not. A single color is returned
    unchanged and an empty list resolves to the background.

    Args:
        collisions: Colors in the order they were collected.
        hit_light_source: Whether the path reached a light.
        brightness: Scene brightness in (0, 1].

    Returns:
        The averaged color on the 0-255 scale.
    """
    if not collisions:
        return (255.0 * brightness, 255.0 * brightness, 255.0 * brightness)
    if len(collisions) == 1:
        first = collisions[0]
        return (float(first[0]), float(first[1]), float(first[2]))

    colors = np.asarray(collisions, dtype=np.float64)
    weights = 1.0 / np.arange(1, len(colors) + 1, dtype=np.float64)
    total = (colors * weights[:, None]).sum(axis=0) / len(colors)

    boost = LIGHT_BOOST if hit_light_source else LIGHT_BOOST * brightness
    total = total * boost
    return (float(total[0]), float(total[1]), float(total[2]))


class TracedRay:
    """A ray that records the colors of its path.

    Attributes:
        origin: The starting point of the ray.
        direction: Unit direction (normalized at construction).
        depth: Recursion depth (0 for primary rays).
        collisions: Colors collected by the last trace, parent first and
            children depth-first.
        hit_light_source: Whether the last trace reached a light.
        intersection_dist: Distance of the ray's nearest hit; ``inf`` until a
            hit is found. Never increases.
    """

    def __init__(self, origin: Sequence[float], direction: Sequence[float], depth: int = 0) -> None:
        d = np.asarray(to_point(direction), dtype=np.float64)
        norm = np.linalg.norm(d)
        if norm == 0.0:
            raise ValueError("Ray direction must be non-zero")
        d = d / norm
        if depth < 0:
            raise ValueError(f"Ray depth must be non-negative, got {depth}")

        self.origin: Vec3 = to_point(origin)
        self.direction: Vec3 = (float(d[0]), float(d[1]), float(d[2]))
        self.depth = depth
        self.collisions: list[RGB] = []
        self.hit_light_source = False
        self.intersection_dist = math.inf

    def trace(self, scene: Scene) -> None:
        """Trace the ray through a scene, filling collisions and hit_light_source.

        The scene is uploaded to the Taichi storage first. Only hits closer
        than ``intersection_dist`` are accepted, so a ray that already found a
        nearer object misses farther ones. Fan-out starts from ``depth``, and
        a ray at MAX_DEPTH or deeper collects nothing. Secondary rays are
        sampled randomly, so only the first hit is deterministic.

        Args:
            scene: The scene to trace against.
        """
        from src.rt.core.integrator import trace_probe

        scene.upload()
        result = trace_probe(
            self.origin,
            self.direction,
            depth=self.depth,
            max_distance=min(self.intersection_dist, T_MAX),
        )

        self.collisions = list(result["collisions"])
        self.hit_light_source = result["hit_light_source"]
        if result["distance"] < T_MAX:
            self.intersection_dist = result["distance"]

    def average_color(self, scene: Scene) -> RGB:
        """Average the collected colors, boosted by light or scene brightness."""
        return average_colors(self.collisions, self.hit_light_source, scene.brightness)

    def __repr__(self) -> str:
        return (
            f"TracedRay(origin={self.origin}, direction={self.direction}, "
            f"depth={self.depth}, collisions={len(self.collisions)})"
        )
