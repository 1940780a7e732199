"""Axis-aligned Cube primitive.

Each of the six faces (3 axes x 2 signs) is intersected as a plane through
``center + half_size * axis_normal``. A face hit counts if every local
coordinate of the hit point lies within the half size, scaled by a small
multiplicative tolerance so that rays grazing an edge are not lost to
rounding. The closest accepted face hit wins.

The normal is the unit vector along the axis of the largest-magnitude local
coordinate. Ties (points on an edge or vertex) go to the first axis in X, Y,
Z order.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from src.rt.geometry.shape import (
    PARALLEL_EPSILON,
    HitRecord,
    Shape,
    ShapeKind,
    Vec3,
    make_miss_record,
)
from src.rt.materials.texture import Diffusive, Texture

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Multiplicative slack on the face bounds check
CUBE_TOLERANCE = 1.0001 * 1.0001


@dataclass(frozen=True)
class Cube(Shape):
    """An axis-aligned cube.

    Attributes:
        center: The center of the cube.
        size: Edge length (positive).
        texture: Surface texture.
    """

    kind: ClassVar[ShapeKind] = ShapeKind.CUBE

    center: Vec3
    size: float
    texture: Texture = field(default_factory=Diffusive)

    def __post_init__(self) -> None:
        self._normalize_fields()
        self._validate_positive(size=self.size)

    def storage_params(self) -> tuple[float, float]:
        return float(self.size), 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "cube",
            "center": list(self.center),
            "size": self.size,
            "texture": self.texture.to_dict(),
        }


@ti.func
def cube_face_normal(local_point: vec3) -> vec3:
    """Normal of the face a cube-local point lies on.

    Args:
        local_point: Hit point relative to the cube center.

    Returns:
        +/- unit axis of the largest |component|, first axis winning ties.
    """
    abs_p = ti.abs(local_point)

    # Strict comparisons keep the earlier axis on ties
    normal = vec3(ti.select(local_point.x < 0.0, -1.0, 1.0), 0.0, 0.0)
    largest = abs_p.x
    if abs_p.y > largest:
        normal = vec3(0.0, ti.select(local_point.y < 0.0, -1.0, 1.0), 0.0)
        largest = abs_p.y
    if abs_p.z > largest:
        normal = vec3(0.0, 0.0, ti.select(local_point.z < 0.0, -1.0, 1.0))

    return normal


@ti.func
def hit_cube(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    size: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-cube intersection by checking all six face planes.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        center: The cube center.
        size: The cube edge length.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A HitRecord for the closest face hit.
    """
    half_size = size / 2.0
    bound = half_size * CUBE_TOLERANCE

    closest_t = t_max
    result = make_miss_record()

    for axis in ti.static(range(3)):
        for sign in ti.static((-1.0, 1.0)):
            face_normal = vec3(0.0, 0.0, 0.0)
            face_normal[axis] = sign
            face_center = center + half_size * face_normal

            denom = tm.dot(face_normal, ray_direction)
            if ti.abs(denom) > PARALLEL_EPSILON:
                t = tm.dot(face_center - ray_origin, face_normal) / denom
                if t > t_min and t < closest_t:
                    point = ray_origin + t * ray_direction
                    local_point = point - center
                    if (
                        ti.abs(local_point.x) <= bound
                        and ti.abs(local_point.y) <= bound
                        and ti.abs(local_point.z) <= bound
                    ):
                        closest_t = t
                        result = HitRecord(
                            hit=1,
                            t=t,
                            point=point,
                            normal=cube_face_normal(local_point),
                        )

    return result
