"""FlatPlane primitive: a bounded horizontal disk.

The disk lies in the plane y = center.y. Its normal is +Y or -Y, whichever
faces the side the ray starts on, so the disk is two-sided. A hit is accepted
only if the in-plane distance from the center is at most the radius.

FlatPlane is also used for the caps of a Cylinder.
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


@dataclass(frozen=True)
class FlatPlane(Shape):
    """A disk of given radius centered at ``center``, facing along Y.

    Attributes:
        center: The center of the disk.
        radius: The disk radius (positive).
        texture: Surface texture.
    """

    kind: ClassVar[ShapeKind] = ShapeKind.FLAT_PLANE

    center: Vec3
    radius: float
    texture: Texture = field(default_factory=Diffusive)

    def __post_init__(self) -> None:
        self._normalize_fields()
        self._validate_positive(radius=self.radius)

    def storage_params(self) -> tuple[float, float]:
        return float(self.radius), 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "flat_plane",
            "center": list(self.center),
            "radius": self.radius,
            "texture": self.texture.to_dict(),
        }


@ti.func
def flat_plane_normal(ray_origin: vec3, center: vec3) -> vec3:
    """Return the disk normal facing the side of the plane the ray starts on."""
    normal = vec3(0.0, 1.0, 0.0)
    if ray_origin.y < center.y:
        normal = vec3(0.0, -1.0, 0.0)
    return normal


@ti.func
def hit_flat_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-disk intersection.

    Uses the plane distance t = dot(center - origin, n) / dot(direction, n)
    and then checks |hit - center| <= radius.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        center: The disk center.
        radius: The disk radius.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A HitRecord whose normal faces the ray origin.
    """
    normal = flat_plane_normal(ray_origin, center)
    denom = tm.dot(ray_direction, normal)

    result = make_miss_record()

    if ti.abs(denom) > PARALLEL_EPSILON:
        t = tm.dot(center - ray_origin, normal) / denom
        if t > t_min and t < t_max:
            point = ray_origin + t * ray_direction
            if tm.length(point - center) <= radius:
                result = HitRecord(hit=1, t=t, point=point, normal=normal)

    return result
