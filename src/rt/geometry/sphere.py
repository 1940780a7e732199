"""Sphere primitive and ray-sphere intersection.

The intersection solves the standard quadratic

    |origin + t * direction - center|^2 = radius^2
    a = dot(d, d),  b = 2 * dot(oc, d),  c = dot(oc, oc) - radius^2

with discriminant b^2 - 4ac. The smaller root inside (t_min, t_max) wins;
the larger root is used when the ray starts inside the sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.geometry.sphere import Sphere
    >>> from src.rt.materials.texture import Diffusive
    >>> sphere = Sphere(center=(0.0, 0.0, -5.0), radius=1.0, texture=Diffusive())
    >>> # Use hit_sphere within a Taichi kernel
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from src.rt.geometry.shape import (
    HitRecord,
    Shape,
    ShapeKind,
    Vec3,
    make_miss_record,
    quadratic_discriminant,
)
from src.rt.materials.texture import Diffusive, Texture

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@dataclass(frozen=True)
class Sphere(Shape):
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
        texture: Surface texture.
    """

    kind: ClassVar[ShapeKind] = ShapeKind.SPHERE

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
            "type": "sphere",
            "center": list(self.center),
            "radius": self.radius,
            "texture": self.texture.to_dict(),
        }


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        center: The sphere center.
        radius: The sphere radius.
        t_min: Minimum t value to consider a valid hit (avoids self-intersection).
        t_max: Maximum t value to consider a valid hit (nearest hit so far).

    Returns:
        A HitRecord; the normal is (hit - center) normalized, pointing outward.
    """
    oc = ray_origin - center

    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - radius * radius
    disc = quadratic_discriminant(a, b, c)

    result = make_miss_record()

    if disc >= 0.0:
        sqrt_d = ti.sqrt(disc)
        t = (-b - sqrt_d) / (2.0 * a)
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = (-b + sqrt_d) / (2.0 * a)
            valid = (t > t_min) and (t < t_max)

        if valid:
            point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=tm.normalize(point - center),
            )

    return result
