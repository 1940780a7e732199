"""Vertical Cylinder primitive with capped ends.

The axis runs along +Y from ``center`` to ``center + height * up``. The
cylinder is the union of:

- the lateral surface, found by projecting the ray onto the plane
  perpendicular to the axis and solving a circle quadratic; a root only
  counts if its axial height lies in [0, height],
- a bottom FlatPlane cap at ``center`` and a top FlatPlane cap at
  ``center + height * up``, both with the cylinder's radius.

The closest candidate among all of them is the hit.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from src.rt.geometry.flat_plane import FlatPlane, hit_flat_plane
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
class Cylinder(Shape):
    """A vertical cylinder standing on ``center``.

    Attributes:
        center: Center of the bottom cap.
        radius: Cylinder radius (positive).
        height: Extent along +Y (positive).
        texture: Surface texture, shared by the caps.
        bottom: Bottom cap (derived).
        top: Top cap (derived).
    """

    kind: ClassVar[ShapeKind] = ShapeKind.CYLINDER

    center: Vec3
    radius: float
    height: float
    texture: Texture = field(default_factory=Diffusive)
    bottom: FlatPlane = field(init=False, repr=False, compare=False)
    top: FlatPlane = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._normalize_fields()
        self._validate_positive(radius=self.radius, height=self.height)

        x, y, z = self.center
        object.__setattr__(self, "bottom", FlatPlane(self.center, self.radius, self.texture))
        object.__setattr__(
            self, "top", FlatPlane((x, y + self.height, z), self.radius, self.texture)
        )

    def storage_params(self) -> tuple[float, float]:
        return float(self.radius), float(self.height)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "cylinder",
            "center": list(self.center),
            "radius": self.radius,
            "height": self.height,
            "texture": self.texture.to_dict(),
        }


@ti.func
def hit_cylinder_side(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
    height: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test the ray against the lateral surface only.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        center: Center of the bottom cap.
        radius: Cylinder radius.
        height: Cylinder height.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A HitRecord with an outward radial normal.
    """
    axis = vec3(0.0, 1.0, 0.0)
    to_origin = ray_origin - center

    # Components perpendicular to the axis
    eff_direction = ray_direction - axis * tm.dot(ray_direction, axis)
    eff_origin = to_origin - axis * tm.dot(to_origin, axis)

    a = tm.dot(eff_direction, eff_direction)
    b = 2.0 * tm.dot(eff_origin, eff_direction)
    c = tm.dot(eff_origin, eff_origin) - radius * radius
    disc = quadratic_discriminant(a, b, c)

    result = make_miss_record()
    closest_t = t_max

    # a == 0 means the ray runs parallel to the axis and only the caps can be hit
    if a > 1e-12 and disc >= 0.0:
        sqrt_d = ti.sqrt(disc)
        for k in ti.static(range(2)):
            t = (-b - sqrt_d) / (2.0 * a)
            if ti.static(k == 1):
                t = (-b + sqrt_d) / (2.0 * a)

            if t > t_min and t < closest_t:
                point = ray_origin + t * ray_direction
                axial = tm.dot(point - center, axis)
                if axial >= 0.0 and axial <= height:
                    closest_t = t
                    radial = point - center - axis * axial
                    result = HitRecord(hit=1, t=t, point=point, normal=tm.normalize(radial))

    return result


@ti.func
def hit_cylinder(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
    height: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-cylinder intersection (lateral surface and both caps).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        center: Center of the bottom cap.
        radius: Cylinder radius.
        height: Cylinder height.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A HitRecord for the closest of the lateral and cap hits.
    """
    result = hit_cylinder_side(ray_origin, ray_direction, center, radius, height, t_min, t_max)
    closest_t = t_max
    if result.hit == 1:
        closest_t = result.t

    bottom = hit_flat_plane(ray_origin, ray_direction, center, radius, t_min, closest_t)
    if bottom.hit == 1:
        closest_t = bottom.t
        result = bottom

    top_center = center + vec3(0.0, height, 0.0)
    top = hit_flat_plane(ray_origin, ray_direction, top_center, radius, t_min, closest_t)
    if top.hit == 1:
        result = top

    return result
