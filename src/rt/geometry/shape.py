"""Shared shape contract: shape kinds, hit records and the host-side base class.

Every primitive (Sphere, Cube, Cylinder, FlatPlane) is described twice:

- On the host, as a frozen dataclass deriving from ``Shape``. This is what
  scenes are built from and what gets serialized.
- In kernels, as a ``ShapeKind`` tag plus (center, radius, height) stored in
  the scene fields, intersected by the matching ``hit_*`` function. Cubes
  store their edge size in the radius slot.

Misses are normal control flow: kernels return a HitRecord with ``hit == 0``
and the host API returns ``None``.

Example:
    >>> from src.rt.geometry.shape import discriminant
    >>> discriminant(1.0, 2.0, 1.0)
    0.0
    >>> discriminant(1.0, 0.0, 1.0) is None
    True
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, ClassVar

import taichi as ti
import taichi.math as tm

from src.rt.materials.texture import Texture

if TYPE_CHECKING:
    from src.rt.core.tracer import TracedRay

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Host-side point type
Vec3 = tuple[float, float, float]

# Minimum accepted hit distance (prevents self-intersection)
T_MIN = 1e-6

# Plane tests treat |denominator| below this as parallel
PARALLEL_EPSILON = 1e-6


class ShapeKind(IntEnum):
    """Enumeration of primitive kinds, used as the tag in scene storage."""

    SPHERE = 0
    CUBE = 1
    CYLINDER = 2
    FLAT_PLANE = 3


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: Distance along the (unit) ray direction. Only valid if hit == 1.
        point: The 3D hit point. Only valid if hit == 1.
        normal: Unit surface normal at the hit point. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def quadratic_discriminant(a: ti.f32, b: ti.f32, c: ti.f32) -> ti.f32:
    """Discriminant b^2 - 4ac of a*t^2 + b*t + c = 0."""
    return b * b - 4.0 * a * c


def discriminant(a: float, b: float, c: float) -> float | None:
    """Discriminant of a*t^2 + b*t + c = 0, or None if there are no real roots.

    Args:
        a: Quadratic coefficient.
        b: Linear coefficient.
        c: Constant term.

    Returns:
        b^2 - 4ac when it is non-negative (0.0 exactly at the tangent
        boundary), otherwise None.
    """
    value = b * b - 4.0 * a * c
    if value < 0.0:
        return None
    return value


def to_point(value: Sequence[float]) -> Vec3:
    """Convert any 3-sequence into a tuple of floats.

    Raises:
        ValueError: If the sequence does not have exactly 3 components.
    """
    if len(value) != 3:
        raise ValueError(f"Point must have 3 components, got {len(value)}")
    return (float(value[0]), float(value[1]), float(value[2]))


# =============================================================================
# Host-side Shape Model
# =============================================================================


@dataclass(frozen=True)
class Intersection:
    """Result of a successful host-side intersection test.

    Attributes:
        hit_point: The point where the ray meets the surface.
        normal: Unit surface normal at the hit point.
        distance: Distance from the ray origin along its unit direction.
        texture: Texture of the primitive that was hit.
    """

    hit_point: Vec3
    normal: Vec3
    distance: float
    texture: Texture


class Shape:
    """Base class of the host-side primitives.

    Subclasses are frozen dataclasses with ``center`` and ``texture`` fields
    and set the ``kind`` tag. They provide ``storage_params`` (the radius and
    height slots of the scene fields) and ``to_dict``.
    """

    kind: ClassVar[ShapeKind]
    center: Vec3
    texture: Texture

    @property
    def is_light(self) -> bool:
        """Whether the primitive's texture is a light source."""
        return self.texture.is_light

    def storage_params(self) -> tuple[float, float]:
        """Return the (radius, height) values uploaded to scene storage."""
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        """Export the primitive to a dictionary (for JSON serialization)."""
        raise NotImplementedError

    def intersection(self, ray: "TracedRay") -> Intersection | None:
        """Intersect a host-side ray with this primitive.

        Only hits closer than ``ray.intersection_dist`` are accepted, so a
        ray that already found a nearer object sees this one as a miss.

        Args:
            ray: The ray to test. It is not modified.

        Returns:
            The Intersection, or None on a miss.
        """
        # Deferred import: dispatch imports every primitive module
        from src.rt.geometry.dispatch import probe_intersection

        result = probe_intersection(self, ray.origin, ray.direction, ray.intersection_dist)
        if result is None:
            return None

        distance, point, normal = result
        return Intersection(
            hit_point=point,
            normal=normal,
            distance=distance,
            texture=self.texture,
        )

    def _validate_positive(self, **values: float) -> None:
        """Raise ValueError for any non-positive dimension."""
        for name, value in values.items():
            if not value > 0.0:
                raise ValueError(f"{type(self).__name__} {name} must be positive, got {value}")

    def _normalize_fields(self) -> None:
        """Coerce the center to a float tuple (frozen-safe)."""
        object.__setattr__(self, "center", to_point(self.center))
