"""Dispatch over primitive kinds.

``hit_object`` is the single ``match`` over ShapeKind used by the scene
intersection loop. ``probe_intersection`` runs it for one ray against one
host-side primitive, which is what ``Shape.intersection`` uses.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.geometry.sphere import Sphere
    >>> from src.rt.geometry.dispatch import probe_intersection
    >>> sphere = Sphere(center=(0.0, 0.0, -5.0), radius=1.0)
    >>> probe_intersection(sphere, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), float("inf"))[0]
    4.0
"""

import math
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from src.rt.core.ray import T_MAX
from src.rt.geometry.cube import hit_cube
from src.rt.geometry.cylinder import hit_cylinder
from src.rt.geometry.flat_plane import hit_flat_plane
from src.rt.geometry.shape import T_MIN, HitRecord, ShapeKind, Vec3, make_miss_record
from src.rt.geometry.sphere import hit_sphere

if TYPE_CHECKING:
    from src.rt.geometry.shape import Shape

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

_SPHERE = int(ShapeKind.SPHERE)
_CUBE = int(ShapeKind.CUBE)
_CYLINDER = int(ShapeKind.CYLINDER)
_FLAT_PLANE = int(ShapeKind.FLAT_PLANE)


@ti.func
def hit_object(
    kind: ti.i32,
    center: vec3,
    radius: ti.f32,
    height: ti.f32,
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a primitive described by its storage slots.

    Args:
        kind: A ShapeKind value.
        center: Primitive center.
        radius: Radius (edge size for cubes).
        height: Height (cylinders only).
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The primitive's HitRecord, or a miss record for an unknown kind.
    """
    rec = make_miss_record()

    if kind == _SPHERE:
        rec = hit_sphere(ray_origin, ray_direction, center, radius, t_min, t_max)
    elif kind == _CUBE:
        rec = hit_cube(ray_origin, ray_direction, center, radius, t_min, t_max)
    elif kind == _CYLINDER:
        rec = hit_cylinder(ray_origin, ray_direction, center, radius, height, t_min, t_max)
    elif kind == _FLAT_PLANE:
        rec = hit_flat_plane(ray_origin, ray_direction, center, radius, t_min, t_max)

    return rec


# =============================================================================
# Single-ray Probe (host-side intersection)
# =============================================================================

_probe_hit = ti.field(dtype=ti.i32, shape=())
_probe_t = ti.field(dtype=ti.f32, shape=())
_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_normal = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _probe_kernel(
    kind: ti.i32,
    center: vec3,
    radius: ti.f32,
    height: ti.f32,
    ray_origin: vec3,
    ray_direction: vec3,
    t_max: ti.f32,
):
    rec = hit_object(
        kind, center, radius, height, ray_origin, tm.normalize(ray_direction), T_MIN, t_max
    )
    _probe_hit[None] = rec.hit
    _probe_t[None] = rec.t
    _probe_point[None] = rec.point
    _probe_normal[None] = rec.normal


def probe_intersection(
    shape: "Shape",
    origin: Vec3,
    direction: Vec3,
    max_distance: float = math.inf,
) -> tuple[float, Vec3, Vec3] | None:
    """Intersect one ray with one primitive.

    Args:
        shape: The host-side primitive.
        origin: Ray origin.
        direction: Ray direction (normalized inside the kernel).
        max_distance: Upper bound on accepted distances (exclusive).

    Returns:
        (distance, hit_point, normal) or None on a miss.
    """
    radius, height = shape.storage_params()
    t_max = min(float(max_distance), T_MAX)

    _probe_kernel(
        int(shape.kind),
        vec3(*shape.center),
        radius,
        height,
        vec3(*origin),
        vec3(*direction),
        t_max,
    )

    if _probe_hit[None] == 0:
        return None

    point = _probe_point[None]
    normal = _probe_normal[None]
    return (
        float(_probe_t[None]),
        (float(point[0]), float(point[1]), float(point[2])),
        (float(normal[0]), float(normal[1]), float(normal[2])),
    )
