"""Ray data structure and vector utilities for the Taichi ray tracer.

This module provides the kernel-side Ray dataclass, the semantic vector aliases
used throughout the renderer and the vector/sampling helpers shared by the
geometry, material and camera modules. Everything here is designed to be
called from within Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.core.ray import make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0), 0)
    ...     return ray_at(ray, 5.0).z  # -5.0, direction is normalized
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Semantic aliases. They are all the same 3-component vector; the names only
# document intent. Directions and normals are unit length wherever they are
# stored on a Ray or a hit record.
Point = vec3
Direction = vec3
Normal = vec3
Color = vec3

# Upper bound used in place of +inf for "no hit yet"
T_MAX = 1e10


@ti.dataclass
class Ray:
    """A ray as seen by the intersection routines.

    Attributes:
        origin: The starting point of the ray.
        direction: The unit direction of the ray.
        intersection_dist: Running minimum distance of the nearest hit found
            so far. Starts at T_MAX and only ever decreases during a trace.
        depth: Recursion depth of the ray (0 for primary camera rays).
    """

    origin: vec3
    direction: vec3
    intersection_dist: ti.f32
    depth: ti.i32


@ti.func
def make_ray(origin: vec3, direction: vec3, depth: ti.i32) -> Ray:
    """Create a ray, normalizing its direction.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.
        depth: Recursion depth of the new ray.

    Returns:
        A new Ray with a unit direction and no hit recorded yet.
    """
    return Ray(
        origin=origin,
        direction=tm.normalize(direction),
        intersection_dist=T_MAX,
        depth=depth,
    )


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a unit normal: d - 2(d.n)n."""
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis from a normal vector.

    Creates a local coordinate frame where the normal is the z-axis.

    Args:
        normal: The surface normal (need not be normalized).

    Returns:
        A tuple (u, v, w) forming an orthonormal basis with w = normal.
    """
    w = tm.normalize(normal)
    # Choose a helper axis that is not parallel to the normal
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(w.x) > 0.9:
        a = vec3(0.0, 1.0, 0.0)
    v = tm.normalize(tm.cross(w, a))
    u = tm.cross(w, v)
    return u, v, w


@ti.func
def random_cosine_direction() -> vec3:
    """Generate a random direction with cosine-weighted distribution.

    The direction is expressed in the local frame where z is the normal.
    With z = sqrt(r2), the density over the hemisphere is cos(theta) / pi.

    Returns:
        A random unit direction in the local coordinate frame (z-up).
    """
    r1 = ti.random(ti.f32)
    r2 = ti.random(ti.f32)
    phi = 2.0 * tm.pi * r1
    sin_theta = ti.sqrt(1.0 - r2)
    x = ti.cos(phi) * sin_theta
    y = ti.sin(phi) * sin_theta
    z = ti.sqrt(r2)
    return vec3(x, y, z)


@ti.func
def local_to_world(local_dir: vec3, u: vec3, v: vec3, w: vec3) -> vec3:
    """Transform a direction from a local (u, v, w) frame to world space."""
    return local_dir.x * u + local_dir.y * v + local_dir.z * w


@ti.func
def offset_ray_origin(point: vec3, normal: vec3, direction: vec3, epsilon: ti.f32) -> vec3:
    """Offset a secondary ray origin off the surface it starts on.

    The point is pushed along the normal toward the side the new ray travels
    into (above the surface for reflection, below for rays heading inward).

    Args:
        point: The intersection point.
        normal: The surface normal at the point.
        direction: The direction of the new ray.
        epsilon: Offset distance.

    Returns:
        The offset origin point.
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + epsilon * offset_dir
