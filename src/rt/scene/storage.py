"""Scene storage and scene-level intersection testing.

Primitives live in preallocated Taichi fields using a Structure of Arrays
layout. Each slot is a tagged union: ``object_kinds`` selects the primitive
and (center, radius, height) are its parameters. Textures are stored
alongside as a kind and a color.

The scene is written once from the host (see ``Scene.upload``) and is
read-only for every kernel that follows.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.scene.storage import add_object, clear_scene, set_brightness
    >>> from src.rt.geometry.shape import ShapeKind
    >>> from src.rt.materials.texture import TextureKind
    >>> clear_scene()
    >>> add_object(ShapeKind.SPHERE, (0, 0, -5), 1.0, 0.0, TextureKind.DIFFUSIVE, (255, 0, 0))
    0
    >>> set_brightness(0.5)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.rt.core.color import RGB
from src.rt.core.ray import Ray
from src.rt.geometry.dispatch import hit_object
from src.rt.geometry.shape import T_MIN, Vec3

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with texture information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Distance to the nearest hit. Only valid if hit == 1.
        point: The nearest hit point. Only valid if hit == 1.
        normal: Unit surface normal at the hit point. Only valid if hit == 1.
        texture_kind: TextureKind of the hit primitive (-1 on a miss).
        color: Texture color of the hit primitive.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    texture_kind: ti.i32
    color: vec3


# Maximum number of primitives supported in the scene
MAX_OBJECTS = 1024

# Geometry storage
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_heights = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)

# Texture storage
texture_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
texture_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)

num_objects = ti.field(dtype=ti.i32, shape=())

# Ambient brightness in (0, 1]
scene_brightness = ti.field(dtype=ti.f32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the object count to zero. The field data is not cleared but will
    be overwritten when new primitives are added.
    """
    num_objects[None] = 0


def add_object(
    kind: int,
    center: Vec3,
    radius: float,
    height: float,
    texture_kind: int,
    color: RGB,
) -> int:
    """Add a primitive to the scene.

    Args:
        kind: ShapeKind of the primitive.
        center: The primitive center.
        radius: Radius (edge size for cubes).
        height: Height (cylinders only, 0 otherwise).
        texture_kind: TextureKind of the surface.
        color: Texture color on the 0-255 scale.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    object_kinds[idx] = int(kind)
    object_centers[idx] = center
    object_radii[idx] = radius
    object_heights[idx] = height
    texture_kinds[idx] = int(texture_kind)
    texture_colors[idx] = color
    num_objects[None] = idx + 1
    return idx


def get_object_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_objects[None])


def set_brightness(brightness: float) -> None:
    """Set the ambient brightness read by the tracer."""
    scene_brightness[None] = brightness


@ti.func
def background_color() -> vec3:
    """Color returned for rays that escape: white scaled by brightness."""
    return vec3(255.0, 255.0, 255.0) * scene_brightness[None]


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        texture_kind=-1,
        color=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def intersect_scene(ray: Ray) -> SceneHitRecord:
    """Test a ray against every primitive and keep the nearest hit.

    The running nearest distance starts at ``ray.intersection_dist`` (T_MAX
    for a fresh ray) and is only ever tightened, so each object is tested
    against the best distance found so far and the result does not depend on
    the order objects were added in.

    Args:
        ray: The ray to test; its direction must be unit length.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    intersection_dist = ray.intersection_dist
    result = _make_miss_record()

    for i in range(num_objects[None]):
        rec = hit_object(
            object_kinds[i],
            object_centers[i],
            object_radii[i],
            object_heights[i],
            ray.origin,
            ray.direction,
            T_MIN,
            intersection_dist,
        )
        if rec.hit == 1:
            intersection_dist = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                texture_kind=texture_kinds[i],
                color=texture_colors[i],
            )

    return result
