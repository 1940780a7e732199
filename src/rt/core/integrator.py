"""Recursive path tracer with per-depth fan-out.

A traced ray scans the scene for its nearest hit and then, by texture:

    Light       push color, mark the path as lit, stop
    Diffusive   push color, continue along hemisphere samples
    Glossy      push color, continue along blended reflections
    Reflective  push nothing, continue along the mirror direction

Hitting a non-light surface at depth d spawns ``secondary_ray_count(d)``
secondary rays at depth d + 1 (exactly one for Reflective). The count shrinks
from NUM_SECONDARY_RAYS at depth 0 to 1 at depth 3 and beyond; MAX_DEPTH
bounds the recursion. A secondary ray that hits nothing contributes the
scene background to its parent.

Taichi functions cannot recurse at run time, so the shallow, branching levels
are unrolled at compile time (``depth`` is a template argument) and the deep
single-ray levels run as a bounded loop. Collected colors are not kept in a
list: they are folded into a PathState in the same depth-first order
(parent first, children after) so that ``resolve_color`` computes the
weighted average directly.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.core.integrator import sample_color
    >>> # Within a Taichi kernel, after Scene.upload():
    >>> # color = sample_color(origin, direction)
"""

import taichi as ti
import taichi.math as tm

from src.rt.core.color import LIGHT_BOOST
from src.rt.core.ray import T_MAX, Ray, make_ray, offset_ray_origin
from src.rt.materials.scatter import scatter
from src.rt.materials.texture import TextureKind
from src.rt.scene.storage import background_color, intersect_scene, scene_brightness

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Tracing Constants
# =============================================================================

# Maximum recursion depth; a ray at this depth returns without tracing
MAX_DEPTH = 50

# Secondary rays spawned by a primary hit
NUM_SECONDARY_RAYS = 4

# Depths below this may spawn more than one secondary ray
FANOUT_DEPTHS = 3

# Offset of secondary ray origins off the surface
RAY_EPSILON = 1e-4

# Capacity of the collision recording buffer
MAX_RECORDED_COLLISIONS = 4096

_LIGHT = int(TextureKind.LIGHT)
_REFLECTIVE = int(TextureKind.REFLECTIVE)


def secondary_ray_count(depth: int, num_secondary_rays: int = NUM_SECONDARY_RAYS) -> int:
    """Number of secondary rays spawned by a hit at the given depth.

    The count is N at depth 0, N // 2 at depth 1, N // 4 at depth 2 and 1 at
    any deeper level. It never drops below 1.

    Args:
        depth: Depth of the ray that hit the surface.
        num_secondary_rays: The depth-0 count N.

    Returns:
        The number of secondary rays.
    """
    if depth >= FANOUT_DEPTHS:
        return 1
    return max(1, num_secondary_rays // (2**depth))


# =============================================================================
# Path State
# =============================================================================


@ti.dataclass
class PathState:
    """Streaming form of a ray's collision list.

    Attributes:
        count: Number of colors pushed so far.
        primary: The first pushed color.
        weighted: Sum of color_i / (i + 1) over every later color i.
        hit_light: 1 if any ray of the path hit a Light.
    """

    count: ti.i32
    primary: vec3
    weighted: vec3
    hit_light: ti.i32


# Recording buffer, written only by the probe kernel
_recorded_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RECORDED_COLLISIONS)


@ti.func
def make_path_state() -> PathState:
    """Create an empty PathState (no collisions, no light)."""
    return PathState(
        count=0,
        primary=vec3(0.0, 0.0, 0.0),
        weighted=vec3(0.0, 0.0, 0.0),
        hit_light=0,
    )


@ti.func
def push_collision(state: PathState, color: vec3, record: ti.template()) -> PathState:
    """Append a color to the path.

    Args:
        state: The current path state.
        color: The color to append.
        record: If True, also copy the color into the recording buffer.

    Returns:
        The updated path state.
    """
    if ti.static(record):
        if state.count < MAX_RECORDED_COLLISIONS:
            _recorded_colors[state.count] = color

    result = state
    if result.count == 0:
        result.primary = color
    else:
        result.weighted += color / ti.cast(result.count + 1, ti.f32)
    result.count += 1
    return result


@ti.func
def resolve_color(state: PathState, brightness: ti.f32) -> vec3:
    """Average a path's colors.

    Empty paths resolve to the background and a single color is returned
    unchanged. Otherwise the first color is weighted 1 and color i by
    1 / (i + 1); the sum is divided by the count and boosted by LIGHT_BOOST
    for lit paths or LIGHT_BOOST * brightness for unlit ones.

    Args:
        state: The finished path state.
        brightness: Scene brightness in (0, 1].

    Returns:
        The color of the path on the 0-255 scale.
    """
    color = vec3(255.0, 255.0, 255.0) * brightness

    if state.count == 1:
        color = state.primary
    elif state.count > 1:
        boost = LIGHT_BOOST * brightness
        if state.hit_light == 1:
            boost = LIGHT_BOOST
        color = (state.primary + state.weighted) / ti.cast(state.count, ti.f32) * boost

    return color


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def _bounded_ray(origin: vec3, direction: vec3, depth: ti.i32, max_distance: ti.f32) -> Ray:
    """A ray whose nearest-hit search starts from max_distance."""
    ray = make_ray(origin, direction, depth)
    ray.intersection_dist = max_distance
    return ray


@ti.func
def _trace_chain(
    origin: vec3,
    direction: vec3,
    state: PathState,
    max_distance: ti.f32,
    start_depth: ti.template(),
    record: ti.template(),
) -> PathState:
    """Trace a single-ray chain from start_depth down to MAX_DEPTH.

    Every level spawns one secondary ray, so the recursion is a loop. Only
    the first ray is bounded by max_distance; its descendants start at T_MAX.
    A miss below the first level contributes the background to its parent; a
    miss at start_depth is left for the caller to fold.
    """
    result = state
    ray_origin = origin
    ray_direction = direction
    bound = max_distance
    active = 1

    for depth in range(start_depth, MAX_DEPTH):
        if active == 1:
            rec = intersect_scene(_bounded_ray(ray_origin, ray_direction, depth, bound))
            bound = T_MAX

            if rec.hit == 0:
                if depth > start_depth:
                    result = push_collision(result, background_color(), record)
                active = 0
            else:
                if rec.texture_kind != _REFLECTIVE:
                    result = push_collision(result, rec.color, record)

                if rec.texture_kind == _LIGHT:
                    result.hit_light = 1
                    active = 0
                else:
                    new_direction = scatter(rec.texture_kind, ray_direction, rec.normal)
                    ray_origin = offset_ray_origin(
                        rec.point, rec.normal, new_direction, RAY_EPSILON
                    )
                    ray_direction = new_direction

    # The last ray's child would start at MAX_DEPTH and return empty
    if ti.static(start_depth < MAX_DEPTH):
        if active == 1:
            result = push_collision(result, background_color(), record)

    return result


@ti.func
def _trace_branching(
    origin: vec3,
    direction: vec3,
    state: PathState,
    max_distance: ti.f32,
    depth: ti.template(),
    record: ti.template(),
) -> PathState:
    """Trace one ray at a fan-out depth and all of its descendants.

    Children below FANOUT_DEPTHS recurse at compile time; the first depth with
    a single child hands over to the chain loop. Hits at or beyond
    max_distance are ignored for this ray; children are unbounded.
    """
    result = state
    rec = intersect_scene(_bounded_ray(origin, direction, depth, max_distance))

    if rec.hit == 1:
        if rec.texture_kind != _REFLECTIVE:
            result = push_collision(result, rec.color, record)

        if rec.texture_kind == _LIGHT:
            result.hit_light = 1
        else:
            fanout = ti.static(secondary_ray_count(depth))
            num_children = ti.select(rec.texture_kind == _REFLECTIVE, 1, fanout)

            for _ in range(num_children):
                new_direction = scatter(rec.texture_kind, direction, rec.normal)
                child_origin = offset_ray_origin(rec.point, rec.normal, new_direction, RAY_EPSILON)
                count_before = result.count

                if ti.static(depth + 1 < FANOUT_DEPTHS):
                    result = _trace_branching(
                        child_origin, new_direction, result, T_MAX, depth + 1, record
                    )
                else:
                    result = _trace_chain(
                        child_origin, new_direction, result, T_MAX, depth + 1, record
                    )

                # A child that collected nothing missed the scene
                if result.count == count_before:
                    result = push_collision(result, background_color(), record)

    return result


@ti.func
def trace_path(origin: vec3, direction: vec3, record: ti.template()) -> PathState:
    """Trace a primary (depth 0) ray and everything it spawns.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized here).
        record: If True, every pushed color is copied to the recording buffer.

    Returns:
        The finished PathState of the ray.
    """
    return _trace_branching(
        origin, tm.normalize(direction), make_path_state(), T_MAX, 0, record
    )


@ti.func
def sample_color(origin: vec3, direction: vec3) -> vec3:
    """Trace one primary ray and resolve it to a color.

    Args:
        origin: Ray origin.
        direction: Ray direction (need not be normalized).

    Returns:
        The averaged, boosted color of the path on the 0-255 scale.
    """
    state = trace_path(origin, direction, False)
    return resolve_color(state, scene_brightness[None])


# =============================================================================
# Single-ray Probe
# =============================================================================

_probe_count = ti.field(dtype=ti.i32, shape=())
_probe_hit_light = ti.field(dtype=ti.i32, shape=())
_probe_distance = ti.field(dtype=ti.f32, shape=())
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_probe_kernel(
    origin: vec3, direction: vec3, max_distance: ti.f32, start_depth: ti.template()
):
    # Single-iteration outer loop keeps the scene scan serial
    for _ in range(1):
        unit_direction = tm.normalize(direction)
        state = make_path_state()
        _probe_distance[None] = T_MAX

        # A ray at MAX_DEPTH returns without tracing
        if ti.static(start_depth < MAX_DEPTH):
            nearest = intersect_scene(
                _bounded_ray(origin, unit_direction, start_depth, max_distance)
            )
            if nearest.hit == 1:
                _probe_distance[None] = nearest.t

            if ti.static(start_depth < FANOUT_DEPTHS):
                state = _trace_branching(
                    origin, unit_direction, state, max_distance, start_depth, True
                )
            else:
                state = _trace_chain(
                    origin, unit_direction, state, max_distance, start_depth, True
                )

        _probe_count[None] = state.count
        _probe_hit_light[None] = state.hit_light
        _probe_color[None] = resolve_color(state, scene_brightness[None])


def trace_probe(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
    max_distance: float = T_MAX,
) -> dict:
    """Trace one ray against the uploaded scene and record its path.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        depth: Depth the ray starts at. Fan-out follows secondary_ray_count
            from there; at MAX_DEPTH or deeper nothing is traced.
        max_distance: Only hits of the first ray closer than this are
            accepted (clamped to T_MAX).

    Returns:
        Dictionary with 'collisions' (list of RGB tuples in push order),
        'hit_light_source' (bool), 'distance' (nearest hit distance, or
        T_MAX on a miss) and 'color' (the resolved color).

    Raises:
        ValueError: If depth is negative.
    """
    if depth < 0:
        raise ValueError(f"Ray depth must be non-negative, got {depth}")

    # Every depth at or past the limit shares one kernel instantiation
    start_depth = min(int(depth), MAX_DEPTH)
    _trace_probe_kernel(
        vec3(*origin), vec3(*direction), min(float(max_distance), T_MAX), start_depth
    )

    count = int(_probe_count[None])
    recorded = _recorded_colors.to_numpy()[: min(count, MAX_RECORDED_COLLISIONS)]
    color = _probe_color[None]

    return {
        "collisions": [(float(c[0]), float(c[1]), float(c[2])) for c in recorded],
        "hit_light_source": bool(_probe_hit_light[None]),
        "distance": float(_probe_distance[None]),
        "color": (float(color[0]), float(color[1]), float(color[2])),
    }
