"""Scattering directions for each texture kind.

Dispatch happens once per intersection inside the tracer:

    Diffusive   direction sampled over the hemisphere around the normal
                (cosine-biased, built from an orthonormal basis of the normal)
    Glossy      dot(reflect, diffuse) * diffuse, a stylized rough reflection
    Reflective  perfect mirror reflection d - 2(d.n)n
    Light       terminal, no continuation

These are deliberately not an energy-conserving BRDF: the renderer is a
stylized approximation and only needs plausible continuation directions.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.rt.materials.scatter import scatter
    >>> # Within a Taichi kernel:
    >>> # new_direction = scatter(texture_kind, incident, normal)
"""

import taichi as ti
import taichi.math as tm

from src.rt.core.ray import (
    build_onb_from_normal,
    local_to_world,
    near_zero,
    random_cosine_direction,
    reflect,
)
from src.rt.materials.texture import TextureKind

# Type alias for 3D vectors
vec3 = tm.vec3

_DIFFUSIVE = int(TextureKind.DIFFUSIVE)
_GLOSSY = int(TextureKind.GLOSSY)


@ti.func
def diffusive_direction(normal: vec3) -> vec3:
    """Sample a cosine-biased direction in the hemisphere around the normal.

    Args:
        normal: The surface normal at the hit point.

    Returns:
        A unit direction with non-negative dot product with the normal.
    """
    u, v, w = build_onb_from_normal(normal)
    direction = local_to_world(random_cosine_direction(), u, v, w)

    # Degenerate samples fall back to the normal itself
    if near_zero(direction):
        direction = w

    return tm.normalize(direction)


@ti.func
def glossy_direction(incident: vec3, normal: vec3) -> vec3:
    """Blend a mirror reflection with a diffuse sample.

    The continuation is dot(reflect, diffuse) * diffuse, normalized. Samples
    close to the mirror direction keep their orientation; the rest are
    weighted down (and flipped when the dot product is negative).

    Args:
        incident: The incoming ray direction (unit length).
        normal: The surface normal at the hit point.

    Returns:
        The new unit direction.
    """
    mirror = reflect(incident, normal)
    diffuse = diffusive_direction(normal)
    blended = tm.dot(mirror, diffuse) * diffuse

    result = mirror
    if not near_zero(blended):
        result = tm.normalize(blended)
    return result


@ti.func
def reflective_direction(incident: vec3, normal: vec3) -> vec3:
    """Perfect mirror reflection of the incoming direction."""
    return tm.normalize(reflect(incident, normal))


@ti.func
def scatter(texture_kind: ti.i32, incident: vec3, normal: vec3) -> vec3:
    """Dispatch to the continuation direction of a texture kind.

    Args:
        texture_kind: A TextureKind value.
        incident: The incoming ray direction (unit length).
        normal: The surface normal at the hit point.

    Returns:
        The continuation direction. For Light (terminal) the mirror
        direction is returned but never used by the tracer.
    """
    direction = reflective_direction(incident, normal)

    if texture_kind == _DIFFUSIVE:
        direction = diffusive_direction(normal)
    elif texture_kind == _GLOSSY:
        direction = glossy_direction(incident, normal)

    return direction
