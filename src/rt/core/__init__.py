"""Core rendering module.

Components:
    ray: Kernel-side Ray dataclass and vector/sampling utilities
    color: Color presets, gamma correction and quantization
    integrator: Recursive path tracer with per-depth fan-out
    tracer: Host-side ray exposing its collision list

The integrator and tracer are NOT imported here: they allocate Taichi fields
and must be imported after ti.init(). Import them directly from
src.rt.core.integrator and src.rt.core.tracer.
"""

from .color import (
    DEFAULT_GAMMA,
    LIGHT_BOOST,
    PRESETS,
    RGB,
    apply_gamma,
    correct_gamma,
    quantize,
    random_color,
    scale,
    to_rgb,
)
from .ray import (
    T_MAX,
    Color,
    Direction,
    Normal,
    Point,
    Ray,
    build_onb_from_normal,
    local_to_world,
    make_ray,
    near_zero,
    offset_ray_origin,
    random_cosine_direction,
    ray_at,
    reflect,
    vec3,
)

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "Point",
    "Direction",
    "Normal",
    "Color",
    "T_MAX",
    "reflect",
    "near_zero",
    "build_onb_from_normal",
    "random_cosine_direction",
    "local_to_world",
    "offset_ray_origin",
    "RGB",
    "PRESETS",
    "DEFAULT_GAMMA",
    "LIGHT_BOOST",
    "to_rgb",
    "scale",
    "random_color",
    "correct_gamma",
    "apply_gamma",
    "quantize",
]
