"""Material models.

Components:
    texture: Host-side texture variants (Light, Diffusive, Glossy, Reflective)
    scatter: Continuation directions per texture kind (Taichi functions)
"""

from .scatter import diffusive_direction, glossy_direction, reflective_direction, scatter
from .texture import (
    Diffusive,
    Glossy,
    Light,
    Reflective,
    Texture,
    TextureKind,
    texture_from_dict,
)

__all__ = [
    "Texture",
    "TextureKind",
    "Light",
    "Diffusive",
    "Glossy",
    "Reflective",
    "texture_from_dict",
    "scatter",
    "diffusive_direction",
    "glossy_direction",
    "reflective_direction",
]
