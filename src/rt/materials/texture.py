"""Surface textures (materials) carried by every primitive.

A texture is one of a closed set of variants:

    Light(color)      emits; terminates the path
    Diffusive(color)  scatters over the hemisphere around the normal
    Glossy(color)     blends a mirror reflection with a diffuse sample
    Reflective        perfect mirror, contributes no color of its own

On the host side each variant is a small frozen dataclass. On the kernel side
a texture is a ``TextureKind`` integer plus a color, which is how the scene
storage fields hold it.

Example:
    >>> from src.rt.materials.texture import Diffusive, Light, texture_from_dict
    >>> Light((255.0, 255.0, 224.0)).is_light
    True
    >>> texture_from_dict({"type": "diffusive", "color": "red"})
    Diffusive(color=(255.0, 0.0, 0.0))
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar

from src.rt.core.color import BLACK, RGB, to_rgb


class TextureKind(IntEnum):
    """Enumeration of texture variants, used for dispatch inside kernels."""

    LIGHT = 0
    DIFFUSIVE = 1
    GLOSSY = 2
    REFLECTIVE = 3


@dataclass(frozen=True)
class Texture:
    """Base class of the texture variants.

    Subclasses set ``kind``; colored variants also carry a ``color``.
    """

    kind: ClassVar[TextureKind]

    @property
    def is_light(self) -> bool:
        """Whether hitting this texture terminates the path as a light."""
        return self.kind == TextureKind.LIGHT

    @property
    def rgb(self) -> RGB:
        """The color pushed on a hit (black for variants without color)."""
        return getattr(self, "color", BLACK)

    def to_dict(self) -> dict[str, Any]:
        """Export the texture to a dictionary (for JSON serialization)."""
        data: dict[str, Any] = {"type": self.kind.name.lower()}
        if hasattr(self, "color"):
            data["color"] = list(self.rgb)
        return data


@dataclass(frozen=True)
class Light(Texture):
    """Emitting surface. A ray that hits it stops."""

    kind: ClassVar[TextureKind] = TextureKind.LIGHT
    color: RGB = (255.0, 255.0, 255.0)


@dataclass(frozen=True)
class Diffusive(Texture):
    """Matte surface scattering over the hemisphere."""

    kind: ClassVar[TextureKind] = TextureKind.DIFFUSIVE
    color: RGB = (169.0, 169.0, 169.0)


@dataclass(frozen=True)
class Glossy(Texture):
    """Rough reflective surface (mirror blended with a diffuse sample)."""

    kind: ClassVar[TextureKind] = TextureKind.GLOSSY
    color: RGB = (192.0, 192.0, 192.0)


@dataclass(frozen=True)
class Reflective(Texture):
    """Perfect mirror."""

    kind: ClassVar[TextureKind] = TextureKind.REFLECTIVE


_VARIANTS: dict[str, type[Texture]] = {
    "light": Light,
    "diffusive": Diffusive,
    "glossy": Glossy,
    "reflective": Reflective,
}


def texture_from_dict(data: dict[str, Any]) -> Texture:
    """Load a texture from a dictionary.

    Args:
        data: Dictionary with a 'type' key and, for colored variants, an
            optional 'color' given as [r, g, b] or a preset name.

    Returns:
        The texture variant.

    Raises:
        ValueError: If the type or color is invalid.
    """
    texture_type = str(data.get("type", "")).lower()
    if texture_type not in _VARIANTS:
        raise ValueError(f"Unknown texture type: {texture_type}")

    cls = _VARIANTS[texture_type]
    if cls is Reflective:
        return Reflective()
    if "color" in data:
        return cls(color=to_rgb(data["color"]))
    return cls()
