"""Color presets and gamma correction.

Colors are linear RGB triples on the 0-255 scale, so ``WHITE`` is
``(255.0, 255.0, 255.0)``. They stay floating point through the whole render
and are only quantized to integers when an image is written.

Example:
    >>> from src.rt.core.color import PRESETS, correct_gamma, scale
    >>> correct_gamma(PRESETS["white"], 2.2)
    (255.0, 255.0, 255.0)
    >>> scale(PRESETS["white"], 0.5)
    (127.5, 127.5, 127.5)
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

# Host-side color type: (r, g, b) on the 0-255 scale
RGB = tuple[float, float, float]

# Maximum channel value
MAX_CHANNEL = 255.0

# Default display gamma (sRGB approximation)
DEFAULT_GAMMA = 2.2

# Boost applied to paths that reached a light; unlit paths get
# LIGHT_BOOST * brightness
LIGHT_BOOST = 2.0

BLACK: RGB = (0.0, 0.0, 0.0)
WHITE: RGB = (255.0, 255.0, 255.0)
RED: RGB = (255.0, 0.0, 0.0)
GREEN: RGB = (0.0, 255.0, 0.0)
BLUE: RGB = (0.0, 0.0, 255.0)
LIGHT_BLUE: RGB = (135.0, 206.0, 250.0)
INDIGO: RGB = (75.0, 0.0, 130.0)
YELLOW: RGB = (255.0, 255.0, 0.0)
LIGHT_YELLOW: RGB = (255.0, 255.0, 224.0)
GREY: RGB = (169.0, 169.0, 169.0)
PINK: RGB = (255.0, 20.0, 147.0)
CYAN: RGB = (0.0, 255.0, 255.0)
ORANGE: RGB = (255.0, 165.0, 0.0)
BROWN: RGB = (165.0, 42.0, 42.0)
PURPLE: RGB = (128.0, 0.0, 128.0)
LAVENDER: RGB = (230.0, 230.0, 250.0)
MAGENTA: RGB = (255.0, 0.0, 255.0)
VIOLET: RGB = (238.0, 130.0, 238.0)
MAROON: RGB = (128.0, 0.0, 0.0)
OLIVE: RGB = (128.0, 128.0, 0.0)
NAVY: RGB = (0.0, 0.0, 128.0)
TEAL: RGB = (0.0, 128.0, 128.0)
PEACH: RGB = (255.0, 218.0, 185.0)
GOLD: RGB = (255.0, 215.0, 0.0)
SILVER: RGB = (192.0, 192.0, 192.0)
BEIGE: RGB = (245.0, 245.0, 220.0)
TURQUOISE: RGB = (64.0, 224.0, 208.0)
CORAL: RGB = (255.0, 127.0, 80.0)
MINT_GREEN: RGB = (152.0, 251.0, 152.0)
SKY_BLUE: RGB = (135.0, 206.0, 235.0)

# Name lookup for scene files
PRESETS: dict[str, RGB] = {
    "black": BLACK,
    "white": WHITE,
    "red": RED,
    "green": GREEN,
    "blue": BLUE,
    "light_blue": LIGHT_BLUE,
    "indigo": INDIGO,
    "yellow": YELLOW,
    "light_yellow": LIGHT_YELLOW,
    "grey": GREY,
    "pink": PINK,
    "cyan": CYAN,
    "orange": ORANGE,
    "brown": BROWN,
    "purple": PURPLE,
    "lavender": LAVENDER,
    "magenta": MAGENTA,
    "violet": VIOLET,
    "maroon": MAROON,
    "olive": OLIVE,
    "navy": NAVY,
    "teal": TEAL,
    "peach": PEACH,
    "gold": GOLD,
    "silver": SILVER,
    "beige": BEIGE,
    "turquoise": TURQUOISE,
    "coral": CORAL,
    "mint_green": MINT_GREEN,
    "sky_blue": SKY_BLUE,
}


def to_rgb(value: Sequence[float] | str) -> RGB:
    """Convert a preset name or a 3-sequence into an RGB tuple.

    Args:
        value: A preset name from PRESETS, or any sequence of three numbers.

    Returns:
        The color as a tuple of floats.

    Raises:
        ValueError: If the name is unknown or the sequence is not length 3.
    """
    if isinstance(value, str):
        key = value.lower()
        if key not in PRESETS:
            raise ValueError(f"Unknown color preset: {value}")
        return PRESETS[key]

    if len(value) != 3:
        raise ValueError(f"Color must have 3 components, got {len(value)}")
    return (float(value[0]), float(value[1]), float(value[2]))


def scale(color: RGB, factor: float) -> RGB:
    """Multiply every channel of a color by a scalar."""
    return (color[0] * factor, color[1] * factor, color[2] * factor)


def random_color(rng: np.random.Generator | None = None) -> RGB:
    """Draw a uniformly random color.

    Args:
        rng: Optional NumPy random generator (a fresh one is used if omitted).

    Returns:
        A color with each channel in [0, 255).
    """
    if rng is None:
        rng = np.random.default_rng()
    r, g, b = rng.uniform(0.0, MAX_CHANNEL, size=3)
    return (float(r), float(g), float(b))


def correct_gamma(color: RGB, gamma: float = DEFAULT_GAMMA) -> RGB:
    """Apply gamma correction to a single 0-255 color.

    Each channel is normalized, raised to 1/gamma and scaled back:
        out = (c / 255) ** (1 / gamma) * 255

    Args:
        color: Linear color on the 0-255 scale.
        gamma: Display gamma (default 2.2).

    Returns:
        The gamma corrected color on the 0-255 scale.
    """
    gamma_inv = 1.0 / gamma
    return (
        (max(color[0], 0.0) / MAX_CHANNEL) ** gamma_inv * MAX_CHANNEL,
        (max(color[1], 0.0) / MAX_CHANNEL) ** gamma_inv * MAX_CHANNEL,
        (max(color[2], 0.0) / MAX_CHANNEL) ** gamma_inv * MAX_CHANNEL,
    )


def apply_gamma(
    pixels: npt.NDArray[np.floating],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction to an array of 0-255 colors.

    Values are clamped to [0, 255] first so that over-bright pixels saturate
    instead of producing values above the channel maximum.

    Args:
        pixels: Array of linear colors with a trailing channel axis of size 3.
        gamma: Display gamma (default 2.2).

    Returns:
        Gamma corrected array of the same shape on the 0-255 scale.
    """
    normalized = np.clip(np.asarray(pixels, dtype=np.float64), 0.0, MAX_CHANNEL) / MAX_CHANNEL
    if gamma == 1.0:
        return normalized * MAX_CHANNEL
    return np.power(normalized, 1.0 / gamma) * MAX_CHANNEL


def quantize(pixels: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert 0-255 float colors to 8-bit integers (truncating, like a cast)."""
    return np.clip(pixels, 0.0, MAX_CHANNEL).astype(np.uint8)
