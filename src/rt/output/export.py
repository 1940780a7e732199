"""Image export utilities for rendered images.

Rendered pixels are linear colors on the 0-255 scale. Export applies gamma
correction, clamps to [0, 255] and quantizes to 8 bits.

Supported formats:
    - PPM (P3, ASCII)
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.rt.output.export import save_png_from_array
    >>> import numpy as np
    >>> save_png_from_array(np.full((4 * 4, 3), 128.0), 4, 4, "grey.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.rt.core.color import DEFAULT_GAMMA, apply_gamma, quantize
from src.rt.output.ppm import write_ppm


def image_to_uint8(
    pixels: npt.NDArray[np.floating],
    width: int,
    height: int,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.uint8]:
    """Convert linear 0-255 pixels to a gamma corrected 8-bit image.

    Args:
        pixels: Array of shape (width * height, 3), row-major.
        width: Image width in pixels.
        height: Image height in pixels.
        gamma: Gamma correction value (default 2.2).

    Returns:
        8-bit image array of shape (height, width, 3).
    """
    image = np.asarray(pixels, dtype=np.float64).reshape(height, width, 3)
    return quantize(apply_gamma(image, gamma))


def save_ppm_from_array(
    pixels: npt.NDArray[np.floating],
    width: int,
    height: int,
    filepath: str | Path,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save linear 0-255 pixels as a P3 PPM file.

    Args:
        pixels: Array of shape (width * height, 3), row-major.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path.
        gamma: Gamma correction value (default 2.2).
    """
    write_ppm(filepath, image_to_uint8(pixels, width, height, gamma=gamma), width, height)


def save_png_from_array(
    pixels: npt.NDArray[np.floating],
    width: int,
    height: int,
    filepath: str | Path,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save linear 0-255 pixels as an 8-bit PNG file.

    Args:
        pixels: Array of shape (width * height, 3), row-major.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 2.2).
    """
    image_uint8 = image_to_uint8(pixels, width, height, gamma=gamma)

    # Save using Pillow (uint8 HxWx3 is read as RGB)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)
