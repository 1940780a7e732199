"""Plain-text PPM (P3) image files.

Layout:

    P3
    <width> <height>
    255
    r g b
    r g b
    ...

with width * height triplets in row-major order (top row first), each
channel an integer in [0, 255].

Example:
    >>> import numpy as np
    >>> from src.rt.output.ppm import read_ppm, write_ppm
    >>> write_ppm("tiny.ppm", np.zeros((2 * 3, 3), dtype=np.uint8), 2, 3)
    >>> read_ppm("tiny.ppm").shape
    (3, 2, 3)
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt

PPM_MAGIC = "P3"
PPM_MAX_VALUE = 255


def write_ppm(
    filepath: str | Path,
    pixels: npt.NDArray[np.integer],
    width: int,
    height: int,
) -> None:
    """Write 8-bit RGB pixels as an ASCII PPM file.

    Args:
        filepath: Output file path.
        pixels: Array of shape (width * height, 3) or (height, width, 3),
            row-major, values in [0, 255].
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the pixel count does not match width * height.
        OSError: If the file cannot be written.
    """
    flat = np.asarray(pixels).reshape(-1, 3)
    if flat.shape[0] != width * height:
        raise ValueError(
            f"Pixel count {flat.shape[0]} does not match {width}x{height} image"
        )

    lines = [PPM_MAGIC, f"{width} {height}", str(PPM_MAX_VALUE)]
    lines.extend(f"{int(r)} {int(g)} {int(b)}" for r, g, b in flat)

    with open(filepath, "w", encoding="ascii") as f:
        f.write("\n".join(lines))
        f.write("\n")


def read_ppm_header(filepath: str | Path) -> tuple[int, int, int]:
    """Read the (width, height, max_value) header of a P3 file.

    Raises:
        ValueError: If the file is not a P3 PPM.
    """
    with open(filepath, encoding="ascii") as f:
        tokens = f.read().split(maxsplit=4)

    if len(tokens) < 4 or tokens[0] != PPM_MAGIC:
        raise ValueError(f"Not a P3 PPM file: {filepath}")
    return int(tokens[1]), int(tokens[2]), int(tokens[3])


def read_ppm(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Read a P3 file into an array of shape (height, width, 3).

    Raises:
        ValueError: If the file is not a P3 PPM or is truncated.
    """
    with open(filepath, encoding="ascii") as f:
        tokens = f.read().split()

    if len(tokens) < 4 or tokens[0] != PPM_MAGIC:
        raise ValueError(f"Not a P3 PPM file: {filepath}")

    width, height = int(tokens[1]), int(tokens[2])
    values = np.array(tokens[4:], dtype=np.int64)
    if values.size != width * height * 3:
        raise ValueError(
            f"Expected {width * height} triplets, found {values.size / 3:g}"
        )
    return values.reshape(height, width, 3).astype(np.uint8)
