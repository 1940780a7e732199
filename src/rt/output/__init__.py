"""Image output.

Components:
    ppm: Plain-text PPM (P3) reading and writing
    export: Gamma correction and PPM/PNG export of rendered pixels
"""

from .export import image_to_uint8, save_png_from_array, save_ppm_from_array
from .ppm import read_ppm, read_ppm_header, write_ppm

__all__ = [
    "write_ppm",
    "read_ppm",
    "read_ppm_header",
    "image_to_uint8",
    "save_ppm_from_array",
    "save_png_from_array",
]
