"""Output module for encoding and saving rendered images.

Components:
    ppm: Square-root gamma encoding, P3 text output and PNG export
"""

from .ppm import (
    encode_pixels,
    format_color,
    format_ppm,
    read_ppm,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    "encode_pixels",
    "format_color",
    "format_ppm",
    "read_ppm",
    "save_png",
    "save_ppm",
    "write_ppm",
]
