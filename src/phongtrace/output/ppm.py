"""Image encoding for rendered output.

Rendered pixels are sample averages in linear color. Encoding applies a
square-root gamma, clamps each channel to [0, 0.999] and scales by 256, so
every channel lands in [0, 255].

Supported formats:
    - Plain-text PPM (P3): header ``P3``, ``<width> <height>``, ``255``,
      then one ``R G B`` line per pixel from the top row to the bottom row
    - PNG (8-bit via Pillow)

Example:
    >>> from phongtrace.output.ppm import write_ppm
    >>> import sys
    >>> write_ppm(renderer.get_image_numpy(), sys.stdout)
"""

from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest channel value before scaling by 256
CLAMP_MAX = 0.999

MAX_COLOR_VALUE = 255


def format_color(
    color_sum: tuple[float, float, float], samples_per_pixel: int
) -> tuple[int, int, int]:
    """Encode one pixel from the sum of its samples.

    Args:
        color_sum: Sum of the sample colors.
        samples_per_pixel: Number of samples summed, at least 1.

    Returns:
        The (R, G, B) integers in [0, 255].
    """
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be at least 1")

    scale = 1.0 / samples_per_pixel
    encoded = []
    for channel in color_sum:
        value = np.sqrt(max(scale * channel, 0.0))
        encoded.append(int(256 * min(max(value, 0.0), CLAMP_MAX)))
    return (encoded[0], encoded[1], encoded[2])


def encode_pixels(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Encode a sample-averaged linear image to 8-bit channels.

    Args:
        image: Array of shape (H, W, 3) of averaged linear colors.

    Returns:
        Array of shape (H, W, 3) with dtype uint8.
    """
    linear = np.nan_to_num(np.asarray(image, dtype=np.float64), nan=0.0, posinf=0.0, neginf=0.0)
    gamma_corrected = np.sqrt(np.clip(linear, 0.0, None))
    clamped = np.clip(gamma_corrected, 0.0, CLAMP_MAX)
    return (256.0 * clamped).astype(np.uint8)


def format_ppm(image: npt.NDArray[np.floating]) -> str:
    """Format a sample-averaged image as a P3 document.

    Args:
        image: Array of shape (H, W, 3), first row at the top.

    Returns:
        The complete P3 text, ending with a newline.
    """
    height, width = image.shape[:2]
    pixels = encode_pixels(image).reshape(-1, 3)

    lines = ["P3", f"{width} {height}", str(MAX_COLOR_VALUE)]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.tolist())
    return "\n".join(lines) + "\n"


def write_ppm(image: npt.NDArray[np.floating], stream: TextIO) -> None:
    """Write a sample-averaged image to a text stream as P3."""
    stream.write(format_ppm(image))


def save_ppm(image: npt.NDArray[np.floating], filepath: str) -> None:
    """Save a sample-averaged image as a P3 file."""
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(image, stream)


def save_png(image: npt.NDArray[np.floating], filepath: str) -> None:
    """Save a sample-averaged image as an 8-bit PNG.

    Uses the same encoding as the PPM output.
    """
    pil_image = PILImage.fromarray(encode_pixels(image))
    pil_image.save(filepath)


def read_ppm(text: str) -> npt.NDArray[np.uint8]:
    """Parse a P3 document into an array of shape (H, W, 3).

    Raises:
        ValueError: If the document is not a well-formed P3 image.
    """
    tokens = text.split()
    if len(tokens) < 4 or tokens[0] != "P3":
        raise ValueError("Not a P3 document")

    width, height, max_value = int(tokens[1]), int(tokens[2]), int(tokens[3])
    if max_value != MAX_COLOR_VALUE:
        raise ValueError(f"Unsupported max color value: {max_value}")

    values = tokens[4:]
    if len(values) != width * height * 3:
        raise ValueError(f"Expected {width * height * 3} channel values, got {len(values)}")

    return np.array(values, dtype=np.int64).astype(np.uint8).reshape(height, width, 3)
