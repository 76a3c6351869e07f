"""Scanline-ordered renderer with progress reporting.

This module wraps the core integrator with a small stateful interface:
- Rows are rendered from the top of the image to the bottom, each row a
  single parallel kernel launch over its columns
- Progress is logged as a countdown of remaining scanlines
- Callbacks or a generator expose progress to callers
- Samples accumulate, so rendering again refines the same image

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=0)
    >>> from phongtrace.core.progressive import ProgressiveRenderer
    >>> from phongtrace.scene.presets import create_hollow_sphere_scene
    >>> from phongtrace.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_hollow_sphere_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> renderer.save_image("hollow.ppm")
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from phongtrace.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_averaged_image_numpy,
    get_total_samples,
    render_scanline,
    setup_render_target,
)
from phongtrace.output.ppm import encode_pixels, save_png, save_ppm

logger = logging.getLogger(__name__)

# Callback receives (completed_scanlines, total_scanlines)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Renders the active scene into the shared accumulation buffers.

    The renderer keeps the image size and depth budget; the pixel data
    itself lives in the integrator's Taichi fields.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Recursion depth budget per sample.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If dimensions are out of range or max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth = {max_depth} must be non-negative")
        self._width = width
        self._height = height
        self.max_depth = max_depth
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear accumulated samples without changing the image size."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset the accumulator."""
        self._width = width
        self._height = height
        setup_render_target(width, height)

    def render_progressive(self, num_samples: int = 1) -> Generator[tuple[int, int], None, None]:
        """Render every scanline, yielding after each one.

        Args:
            num_samples: Samples per pixel to add.

        Yields:
            Tuple of (completed_scanlines, total_scanlines).
        """
        if num_samples <= 0:
            return

        for row in range(self._height - 1, -1, -1):
            logger.info("Scanlines remaining: %d", row + 1)
            render_scanline(row, num_samples, self.max_depth)
            yield (self._height - row, self._height)

        logger.info("Done.")

    def render(self, num_samples: int = 1, callback: ProgressCallback | None = None) -> None:
        """Render every scanline with ``num_samples`` samples per pixel.

        Args:
            num_samples: Samples per pixel to add.
            callback: Optional function called after each scanline with
                (completed_scanlines, total_scanlines).
        """
        for completed, total in self.render_progressive(num_samples):
            if callback is not None:
                callback(completed, total)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the sample-averaged linear image, shape (height, width, 3)."""
        return get_averaged_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image, shape (height, width, 3)."""
        return encode_pixels(self.get_image_numpy())

    def save_image(self, filepath: str) -> None:
        """Save the image as PNG when the path ends in ``.png``, PPM otherwise."""
        if filepath.lower().endswith(".png"):
            save_png(self.get_image_numpy(), filepath)
        else:
            save_ppm(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
