"""Command-line entry point.

Usage:
    python -m phongtrace [options] > image.ppm

Options:
    --scene NAME        Preset scene: hollow or random (default: hollow)
    --config PATH       JSON render config; command-line options override it
    --width WIDTH       Image width in pixels
    --aspect-ratio R    Width divided by height
    --samples SAMPLES   Samples per pixel
    --max-depth DEPTH   Recursion depth budget
    --seed SEED         Random seed
    --arch ARCH         Taichi backend: cpu or gpu
    --output OUTPUT     Output path; ``-`` writes PPM to stdout (default: -)
    --quiet             Only log warnings and errors
    --verbose           Log debug messages

The image goes to stdout or the output file; progress goes to stderr.

Example:
    python -m phongtrace --scene random --width 300 --samples 20 --output cover.png
"""

import argparse
import logging
import sys
from typing import TextIO

from phongtrace.config import (
    ARCHES,
    SCENE_PRESETS,
    CameraConfig,
    RenderConfig,
    init_taichi,
    load_config,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="phongtrace",
        description="Render a sphere scene with Phong-lit ray tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", choices=SCENE_PRESETS, default=None, help="Preset scene")
    parser.add_argument("--config", type=str, default=None, help="JSON render config")
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--aspect-ratio", type=float, default=None, help="Width / height")
    parser.add_argument("--samples", type=int, default=None, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, default=None, help="Recursion depth budget")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--arch", choices=ARCHES, default=None, help="Taichi backend")
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help="Output path, .png for PNG, anything else for PPM; - for stdout (default: -)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    verbosity.add_argument("--verbose", action="store_true", help="Log debug messages")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> RenderConfig:
    """Merge the optional JSON config with command-line overrides.

    Raises:
        ValueError: If the resulting config is invalid.
    """
    config = load_config(args.config) if args.config else RenderConfig()

    overrides = {
        "scene": args.scene,
        "image_width": args.width,
        "aspect_ratio": args.aspect_ratio,
        "samples_per_pixel": args.samples,
        "max_depth": args.max_depth,
        "seed": args.seed,
        "arch": args.arch,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    # An explicit preset on the command line wins over an inline scene
    if args.scene is not None:
        config.scene_data = None

    config.validate()
    return config


def build_scene(config: RenderConfig):
    """Fill the scene storage and return the camera to render with.

    Taichi must already be initialized.
    """
    # Lazy imports so Taichi fields are declared after ti.init
    from phongtrace.camera.thin_lens import ThinLensCamera
    from phongtrace.scene.manager import SceneManager
    from phongtrace.scene.presets import PRESETS

    if config.scene_data is not None:
        scene = SceneManager()
        scene.from_dict(config.scene_data)
        camera = None
    else:
        scene, camera = PRESETS[config.scene](config.aspect_ratio, config.seed)

    if config.camera is not None or camera is None:
        cam = config.camera if config.camera is not None else CameraConfig()
        camera = ThinLensCamera(
            lookfrom=cam.lookfrom,
            lookat=cam.lookat,
            vup=cam.vup,
            vfov=cam.vfov,
            aspect_ratio=config.aspect_ratio,
            aperture=cam.aperture,
            focus_dist=cam.resolved_focus_dist(),
        )

    return scene, camera


def render(config: RenderConfig, output: str = "-", stream: TextIO | None = None) -> None:
    """Render the configured scene and write the image.

    Args:
        config: A validated render config.
        output: ``-`` for PPM on ``stream``, a ``.png`` path for PNG, or any
            other path for a PPM file.
        stream: Text stream for ``-`` output. Defaults to stdout.
    """
    from phongtrace.camera.thin_lens import setup_camera
    from phongtrace.core.progressive import ProgressiveRenderer
    from phongtrace.output.ppm import write_ppm

    _, camera = build_scene(config)
    setup_camera(camera)

    width, height = config.image_width, config.image_height
    logger.info(
        "Rendering %dx%d, %d samples per pixel, max depth %d",
        width,
        height,
        config.samples_per_pixel,
        config.max_depth,
    )

    renderer = ProgressiveRenderer(width, height, max_depth=config.max_depth)
    renderer.render(config.samples_per_pixel)

    if output == "-":
        write_ppm(renderer.get_image_numpy(), stream if stream is not None else sys.stdout)
    else:
        renderer.save_image(output)
        logger.info("Saved to: %s", output)


def configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG
    logging.basicConfig(stream=sys.stderr, level=level, format="%(message)s")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args)

    try:
        config = build_config(args)
        init_taichi(config)
        render(config, args.output)
        return 0
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
