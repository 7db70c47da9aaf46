"""Render one of the built-in scenes to an image file.

Usage:
    rtweekend [options]

Example:
    rtweekend --scene final --width 400 --samples 20 --output cover.png
"""

import argparse
import logging
import sys
import time

from rtweekend.camera import Camera
from rtweekend.config import device
from rtweekend.image_io import ImageWriteError, save_image
from rtweekend.scenes import SCENES
from rtweekend.vec3 import vec3

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Camera options left unset fall back to the defaults of the chosen scene.
    """
    parser = argparse.ArgumentParser(
        description="Render a scene of spheres with a Monte-Carlo ray tracer.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--scene", choices=sorted(SCENES), default="two-spheres", help="Scene to render")
    parser.add_argument("--width", type=int, help="Image width in pixels")
    parser.add_argument("--aspect-ratio", type=float, help="Image width over height")
    parser.add_argument("--samples", type=int, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, help="Maximum number of bounces per ray")
    parser.add_argument("--vfov", type=float, help="Vertical field of view in degrees")
    parser.add_argument("--look-from", type=float, nargs=3, metavar=("X", "Y", "Z"), help="Lens position")
    parser.add_argument("--look-at", type=float, nargs=3, metavar=("X", "Y", "Z"), help="Point the camera looks at")
    parser.add_argument("--vup", type=float, nargs=3, metavar=("X", "Y", "Z"), help="Camera-relative up direction")
    parser.add_argument("--defocus-angle", type=float, help="Aperture cone angle in degrees; 0 disables blur")
    parser.add_argument("--focus-dist", type=float, help="Distance from the lens to the plane of perfect focus")
    parser.add_argument("--seed", type=int, help="Seed for the scene layout and the sampling stream")
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output path; .ppm and '-' (stdout) write plain-text PPM, other suffixes go through Pillow",
    )
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    args = parser.parse_args(argv)

    for name in ("width", "samples", "max_depth"):
        value = getattr(args, name)
        if value is not None and value < 1:
            parser.error(f"--{name.replace('_', '-')} must be at least 1")
    for name in ("aspect_ratio", "focus_dist"):
        value = getattr(args, name)
        if value is not None and value <= 0:
            parser.error(f"--{name.replace('_', '-')} must be positive")
    return args


def build_camera(args: argparse.Namespace, defaults: dict) -> Camera:
    settings = dict(defaults)
    overrides = {
        "image_width": args.width,
        "aspect_ratio": args.aspect_ratio,
        "samples_per_pixel": args.samples,
        "max_depth": args.max_depth,
        "vfov": args.vfov,
        "defocus_angle": args.defocus_angle,
        "focus_dist": args.focus_dist,
        "look_from": vec3(*args.look_from) if args.look_from else None,
        "look_at": vec3(*args.look_at) if args.look_at else None,
        "vup": vec3(*args.vup) if args.vup else None,
    }
    settings.update({key: value for key, value in overrides.items() if value is not None})
    return Camera(**settings, seed=args.seed)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    logger.info("Using device: %s", device)
    scene = SCENES[args.scene](args.seed)
    camera = build_camera(args, scene.camera)
    logger.info(
        "Rendering %s at %dx%d, %d samples per pixel, max depth %d",
        args.scene,
        camera.image_width,
        camera.image_height,
        camera.samples_per_pixel,
        camera.max_depth,
    )

    start_time = time.time()
    pixels = camera.render(scene.world, progress=args.progress)

    try:
        save_image(pixels, args.output)
    except ImageWriteError as e:
        logger.error("Error: %s", e)
        return 1

    logger.info("Saved to %s in %.2fs", args.output, time.time() - start_time)
    return 0


if __name__ == "__main__":
    sys.exit(main())
