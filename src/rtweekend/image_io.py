"""Gamma encoding and image file output."""

import sys
from pathlib import Path
from typing import TextIO

import numpy as np
import torch as t
from jaxtyping import Float, UInt8, jaxtyped
from PIL import Image
from typeguard import typechecked as typechecker

from rtweekend.interval import Interval

# Channels are clamped just below 1 so that 256 * x truncates to at most 255
INTENSITY = Interval(0.0, 0.999)


class ImageWriteError(OSError):
    """Raised when a rendered image cannot be written to its destination."""


@jaxtyped(typechecker=typechecker)
def linear_to_gamma(linear: Float[t.Tensor, "*batch"]) -> Float[t.Tensor, "*batch"]:
    # Gamma 2
    return t.where(linear > 0, t.sqrt(linear.clamp(min=0.0)), t.zeros_like(linear))


@jaxtyped(typechecker=typechecker)
def quantize(colors: Float[t.Tensor, "*batch 3"]) -> UInt8[t.Tensor, "*batch 3"]:
    """Maps linear colors to 8-bit channels: gamma, clamp to [0, 0.999], scale by 256, truncate."""
    encoded = INTENSITY.clamp(linear_to_gamma(colors))
    return t.floor(256.0 * encoded).to(t.uint8)


@jaxtyped(typechecker=typechecker)
def format_ppm(pixels: UInt8[t.Tensor, "h w 3"]) -> str:
    """Encodes pixels as plain-text PPM (P3), one "R G B" line per pixel, top row first."""
    height, width, _ = pixels.shape
    lines = ["P3", f"{width} {height}", "255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(pixels: UInt8[t.Tensor, "h w 3"], stream: TextIO) -> None:
    stream.write(format_ppm(pixels))


@jaxtyped(typechecker=typechecker)
def tensor_to_image(pixels: UInt8[t.Tensor, "h w 3"]) -> Image.Image:
    array = pixels.cpu().numpy().astype(np.uint8)
    return Image.fromarray(array)


def save_image(pixels: UInt8[t.Tensor, "h w 3"], path: str | Path) -> None:
    """Writes pixels to `path`.

    "-" and ".ppm" files get plain-text PPM; any other suffix is handed to
    Pillow. Failures surface as a single ImageWriteError naming the destination.
    """
    if str(path) == "-":
        write_ppm(pixels, sys.stdout)
        sys.stdout.flush()
        return

    path = Path(path)
    try:
        if path.suffix.lower() == ".ppm":
            with path.open("w", encoding="ascii") as f:
                write_ppm(pixels, f)
        else:
            tensor_to_image(pixels).save(path)
    except (OSError, ValueError) as e:
        raise ImageWriteError(f"Could not write image to {path}: {e}") from e
