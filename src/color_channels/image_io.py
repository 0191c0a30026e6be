"""
Image file reading and PNG writing, backed by Pillow.

Anything Pillow can decode (PNG, JPEG, GIF, Netpbm, ...) may be split or
used as a channel image. Results are always written as PNG.

Pillow has no 16-bit RGB(A) mode: 16-bit color files are decoded at 8 bits
per sample, so splitting them drops their low bits. 16-bit grayscale files
keep full precision.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import numpy as np
from PIL import Image

from color_channels.core.data_types import ChannelBuffer, ImageBuffer

logger = logging.getLogger(__name__)

# Pillow modes holding one 16-bit (or wider) integer sample per pixel
WIDE_GRAY_MODES = {"I;16", "I;16L", "I;16B", "I;16N", "I"}

STDOUT_NAMES = {"", "-"}


def _wide_gray(img: Image.Image) -> np.ndarray:
    return np.clip(np.asarray(img, dtype=np.int64), 0, 65535).astype(np.uint16)


def read_image(path: str | Path) -> ImageBuffer:
    """
    Read a color image as RGBA samples.

    16-bit grayscale files keep their precision; everything else is
    decoded at 8 bits per sample.
    """
    with Image.open(path) as img:
        img.load()
        logger.debug("Read %s (%dx%d, mode %s)", path, img.width, img.height, img.mode)

        if img.mode in WIDE_GRAY_MODES:
            gray = _wide_gray(img)
            return ImageBuffer(data=np.stack([gray, gray, gray], axis=2), bit_depth=16)
        if img.mode == "RGBa":
            return ImageBuffer(data=np.asarray(img), bit_depth=8, premultiplied=True)
        return ImageBuffer(data=np.asarray(img.convert("RGBA")), bit_depth=8)


def read_channel(path: str | Path, name: str = "") -> ChannelBuffer:
    """
    Read a grayscale channel image.

    Color inputs are reduced to luminance, as any grayscale conversion
    would.
    """
    with Image.open(path) as img:
        img.load()
        logger.debug("Read channel %s (%dx%d, mode %s)", path, img.width, img.height, img.mode)

        if img.mode in WIDE_GRAY_MODES:
            return ChannelBuffer(data=_wide_gray(img), bit_depth=16, name=name)
        return ChannelBuffer(data=np.asarray(img.convert("L")), bit_depth=8, name=name)


def to_pil(buffer: ImageBuffer | ChannelBuffer) -> Image.Image:
    """
    Convert a buffer to a Pillow image suitable for PNG output.

    Pillow cannot store 16-bit RGBA, so color images are narrowed to
    8 bits per sample; grayscale channels keep their depth.
    """
    if isinstance(buffer, ChannelBuffer):
        if buffer.bit_depth == 16:
            return Image.fromarray(buffer.data.astype(np.uint16))
        return Image.fromarray(buffer.data)

    straight = buffer.unpremultiplied().to_bit_depth(8)
    return Image.fromarray(straight.data)


def write_png(path: str | Path, buffer: ImageBuffer | ChannelBuffer) -> None:
    """Write a buffer as PNG to a file, or to standard output for "" or "-"."""
    img = to_pil(buffer)
    if str(path) in STDOUT_NAMES:
        img.save(sys.stdout.buffer, format="PNG")
        sys.stdout.buffer.flush()
        logger.debug("Wrote PNG to standard output")
        return
    img.save(path, format="PNG")
    logger.debug("Wrote %s", path)
