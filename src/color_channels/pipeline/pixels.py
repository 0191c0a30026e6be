"""
Per-row pixel pipeline.

Applies a color model and the channel codec to every pixel of an image.
Rows are independent: each task reads and writes only its own row of
every buffer, so the only synchronization is the join at the end.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

import numpy as np
from numpy.typing import NDArray

from color_channels.color.codec import UNIT, decode, encode
from color_channels.color.conversions import WhitePoint
from color_channels.color.models import ColorModel
from color_channels.core.data_types import ChannelBuffer, ImageBuffer, check_bounds
from color_channels.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


def for_each_row(height: int, process_row: Callable[[int], None], workers: int | None = None) -> None:
    """
    Run process_row(y) for every row on a short-lived thread pool.

    Returns once every row has finished; the first exception raised by
    a row is re-raised here.
    """
    if height == 0:
        return
    with ThreadPoolExecutor(max_workers=workers) as pool:
        # Consuming the iterator joins every task and surfaces errors
        for _ in pool.map(process_row, range(height)):
            pass


def color_row(image: ImageBuffer, y: int) -> NDArray[np.float64]:
    """
    Color Values for one row of a straight-alpha image, shape (3, width).

    Fully transparent pixels have no defined color and read as black.
    """
    row = image.data[y]
    rgb = row[:, :3].T.astype(np.float64) / image.max_value
    return np.where(row[:, 3] == 0, 0.0, rgb)


def split_pixels(
    image: ImageBuffer,
    model: ColorModel,
    white_point: WhitePoint | None = None,
    bit_depth: int = 16,
    workers: int | None = None,
) -> list[ChannelBuffer]:
    """
    Decompose an image into one grayscale buffer per model channel.

    Args:
        image: Source image
        model: Color model whose forward conversion is applied
        white_point: Reference white (ignored by models that take none)
        bit_depth: Depth of the produced buffers
        workers: Thread count (None lets the pool decide)

    Returns:
        Buffers in the model's channel order, named after the channels
    """
    straight = image.unpremultiplied()
    height, width = straight.bounds
    outputs = [
        ChannelBuffer.allocate(name, height, width, bit_depth)
        for name in model.channel_names
    ]

    def split_row(y: int) -> None:
        vector = model.forward(color_row(straight, y), white_point)
        for buf, channel_range, values in zip(outputs, model.ranges, vector):
            buf.data[y] = encode(values, channel_range, bit_depth)

    logger.debug("Splitting %dx%d image into %s", width, height, model.name)
    for_each_row(height, split_row, workers)
    return outputs


def merge_pixels(
    channels: Sequence[ChannelBuffer],
    model: ColorModel,
    white_point: WhitePoint | None = None,
    bit_depth: int = 16,
    workers: int | None = None,
) -> ImageBuffer:
    """
    Recompose model channels into one opaque color image.

    Each buffer is decoded at its own bit depth, so 8- and 16-bit
    channel images can be mixed.

    Args:
        channels: Exactly one buffer per model channel, identical bounds
        model: Color model whose inverse conversion is applied
        white_point: Reference white (ignored by models that take none)
        bit_depth: Depth of the produced image
        workers: Thread count (None lets the pool decide)

    Raises:
        ConfigurationError: If the buffer count does not match the model
        GeometryError: If the buffers' bounds differ
    """
    if len(channels) != model.channel_count:
        raise ConfigurationError(
            f"{model.name} needs {model.channel_count} channels, got {len(channels)}"
        )
    height, width = check_bounds(channels)
    merged = ImageBuffer.opaque(height, width, bit_depth)

    def merge_row(y: int) -> None:
        vector = np.stack([
            decode(buf.data[y], channel_range, buf.bit_depth)
            for buf, channel_range in zip(channels, model.ranges)
        ], axis=0)
        rgb = model.inverse(vector, white_point)
        merged.data[y, :, :3] = encode(rgb, UNIT, bit_depth).T

    logger.debug("Merging %d %s channels of %dx%d", len(channels), model.name, width, height)
    for_each_row(height, merge_row, workers)
    return merged
