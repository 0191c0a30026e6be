"""
Split and merge orchestration.

split_image() and merge_channels() work on in-memory buffers.
split_files() and merge_files() add file handling on top; they validate
every argument before any pixel is read, and write nothing until the
complete result exists in memory.
"""

from __future__ import annotations

import logging
from typing import Sequence

from color_channels.color.conversions import D65
from color_channels.config import ColorSpaceSpec, ConversionConfig, Mode, Parameters
from color_channels.core.data_types import ChannelBuffer, ImageBuffer, check_bounds
from color_channels.core.errors import ConfigurationError
from color_channels.image_io import read_channel, read_image, write_png
from color_channels.pipeline.alpha import extract_alpha, inject_alpha
from color_channels.pipeline.pixels import merge_pixels, split_pixels

logger = logging.getLogger(__name__)

PLACEHOLDER = "%s"


def _warn_unused_white_point(spec: ColorSpaceSpec, config: ConversionConfig) -> None:
    if not spec.model.uses_white_point and tuple(config.white_point) != D65:
        logger.warning(
            "Color space %s does not use a white point; ignoring it", spec.model.name
        )


def expected_inputs(spec: ColorSpaceSpec) -> int:
    """Number of channel images a merge in this color space needs."""
    return spec.channel_count


def output_names(template: str, labels: Sequence[str]) -> list[str]:
    """
    Expand a split output template once per channel label.

    Raises:
        ConfigurationError: If the template is empty or lacks "%s"
    """
    if not template:
        raise ConfigurationError("An output-file template must be specified when splitting")
    if PLACEHOLDER not in template:
        raise ConfigurationError(f'The split output template must contain "%s" (got "{template}")')
    return [template.replace(PLACEHOLDER, label) for label in labels]


def split_image(image: ImageBuffer, config: ConversionConfig) -> list[ChannelBuffer]:
    """
    Split an image into channel buffers.

    Returns:
        One buffer per model channel, then "alpha" if the color-space
        name requested it
    """
    spec = config.resolve()
    _warn_unused_white_point(spec, config)

    channels = split_pixels(
        image,
        spec.model,
        white_point=config.white_point,
        bit_depth=config.bit_depth,
        workers=config.workers,
    )
    if spec.alpha:
        channels.append(extract_alpha(image, config.bit_depth))
    return channels


def merge_channels(channels: Sequence[ChannelBuffer], config: ConversionConfig) -> ImageBuffer:
    """
    Merge channel buffers into one image.

    Args:
        channels: Model channels in order, then the alpha channel if the
            color-space name requests one

    Raises:
        ConfigurationError: If the channel count is wrong
        GeometryError: If the bounds differ
    """
    spec = config.resolve()
    expected = expected_inputs(spec)
    if len(channels) != expected:
        raise ConfigurationError(
            f'Expected {expected} input files for color space "{spec.requested}" '
            f"but saw {len(channels)}"
        )
    check_bounds(channels)
    _warn_unused_white_point(spec, config)

    model_channels = channels[: spec.model.channel_count]
    merged = merge_pixels(
        model_channels,
        spec.model,
        white_point=config.white_point,
        bit_depth=config.bit_depth,
        workers=config.workers,
    )
    if spec.alpha:
        merged = inject_alpha(merged, channels[-1])
    return merged


def split_files(params: Parameters) -> list[str]:
    """
    Split one image file into channel PNGs.

    Returns:
        The names of the files written, in channel order
    """
    if len(params.input_names) != 1:
        raise ConfigurationError(f"Expected 1 input file but saw {len(params.input_names)}")
    spec = params.config.resolve()
    names = output_names(params.output_name, spec.file_labels)

    image = read_image(params.input_names[0])
    channels = split_image(image, params.config)

    for name, channel in zip(names, channels):
        write_png(name, channel)
    logger.info(
        "Split %s into %d %s channels", params.input_names[0], len(channels), spec.model.name
    )
    return names


def merge_files(params: Parameters) -> str:
    """
    Merge channel image files into one PNG.

    Returns:
        The output name ("" or "-" for standard output)
    """
    spec = params.config.resolve()
    expected = expected_inputs(spec)
    if len(params.input_names) != expected:
        raise ConfigurationError(
            f'Expected {expected} input files for color space "{spec.requested}" '
            f"but saw {len(params.input_names)}"
        )

    channels = [
        read_channel(path, name)
        for path, name in zip(params.input_names, spec.channel_names)
    ]
    merged = merge_channels(channels, params.config)

    write_png(params.output_name, merged)
    logger.info(
        "Merged %d %s channels into %s",
        len(channels),
        spec.model.name,
        params.output_name or "standard output",
    )
    return params.output_name


def run(params: Parameters) -> None:
    """Dispatch on the conversion mode."""
    if params.mode is Mode.SPLIT:
        split_files(params)
    else:
        merge_files(params)
