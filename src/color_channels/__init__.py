"""
color-channels: split images into color-model channels and merge them back.

Quick start:
    >>> from color_channels import ConversionConfig, split_image, merge_channels
    >>> channels = split_image(image, ConversionConfig(color_space="lab"))
    >>> restored = merge_channels(channels, ConversionConfig(color_space="lab"))
"""

__version__ = "1.0.0"

from color_channels.config import (
    ColorSpaceSpec,
    ConversionConfig,
    Mode,
    Parameters,
    resolve_color_space,
)
from color_channels.core.data_types import ChannelBuffer, ImageBuffer
from color_channels.core.errors import ConfigurationError, ConversionError, GeometryError
from color_channels.pipeline.orchestrator import merge_channels, split_image

__all__ = [
    "__version__",
    "ChannelBuffer",
    "ColorSpaceSpec",
    "ConfigurationError",
    "ConversionConfig",
    "ConversionError",
    "GeometryError",
    "ImageBuffer",
    "Mode",
    "Parameters",
    "merge_channels",
    "resolve_color_space",
    "split_image",
]
