"""Core data types, errors and the color model registry."""

from color_channels.core.data_types import ChannelBuffer, ImageBuffer, check_bounds
from color_channels.core.errors import ConfigurationError, ConversionError, GeometryError
from color_channels.core.registry import ColorModelRegistry, register_model

__all__ = [
    "ChannelBuffer",
    "ImageBuffer",
    "check_bounds",
    "ConversionError",
    "ConfigurationError",
    "GeometryError",
    "ColorModelRegistry",
    "register_model",
]
