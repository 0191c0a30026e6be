"""Channel codec, color conversions and registered color models."""

from color_channels.color.codec import HUE, SIGNED, UNIT, ChannelRange, decode, encode
from color_channels.color.models import ColorModel, get_model, list_models
from color_channels.color.whitepoint import parse_white_point, white_point_from_xy

__all__ = [
    "ChannelRange",
    "UNIT",
    "SIGNED",
    "HUE",
    "encode",
    "decode",
    "ColorModel",
    "get_model",
    "list_models",
    "parse_white_point",
    "white_point_from_xy",
]
