"""
Color model descriptors.

Each supported color space is one ColorModel registered under its
canonical lowercase name. The pixel pipeline only ever talks to these
descriptors, never to the conversion functions directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from color_channels.color import conversions as cv
from color_channels.color.codec import HUE, SIGNED, UNIT, ChannelRange
from color_channels.core.registry import ColorModelRegistry, register_model

Converter = Callable[..., NDArray[np.float64]]


@dataclass(frozen=True)
class ColorModel:
    """
    Descriptor for one color space.

    Attributes:
        name: Canonical lowercase name
        channel_names: Ordered channel names, e.g. ("H", "C", "L")
        ranges: Declared scalar range of each channel
        to_channels: RGB (3, ...) -> channel vector (N, ...)
        to_rgb: Channel vector (N, ...) -> unclamped RGB (3, ...)
        uses_white_point: Whether the converters take a reference white
        description: One-line summary for help output
        file_labels: Strings substituted into output file names
            (defaults to channel_names)
    """

    name: str
    channel_names: tuple[str, ...]
    ranges: tuple[ChannelRange, ...]
    to_channels: Converter
    to_rgb: Converter
    uses_white_point: bool = False
    description: str = ""
    file_labels: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if len(self.ranges) != len(self.channel_names):
            raise ValueError(
                f"{self.name}: {len(self.ranges)} ranges for "
                f"{len(self.channel_names)} channels"
            )
        if not self.file_labels:
            object.__setattr__(self, "file_labels", self.channel_names)

    @property
    def channel_count(self) -> int:
        return len(self.channel_names)

    def forward(
        self, rgb: NDArray, white_point: cv.WhitePoint | None = None
    ) -> NDArray[np.float64]:
        """Convert a Color Value array to a Channel Vector array."""
        if self.uses_white_point:
            return self.to_channels(rgb, white_point or cv.D65)
        return self.to_channels(rgb)

    def inverse(
        self, channels: NDArray, white_point: cv.WhitePoint | None = None
    ) -> NDArray[np.float64]:
        """Convert a Channel Vector array to an in-gamut Color Value array."""
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            if self.uses_white_point:
                rgb = self.to_rgb(channels, white_point or cv.D65)
            else:
                rgb = self.to_rgb(channels)
        return cv.clamp_color(rgb)


def get_model(name: str) -> ColorModel | None:
    """Look up a registered model by canonical name."""
    return ColorModelRegistry.get(name)


def list_models() -> list[str]:
    """Get the sorted names of all registered models."""
    return ColorModelRegistry.list_all()


# =============================================================================
# Built-in models
# =============================================================================

RGB_CHANNELS = ("R", "G", "B")

register_model(ColorModel(
    name="rgb",
    channel_names=RGB_CHANNELS,
    ranges=(UNIT, UNIT, UNIT),
    to_channels=cv.rgb_identity,
    to_rgb=cv.rgb_identity,
    description="red, green, blue (gamma-encoded, passed through)",
))

register_model(ColorModel(
    name="srgb",
    channel_names=RGB_CHANNELS,
    ranges=(UNIT, UNIT, UNIT),
    to_channels=cv.rgb_identity,
    to_rgb=cv.rgb_identity,
    description="standard RGB components",
))

register_model(ColorModel(
    name="linrgb",
    channel_names=RGB_CHANNELS,
    ranges=(UNIT, UNIT, UNIT),
    to_channels=cv.rgb_to_linrgb,
    to_rgb=cv.linrgb_to_rgb,
    description="linear-light RGB",
))

register_model(ColorModel(
    name="hcl",
    channel_names=("H", "C", "L"),
    ranges=(HUE, UNIT, UNIT),
    to_channels=cv.rgb_to_hcl,
    to_rgb=cv.hcl_to_rgb,
    uses_white_point=True,
    description="hue, chroma, luminance (CIE L*C*h)",
))

register_model(ColorModel(
    name="hsl",
    channel_names=("H", "S", "L"),
    ranges=(HUE, UNIT, UNIT),
    to_channels=cv.rgb_to_hsl,
    to_rgb=cv.hsl_to_rgb,
    description="hue, saturation, lightness",
))

register_model(ColorModel(
    name="hsluv",
    channel_names=("H", "S", "L"),
    ranges=(HUE, UNIT, UNIT),
    to_channels=cv.rgb_to_hsluv,
    to_rgb=cv.hsluv_to_rgb,
    description="perceptually uniform hue, saturation, lightness",
))

register_model(ColorModel(
    name="lab",
    channel_names=("L", "a", "b"),
    ranges=(UNIT, SIGNED, SIGNED),
    to_channels=cv.rgb_to_lab,
    to_rgb=cv.lab_to_rgb,
    uses_white_point=True,
    description="CIE L*a*b*",
))

register_model(ColorModel(
    name="luv",
    channel_names=("L", "u", "v"),
    ranges=(UNIT, SIGNED, SIGNED),
    to_channels=cv.rgb_to_luv,
    to_rgb=cv.luv_to_rgb,
    uses_white_point=True,
    description="CIE L*u*v*",
))

# "YY" keeps the Y file distinct from "y" on case-insensitive file systems
register_model(ColorModel(
    name="xyy",
    channel_names=("x", "y", "Y"),
    ranges=(UNIT, UNIT, UNIT),
    to_channels=cv.rgb_to_xyy,
    to_rgb=cv.xyy_to_rgb,
    description="CIE xyY chromaticity and luminance",
    file_labels=("x", "y", "YY"),
))

register_model(ColorModel(
    name="xyz",
    channel_names=("X", "Y", "Z"),
    ranges=(UNIT, UNIT, UNIT),
    to_channels=cv.rgb_to_xyz,
    to_rgb=cv.xyz_to_rgb,
    description="CIE XYZ tristimulus",
))

register_model(ColorModel(
    name="ycbcr",
    channel_names=("Y", "Cb", "Cr"),
    ranges=(UNIT, UNIT, UNIT),
    to_channels=cv.rgb_to_ycbcr,
    to_rgb=cv.ycbcr_to_rgb,
    description="luma and chroma differences (8-bit precision)",
))

register_model(ColorModel(
    name="cmyk",
    channel_names=("C", "M", "Y", "K"),
    ranges=(UNIT, UNIT, UNIT, UNIT),
    to_channels=cv.rgb_to_cmyk,
    to_rgb=cv.cmyk_to_rgb,
    description="cyan, magenta, yellow, black (8-bit precision)",
))
