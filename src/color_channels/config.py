"""
Conversion configuration.

Resolves user-supplied color-space names against the model registry and
bundles the settings one split or merge needs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from color_channels.color.conversions import D65, WhitePoint
from color_channels.color.models import ColorModel, get_model, list_models
from color_channels.core.data_types import sample_dtype
from color_channels.core.errors import ConfigurationError

DEFAULT_COLOR_SPACE = "hcl"
DEFAULT_BIT_DEPTH = 16
ALPHA_CHANNEL = "alpha"


class Mode(str, Enum):
    """Direction of a conversion."""

    SPLIT = "split"
    MERGE = "merge"


def normalize_space_name(name: str) -> str:
    """Lowercase a color-space name and drop everything but letters."""
    return re.sub(r"[^a-z]", "", name.lower())


@dataclass(frozen=True)
class ColorSpaceSpec:
    """
    A resolved color-space request.

    Attributes:
        model: The registered color model
        alpha: Whether an alpha channel rides along
        requested: The name as the user typed it
    """

    model: ColorModel
    alpha: bool = False
    requested: str = ""

    @property
    def channel_names(self) -> tuple[str, ...]:
        """Channel names in order, with "alpha" last if requested."""
        if self.alpha:
            return self.model.channel_names + (ALPHA_CHANNEL,)
        return self.model.channel_names

    @property
    def file_labels(self) -> tuple[str, ...]:
        """Output file labels in order, with "alpha" last if requested."""
        if self.alpha:
            return self.model.file_labels + (ALPHA_CHANNEL,)
        return self.model.file_labels

    @property
    def channel_count(self) -> int:
        """Number of channel images a merge expects."""
        return len(self.channel_names)


def resolve_color_space(name: str) -> ColorSpaceSpec:
    """
    Resolve a color-space name.

    Matching ignores case and non-letters, so "L*a*b*" means "lab". A
    trailing "a" on an otherwise unknown name adds an alpha channel
    ("hcla" is "hcl" plus alpha).

    Raises:
        ConfigurationError: If no registered model matches
    """
    key = normalize_space_name(name)
    model = get_model(key)
    if model is not None:
        return ColorSpaceSpec(model=model, alpha=False, requested=name)
    if key.endswith("a"):
        model = get_model(key[:-1])
        if model is not None:
            return ColorSpaceSpec(model=model, alpha=True, requested=name)
    raise ConfigurationError(
        f'Unknown color space "{name}" (valid choices: {", ".join(list_models())}, '
        'each optionally followed by "a" for alpha)'
    )


@dataclass(frozen=True)
class ConversionConfig:
    """
    Settings for one in-memory split or merge.

    Attributes:
        color_space: Color-space name, resolved on use
        white_point: Reference white for white-point aware models
        bit_depth: Sample depth of split outputs and merged images
        workers: Thread count for the row pipeline (None lets the pool decide)
    """

    color_space: str = DEFAULT_COLOR_SPACE
    white_point: WhitePoint = D65
    bit_depth: int = DEFAULT_BIT_DEPTH
    workers: int | None = None

    def resolve(self) -> ColorSpaceSpec:
        """Resolve and validate; raises ConfigurationError on bad settings."""
        sample_dtype(self.bit_depth)
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError(f"Worker count must be positive, not {self.workers}")
        return resolve_color_space(self.color_space)


@dataclass(frozen=True)
class Parameters:
    """
    Everything a file-level split or merge needs.

    Attributes:
        mode: SPLIT or MERGE
        input_names: Input files (one image to split, or channel images to merge)
        output_name: Template containing "%s" for split; output file for merge
            ("" or "-" means standard output)
        config: In-memory conversion settings
    """

    mode: Mode
    input_names: tuple[str, ...] = ()
    output_name: str = ""
    config: ConversionConfig = field(default_factory=ConversionConfig)
