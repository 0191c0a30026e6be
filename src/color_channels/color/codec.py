"""
Channel codec.

Maps model scalars in a declared range to fixed-bit-depth grayscale
samples and back. Out-of-range scalars saturate instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from color_channels.core.data_types import max_sample, sample_dtype


@dataclass(frozen=True)
class ChannelRange:
    """Declared scalar range of one channel."""

    low: float
    high: float

    @property
    def span(self) -> float:
        return self.high - self.low

    def normalize(self, values: NDArray) -> NDArray:
        """Affine map from [low, high] onto [0, 1]."""
        return (values - self.low) / self.span

    def denormalize(self, values: NDArray) -> NDArray:
        """Affine map from [0, 1] back onto [low, high]."""
        return values * self.span + self.low


UNIT = ChannelRange(0.0, 1.0)
SIGNED = ChannelRange(-1.0, 1.0)
HUE = ChannelRange(0.0, 360.0)


def encode(
    values: NDArray | float, channel_range: ChannelRange = UNIT, bit_depth: int = 16
) -> NDArray:
    """
    Encode scalars as integer samples.

    Args:
        values: Scalars in the channel's declared range
        channel_range: Declared range of the channel
        bit_depth: 8 or 16

    Returns:
        Samples in [0, 2^bit_depth - 1], clamped at both ends
    """
    dtype = sample_dtype(bit_depth)
    max_val = max_sample(bit_depth)

    unit = channel_range.normalize(np.asarray(values, dtype=np.float64))
    unit = np.nan_to_num(unit, nan=0.0, posinf=1.0, neginf=0.0)
    clamped = np.clip(unit, 0.0, 1.0)
    return np.floor(clamped * max_val + 0.5).astype(dtype)


def decode(
    samples: NDArray | int, channel_range: ChannelRange = UNIT, bit_depth: int = 16
) -> NDArray[np.float64]:
    """
    Decode integer samples back to scalars in the declared range.

    Args:
        samples: Integer samples
        channel_range: Declared range of the channel
        bit_depth: Bit depth the samples were encoded with

    Returns:
        Float64 scalars in [low, high]
    """
    max_val = max_sample(bit_depth)
    unit = np.asarray(samples, dtype=np.float64) / max_val
    return channel_range.denormalize(unit)


def quantization_step(channel_range: ChannelRange, bit_depth: int) -> float:
    """Width of one sample step expressed in the channel's own units."""
    return channel_range.span / max_sample(bit_depth)
