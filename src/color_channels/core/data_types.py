"""
Core data types for color-channels.

Provides ImageBuffer (an RGBA sample grid) and ChannelBuffer (a single
grayscale channel), both backed by unsigned integer numpy arrays at a
fixed bit depth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from color_channels.core.errors import ConfigurationError, GeometryError

SUPPORTED_BIT_DEPTHS = (8, 16)


def sample_dtype(bit_depth: int) -> type[np.unsignedinteger]:
    """Return the numpy dtype that holds samples of the given depth."""
    if bit_depth == 8:
        return np.uint8
    if bit_depth == 16:
        return np.uint16
    raise ConfigurationError(
        f"Unsupported bit depth {bit_depth} (expected one of {SUPPORTED_BIT_DEPTHS})"
    )


def depth_of(data: NDArray, bit_depth: int | None) -> int:
    """
    Bit depth of a sample array: the explicit one, else from its dtype.

    Raises:
        ConfigurationError: If no depth is given and the dtype is not
            uint8 or uint16
    """
    if bit_depth is not None:
        return bit_depth
    if data.dtype == np.uint8:
        return 8
    if data.dtype == np.uint16:
        return 16
    raise ConfigurationError(
        f"Cannot infer the bit depth of {data.dtype} samples; pass bit_depth"
    )


def max_sample(bit_depth: int) -> int:
    """Largest sample value representable at a bit depth."""
    sample_dtype(bit_depth)
    return (1 << bit_depth) - 1


def rescale_samples(samples: NDArray, from_bits: int, to_bits: int) -> NDArray:
    """
    Convert integer samples from one bit depth to another.

    Widening 8 -> 16 multiplies by 257, so narrowing the result again
    gives back the original samples exactly.
    """
    dtype = sample_dtype(to_bits)
    if from_bits == to_bits:
        return samples.astype(dtype, copy=True)
    src_max = max_sample(from_bits)
    dst_max = max_sample(to_bits)
    wide = samples.astype(np.uint32)
    return ((wide * dst_max + src_max // 2) // src_max).astype(dtype)


@dataclass
class ChannelBuffer:
    """
    One grayscale channel of a split image.

    Attributes:
        data: 2-D array of shape (height, width), uint8 or uint16
        bit_depth: 8 or 16; None takes it from a uint8 or uint16 dtype
        name: Channel name ("H", "Cb", "alpha", ...)
    """

    data: NDArray
    bit_depth: int | None = None
    name: str = ""

    def __post_init__(self) -> None:
        self.bit_depth = depth_of(self.data, self.bit_depth)
        dtype = sample_dtype(self.bit_depth)
        if self.data.ndim != 2:
            raise ValueError(f"ChannelBuffer data must be 2D, got {self.data.ndim}D")
        if self.data.dtype != dtype:
            self.data = np.clip(self.data, 0, max_sample(self.bit_depth)).astype(dtype)

    @classmethod
    def allocate(
        cls, name: str, height: int, width: int, bit_depth: int = 16
    ) -> ChannelBuffer:
        """Create a zeroed channel with the given bounds."""
        return cls(
            data=np.zeros((height, width), dtype=sample_dtype(bit_depth)),
            bit_depth=bit_depth,
            name=name,
        )

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def bounds(self) -> tuple[int, int]:
        """Bounds as (height, width)."""
        return (self.height, self.width)

    @property
    def max_value(self) -> int:
        return max_sample(self.bit_depth)

    def get(self, y: int, x: int) -> int:
        """Sample at row y, column x."""
        return int(self.data[y, x])

    def to_bit_depth(self, bit_depth: int) -> ChannelBuffer:
        """Return a copy rescaled to another bit depth."""
        return ChannelBuffer(
            data=rescale_samples(self.data, self.bit_depth, bit_depth),
            bit_depth=bit_depth,
            name=self.name,
        )

    def __repr__(self) -> str:
        return (
            f"ChannelBuffer(name={self.name!r}, bounds={self.bounds}, "
            f"bit_depth={self.bit_depth})"
        )


@dataclass
class ImageBuffer:
    """
    RGBA image held as integer samples.

    Attributes:
        data: Array of shape (height, width, 4), uint8 or uint16
        bit_depth: 8 or 16; None takes it from a uint8 or uint16 dtype
        premultiplied: True if color samples are scaled by alpha

    Shape Convention:
        - Channel-last format: (height, width, RGBA), as Pillow delivers it
    """

    data: NDArray
    bit_depth: int | None = None
    premultiplied: bool = False

    def __post_init__(self) -> None:
        self.bit_depth = depth_of(self.data, self.bit_depth)
        dtype = sample_dtype(self.bit_depth)

        # Promote RGB to opaque RGBA
        if self.data.ndim == 3 and self.data.shape[2] == 3:
            alpha = np.full(self.data.shape[:2] + (1,), max_sample(self.bit_depth))
            self.data = np.concatenate([self.data, alpha], axis=2)
        if self.data.ndim != 3 or self.data.shape[2] != 4:
            raise ValueError(
                f"ImageBuffer data must have shape (H, W, 4), got {self.data.shape}"
            )
        if self.data.dtype != dtype:
            self.data = np.clip(self.data, 0, max_sample(self.bit_depth)).astype(dtype)

    @classmethod
    def opaque(cls, height: int, width: int, bit_depth: int = 16) -> ImageBuffer:
        """Create a black, fully opaque image."""
        data = np.zeros((height, width, 4), dtype=sample_dtype(bit_depth))
        data[..., 3] = max_sample(bit_depth)
        return cls(data=data, bit_depth=bit_depth)

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def bounds(self) -> tuple[int, int]:
        """Bounds as (height, width)."""
        return (self.height, self.width)

    @property
    def max_value(self) -> int:
        return max_sample(self.bit_depth)

    @property
    def alpha(self) -> NDArray:
        """The alpha plane, shape (height, width)."""
        return self.data[..., 3]

    def get(self, y: int, x: int) -> tuple[int, int, int, int]:
        """RGBA sample at row y, column x."""
        r, g, b, a = self.data[y, x]
        return (int(r), int(g), int(b), int(a))

    def unpremultiplied(self) -> ImageBuffer:
        """
        Return a copy with straight (non-premultiplied) alpha.

        Fully transparent pixels come back as transparent black.
        """
        if not self.premultiplied:
            return self.copy()

        max_value = self.max_value
        wide = self.data.astype(np.uint32)
        alpha = wide[..., 3:4]
        safe_alpha = np.maximum(alpha, 1)
        color = (wide[..., :3] * max_value + safe_alpha // 2) // safe_alpha
        color = np.where(alpha > 0, np.minimum(color, max_value), 0)
        data = np.concatenate([color, alpha], axis=2)
        return ImageBuffer(data=data, bit_depth=self.bit_depth, premultiplied=False)

    def to_bit_depth(self, bit_depth: int) -> ImageBuffer:
        """Return a copy rescaled to another bit depth."""
        return ImageBuffer(
            data=rescale_samples(self.data, self.bit_depth, bit_depth),
            bit_depth=bit_depth,
            premultiplied=self.premultiplied,
        )

    def copy(self) -> ImageBuffer:
        """Create a deep copy of this buffer."""
        return ImageBuffer(
            data=self.data.copy(),
            bit_depth=self.bit_depth,
            premultiplied=self.premultiplied,
        )

    def __repr__(self) -> str:
        return (
            f"ImageBuffer(bounds={self.bounds}, bit_depth={self.bit_depth}, "
            f"premultiplied={self.premultiplied})"
        )


def check_bounds(buffers: Sequence[ChannelBuffer]) -> tuple[int, int]:
    """
    Ensure every buffer has the same bounds.

    Returns:
        The shared (height, width)

    Raises:
        GeometryError: If the buffers disagree or the sequence is empty
    """
    if not buffers:
        raise GeometryError("At least one channel image is required")
    bounds = buffers[0].bounds
    for buf in buffers[1:]:
        if buf.bounds != bounds:
            raise GeometryError(
                "All input images must have the same dimensions "
                f"({buffers[0].name or 'channel 0'} is {bounds[1]}x{bounds[0]}, "
                f"{buf.name or 'another channel'} is {buf.width}x{buf.height})"
            )
    return bounds
