"""
Alpha side-channel.

Opacity never enters a color model: it is lifted out as its own channel
on split and written back on merge.
"""

from __future__ import annotations

from color_channels.config import ALPHA_CHANNEL
from color_channels.core.data_types import ChannelBuffer, ImageBuffer, rescale_samples
from color_channels.core.errors import GeometryError


def unpremultiply(image: ImageBuffer) -> ImageBuffer:
    """Straight-alpha copy of an image; transparent pixels become black."""
    return image.unpremultiplied()


def extract_alpha(image: ImageBuffer, bit_depth: int = 16) -> ChannelBuffer:
    """
    Read an image's straight-alpha opacity into a grayscale channel.

    Args:
        image: Source image (premultiplied or not)
        bit_depth: Depth of the returned channel

    Returns:
        ChannelBuffer named "alpha"
    """
    straight = unpremultiply(image)
    return ChannelBuffer(
        data=rescale_samples(straight.alpha, straight.bit_depth, bit_depth),
        bit_depth=bit_depth,
        name=ALPHA_CHANNEL,
    )


def inject_alpha(image: ImageBuffer, alpha: ChannelBuffer) -> ImageBuffer:
    """
    Replace an image's alpha with a channel's samples.

    The image is converted to straight alpha first, and the channel is
    rescaled to the image's bit depth.

    Raises:
        GeometryError: If the bounds differ
    """
    if alpha.bounds != image.bounds:
        raise GeometryError(
            f"Alpha channel is {alpha.width}x{alpha.height} but the image is "
            f"{image.width}x{image.height}"
        )
    result = unpremultiply(image)
    result.data[..., 3] = rescale_samples(alpha.data, alpha.bit_depth, result.bit_depth)
    return result
