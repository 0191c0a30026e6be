"""Pixel pipeline, alpha side-channel and split/merge orchestration."""

from color_channels.pipeline.alpha import extract_alpha, inject_alpha, unpremultiply
from color_channels.pipeline.orchestrator import (
    merge_channels,
    merge_files,
    output_names,
    split_files,
    split_image,
)
from color_channels.pipeline.pixels import merge_pixels, split_pixels

__all__ = [
    "extract_alpha",
    "inject_alpha",
    "unpremultiply",
    "split_pixels",
    "merge_pixels",
    "split_image",
    "merge_channels",
    "split_files",
    "merge_files",
    "output_names",
]
