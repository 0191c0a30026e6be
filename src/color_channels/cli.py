from __future__ import annotations

import argparse
import logging
import sys
from typing import List

from color_channels import __version__
from color_channels.color.models import get_model, list_models
from color_channels.color.whitepoint import parse_white_point
from color_channels.config import (
    DEFAULT_BIT_DEPTH,
    DEFAULT_COLOR_SPACE,
    ConversionConfig,
    Mode,
    Parameters,
)
from color_channels.core.errors import ConversionError
from color_channels.pipeline.orchestrator import run

PROG = "color-channels"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Split an image into color channels or merge color channels into an image",
        epilog=(
            'Examples: %(prog)s --split --space=lab -o "photo-%%s.png" photo.jpg\n'
            "          %(prog)s --merge --space=lab -o photo.png "
            "photo-L.png photo-a.png photo-b.png"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--split",
        dest="mode",
        action="store_const",
        const=Mode.SPLIT,
        help="Split one image into one grayscale image per channel",
    )
    mode.add_argument(
        "--merge",
        dest="mode",
        action="store_const",
        const=Mode.MERGE,
        help="Merge grayscale channel images into one color image",
    )
    parser.add_argument(
        "--space",
        default=DEFAULT_COLOR_SPACE,
        help=(
            f"Color space of the channels (default {DEFAULT_COLOR_SPACE}); "
            'append "a" to include an alpha channel, e.g. "hcla"'
        ),
    )
    parser.add_argument(
        "--white",
        default="D65",
        help='White point for hcl, lab and luv: "D65", "D50" or chromaticity "x y" (default D65)',
    )
    parser.add_argument(
        "--depth",
        type=int,
        choices=[8, 16],
        default=DEFAULT_BIT_DEPTH,
        help=f"Bits per sample of split channel images (default {DEFAULT_BIT_DEPTH})",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=None,
        help="Threads used to process image rows (default: chosen automatically)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="",
        help='Output file; with --split a template containing "%%s" for the channel name '
        "(default for --merge: standard output)",
    )
    parser.add_argument(
        "--list-spaces", action="store_true", help="List supported color spaces and exit"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Report progress")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("inputs", nargs="*", metavar="FILE", help="Input image file(s)")
    return parser


def describe_spaces() -> List[str]:
    lines = []
    for name in list_models():
        model = get_model(name)
        white = " [white point]" if model.uses_white_point else ""
        lines.append(f"{name:8s} {','.join(model.channel_names):10s} {model.description}{white}")
    return lines


def build_parameters(args: argparse.Namespace) -> Parameters:
    """Turn parsed arguments into validated Parameters."""
    config = ConversionConfig(
        color_space=args.space,
        white_point=parse_white_point(args.white),
        bit_depth=args.depth,
        workers=args.workers,
    )
    config.resolve()
    return Parameters(
        mode=args.mode,
        input_names=tuple(args.inputs),
        output_name=args.output,
        config=config,
    )


def main(argv: List[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format=f"{PROG}: %(message)s",
    )

    if args.list_spaces:
        for line in describe_spaces():
            print(line)
        return
    if args.mode is None:
        parser.error("one of --split or --merge is required")

    try:
        run(build_parameters(args))
    except (ConversionError, OSError) as err:
        logging.error("%s", err)
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:])
