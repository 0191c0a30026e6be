"""
Reference white parsing.

A white point is an XYZ triple normalized to Y = 1. It is given either
as a named illuminant or as CIE 1931 chromaticity coordinates.
"""

from __future__ import annotations

import re

from color_channels.color.conversions import D50, D65, WhitePoint
from color_channels.core.errors import ConfigurationError

PRESETS: dict[str, WhitePoint] = {
    "D65": D65,
    "D50": D50,
}


def white_point_from_xy(x: float, y: float) -> WhitePoint:
    """
    Build an XYZ white point from chromaticity coordinates.

    Raises:
        ConfigurationError: Unless 0 <= x <= 1, 0 < y <= 1 and x + y <= 1
    """
    if not 0.0 <= x <= 1.0:
        raise ConfigurationError(f"White-point x must lie in [0, 1], not {x}")
    if not 0.0 < y <= 1.0:
        raise ConfigurationError(f"White-point y must lie in (0, 1], not {y}")
    if x + y > 1.0:
        raise ConfigurationError(f"White-point x + y must not exceed 1 (got {x + y})")
    z = 1.0 - x - y
    return (x / y, 1.0, z / y)


def parse_white_point(text: str) -> WhitePoint:
    """
    Parse a white-point specification.

    Accepts "D65" or "D50" in any case, or two numbers "x y" (a comma
    may separate them as well).

    Raises:
        ConfigurationError: On any malformed specification
    """
    spec = text.strip()
    preset = PRESETS.get(spec.upper())
    if preset is not None:
        return preset

    fields = [f for f in re.split(r"[\s,]+", spec) if f]
    if len(fields) != 2:
        raise ConfigurationError(
            f'Invalid white point "{text}" (expected D65, D50, or two numbers "x y")'
        )
    try:
        x, y = (float(f) for f in fields)
    except ValueError:
        raise ConfigurationError(
            f'Invalid white point "{text}" (coordinates must be numbers)'
        ) from None
    return white_point_from_xy(x, y)
