"""
Exception types raised by the conversion engine.

Every error here is detected before any pixel is processed, so a caller
that catches ConversionError never sees partial output.
"""


class ConversionError(ValueError):
    """Base class for all fatal split/merge errors."""


class ConfigurationError(ConversionError):
    """Bad color space, white point, channel count or output template."""


class GeometryError(ConversionError):
    """Channel buffers that do not share the same bounds."""
