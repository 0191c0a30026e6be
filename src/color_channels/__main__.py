"""Allow ``python -m color_channels``."""

from color_channels.cli import main

main()
