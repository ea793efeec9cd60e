"""
Exceptions raised by the pixel art conversion pipeline.
"""


class PixelArtError(ValueError):
    """Base exception for conversion errors."""

    pass


class InvalidSource(PixelArtError):
    """The source image or target surface is missing, of the wrong type, or unreadable."""

    pass


class InvalidConfiguration(PixelArtError):
    """A configuration value (palette, bounds, dimensions) cannot be used."""

    pass
