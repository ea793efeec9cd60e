"""
Pixel Art Converter

Turns arbitrary raster images into pixel art: block-pixelated, optionally
greyscale, palette-quantized renderings that keep the source's composition.

Public API:
    - Pixelator: Fluent converter bound to a source image and a target surface
    - PixelatorConfig: Conversion settings (scale, palette, max bounds)
    - convert_image: Functional pipeline over numpy image arrays
    - SourceImage / TargetSurface: Image resources read from and drawn to
    - pixelate, constrain, greyscale, quantize: Individual pipeline stages
    - color_distance, nearest_color: Colour matching primitives
    - DEFAULT_PALETTE: Built-in 16-colour palette

For debug logging:

    import logging
    logging.basicConfig(level=logging.DEBUG)
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from pixelart_converter.api import Pixelator, PixelatorConfig, convert_image, normalize_scale  # noqa: E402
from pixelart_converter.channel_transform import greyscale, quantize  # noqa: E402
from pixelart_converter.color_distance import color_distance  # noqa: E402
from pixelart_converter.errors import InvalidConfiguration, InvalidSource, PixelArtError  # noqa: E402
from pixelart_converter.palette_matching import (  # noqa: E402
    DEFAULT_PALETTE,
    nearest_color,
    parse_hex_palette,
    validate_palette,
)
from pixelart_converter.resampling import PixelationPlan, constrain, pixelate, plan_pixelation  # noqa: E402
from pixelart_converter.surfaces import SourceImage, TargetSurface  # noqa: E402

__version__ = "0.1.0"
__all__ = [
    "Pixelator", "PixelatorConfig", "convert_image", "normalize_scale",
    "SourceImage", "TargetSurface",
    "pixelate", "constrain", "plan_pixelation", "PixelationPlan",
    "greyscale", "quantize",
    "color_distance", "nearest_color", "validate_palette", "parse_hex_palette", "DEFAULT_PALETTE",
    "PixelArtError", "InvalidSource", "InvalidConfiguration",
    "__version__",
]
