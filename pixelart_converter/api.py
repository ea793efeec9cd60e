#!/usr/bin/env python3
"""
Public API for the pixel art converter.

This module provides the main interface for programmatic use: a fluent
Pixelator bound to a source image and a target surface, and a functional
convert_image() for plain numpy arrays.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np

from pixelart_converter.buffers import to_rgba
from pixelart_converter.channel_transform import greyscale, quantize
from pixelart_converter.errors import InvalidConfiguration, InvalidSource
from pixelart_converter.palette_matching import DEFAULT_PALETTE, RGB, Palette, validate_palette
from pixelart_converter.resampling import MAX_SCALE, MIN_SCALE, constrain, pixelate
from pixelart_converter.surfaces import SourceImage, TargetSurface

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 8
MAX_RESOLUTION = 50


def normalize_scale(resolution: int | None) -> float:
    """
    Map a caller-facing pixel resolution (integer 1-50) to a scale factor.

    Anything else (fractions, out-of-range or non-numeric values) falls back
    to the default resolution of 8, i.e. a scale of 0.08.
    """
    if isinstance(resolution, bool) or not isinstance(resolution, (int, np.integer)):
        return DEFAULT_RESOLUTION * 0.01
    if 1 <= resolution <= MAX_RESOLUTION:
        return int(resolution) * 0.01
    return DEFAULT_RESOLUTION * 0.01


def _check_bound(name: str, value: int | None) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidConfiguration(f"{name} must be non-negative, got {value}")
    return int(value)


@dataclass(frozen=True)
class PixelatorConfig:
    """
    Conversion settings.

    Attributes:
        scale: Scale factor in [0.01, 0.5]; use from_resolution() to build from 1-50
        palette: Ordered palette used for quantization
        max_width: Maximum output width, 0 for no limit
        max_height: Maximum output height, 0 for no limit
        greyscale: Convert to greyscale after pixelating
        quantize: Map colours to the palette after pixelating

    Raises:
        InvalidConfiguration: If the scale, palette or bounds are invalid
    """
    scale: float = DEFAULT_RESOLUTION * 0.01
    palette: Palette = field(default=DEFAULT_PALETTE)
    max_width: int = 0
    max_height: int = 0
    greyscale: bool = False
    quantize: bool = True

    def __post_init__(self):
        if isinstance(self.scale, bool) or not isinstance(self.scale, (int, float, np.integer, np.floating)):
            raise InvalidConfiguration(f"scale must be a number, got {self.scale!r}")
        if not MIN_SCALE <= self.scale <= MAX_SCALE:
            raise InvalidConfiguration(f"scale must be in [{MIN_SCALE}, {MAX_SCALE}], got {self.scale}")

        # Frozen: normalised values are stored through object.__setattr__
        object.__setattr__(self, "scale", float(self.scale))
        object.__setattr__(self, "palette", validate_palette(self.palette))
        object.__setattr__(self, "max_width", _check_bound("max_width", self.max_width))
        object.__setattr__(self, "max_height", _check_bound("max_height", self.max_height))

    @classmethod
    def from_resolution(
        cls,
        resolution: int | None = DEFAULT_RESOLUTION,
        *,
        palette: Sequence[Sequence[int]] | None = None,
        max_width: int | None = 0,
        max_height: int | None = 0,
        greyscale: bool = False,
        quantize: bool = True
    ) -> PixelatorConfig:
        """Build a validated config from caller-facing values."""
        return cls(
            scale=normalize_scale(resolution),
            palette=DEFAULT_PALETTE if palette is None else palette,
            max_width=max_width,
            max_height=max_height,
            greyscale=greyscale,
            quantize=quantize,
        )


def _run_pipeline(buffer: np.ndarray, config: PixelatorConfig, interpolation: int) -> np.ndarray:
    result = pixelate(buffer, config.scale)
    if config.greyscale:
        greyscale(result)
    if config.quantize:
        quantize(result, config.palette)
    return constrain(result, config.max_width, config.max_height, interpolation=interpolation)


def convert_image(image: np.ndarray | None, config: PixelatorConfig | None = None, *, bgr: bool = False) -> np.ndarray:
    """
    Convert an image array to pixel art.

    Runs pixelate, the optional greyscale and palette stages, and the
    max-bounds constraint, in that order. The input array is not modified.

    Args:
        image: uint8 array, greyscale (H, W), RGB (H, W, 3) or RGBA (H, W, 4)
        config: Conversion settings, defaults to PixelatorConfig()
        bgr: True if the array is in OpenCV's BGR(A) channel order

    Returns:
        New RGBA uint8 array of shape (height, width, 4)

    Raises:
        InvalidSource: If image is None or not a uint8 image array
        InvalidConfiguration: If the image has zero area or the palette is empty

    Example:
        >>> import cv2
        >>> from pixelart_converter import PixelatorConfig, convert_image
        >>>
        >>> img = cv2.imread("photo.png", cv2.IMREAD_UNCHANGED)
        >>> config = PixelatorConfig.from_resolution(6, max_width=256)
        >>> art = convert_image(img, config, bgr=True)
        >>> cv2.imwrite("art.png", cv2.cvtColor(art, cv2.COLOR_RGBA2BGRA))
    """
    if image is None:
        raise InvalidSource("image cannot be None")

    if config is None:
        config = PixelatorConfig()

    buffer = to_rgba(image, bgr=bgr)
    return _run_pipeline(buffer, config, cv2.INTER_NEAREST)


class Pixelator:
    """
    Converts a source image into pixel art on a target surface.

    Setters return the instance so calls can be chained. Changing the
    configuration does not redraw anything; call the operations again.

    Example:
        >>> px = Pixelator(SourceImage.from_file("photo.png"))
        >>> px.set_scale(6).set_max_width(256).convert().save_image("art.png")
    """

    def __init__(
        self,
        source: SourceImage | None = None,
        target: TargetSurface | None = None,
        *,
        scale: int | None = DEFAULT_RESOLUTION,
        palette: Sequence[Sequence[int]] | None = None,
        max_width: int | None = 0,
        max_height: int | None = 0,
        greyscale: bool = False,
        quantize: bool = True
    ):
        if source is None and target is None:
            raise InvalidConfiguration("a source image or a target surface must be provided")

        self._source = source
        self._target = target if target is not None else TargetSurface()
        self._config = PixelatorConfig.from_resolution(
            scale,
            palette=palette,
            max_width=max_width,
            max_height=max_height,
            greyscale=greyscale,
            quantize=quantize,
        )
        self._check_target(self._target)
        if source is not None:
            self._check_source(source)

    @staticmethod
    def _check_target(target) -> None:
        if not isinstance(target, TargetSurface):
            raise InvalidSource(f"target must be a TargetSurface, got {type(target)}")

    @staticmethod
    def _check_source(source) -> None:
        if not isinstance(source, SourceImage):
            raise InvalidSource(f"source must be a SourceImage, got {type(source)}")

    def verify_sources(self) -> None:
        """
        Check that both the source image and the target surface are usable.

        Raises:
            InvalidSource: If either is missing or of the wrong type
        """
        self._check_target(self._target)
        self._check_source(self._source)

    @property
    def config(self) -> PixelatorConfig:
        return self._config

    @property
    def scale(self) -> float:
        return self._config.scale

    @property
    def source(self) -> SourceImage | None:
        return self._source

    @property
    def target(self) -> TargetSurface:
        return self._target

    # Configuration

    def set_source(self, source: SourceImage) -> Pixelator:
        """Set the image to convert; the current source is kept if this one is rejected."""
        self._check_source(source)
        self._source = source
        return self

    def set_source_path(self, path: str | Path) -> Pixelator:
        """Load the image to convert from a file."""
        return self.set_source(SourceImage.from_file(path))

    def set_target(self, target: TargetSurface) -> Pixelator:
        """Set the surface to draw to; the current target is kept if this one is rejected."""
        self._check_target(target)
        self._target = target
        return self

    def set_palette(self, palette: Sequence[Sequence[int]]) -> Pixelator:
        """Replace the palette used by convert_palette()."""
        self._config = replace(self._config, palette=validate_palette(palette))
        return self

    def set_scale(self, resolution: int) -> Pixelator:
        """Set the pixel resolution (1-50); invalid values fall back to 8."""
        self._config = replace(self._config, scale=normalize_scale(resolution))
        return self

    def set_max_width(self, width: int | None) -> Pixelator:
        """Set the maximum output width, 0 for no limit."""
        self._config = replace(self._config, max_width=_check_bound("max_width", width))
        return self

    def set_max_height(self, height: int | None) -> Pixelator:
        """Set the maximum output height, 0 for no limit."""
        self._config = replace(self._config, max_height=_check_bound("max_height", height))
        return self

    def set_greyscale(self, enabled: bool) -> Pixelator:
        self._config = replace(self._config, greyscale=bool(enabled))
        return self

    def set_quantize(self, enabled: bool) -> Pixelator:
        self._config = replace(self._config, quantize=bool(enabled))
        return self

    def get_palette(self) -> list[RGB]:
        return list(self._config.palette)

    # Operations

    def pixelate(self) -> Pixelator:
        """Draw a pixelated version of the source onto the target."""
        self.verify_sources()
        result = pixelate(self._source.to_buffer(), self._config.scale)
        self._target.image_smoothing_enabled = False
        self._target.put_pixels(result)
        return self

    def convert_greyscale(self) -> Pixelator:
        """Convert the target content to greyscale."""
        self.verify_sources()
        self._target.put_pixels(greyscale(self._target.get_pixels()))
        return self

    def convert_palette(self) -> Pixelator:
        """Map the target content to the current palette."""
        self.verify_sources()
        self._target.put_pixels(quantize(self._target.get_pixels(), self._config.palette))
        return self

    def resize_image(self) -> Pixelator:
        """Shrink the target content proportionally to the max width/height."""
        self.verify_sources()
        result = constrain(
            self._target.get_pixels(),
            self._config.max_width,
            self._config.max_height,
            interpolation=self._target.interpolation,
        )
        self._target.put_pixels(result)
        return self

    def draw(self) -> Pixelator:
        """Copy the source to the target at natural size, then apply the max bounds."""
        self.verify_sources()
        self._target.put_pixels(self._source.to_buffer())
        return self.resize_image()

    def convert(self) -> Pixelator:
        """Run the full pipeline and draw the result onto the target."""
        self.verify_sources()
        logger.debug(
            "Converting %dx%d source (scale=%.3f, greyscale=%s, quantize=%s, max=%dx%d)",
            self._source.natural_width, self._source.natural_height, self._config.scale,
            self._config.greyscale, self._config.quantize,
            self._config.max_width, self._config.max_height
        )
        result = _run_pipeline(self._source.to_buffer(), self._config, cv2.INTER_NEAREST)
        self._target.image_smoothing_enabled = False
        self._target.put_pixels(result)
        return self

    def save_image(self, path: str | Path) -> Path:
        """Save the target content as a PNG file and return the path written."""
        self.verify_sources()
        return self._target.save(path)
