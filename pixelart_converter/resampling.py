"""
Block pixelation and bounding-box constraining of pixel buffers.

Pixelation draws the source into a working canvas at a fraction of its size
and magnifies that small copy back to full size without smoothing, so each
block of the output carries a single source sample.
"""

import logging
import math
from dataclasses import dataclass

import cv2
import numpy as np

from pixelart_converter.buffers import check_pixel_buffer
from pixelart_converter.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

# Images larger than this on either axis get their scale halved
OVERSIZE_LIMIT = 900
# Extra room added around the working canvas of oversized images
CANVAS_MARGIN = 50
# Dimensions above this get the border-trim padding
BORDER_TRIM_MIN = 300
# Divisor applied to the padding of the longer axis
BORDER_TRIM_LONG_AXIS_DIVISOR = 1.5
# Accepted range of the configured scale factor
MIN_SCALE = 0.01
MAX_SCALE = 0.5


@dataclass
class PixelationPlan:
    """
    Geometry of a single pixelation pass.

    Attributes:
        scale: Effective scale factor (halved for oversized images)
        scaled_width: Width of the downscaled copy
        scaled_height: Height of the downscaled copy
        canvas_width: Width of the working canvas holding the downscaled copy
        canvas_height: Height of the working canvas
        final_width: Width the downscaled copy is magnified to, before clipping
        final_height: Height the downscaled copy is magnified to, before clipping
        oversized: True if the oversized-image correction was applied
    """
    scale: float
    scaled_width: int
    scaled_height: int
    canvas_width: int
    canvas_height: int
    final_width: int
    final_height: int
    oversized: bool


def _border_padding(dim: int, other_dim: int, scale: float) -> float:
    """Extra draw size compensating for blocks clipped at the far edge."""
    if dim <= BORDER_TRIM_MIN:
        return 0.0
    pad = math.floor(dim / (dim * scale))
    if dim > other_dim:
        return pad / BORDER_TRIM_LONG_AXIS_DIVISOR
    return float(pad)


def plan_pixelation(width: int, height: int, scale: float) -> PixelationPlan:
    """
    Work out the intermediate sizes used to pixelate a width x height image.

    Args:
        width: Natural width of the source
        height: Natural height of the source
        scale: Configured scale factor in [0.01, 0.5]

    Returns:
        PixelationPlan for the image. The configured scale is left alone;
        halving for oversized images only applies to the returned plan.

    Raises:
        InvalidConfiguration: If either dimension is not positive or the scale is out of range
    """
    if width <= 0 or height <= 0:
        raise InvalidConfiguration(f"source must have positive dimensions, got {width}x{height}")
    if not MIN_SCALE <= scale <= MAX_SCALE:
        raise InvalidConfiguration(f"scale must be in [{MIN_SCALE}, {MAX_SCALE}], got {scale}")

    canvas_width, canvas_height = width, height
    oversized = width > OVERSIZE_LIMIT or height > OVERSIZE_LIMIT
    if oversized:
        scale *= 0.5

    scaled_w = width * scale
    scaled_h = height * scale

    if oversized:
        side = int(max(scaled_w, scaled_h) + CANVAS_MARGIN)
        canvas_width, canvas_height = side, side

    final_w = width + _border_padding(width, height, scale)
    final_h = height + _border_padding(height, width, scale)

    return PixelationPlan(
        scale=scale,
        scaled_width=max(1, round(scaled_w)),
        scaled_height=max(1, round(scaled_h)),
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        final_width=int(final_w),
        final_height=int(final_h),
        oversized=oversized,
    )


def pixelate(buffer: np.ndarray, scale: float) -> np.ndarray:
    """
    Produce a blocky, pixelated copy of an RGBA buffer.

    Args:
        buffer: Source pixels at natural size (H, W, 4), RGBA
        scale: Scale factor in [0.01, 0.5]; smaller values give larger blocks

    Returns:
        New RGBA buffer with the same dimensions as the source
    """
    check_pixel_buffer(buffer)
    height, width = buffer.shape[:2]
    plan = plan_pixelation(width, height, scale)
    logger.debug("Pixelating %dx%d: %s", width, height, plan)

    sw, sh = plan.scaled_width, plan.scaled_height

    # Working canvas holding the downscaled copy at its top-left corner
    canvas = np.zeros((plan.canvas_height, plan.canvas_width, 4), dtype=np.uint8)
    canvas[:sh, :sw] = cv2.resize(np.ascontiguousarray(buffer), (sw, sh), interpolation=cv2.INTER_AREA)

    # Magnify without smoothing, then clip to the target size
    small = np.ascontiguousarray(canvas[:sh, :sw])
    enlarged = cv2.resize(small, (plan.final_width, plan.final_height), interpolation=cv2.INTER_NEAREST)

    target = np.zeros((height, width, 4), dtype=np.uint8)
    target[:, :] = enlarged[:height, :width]
    return target


def constrain(
    buffer: np.ndarray,
    max_width: int,
    max_height: int,
    interpolation: int = cv2.INTER_NEAREST
) -> np.ndarray:
    """
    Scale a buffer down uniformly to fit a maximum width and/or height.

    The width limit is checked first and the height limit second, so when
    both apply the height-derived ratio wins, whichever is smaller.

    Args:
        buffer: RGBA pixel buffer
        max_width: Maximum width, 0 for no limit
        max_height: Maximum height, 0 for no limit
        interpolation: OpenCV interpolation flag for the redraw

    Returns:
        The input buffer itself if both limits are 0, otherwise a new buffer
    """
    check_pixel_buffer(buffer)
    if max_width < 0 or max_height < 0:
        raise InvalidConfiguration(f"max bounds must be non-negative, got {max_width}x{max_height}")

    if not max_width and not max_height:
        return buffer

    height, width = buffer.shape[:2]
    ratio = 1.0
    if max_width and width > max_width:
        ratio = max_width / width
    if max_height and height > max_height:
        ratio = max_height / height

    new_w = max(1, int(width * ratio))
    new_h = max(1, int(height * ratio))
    logger.debug("Constraining %dx%d to %dx%d (ratio %.4f)", width, height, new_w, new_h, ratio)

    copy = buffer.copy()
    return cv2.resize(copy, (new_w, new_h), interpolation=interpolation)
