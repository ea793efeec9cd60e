"""
Per-pixel colour transforms applied in place to RGBA pixel buffers.
"""

import logging
from typing import Sequence

import numpy as np

from pixelart_converter.buffers import check_pixel_buffer
from pixelart_converter.palette_matching import nearest_palette_indices, validate_palette

logger = logging.getLogger(__name__)


def greyscale(buffer: np.ndarray) -> np.ndarray:
    """
    Replace R, G and B of every pixel with their unweighted mean.

    Alpha is left untouched. Applying this twice gives the same result as once.

    Args:
        buffer: RGBA pixel buffer, modified in place

    Returns:
        The same buffer
    """
    check_pixel_buffer(buffer)
    avg = np.rint(buffer[:, :, :3].sum(axis=2, dtype=np.float64) / 3.0).astype(np.uint8)
    for c in range(3):
        buffer[:, :, c] = avg
    return buffer


def quantize(buffer: np.ndarray, palette: Sequence[Sequence[int]]) -> np.ndarray:
    """
    Replace the RGB of every pixel with its nearest palette colour.

    Alpha is left untouched. Each distinct colour is matched once and the
    result broadcast back to every pixel that has it.

    Args:
        buffer: RGBA pixel buffer, modified in place
        palette: Non-empty ordered palette; validated before the buffer is touched

    Returns:
        The same buffer

    Raises:
        InvalidConfiguration: If the palette is empty or malformed
    """
    check_pixel_buffer(buffer)
    pal = np.array(validate_palette(palette), dtype=np.uint8)

    height, width = buffer.shape[:2]
    rgb = buffer[:, :, :3].reshape(-1, 3)
    colors, inverse = np.unique(rgb, axis=0, return_inverse=True)
    indices = nearest_palette_indices(colors, pal)
    logger.debug("Quantizing %d distinct colours to a %d-colour palette", colors.shape[0], pal.shape[0])

    mapped = pal[indices][inverse.reshape(-1)]
    buffer[:, :, :3] = mapped.reshape(height, width, 3)
    return buffer
