"""
Pixel buffer validation and channel layout conversion.

A pixel buffer is a uint8 numpy array of shape (height, width, 4) in RGBA
order, row-major with the origin at the top-left.
"""

import cv2
import numpy as np

from pixelart_converter.errors import InvalidConfiguration, InvalidSource


def check_pixel_buffer(buffer: np.ndarray) -> np.ndarray:
    """
    Validate an RGBA pixel buffer.

    Raises:
        InvalidSource: If the buffer is not a (H, W, 4) uint8 numpy array
        InvalidConfiguration: If the buffer has zero area
    """
    if not isinstance(buffer, np.ndarray):
        raise InvalidSource(f"pixel buffer must be a numpy array, got {type(buffer)}")

    if buffer.ndim != 3 or buffer.shape[2] != 4:
        raise InvalidSource(f"pixel buffer must have shape (height, width, 4), got {buffer.shape}")

    if buffer.dtype != np.uint8:
        raise InvalidSource(f"pixel buffer must be uint8, got {buffer.dtype}")

    if buffer.shape[0] <= 0 or buffer.shape[1] <= 0:
        raise InvalidConfiguration(f"pixel buffer must have positive dimensions, got {buffer.shape[1]}x{buffer.shape[0]}")

    return buffer


def to_rgba(image: np.ndarray, bgr: bool = False) -> np.ndarray:
    """
    Convert a decoded image to a fresh RGBA pixel buffer.

    Args:
        image: uint8 array with shape (H, W), (H, W, 1), (H, W, 3) or (H, W, 4)
        bgr: True if colour channels are in OpenCV's BGR(A) order

    Returns:
        New (H, W, 4) uint8 RGBA array; missing alpha is fully opaque
    """
    if not isinstance(image, np.ndarray):
        raise InvalidSource(f"image must be a numpy array, got {type(image)}")

    if image.dtype != np.uint8:
        raise InvalidSource(f"image must be uint8, got {image.dtype}")

    if image.ndim == 3 and image.shape[2] == 1:
        image = np.ascontiguousarray(image[:, :, 0])

    if image.ndim == 2:
        if image.size == 0:
            raise InvalidConfiguration(f"image must have positive dimensions, got shape {image.shape}")
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)

    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise InvalidSource(f"image must have 1, 3 or 4 channels, got shape {image.shape}")

    if image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidConfiguration(f"image must have positive dimensions, got shape {image.shape}")

    if image.shape[2] == 3:
        code = cv2.COLOR_BGR2RGBA if bgr else cv2.COLOR_RGB2RGBA
        return cv2.cvtColor(image, code)

    if bgr:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return image.copy()


def to_bgra(buffer: np.ndarray) -> np.ndarray:
    """Convert an RGBA pixel buffer to OpenCV's BGRA order for encoding."""
    check_pixel_buffer(buffer)
    return cv2.cvtColor(buffer, cv2.COLOR_RGBA2BGRA)
