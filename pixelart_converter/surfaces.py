"""
Source images and target surfaces that the conversion pipeline reads from and
draws to.

Decoding and encoding go through OpenCV. Everything past this module works on
RGBA pixel buffers.
"""

import logging
from pathlib import Path

import cv2
import numpy as np

from pixelart_converter.buffers import check_pixel_buffer, to_bgra, to_rgba
from pixelart_converter.errors import InvalidConfiguration, InvalidSource

logger = logging.getLogger(__name__)


class SourceImage:
    """
    Read-only image to convert.

    Attributes:
        natural_width: Width of the decoded image in pixels
        natural_height: Height of the decoded image in pixels
    """

    def __init__(self, pixels: np.ndarray):
        check_pixel_buffer(pixels)
        self._pixels = pixels.copy()
        self._pixels.flags.writeable = False

    @classmethod
    def from_array(cls, image: np.ndarray, bgr: bool = False) -> "SourceImage":
        """
        Wrap a decoded image array.

        Args:
            image: uint8 array, greyscale, RGB or RGBA (BGR/BGRA if bgr is True)
            bgr: True for arrays in OpenCV channel order
        """
        return cls(to_rgba(image, bgr=bgr))

    @classmethod
    def from_file(cls, path: str | Path) -> "SourceImage":
        """
        Decode an image file.

        Raises:
            InvalidSource: If the file cannot be read or decoded
        """
        img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if img is None:
            raise InvalidSource(f"could not load image from {path}")
        if img.dtype == np.uint16:
            img = (img >> 8).astype(np.uint8)
        logger.debug("Loaded %s with shape %s", path, img.shape)
        return cls.from_array(img, bgr=True)

    @property
    def natural_width(self) -> int:
        return self._pixels.shape[1]

    @property
    def natural_height(self) -> int:
        return self._pixels.shape[0]

    def to_buffer(self) -> np.ndarray:
        """Rasterize into a new RGBA pixel buffer at natural size."""
        return self._pixels.copy()


class TargetSurface:
    """
    Writable RGBA surface the pipeline draws its result to.

    Resizing clears the surface. Magnification of pixelated output requires
    image smoothing to be disabled; resizing with smoothing enabled uses
    bilinear interpolation.
    """

    def __init__(self, width: int = 1, height: int = 1):
        self.image_smoothing_enabled = True
        self._pixels = np.zeros((1, 1, 4), dtype=np.uint8)
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def interpolation(self) -> int:
        """OpenCV interpolation flag matching the smoothing setting."""
        return cv2.INTER_LINEAR if self.image_smoothing_enabled else cv2.INTER_NEAREST

    def resize(self, width: int, height: int) -> None:
        """Set new dimensions, discarding current content."""
        if width <= 0 or height <= 0:
            raise InvalidConfiguration(f"surface must have positive dimensions, got {width}x{height}")
        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)

    def put_pixels(self, buffer: np.ndarray) -> None:
        """Replace the surface content (and dimensions) with a pixel buffer."""
        check_pixel_buffer(buffer)
        self._pixels = buffer.copy()

    def get_pixels(self) -> np.ndarray:
        """Read back a copy of the current content."""
        return self._pixels.copy()

    def save(self, output_path: str | Path) -> Path:
        """
        Encode the surface as a PNG file.

        The suffix is forced to .png and parent directories are created.

        Returns:
            Path actually written
        """
        path = Path(output_path)
        if path.suffix.lower() != ".png":
            path = path.with_suffix(".png")
        path.parent.mkdir(parents=True, exist_ok=True)

        if not cv2.imwrite(str(path), to_bgra(self._pixels)):
            raise InvalidSource(f"could not write image to {path}")
        logger.debug("Saved %dx%d surface to %s", self.width, self.height, path)
        return path
