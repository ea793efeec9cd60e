"""
Palette handling and nearest-colour search.

The search is a brute-force scan with a fixed tie-break: of several palette
entries at the same distance, the one appearing last in the palette wins.
Output against a fixed palette is reproducible only while this holds.
"""

import logging
import re
from numbers import Integral
from typing import Sequence

import numpy as np

from pixelart_converter.color_distance import color_distance
from pixelart_converter.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]
Palette = tuple[RGB, ...]

DEFAULT_PALETTE: Palette = (
    (140, 143, 174),
    (88, 69, 99),
    (62, 33, 55),
    (154, 99, 72),
    (215, 155, 125),
    (245, 237, 186),
    (192, 199, 65),
    (100, 125, 52),
    (228, 148, 58),
    (157, 48, 59),
    (210, 100, 113),
    (112, 55, 127),
    (126, 196, 193),
    (52, 133, 157),
    (23, 67, 75),
    (31, 14, 28),
)

# Colours matched per vectorised block, bounds the (N, P, 3) distance array
_MATCH_CHUNK = 65536

_HEX_TOKEN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def validate_palette(palette: Sequence[Sequence[int]] | None) -> Palette:
    """
    Check a palette and return it as an immutable tuple of RGB tuples.

    Args:
        palette: Ordered sequence of (R, G, B) colours, channels 0-255

    Returns:
        The palette as a tuple of int tuples

    Raises:
        InvalidConfiguration: If the palette is empty or an entry is not a valid RGB colour
    """
    if palette is None or len(palette) == 0:
        raise InvalidConfiguration("palette must contain at least one colour")

    normalized = []
    for i, entry in enumerate(palette):
        if isinstance(entry, (str, bytes)) or not hasattr(entry, "__len__") or len(entry) != 3:
            raise InvalidConfiguration(f"palette entry {i} must be an (R, G, B) triple, got {entry!r}")
        channels = []
        for value in entry:
            if isinstance(value, bool) or not isinstance(value, (Integral, np.integer)):
                raise InvalidConfiguration(f"palette entry {i} has a non-integer channel: {entry!r}")
            if not 0 <= int(value) <= 255:
                raise InvalidConfiguration(f"palette entry {i} has a channel outside 0-255: {entry!r}")
            channels.append(int(value))
        normalized.append((channels[0], channels[1], channels[2]))

    return tuple(normalized)


def nearest_color(palette: Sequence[RGB], color: Sequence[int]) -> RGB:
    """
    Find the palette colour closest to the given colour.

    Ties go to the last matching palette entry.

    Args:
        palette: Non-empty ordered palette
        color: RGB colour to match

    Returns:
        The selected palette entry

    Raises:
        InvalidConfiguration: If the palette is empty
    """
    if len(palette) == 0:
        raise InvalidConfiguration("cannot match a colour against an empty palette")

    selected = palette[0]
    current_sim = color_distance(color, palette[0])
    for candidate in palette:
        sim = color_distance(color, candidate)
        if sim <= current_sim:
            selected = candidate
            current_sim = sim

    return selected


def nearest_palette_indices(colors: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """
    Vectorised nearest_color() over many colours at once.

    Compares exact integer squared distances, so ties resolve exactly as in
    the scalar scan (last palette entry wins).

    Args:
        colors: (N, 3) array of RGB colours
        palette: (P, 3) array of palette colours, P > 0

    Returns:
        (N,) array of palette indices
    """
    if palette.shape[0] == 0:
        raise InvalidConfiguration("cannot match colours against an empty palette")

    pal = palette.astype(np.int32)
    last = pal.shape[0] - 1
    indices = np.empty(colors.shape[0], dtype=np.intp)

    for start in range(0, colors.shape[0], _MATCH_CHUNK):
        block = colors[start:start + _MATCH_CHUNK].astype(np.int32)
        diff = block[:, None, :] - pal[None, :, :]
        dist2 = (diff * diff).sum(axis=2)
        # argmin returns the first minimum, search the reversed palette to get the last
        indices[start:start + block.shape[0]] = last - np.argmin(dist2[:, ::-1], axis=1)

    return indices


def parse_hex_palette(text: str) -> Palette:
    """
    Parse a palette from hex colour tokens.

    Tokens are separated by commas and/or whitespace and may be written as
    '#rrggbb', '#rgb', 'rrggbb' or 'rgb'.

    Raises:
        InvalidConfiguration: On malformed tokens or when no colours are given
    """
    colors = []
    for token in re.split(r"[\s,]+", text.strip()):
        if not token:
            continue
        match = _HEX_TOKEN.match(token)
        if match is None:
            raise InvalidConfiguration(f"invalid hex colour: {token!r}")
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        colors.append((int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)))

    logger.debug("Parsed %d palette colours", len(colors))
    return validate_palette(colors)
