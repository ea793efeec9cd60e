"""
Colour similarity metric.
"""

import math
from typing import Sequence


def color_distance(color: Sequence[int], compare: Sequence[int]) -> float:
    """
    Euclidean distance between two RGB colours.

    The lower the result, the more similar the colours. Ranges from 0 (equal)
    to 441.67... (black against white).

    Args:
        color: First RGB colour
        compare: Second RGB colour

    Returns:
        Distance in RGB space
    """
    # int() so numpy uint8 channels don't wrap on subtraction
    d = 0
    for i in range(3):
        delta = int(color[i]) - int(compare[i])
        d += delta * delta
    return math.sqrt(d)
