"""
Side-by-side preview of a source image and its pixel art conversion.
"""

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure


def comparison_figure(source: np.ndarray, result: np.ndarray, title: str | None = None) -> Figure:
    """
    Build a figure showing the source and the converted image next to each other.

    Args:
        source: Source RGBA buffer
        result: Converted RGBA buffer
        title: Optional figure title

    Returns:
        matplotlib Figure with two image axes
    """
    fig, axs = plt.subplots(1, 2, figsize=(10, 5))
    axs[0].imshow(source, interpolation="nearest")
    axs[0].set_title(f"Source ({source.shape[1]}x{source.shape[0]})")
    axs[1].imshow(result, interpolation="nearest")
    axs[1].set_title(f"Pixel art ({result.shape[1]}x{result.shape[0]})")
    for ax in axs:
        ax.axis("off")
    if title:
        fig.suptitle(title)
    fig.tight_layout()
    return fig


def show_comparison(source: np.ndarray, result: np.ndarray, title: str | None = None) -> None:
    """Open a window comparing source and result, blocking until it is closed."""
    comparison_figure(source, result, title)
    plt.show()
