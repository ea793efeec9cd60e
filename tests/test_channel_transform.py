"""
Tests for the in-place greyscale and palette quantization transforms.
"""

import numpy as np
import pytest

from pixelart_converter import DEFAULT_PALETTE, InvalidConfiguration, greyscale, quantize


def _random_buffer(width: int, height: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, (height, width, 4)).astype(np.uint8)


def test_greyscale_averages_channels():
    buf = np.array([[[10, 20, 30, 255], [1, 1, 2, 7], [1, 2, 2, 0]]], dtype=np.uint8)
    out = greyscale(buf)

    assert out is buf, "greyscale should work in place"
    assert buf[0, 0].tolist() == [20, 20, 20, 255]
    assert buf[0, 1].tolist() == [1, 1, 1, 7]
    assert buf[0, 2].tolist() == [2, 2, 2, 0]


def test_greyscale_keeps_alpha():
    buf = _random_buffer(13, 9)
    alpha = buf[:, :, 3].copy()
    greyscale(buf)
    assert np.array_equal(buf[:, :, 3], alpha)
    assert np.all(buf[:, :, 0] == buf[:, :, 1])
    assert np.all(buf[:, :, 1] == buf[:, :, 2])


def test_greyscale_idempotent():
    once = greyscale(_random_buffer(32, 32, seed=5))
    twice = greyscale(once.copy())
    assert np.array_equal(once, twice)


def test_quantize_black_white():
    """Dark grey maps to black with a black/white palette."""
    buf = np.array([[[10, 10, 10, 128], [250, 240, 230, 255]]], dtype=np.uint8)
    out = quantize(buf, [(0, 0, 0), (255, 255, 255)])

    assert out is buf, "quantize should work in place"
    assert buf[0, 0].tolist() == [0, 0, 0, 128]
    assert buf[0, 1].tolist() == [255, 255, 255, 255]


def test_quantize_outputs_only_palette_colours():
    buf = _random_buffer(40, 30, seed=2)
    alpha = buf[:, :, 3].copy()
    quantize(buf, DEFAULT_PALETTE)

    colours = {tuple(int(c) for c in px) for px in buf[:, :, :3].reshape(-1, 3)}
    assert colours <= set(DEFAULT_PALETTE)
    assert np.array_equal(buf[:, :, 3], alpha)


def test_quantize_idempotent_for_default_palette():
    once = quantize(_random_buffer(24, 24, seed=9), DEFAULT_PALETTE)
    twice = quantize(once.copy(), DEFAULT_PALETTE)
    assert np.array_equal(once, twice)


def test_quantize_duplicate_palette():
    buf = np.full((4, 4, 4), 100, dtype=np.uint8)
    quantize(buf, [(100, 100, 100), (100, 100, 100)])
    assert np.all(buf == 100)


def test_quantize_empty_palette_leaves_buffer_untouched():
    buf = _random_buffer(8, 8)
    original = buf.copy()
    with pytest.raises(InvalidConfiguration):
        quantize(buf, [])
    assert np.array_equal(buf, original)
