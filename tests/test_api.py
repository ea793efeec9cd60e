"""
End-to-end tests for the pixelart_converter library API.

Tests that the library can be used programmatically to convert images
without using the CLI.
"""

import cv2
import numpy as np
import pytest

from pixelart_converter import (
    DEFAULT_PALETTE,
    InvalidConfiguration,
    InvalidSource,
    Pixelator,
    PixelatorConfig,
    SourceImage,
    TargetSurface,
    convert_image,
    normalize_scale,
    plan_pixelation,
)


def _solid(width: int, height: int, rgb: tuple[int, int, int]) -> np.ndarray:
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :] = (*rgb, 255)
    return img


def _noise(width: int, height: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    img = rng.integers(0, 256, (height, width, 4)).astype(np.uint8)
    img[:, :, 3] = 255
    return img


def test_convert_solid_red_end_to_end():
    """A 16x16 red image becomes a 16x16 image of the closest default palette colour."""
    px = Pixelator(SourceImage.from_array(_solid(16, 16, (255, 0, 0))))
    px.convert()

    out = px.target.get_pixels()
    assert out.shape == (16, 16, 4), "Output should keep the source dimensions"
    colours = {tuple(int(c) for c in p) for p in out[:, :, :3].reshape(-1, 3)}
    assert colours <= set(DEFAULT_PALETTE), "Every pixel should be a palette colour"
    assert colours == {(157, 48, 59)}
    assert np.all(out[:, :, 3] == 255)


def test_convert_image_functional():
    """convert_image runs the same pipeline on a plain array without modifying it."""
    img = _noise(50, 30)
    original = img.copy()

    out = convert_image(img)

    assert out.shape == (30, 50, 4)
    assert out.dtype == np.uint8
    assert np.array_equal(img, original), "Input array should not be modified"
    colours = {tuple(int(c) for c in p) for p in out[:, :, :3].reshape(-1, 3)}
    assert colours <= set(DEFAULT_PALETTE)


def test_convert_image_bgr_input():
    """BGR images (without alpha) are handled and returned as RGBA."""
    bgr = np.zeros((20, 20, 3), dtype=np.uint8)
    bgr[:, :] = (0, 0, 255)  # red in BGR order

    config = PixelatorConfig.from_resolution(8, quantize=False)
    out = convert_image(bgr, config, bgr=True)

    assert out.shape == (20, 20, 4)
    assert out[0, 0].tolist() == [255, 0, 0, 255]


def test_convert_image_greyscale_palette_and_bounds():
    config = PixelatorConfig.from_resolution(
        10,
        palette=[(0, 0, 0), (128, 128, 128), (255, 255, 255)],
        max_width=20,
        greyscale=True,
    )
    out = convert_image(_noise(80, 40, seed=4), config)

    assert out.shape == (10, 20, 4)
    colours = {tuple(int(c) for c in p) for p in out[:, :, :3].reshape(-1, 3)}
    assert colours <= {(0, 0, 0), (128, 128, 128), (255, 255, 255)}


def test_convert_image_invalid_input():
    """Invalid inputs raise the matching error kinds."""
    with pytest.raises(InvalidSource, match="None"):
        convert_image(None)

    with pytest.raises(InvalidSource, match="uint8"):
        convert_image(np.zeros((10, 10, 3), dtype=np.float32))

    with pytest.raises(InvalidConfiguration, match="positive"):
        convert_image(np.zeros((0, 10, 4), dtype=np.uint8))

    # Errors are ValueErrors for callers that only catch those
    with pytest.raises(ValueError):
        convert_image(np.zeros((10, 10, 5), dtype=np.uint8))


def test_normalize_scale():
    assert normalize_scale(8) == pytest.approx(0.08)
    assert normalize_scale(1) == pytest.approx(0.01)
    assert normalize_scale(50) == pytest.approx(0.5)
    assert normalize_scale(np.int64(20)) == pytest.approx(0.2)
    for invalid in (0, -3, 51, None, "12", True):
        assert normalize_scale(invalid) == pytest.approx(0.08)


def test_normalize_scale_rejects_fractions():
    """Fractional resolutions fall back to 8 and keep the drawing size bounded."""
    for fraction in (0.001, 0.5, 8.5, 12.0, np.float32(3.0)):
        assert normalize_scale(fraction) == pytest.approx(0.08), f"{fraction!r} should fall back to 8"

    plan = plan_pixelation(400, 400, normalize_scale(0.001))
    assert (plan.final_width, plan.final_height) == (412, 412)

    px = Pixelator(SourceImage.from_array(_solid(400, 400, (0, 0, 0))), scale=0.001)
    assert px.scale == pytest.approx(0.08)


def test_config_direct_construction_is_validated():
    """Building PixelatorConfig directly applies the same checks as from_resolution()."""
    with pytest.raises(InvalidConfiguration, match="scale"):
        PixelatorConfig(scale=0.9)
    with pytest.raises(InvalidConfiguration, match="scale"):
        PixelatorConfig(scale=0.00001)
    with pytest.raises(InvalidConfiguration, match="scale"):
        PixelatorConfig(scale="0.08")
    with pytest.raises(InvalidConfiguration, match="palette"):
        PixelatorConfig(palette=())
    with pytest.raises(InvalidConfiguration):
        PixelatorConfig(palette=((0, 0, 300),))
    with pytest.raises(InvalidConfiguration, match="max_width"):
        PixelatorConfig(max_width=-1)
    with pytest.raises(InvalidConfiguration, match="max_height"):
        PixelatorConfig(max_height=2.5)

    config = PixelatorConfig(scale=0.25, palette=[[1, 2, 3]], max_width=None)
    assert config.palette == ((1, 2, 3),), "Palette should be normalised to a tuple of tuples"
    assert config.max_width == 0


def test_pixelator_requires_source_or_target():
    with pytest.raises(InvalidConfiguration):
        Pixelator()

    px = Pixelator(target=TargetSurface(4, 4))
    assert px.source is None


def test_pixelator_rejects_wrong_types():
    with pytest.raises(InvalidSource, match="SourceImage"):
        Pixelator(source=np.zeros((4, 4, 4), dtype=np.uint8))

    with pytest.raises(InvalidSource, match="TargetSurface"):
        Pixelator(SourceImage.from_array(_solid(4, 4, (1, 2, 3))), target="canvas")

    px = Pixelator(SourceImage.from_array(_solid(4, 4, (1, 2, 3))))
    with pytest.raises(InvalidSource):
        px.set_target(object())


def test_rejected_handles_keep_previous_ones():
    """A failed set_source/set_target leaves the Pixelator usable with its old handles."""
    source = SourceImage.from_array(_solid(8, 8, (255, 0, 0)))
    target = TargetSurface(2, 2)
    px = Pixelator(source, target)

    with pytest.raises(InvalidSource, match="SourceImage"):
        px.set_source("not an image")
    with pytest.raises(InvalidSource, match="TargetSurface"):
        px.set_target(None)

    assert px.source is source
    assert px.target is target

    px.convert()
    assert (target.width, target.height) == (8, 8)



def test_pixelator_setters_chain_and_validate():
    px = Pixelator(SourceImage.from_array(_solid(8, 8, (9, 9, 9))))

    assert px.set_scale(12).set_max_width(100).set_max_height(50) is px
    assert px.scale == pytest.approx(0.12)
    assert (px.config.max_width, px.config.max_height) == (100, 50)

    px.set_scale(99)
    assert px.scale == pytest.approx(0.08)

    px.set_palette([[0, 0, 0], [255, 255, 255]])
    assert px.get_palette() == [(0, 0, 0), (255, 255, 255)]

    with pytest.raises(InvalidConfiguration):
        px.set_palette([])
    with pytest.raises(InvalidConfiguration):
        px.set_max_width(-1)
    assert px.get_palette() == [(0, 0, 0), (255, 255, 255)], "Failed setter should keep the old palette"


def test_pixelator_step_by_step_operations():
    """Individual operations can be run in sequence on the target surface."""
    px = Pixelator(SourceImage.from_array(_noise(64, 32)), max_height=16)
    px.pixelate()
    assert not px.target.image_smoothing_enabled
    assert (px.target.width, px.target.height) == (64, 32)

    px.convert_greyscale().set_palette([(0, 0, 0), (255, 255, 255)]).convert_palette()
    out = px.target.get_pixels()
    assert set(np.unique(out[:, :, :3]).tolist()) <= {0, 255}

    px.resize_image()
    assert (px.target.width, px.target.height) == (32, 16)


def test_pixelator_draw_copies_source_and_constrains():
    src = _noise(40, 20)
    px = Pixelator(SourceImage.from_array(src))
    px.draw()
    assert np.array_equal(px.target.get_pixels(), src)

    px.set_max_width(20).draw()
    assert (px.target.width, px.target.height) == (20, 10)


def test_pixelator_oversized_scale_does_not_compound():
    """Repeated conversions of a large image use the same effective scale."""
    px = Pixelator(SourceImage.from_array(_noise(1000, 100)))
    px.pixelate()
    first = px.target.get_pixels()
    px.pixelate()

    assert px.scale == pytest.approx(0.08)
    assert np.array_equal(px.target.get_pixels(), first)


def test_pixelator_failure_leaves_target_untouched():
    """A failing stage doesn't publish a partial result."""
    target = TargetSurface(5, 5)
    marker = _solid(5, 5, (1, 2, 3))
    target.put_pixels(marker)

    px = Pixelator(target=target)
    with pytest.raises(InvalidSource, match="source"):
        px.convert()
    with pytest.raises(InvalidSource):
        px.convert_greyscale()

    assert np.array_equal(target.get_pixels(), marker)


def test_set_source_path_and_save(tmp_path):
    """Sources load from files and results save as PNG."""
    bgr = np.zeros((12, 18, 3), dtype=np.uint8)
    bgr[:, :] = (255, 0, 0)  # blue in BGR order
    input_path = tmp_path / "input.png"
    cv2.imwrite(str(input_path), bgr)

    px = Pixelator(target=TargetSurface())
    px.set_source_path(input_path)
    assert (px.source.natural_width, px.source.natural_height) == (18, 12)

    saved = px.set_quantize(False).convert().save_image(tmp_path / "out" / "result.jpg")
    assert saved.suffix == ".png"
    assert saved.exists()

    reloaded = cv2.imread(str(saved), cv2.IMREAD_UNCHANGED)
    assert reloaded.shape == (12, 18, 4)
    assert reloaded[0, 0].tolist() == [255, 0, 0, 255]


def test_set_source_path_unreadable(tmp_path):
    bogus = tmp_path / "not-an-image.png"
    bogus.write_text("hello")
    px = Pixelator(target=TargetSurface())
    with pytest.raises(InvalidSource, match="could not load"):
        px.set_source_path(bogus)
