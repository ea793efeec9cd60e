#!/usr/bin/env python3
"""
Pixel Art Converter - Command Line Interface

Converts an image into pixel art: a blocky, low-resolution rendering of the
source, optionally in greyscale, with its colours mapped to a fixed palette.

The image is shrunk by the scale factor and magnified back to its original
size without smoothing, so every block of the output carries a single colour.
Each colour is then replaced by the closest palette colour (Euclidean distance
in RGB), and the result is shrunk to fit the maximum width/height if given.
"""

import logging
from pathlib import Path

import click

from pixelart_converter.api import Pixelator
from pixelart_converter.errors import PixelArtError
from pixelart_converter.palette_matching import parse_hex_palette
from pixelart_converter.surfaces import SourceImage


@click.command(context_settings=dict(show_default=True))
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.argument('output_path', type=click.Path(dir_okay=False))
@click.option('--scale', '-s', type=int, default=8,
              help='Pixel resolution 1-50; lower values give larger blocks')
@click.option('--palette', '-p', type=str, default=None,
              help='Palette as hex colours, e.g. "#000000,#ffffff" (default: built-in 16 colours)')
@click.option('--no-palette', is_flag=True, help='Keep the pixelated colours, skip palette mapping')
@click.option('--greyscale', '-g', is_flag=True, help='Convert to greyscale before palette mapping')
@click.option('--max-width', '-W', type=click.IntRange(min=0), default=0,
              help='Maximum output width, 0 for no limit')
@click.option('--max-height', '-H', type=click.IntRange(min=0), default=0,
              help='Maximum output height, 0 for no limit (takes precedence over width)')
@click.option('--preview', is_flag=True, help='Show the source and the result side by side')
@click.option('--verbose', '-v', is_flag=True, help='Log pipeline details to stderr')
def main(input_path: str, output_path: str, scale: int, palette: str | None, no_palette: bool,
         greyscale: bool, max_width: int, max_height: int, preview: bool, verbose: bool) -> None:
    """Convert an image to pixel art.

    INPUT_PATH is the path to the input image file.

    OUTPUT_PATH is where the PNG result is saved (the suffix is forced to .png).

    Scale values outside 1-50 fall back to the default of 8.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        source = SourceImage.from_file(input_path)
        click.echo(f"Loaded image {source.natural_width}x{source.natural_height}")

        pixelator = Pixelator(
            source,
            scale=scale,
            palette=parse_hex_palette(palette) if palette else None,
            max_width=max_width,
            max_height=max_height,
            greyscale=greyscale,
            quantize=not no_palette,
        )
        if palette and not no_palette:
            click.echo(f"Using {len(pixelator.get_palette())}-colour palette")

        pixelator.convert()
        saved_path = pixelator.save_image(output_path)

    except (PixelArtError, OSError) as e:
        click.echo(f"Error processing image: {e}", err=True)
        raise SystemExit(1)

    target = pixelator.target
    click.echo(f"Pixel art {target.width}x{target.height} saved to {saved_path}")

    if preview:
        from pixelart_converter.preview import show_comparison
        show_comparison(source.to_buffer(), target.get_pixels(), title=Path(input_path).name)


if __name__ == "__main__":
    main()
