"""CLI interface for stack6d."""

import sys
from pathlib import Path

import click
from loguru import logger

from stack6d.dimensions import Dimensions
from stack6d.errors import Stack6DError
from stack6d.formats import data_path_for, save_array, validate_file
from stack6d.generators import PATTERN_PRESETS, GeneratorConfig, generate
from stack6d.loader import get_file_info, load_full_array
from stack6d.thumb import save_frame_thumbnail


def _configure_logging(verbose):
    logger.enable("stack6d")
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _fail(message):
    click.echo(f"✗ {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """stack6d - 6D microscopy array tools."""
    _configure_logging(verbose)


@cli.command(name="generate")
@click.option(
    "--type",
    "pattern_name",
    type=click.Choice(sorted(PATTERN_PRESETS), case_sensitive=False),
    required=True,
    help="Pattern used for every channel",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("test.meta"),
    show_default=True,
    help="Metadata file path; samples go to the same name with .data",
)
@click.option("--time", "time_points", default=3, show_default=True, type=int)
@click.option("--positions", default=1, show_default=True, type=int)
@click.option("--z-slices", default=2, show_default=True, type=int)
@click.option("--channels", default=2, show_default=True, type=int)
@click.option("--height", default=64, show_default=True, type=int)
@click.option("--width", default=64, show_default=True, type=int)
@click.option("--pixel-size", default=0.65, show_default=True, type=float)
@click.option("--time-interval", default=2.0, show_default=True, type=float)
@click.option("--base-intensity", default=200.0, show_default=True, type=float)
@click.option("--noise-level", default=15.0, show_default=True, type=float)
@click.option("--seed", type=int, help="Seed for the additive noise")
def generate_cmd(
    pattern_name,
    output,
    time_points,
    positions,
    z_slices,
    channels,
    height,
    width,
    pixel_size,
    time_interval,
    base_intensity,
    noise_level,
    seed,
):
    """
    Generate a synthetic 6D array and save it in split format.

    All channels use the pattern chosen with --type.
    """
    dims = Dimensions(time_points, positions, z_slices, channels, height, width)
    pattern = PATTERN_PRESETS[pattern_name.lower()]

    try:
        config = (
            GeneratorConfig.new(dims)
            .with_channels([(f"Channel_{i + 1}", pattern) for i in range(channels)])
            .with_pixel_size(pixel_size)
            .with_time_interval(time_interval)
            .with_base_intensity(base_intensity)
            .with_noise_level(noise_level)
            .with_seed(seed)
        )
        logger.info(f"Generating {dims} array with {pattern_name} pattern")
        array = generate(config)
        save_array(array, output)
    except (Stack6DError, OSError) as e:
        _fail(f"Error generating {output}: {e}")

    click.echo(f"✓ Generated: {output} and {data_path_for(output)}")


@cli.command()
@click.argument("input", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(input):
    """
    Validate a split-format file without loading its samples.
    """
    try:
        metadata = validate_file(input)
        meta_size, data_size = get_file_info(input)
    except (Stack6DError, OSError) as e:
        _fail(f"Error validating {input}: {e}")

    dims = metadata.dimensions
    click.echo("✓ File validation successful")
    click.echo(f"Dimensions (T×P×Z×C×Y×X): {dims}")
    click.echo(f"Format version: {metadata.format_version}")
    click.echo(f"Created at: {metadata.created_at}")
    click.echo(f"Data type: {metadata.data_type}")
    click.echo(f"Files: {meta_size} + {data_size} bytes")


@cli.command()
@click.argument("input", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--saturation",
    default=1000.0,
    show_default=True,
    type=float,
    help="Saturation threshold for the per-channel statistics",
)
def inspect(input, saturation):
    """
    Load a split-format file and print calibration and frame statistics.

    Statistics are computed for every channel at T=0, P=0, Z=0.
    """
    try:
        array = load_full_array(input)
    except (Stack6DError, OSError) as e:
        _fail(f"Error loading {input}: {e}")

    dims = array.dimensions
    click.echo(f"Dimensions (T×P×Z×C×Y×X): {dims}")
    click.echo(f"Total elements: {dims.total_elements()}")
    click.echo(f"Memory usage: {array.memory_usage_mb()} MB")
    click.echo(f"Pixel size: {array.pixel_size_um:.3f} μm")
    click.echo(f"Time interval: {array.time_interval_s:.1f} s")
    click.echo(f"Data type: {array.data_type}")

    click.echo("\nChannels:")
    for i, name in enumerate(array.channel_names):
        click.echo(f"  {i}: {name}")

    click.echo("\nFrame statistics (T=0, P=0, Z=0):")
    for c in range(dims.channel):
        stats = array.get_frame_stats(0, 0, 0, c, saturation)
        click.echo(
            f"  Channel {c}: min={stats.min:.1f}, max={stats.max:.1f}, "
            f"mean={stats.mean:.1f}, std={stats.std_dev:.1f}"
        )


@cli.command()
@click.argument("input", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--t", "t", default=0, show_default=True, type=int)
@click.option("--p", "p", default=0, show_default=True, type=int)
@click.option("--z", "z", default=0, show_default=True, type=int)
@click.option("--c", "c", default=0, show_default=True, type=int)
@click.option("--saturation", default=1000.0, show_default=True, type=float)
def stats(input, t, p, z, c, saturation):
    """
    Print statistics for a single frame.
    """
    try:
        array = load_full_array(input)
        frame_stats = array.get_frame_stats(t, p, z, c, saturation)
    except (Stack6DError, OSError) as e:
        _fail(f"Error reading frame from {input}: {e}")

    for key, value in frame_stats.to_dict().items():
        click.echo(f"{key}: {value}")


@cli.command()
@click.argument("input", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="PNG path (default: <input>.t<T>p<P>z<Z>c<C>.thumb.png)",
)
@click.option("--t", "t", default=0, show_default=True, type=int)
@click.option("--p", "p", default=0, show_default=True, type=int)
@click.option("--z", "z", default=0, show_default=True, type=int)
@click.option("--c", "c", default=0, show_default=True, type=int)
@click.option(
    "--max-size", default=512, show_default=True, type=click.IntRange(min=1)
)
def thumb(input, output, t, p, z, c, max_size):
    """
    Render a single frame as a PNG thumbnail.
    """
    if output is None:
        output = input.with_name(f"{input.stem}.t{t}p{p}z{z}c{c}.thumb.png")

    try:
        array = load_full_array(input)
        output_path = save_frame_thumbnail(
            array, output, t, p, z, c, max_size=(max_size, max_size)
        )
    except (Stack6DError, OSError) as e:
        _fail(f"Error rendering {input}: {e}")

    click.echo(f"✓ Thumbnail saved: {output_path}")


if __name__ == "__main__":
    cli()
