"""
Command-Line Interface
======================

Single responsibility: Provide user-friendly CLI for mesh warping and morphing.
"""

import sys
from pathlib import Path

import click

from grid_morph.core.exceptions import GridMorphError
from grid_morph.core.image_io import load_image, save_image
from grid_morph.core.kernels import DEFAULT_KERNEL, AntialiasKernel
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.mesh_io import load_mesh, save_mesh
from grid_morph.core.morpher import create_morpher
from grid_morph.pipeline import MorphConfig, generate_ratios, run_morphing_pipeline
from grid_morph.pipeline.demo import run_circle_square_demo
from grid_morph.utils.logging import get_logger, setup_logger
from grid_morph.visualization.overlay import save_mesh_overlay

logger = get_logger(__name__)

KERNEL_NAMES = [k.value for k in AntialiasKernel]
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def _fail(message: str) -> None:
    """Report an error in red and exit with status 1."""
    click.secho(f"\n✗ {message}", fg='red', bold=True)
    sys.exit(1)


def kernel_option(func):
    return click.option(
        '-k', '--kernel',
        type=click.Choice(KERNEL_NAMES, case_sensitive=False),
        default=DEFAULT_KERNEL.value,
        help=f'Antialiasing kernel (default: {DEFAULT_KERNEL.value})'
    )(func)


def output_option(func):
    return click.option(
        '-o', '--output',
        type=click.Path(path_type=Path),
        required=True,
        help='Output file'
    )(func)


@click.command()
@click.argument('image', type=click.Path(exists=True, path_type=Path))
@click.argument('src_mesh', type=click.Path(exists=True, path_type=Path))
@click.argument('dst_mesh', type=click.Path(exists=True, path_type=Path))
@output_option
@click.option('-t', '--fraction', type=float, default=1.0, help='Warp fraction in [0, 1] (default: 1.0)')
@kernel_option
def warp(image, src_mesh, dst_mesh, output, fraction, kernel):
    """
    Warp IMAGE from SRC_MESH toward DST_MESH.

    \b
    Examples:
        grid-morph warp face.png face.mesh smile.mesh -o smile.png
        grid-morph warp face.png face.mesh smile.mesh -o half.png -t 0.5
    """
    try:
        img = load_image(image)
        src = load_mesh(src_mesh)
        dst = load_mesh(dst_mesh)
        result = create_morpher(AntialiasKernel.from_name(kernel)).warp(img, src, dst, fraction)
        save_image(result, output)
    except GridMorphError as e:
        _fail(f"Error: {e}")

    click.secho(f"✓ Warped image saved to: {output}", fg='green', bold=True)


@click.command()
@click.argument('image1', type=click.Path(exists=True, path_type=Path))
@click.argument('image2', type=click.Path(exists=True, path_type=Path))
@click.argument('mesh1', type=click.Path(exists=True, path_type=Path))
@click.argument('mesh2', type=click.Path(exists=True, path_type=Path))
@output_option
@click.option('-t', '--fraction', type=float, default=0.5, help='Morph fraction in [0, 1] (default: 0.5)')
@kernel_option
def morph(image1, image2, mesh1, mesh2, output, fraction, kernel):
    """
    Morph IMAGE1 (over MESH1) a fraction of the way to IMAGE2 (over MESH2).

    \b
    Examples:
        grid-morph morph circle.png square.png circle.mesh square.mesh -o mid.png
        grid-morph morph a.png b.png a.mesh b.mesh -o out.png -t 0.25 -k bilinear
    """
    try:
        img1 = load_image(image1)
        img2 = load_image(image2)
        m1 = load_mesh(mesh1)
        m2 = load_mesh(mesh2)
        result = create_morpher(AntialiasKernel.from_name(kernel)).morph(img1, img2, m1, m2, fraction)
        save_image(result, output)
    except GridMorphError as e:
        _fail(f"Error: {e}")

    click.secho(f"✓ Morphed image saved to: {output}", fg='green', bold=True)


@click.command()
@click.argument('image1', type=click.Path(exists=True, path_type=Path))
@click.argument('image2', type=click.Path(exists=True, path_type=Path))
@click.argument('mesh1', type=click.Path(exists=True, path_type=Path))
@click.argument('mesh2', type=click.Path(exists=True, path_type=Path))
@click.option(
    '-o', '--output',
    type=click.Path(path_type=Path),
    default=None,
    help='Output directory (default: results/)'
)
@click.option('--frames', type=int, default=29, help='Number of frames (default: 29)')
@click.option(
    '--minimal',
    is_flag=True,
    help='Minimal mode: PNG frames only. Default is full mode (meshes + GIF + heatmap + CSV).'
)
@click.option(
    '--parallel/--serial',
    default=True,
    help='Render frames in a process pool (default: parallel)'
)
@click.option(
    '--functionalize',
    is_flag=True,
    help='Repair meshes that fold over or leave the image before morphing'
)
@kernel_option
@click.option(
    '-q', '--quiet',
    is_flag=True,
    help='Suppress output'
)
@click.option(
    '--log-level',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default='INFO',
    help='Logging level (default: INFO)'
)
def sequence(image1, image2, mesh1, mesh2, output, frames, minimal, parallel,
             functionalize, kernel, quiet, log_level):
    """
    Render a full morph sequence from IMAGE1 to IMAGE2.

    By default, generates full output: PNG frames + meshes + GIF + heatmap + CSV.
    Use --minimal for PNG frames only.

    \b
    Examples:
        # Full mode (default)
        grid-morph sequence circle.png square.png circle.mesh square.mesh

        # 15 frames, PNG only, single process
        grid-morph sequence a.png b.png a.mesh b.mesh --frames 15 --minimal --serial
    """
    verbose = not quiet

    try:
        config = MorphConfig(
            source_image=image1,
            dest_image=image2,
            source_mesh=mesh1,
            dest_mesh=mesh2,
            output_dir=output or Path('results'),
            output_mode='minimal' if minimal else 'full',
            ratios=generate_ratios(frames),
            kernel=kernel,
            functionalize=functionalize,
            parallel=parallel,
            verbose=verbose,
            log_level=log_level.upper()
        )
    except GridMorphError as e:
        _fail(f"Configuration error: {e}")

    try:
        click.echo()
        output_path = run_morphing_pipeline(config)
        click.echo()
        click.secho(f"✓ Success! Results saved to: {output_path}", fg='green', bold=True)
        click.echo()
    except KeyboardInterrupt:
        click.echo()
        click.secho("\n✗ Interrupted by user", fg='yellow')
        sys.exit(130)
    except GridMorphError as e:
        click.echo()
        if log_level.upper() == 'DEBUG':
            logger.exception("Pipeline failed")
        _fail(f"Error: {e}")


@click.command('mesh-new')
@click.argument('nx', type=int)
@click.argument('ny', type=int)
@click.argument('width', type=int)
@click.argument('height', type=int)
@output_option
def mesh_new(nx, ny, width, height, output):
    """
    Write a regular NX x NY mesh spanning a WIDTH x HEIGHT image.

    \b
    Example:
        grid-morph mesh-new 5 5 256 256 -o regular.mesh
    """
    try:
        mesh = MeshGrid.regular(nx, ny, width, height)
        save_mesh(mesh, output)
    except ValueError as e:
        _fail(f"Invalid mesh: {e}")
    except GridMorphError as e:
        _fail(f"Error: {e}")

    click.secho(f"✓ {nx}x{ny} mesh saved to: {output}", fg='green', bold=True)


@click.command('mesh-fix')
@click.argument('mesh', type=click.Path(exists=True, path_type=Path))
@click.argument('width', type=int)
@click.argument('height', type=int)
@output_option
def mesh_fix(mesh, width, height, output):
    """
    Functionalize MESH for a WIDTH x HEIGHT image.

    Clamps every point into the image and removes fold-overs so rows and
    columns are monotonic.

    \b
    Example:
        grid-morph mesh-fix hand-edited.mesh 256 256 -o fixed.mesh
    """
    try:
        m = load_mesh(mesh)
        changed = m.functionalize(width, height)
        save_mesh(m, output)
    except ValueError as e:
        _fail(f"Invalid image size: {e}")
    except GridMorphError as e:
        _fail(f"Error: {e}")

    click.echo(f"Adjusted {changed} point(s)")
    click.secho(f"✓ Functional mesh saved to: {output}", fg='green', bold=True)


@click.command()
@click.argument('image', type=click.Path(exists=True, path_type=Path))
@click.argument('mesh', type=click.Path(exists=True, path_type=Path))
@output_option
@click.option('--radius', type=int, default=2, help='Control-point radius in pixels (default: 2)')
def overlay(image, mesh, output, radius):
    """
    Draw MESH over IMAGE.

    \b
    Example:
        grid-morph overlay face.png face.mesh -o face-mesh.png
    """
    try:
        img = load_image(image)
        m = load_mesh(mesh)
        save_mesh_overlay(img, m, output, point_radius=radius)
    except GridMorphError as e:
        _fail(f"Error: {e}")

    click.secho(f"✓ Overlay saved to: {output}", fg='green', bold=True)


@click.command()
@click.option(
    '-o', '--output',
    type=click.Path(path_type=Path),
    default=Path('circle-square.gif'),
    help='Output GIF (default: circle-square.gif)'
)
@click.option('--frames', type=int, default=15, help='Forward frames (default: 15)')
@click.option('--size', type=int, default=256, help='Canvas size in pixels (default: 256)')
@kernel_option
def demo(output, frames, size, kernel):
    """
    Morph a generated circle into a square and save an animated GIF.

    \b
    Example:
        grid-morph demo -o circle-square.gif
    """
    try:
        path = run_circle_square_demo(output, n_frames=frames, size=size,
                                      kernel=AntialiasKernel.from_name(kernel))
    except KeyboardInterrupt:
        click.secho("\n✗ Interrupted by user", fg='yellow')
        sys.exit(130)
    except GridMorphError as e:
        _fail(f"Error: {e}")

    click.secho(f"✓ Animation saved to: {path}", fg='green', bold=True)


@click.group()
@click.version_option(version='1.0.0', prog_name='grid-morph')
@click.option(
    '--log-level',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default='WARNING',
    help='Console logging level for single-image commands (default: WARNING)'
)
def cli(log_level):
    """
    Grid Morph - Mesh-based image warping and morphing.

    \b
    Output Modes (sequence):
      Full (default):  PNG frames + meshes + GIF + heatmap + CSV
      Minimal:         PNG frames only (use --minimal flag)

    \b
    Examples:
        # Halfway morph between two images
        grid-morph morph a.png b.png a.mesh b.mesh -o mid.png

        # Full morph sequence
        grid-morph sequence a.png b.png a.mesh b.mesh

        # Start a mesh for hand editing
        grid-morph mesh-new 6 6 512 512 -o start.mesh

    \b
    For more help on a specific command:
        grid-morph morph --help
        grid-morph sequence --help
    """
    setup_logger(name='grid_morph', verbose=True, log_level=log_level.upper())


# Register commands
cli.add_command(warp)
cli.add_command(morph)
cli.add_command(sequence)
cli.add_command(mesh_new)
cli.add_command(mesh_fix)
cli.add_command(overlay)
cli.add_command(demo)


def main():
    """Entry point for console_scripts."""
    cli()


if __name__ == '__main__':
    main()
