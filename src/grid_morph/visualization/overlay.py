"""
Mesh Overlay
============

Single responsibility: Draw a control-point mesh on top of an image.
"""

from pathlib import Path
from typing import Tuple, Union

from PIL import Image, ImageDraw

from grid_morph.core.exceptions import ImageSaveError
from grid_morph.core.image_io import to_pil_image
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.pixel_buffer import PixelBuffer
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)

Color = Tuple[int, int, int, int]


def render_mesh_overlay(
    buffer: PixelBuffer,
    mesh: MeshGrid,
    color: Color = (255, 0, 0, 255),
    point_radius: int = 2,
    line_width: int = 1
) -> Image.Image:
    """
    Draw mesh lines and control points over an image.

    Args:
        buffer: Background image
        mesh: Mesh laid over the image
        color: RGBA color for lines and points
        point_radius: Radius of each control-point dot in pixels (0 = no dots)
        line_width: Width of mesh lines in pixels

    Returns:
        RGBA Pillow image the size of ``buffer``
    """
    img = to_pil_image(buffer).convert('RGBA')
    draw = ImageDraw.Draw(img)

    points = mesh.points()

    # Horizontal lines (rows), then vertical lines (columns)
    for row in points:
        draw.line([(p.x, p.y) for p in row], fill=color, width=line_width)
    for col in range(mesh.nx):
        draw.line([(row[col].x, row[col].y) for row in points], fill=color, width=line_width)

    if point_radius > 0:
        for row in points:
            for p in row:
                draw.ellipse(
                    [p.x - point_radius, p.y - point_radius, p.x + point_radius, p.y + point_radius],
                    fill=color
                )

    logger.debug(f"Drew {mesh.nx}x{mesh.ny} mesh over {buffer!r}")
    return img


def save_mesh_overlay(
    buffer: PixelBuffer,
    mesh: MeshGrid,
    output_path: Union[str, Path],
    **kwargs
) -> Path:
    """
    Render a mesh overlay and save it.

    Args:
        buffer: Background image
        mesh: Mesh laid over the image
        output_path: Destination file (format from suffix)
        **kwargs: Passed to :func:`render_mesh_overlay`

    Returns:
        Path of the written file

    Raises:
        ImageSaveError: If the file cannot be written
    """
    output_path = Path(output_path)
    img = render_mesh_overlay(buffer, mesh, **kwargs)

    if output_path.suffix.lower() in ('.jpg', '.jpeg'):
        img = img.convert('RGB')

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        img.save(output_path)
    except (OSError, ValueError) as e:
        raise ImageSaveError(f"Failed to save mesh overlay to {output_path}: {e}") from e

    return output_path
