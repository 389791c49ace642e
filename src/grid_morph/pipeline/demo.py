"""
Circle-to-Square Demo
=====================

Single responsibility: Generate a self-contained morph example.

A green-and-white circle in the upper-left quadrant morphs into a
yellow-and-white square in the lower-right quadrant. Images and meshes are
generated in memory, so the demo needs no input files.
"""

import logging
import math
from pathlib import Path
from typing import Tuple, Union

import numpy as np

from grid_morph.core.exceptions import ValidationError
from grid_morph.core.kernels import DEFAULT_KERNEL, AntialiasKernel
from grid_morph.core.mesh import MeshGrid
from grid_morph.core.morpher import create_morpher
from grid_morph.core.pixel_buffer import ChannelLayout, PixelBuffer
from grid_morph.utils.context import log_duration
from grid_morph.utils.logging import get_logger
from grid_morph.visualization.animation import save_animated_gif

logger = get_logger(__name__)


def draw_circle(width: int, height: int, cx: int, cy: int, r: int) -> PixelBuffer:
    """Black image with a circle shading from white (center) to green (rim)."""
    ys, xs = np.mgrid[0:height, 0:width]
    dist = (xs - cx) ** 2 + (ys - cy) ** 2
    r2 = r * r

    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, 3] = 255

    inside = dist <= r2
    rb = (255 - (255 * dist[inside]) // r2).astype(np.uint8)
    pixels[inside, 0] = rb
    pixels[inside, 1] = 255
    pixels[inside, 2] = rb

    return PixelBuffer(pixels, ChannelLayout.NRGBA)


def draw_square(width: int, height: int, cx: int, cy: int, edge: int) -> PixelBuffer:
    """Black image with a square shading from white (center) to yellow (edges)."""
    ys, xs = np.mgrid[0:height, 0:width]
    e2 = edge // 2

    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, 3] = 255

    inside = (xs >= cx - e2) & (xs < cx + e2) & (ys >= cy - e2) & (ys < cy + e2)
    dist = np.abs(cx - xs[inside]) + np.abs(cy - ys[inside])
    b = (255 - (255 * dist) // edge).astype(np.uint8)
    pixels[inside, 0] = 255
    pixels[inside, 1] = 255
    pixels[inside, 2] = b

    return PixelBuffer(pixels, ChannelLayout.NRGBA)


def create_square_mesh(width: int, height: int, cx: int, cy: int, edge: int) -> MeshGrid:
    """5x5 mesh whose inner lines trace the edges and center of a square."""
    e2 = edge // 2
    xs = [0, cx - e2, cx, cx + e2 - 1, width - 1]
    ys = [0, cy - e2, cy, cy + e2 - 1, height - 1]
    return MeshGrid.from_image_points([[(x, y) for x in xs] for y in ys])


def create_circle_mesh(width: int, height: int, cx: int, cy: int, r: int) -> MeshGrid:
    """
    5x5 mesh wrapped around a circle.

    Starts from the mesh of the inscribed square, then pushes the north,
    south, east and west midpoints out to the circle.
    """
    inscribed = int(2 * (r / math.sqrt(2)))
    mesh = create_square_mesh(width, height, cx, cy, inscribed)
    mesh.set_image_point(2, 1, (cx, cy - r))  # North
    mesh.set_image_point(2, 3, (cx, cy + r))  # South
    mesh.set_image_point(3, 2, (cx + r, cy))  # East
    mesh.set_image_point(1, 2, (cx - r, cy))  # West
    return mesh


def prepare_circle_square(size: int = 256) -> Tuple[PixelBuffer, PixelBuffer, MeshGrid, MeshGrid]:
    """
    Build the demo's images and meshes for a square canvas.

    Returns:
        Tuple of (circle_img, square_img, circle_mesh, square_mesh)
    """
    if size < 16:
        raise ValidationError(f"Demo canvas must be at least 16 pixels, got {size}")

    # Geometry scales with the canvas; 256 gives circle (96, 96, r=64) and square (160, 160, 128)
    c_center, radius = size * 3 // 8, size // 4
    s_center, edge = size * 5 // 8, size // 2

    circle_img = draw_circle(size, size, c_center, c_center, radius)
    circle_mesh = create_circle_mesh(size, size, c_center, c_center, radius)
    square_img = draw_square(size, size, s_center, s_center, edge)
    square_mesh = create_square_mesh(size, size, s_center, s_center, edge)

    return circle_img, square_img, circle_mesh, square_mesh


def run_circle_square_demo(
    output_path: Union[str, Path],
    n_frames: int = 15,
    size: int = 256,
    kernel: AntialiasKernel = DEFAULT_KERNEL
) -> Path:
    """
    Morph a circle into a square and save the bouncing animation as a GIF.

    Args:
        output_path: Destination ``.gif`` file
        n_frames: Number of forward frames (the animation plays
                  ``2 * n_frames - 1`` frames)
        size: Width and height of the canvas
        kernel: Antialiasing kernel

    Returns:
        Path of the written GIF
    """
    if n_frames < 2:
        raise ValidationError(f"n_frames must be >= 2, got {n_frames}")

    circle_img, square_img, circle_mesh, square_mesh = prepare_circle_square(size)
    ratios = [i / (n_frames - 1) for i in range(n_frames)]

    morpher = create_morpher(kernel)
    with log_duration(f"Morphing circle to square ({n_frames} frames)", logger, logging.INFO):
        frames = morpher.batch_morph(circle_img, square_img, circle_mesh, square_mesh, ratios)

    return save_animated_gif(frames, output_path, frame_ms=100, hold_ms=1000, bounce=True)
