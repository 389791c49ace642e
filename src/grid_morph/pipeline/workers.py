"""
Pipeline Worker Functions
==========================

Single responsibility: Output layout helpers and parallel frame rendering.

Worker functions must be module-level for multiprocessing.Pool to pickle them.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from grid_morph.core.exceptions import GridMorphError
from grid_morph.core.image_io import save_image
from grid_morph.core.morpher import ImageMorpher
from grid_morph.core.pixel_buffer import PixelBuffer
from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)


# ==============================================================================
# Helper Functions
# ==============================================================================

def create_pair_output_structure(
    output_dir: Path,
    src_name: str,
    dst_name: str,
    timestamp: Optional[str] = None
) -> Tuple[Path, Path, Path, Path, Path]:
    """
    Create output directory structure for an image pair.

    Structure:
        results/<timestamp>/<src>_<dst>/
        ├── session.log
        ├── png/
        ├── mesh/
        ├── mesh_displacement.png
        ├── statistics.csv
        └── animation.gif

    Args:
        output_dir: Base output directory
        src_name: Source image name (filename without extension)
        dst_name: Destination image name (filename without extension)
        timestamp: Optional timestamp string (generated if None)
                   Used for batch mode to group all pairs under same timestamp

    Returns:
        Tuple of (pair_dir, png_dir, mesh_dir, log_file, gif_file)

    Example:
        >>> pair_dir, png_dir, mesh_dir, log, gif = create_pair_output_structure(
        ...     Path("results"), "circle", "square", "20231215_143022"
        ... )
        >>> pair_dir
        PosixPath('results/20231215_143022/circle_square')
    """
    if timestamp is None:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')

    pair_dir = output_dir / timestamp / f"{src_name}_{dst_name}"

    png_dir = pair_dir / 'png'
    mesh_dir = pair_dir / 'mesh'

    png_dir.mkdir(parents=True, exist_ok=True)
    mesh_dir.mkdir(parents=True, exist_ok=True)

    log_file = pair_dir / 'session.log'
    gif_file = pair_dir / 'animation.gif'

    logger.debug(f"Created output structure: {pair_dir}")

    return pair_dir, png_dir, mesh_dir, log_file, gif_file


def generate_morph_filename(src_name: str, dst_name: str, t: float) -> str:
    """
    Create permille notation filename for a morph frame.

    The source weight is ``1 - t`` and the destination weight ``t``.
    Format: "<src>-<permille_src>_<dst>-<permille_dst>"

    Args:
        src_name: Source image name
        dst_name: Destination image name
        t: Morph fraction (0.0 to 1.0)

    Returns:
        Filename string (without extension)

    Example:
        >>> generate_morph_filename("circle", "square", 0.25)
        'circle-750_square-250'
        >>> generate_morph_filename("circle", "square", 0.0)
        'circle-1000_square-000'
    """
    dst_permille = int(round(t * 1000))
    src_permille = 1000 - dst_permille

    return f"{src_name}-{src_permille:03d}_{dst_name}-{dst_permille:03d}"


# ==============================================================================
# Parallel Worker Functions (must be module-level for pickling)
# ==============================================================================

def _render_frame_worker(task: Tuple) -> Tuple[str, Optional[PixelBuffer]]:
    """
    Render and save a single morph frame (worker for parallel processing).

    Must be module-level for multiprocessing.Pool to pickle it.

    Args:
        task: Tuple of (src_img, dst_img, src_mesh, dst_mesh, t, kernel, png_path, name)

    Returns:
        Tuple of (name, frame), with frame None if rendering or saving failed
    """
    src_img, dst_img, src_mesh, dst_mesh, t, kernel, png_path, name = task

    try:
        frame = ImageMorpher(kernel).morph(src_img, dst_img, src_mesh, dst_mesh, t)
        save_image(frame, png_path)
        return (name, frame)
    except GridMorphError as e:
        logger.error(f"Failed to render {name}.png: {e}")
        return (name, None)
