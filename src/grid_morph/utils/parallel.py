"""
Parallelization Utilities
==========================

Single responsibility: Size process pools for frame rendering.
"""

import math
import multiprocessing as mp
from typing import Optional

from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)


def default_worker_count() -> int:
    """Worker processes to use when none are requested: all cores but one."""
    return max(1, mp.cpu_count() - 1)


def frame_pool_size(n_frames: int, max_workers: Optional[int] = None) -> int:
    """
    Number of processes to render ``n_frames`` frames.

    Starts from :func:`default_worker_count`, is capped by ``max_workers``
    and never exceeds the number of frames.

    Example:
        >>> frame_pool_size(3, max_workers=8)  # On 8-core system
        3
    """
    if n_frames < 1:
        raise ValueError(f"Need at least one frame to size a pool, got {n_frames}")

    workers = default_worker_count()
    if max_workers is not None:
        workers = min(workers, max_workers)
    return max(1, min(workers, n_frames))


def frame_chunksize(n_frames: int, workers: int) -> int:
    """
    Frames handed to a worker per dispatch.

    Each task carries both input images, so frames are dealt out in a few
    rounds per worker rather than one at a time or all at once.
    """
    return max(1, math.ceil(n_frames / (workers * 4)))


def create_frame_pool(n_frames: int, max_workers: Optional[int] = None):
    """
    Create a multiprocessing pool sized for rendering ``n_frames`` frames.

    Returns:
        multiprocessing.Pool instance (use with context manager)

    Example:
        >>> with create_frame_pool(len(tasks), max_workers=4) as pool:
        ...     frames = pool.map(render_frame_worker, tasks)
    """
    workers = frame_pool_size(n_frames, max_workers)
    logger.debug(
        f"Creating frame pool with {workers} processes for {n_frames} frames "
        f"({mp.cpu_count()} cores, max_workers={max_workers})"
    )
    return mp.Pool(processes=workers)
