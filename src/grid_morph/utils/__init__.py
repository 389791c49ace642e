"""Utility functions and helpers.

Logging, parallelization, timing context managers, and other shared utilities.
"""

from .logging import close_logger, setup_logger, get_logger
from .context import log_duration
from .parallel import create_frame_pool, default_worker_count, frame_chunksize, frame_pool_size

__all__ = [
    "setup_logger",
    "close_logger",
    "get_logger",
    "log_duration",
    "create_frame_pool",
    "default_worker_count",
    "frame_chunksize",
    "frame_pool_size",
]
