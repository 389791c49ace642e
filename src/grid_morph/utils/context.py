"""
Context Manager Utilities
==========================

Single responsibility: Provide reusable context managers for common patterns.
"""

import logging
import time
from contextlib import contextmanager
from typing import Optional

from grid_morph.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def log_duration(label: str, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
    """
    Context manager that logs how long its block took.

    The duration is logged even when the block raises; the exception
    propagates unchanged.

    Args:
        label: Description of the timed work
        log: Logger to write to (default: this module's logger)
        level: Logging level for the message

    Yields:
        None

    Example:
        >>> with log_duration("Rendering frames"):
        ...     frames = morpher.batch_morph(img1, img2, mesh1, mesh2, ratios)
    """
    target = log or logger
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        target.log(level, f"{label} took {elapsed:.2f}s")
