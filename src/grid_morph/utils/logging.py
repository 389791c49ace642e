"""Structured logging for mesh warping and morphing.

This module provides the centralized logging setup used by every grid_morph
module. Library code only calls :func:`get_logger`; applications (the CLI and
the frame pipeline) call :func:`setup_logger` once to attach handlers.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """Add colors to console output for better readability.

    Uses ANSI escape codes to colorize log levels in terminal output.
    Colors are only applied to the level name, not the entire message.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colored level name.

        Args:
            record: Log record to format

        Returns:
            Formatted log string with ANSI color codes
        """
        original_levelname = record.levelname

        if record.levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[record.levelname]}"
                f"{record.levelname}"
                f"{self.RESET}"
            )

        formatted = super().format(record)

        # Restore so other handlers see the plain level name
        record.levelname = original_levelname

        return formatted


def setup_logger(
    name: str = 'grid_morph',
    verbose: bool = True,
    log_file: Optional[Path] = None,
    log_level: str = "INFO"
) -> logging.Logger:
    """
    Configure structured logging for grid_morph.

    Creates a logger with optional file and console handlers. The file handler
    always logs at DEBUG level, while the console handler respects the
    specified log_level and verbose settings.

    Args:
        name: Logger name (typically 'grid_morph' or a session name)
        verbose: If True, enable console output. If False, only log to file.
        log_file: Optional file path for persistent logs. If None, no file logging.
        log_level: Console logging level: "DEBUG", "INFO", "WARNING", or "ERROR"

    Returns:
        Configured logger instance ready for use

    Example:
        >>> from pathlib import Path
        >>> logger = setup_logger(
        ...     name='grid_morph',
        ...     verbose=True,
        ...     log_file=Path('results/session.log'),
        ...     log_level='INFO'
        ... )
        >>> logger.info("Starting morph sequence")
        INFO: Starting morph sequence

    Notes:
        - File handler logs everything at DEBUG level
        - Console handler respects log_level parameter
        - Calling this multiple times with same name replaces the handlers
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    logger.propagate = False

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(fh)

    if verbose:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(getattr(logging, log_level.upper()))
        ch.setFormatter(ColoredFormatter('%(levelname)s: %(message)s'))
        logger.addHandler(ch)

    return logger


def get_logger(name: str = 'grid_morph') -> logging.Logger:
    """
    Get existing logger instance by name.

    Retrieves a logger that was previously configured with setup_logger().
    If the logger hasn't been set up yet, returns an unconfigured logger
    (which will use Python's default logging behavior).

    Args:
        name: Logger name to retrieve (default: 'grid_morph')

    Returns:
        Logger instance

    Example:
        >>> from grid_morph.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("Warping 128x128 image")
    """
    return logging.getLogger(name)


def close_logger(logger: logging.Logger) -> None:
    """
    Close and detach every handler of a logger set up with setup_logger().

    Releases the session log file so it can be moved or deleted as soon as
    the run that wrote it returns.
    """
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
