"""Logging configuration for the vscreen CLI.

Provides:
- Log levels driven by --verbose (INFO) and --debug (DEBUG)
- xrandr subprocess call tracing
- Command timing logs
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Optional


# Default log format
DEFAULT_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"

LOGGER_NAME = "vscreen"


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        """Format log record with a colored level name."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Configure the ``vscreen`` logger.

    Module loggers (``vscreen.xrandr``, ``vscreen.pool``, ...) propagate to
    it, so this is the only place handlers are attached.

    Args:
        verbose: Enable verbose logging (INFO level)
        debug: Enable debug logging (DEBUG level), including every xrandr call

    Returns:
        Configured logger instance

    Examples:
        >>> logger = setup_logging(debug=True)
        >>> logger.debug("Querying outputs")
        2026-01-12 10:30:45 [DEBUG] vscreen:1: Querying outputs
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()

    if debug:
        logger.setLevel(logging.DEBUG)
        log_format = DEBUG_FORMAT
    elif verbose:
        logger.setLevel(logging.INFO)
        log_format = VERBOSE_FORMAT
    else:
        logger.setLevel(logging.WARNING)
        log_format = DEFAULT_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logger.level)

    if sys.stderr.isatty():
        formatter = ColoredFormatter(log_format)
    else:
        formatter = logging.Formatter(log_format)

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def log_subprocess_call(cmd: list, result: Any, logger: logging.Logger) -> None:
    """Trace a finished subprocess call at DEBUG level.

    Args:
        cmd: Command list
        result: subprocess.CompletedProcess result
        logger: Logger instance
    """
    logger.debug(f"Subprocess call: {' '.join(str(c) for c in cmd)}")
    logger.debug(f"  Return code: {result.returncode}")

    stdout = getattr(result, 'stdout', None)
    if stdout:
        stdout = stdout if isinstance(stdout, str) else stdout.decode()
        logger.debug(f"  stdout: {stdout[:200]}...")  # First 200 chars

    stderr = getattr(result, 'stderr', None)
    if stderr:
        stderr = stderr if isinstance(stderr, str) else stderr.decode()
        logger.debug(f"  stderr: {stderr[:200]}...")


@contextmanager
def log_timing(operation: str, logger: logging.Logger):
    """Context manager for logging operation timing.

    Args:
        operation: Operation description
        logger: Logger instance

    Examples:
        >>> with log_timing("--output 1", logger):
        ...     dispatcher.dispatch(args)
        INFO: --output 1 completed in 41.07ms
    """
    start = time.perf_counter()
    logger.info(f"Starting: {operation}")

    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{operation} completed in {elapsed_ms:.2f}ms")


# Global logger instance
_logger: Optional[logging.Logger] = None


def init_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Initialize global logging.

    Args:
        verbose: Enable verbose mode
        debug: Enable debug mode

    Returns:
        The configured ``vscreen`` logger
    """
    global _logger
    _logger = setup_logging(verbose=verbose, debug=debug)
    return _logger


def get_global_logger() -> logging.Logger:
    """Get global logger instance, configuring defaults on first use."""
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger
