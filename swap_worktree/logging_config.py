"""Logging configuration for swap-worktree"""
import logging
import sys
from pathlib import Path

from swap_worktree.constants import (
    LOG_DATE_FORMAT,
    LOG_DETAILED_FORMAT,
    LOG_DIR_NAME,
    LOG_FILE_NAME,
    LOG_SIMPLE_FORMAT,
)

PACKAGE_PREFIX = "swap_worktree."


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name when its stream is a terminal."""

    # ANSI color codes by level
    COLORS = {
        logging.DEBUG: '\033[36m',     # Cyan
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt=None, datefmt=None, stream=None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        stream = stream if stream is not None else sys.stderr
        self.use_color = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record):
        color = self.COLORS.get(record.levelno)
        if self.use_color and color:
            # Copy so other handlers see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def log_file_path() -> Path:
    """Where the debug log is written."""
    return Path.home() / LOG_DIR_NAME / LOG_FILE_NAME


def _file_handler(path: Path):
    """Debug log file handler, or None if the file cannot be opened."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode='w')  # Overwrite each run
    except OSError as e:
        logging.getLogger(__name__).warning(f"Could not open log file {path}: {e}")
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=LOG_DETAILED_FORMAT, datefmt=LOG_DATE_FORMAT))
    return handler


def _console_handler(level: int, debug: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if debug:
        formatter = ColoredFormatter(fmt=LOG_DETAILED_FORMAT, datefmt=LOG_DATE_FORMAT)
    else:
        # Progress lines read as plain output
        formatter = ColoredFormatter(fmt=LOG_SIMPLE_FORMAT)
    handler.setFormatter(formatter)
    return handler


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure logging for the application.

    Swap steps are logged at INFO, individual git commands and their
    results at DEBUG. GitPython's own command log stays quiet unless
    debugging.

    Args:
        verbose: If True, show INFO level messages (step-by-step progress)
        debug: If True, show DEBUG level messages and also write a log file
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    logging.getLogger('git').setLevel(logging.INFO if debug else logging.WARNING)

    root_logger.addHandler(_console_handler(level, debug))
    if debug:
        file_handler = _file_handler(log_file_path())
        if file_handler is not None:
            root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance, named without the package prefix
        (``services.git.operations``, ``core.swap_orchestrator``)
    """
    if name.startswith(PACKAGE_PREFIX):
        name = name[len(PACKAGE_PREFIX):]
    return logging.getLogger(name)
