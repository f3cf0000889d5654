"""Logging configuration.

Log records go to stderr through rich so they don't interleave with tables
printed on stdout. Level comes from --verbose or the LOG_LEVEL environment
variable (default: WARNING).
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(verbose: bool = False) -> int:
    """Get logging level from the verbose flag or LOG_LEVEL.

    Returns:
        Logging level constant.
    """
    if verbose:
        return logging.DEBUG
    level_str = os.getenv("LOG_LEVEL", "WARNING").upper()
    return LOG_LEVEL_MAP.get(level_str, logging.WARNING)


def setup_logging(verbose: bool = False) -> None:
    """Configure the package logger with a rich stderr handler."""
    logger = logging.getLogger("branchgoals")
    logger.setLevel(get_log_level(verbose))

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
