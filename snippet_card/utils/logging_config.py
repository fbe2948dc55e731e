"""Logging setup shared by the CLI and the API server.

Records go to stderr so the CLI can keep stdout for its JSON output.
"""

import logging
import sys
from typing import IO, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# urllib3 logs every connection and PIL every plugin import at DEBUG/INFO
NOISY_LOGGERS = ("urllib3", "PIL")


def setup_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> logging.Handler:
    """
    Install a single handler on the root logger.

    Calling it again replaces the previous handler, so the CLI and the API
    lifespan hook can both call it safely.

    Args:
        level: Level name; unknown names fall back to INFO
        stream: Output stream (defaults to stderr)

    Returns:
        The installed handler
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(log_level)

    noisy_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
    return handler


def get_logger(name: str) -> logging.Logger:
    """Module logger; pass ``__name__``."""
    return logging.getLogger(name)
