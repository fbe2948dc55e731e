"""Utility modules for the snippet card generator."""

from .logging_config import get_logger, setup_logging
from .retry import TransientStatusError, page_fetch_retry

__all__ = ["get_logger", "setup_logging", "TransientStatusError", "page_fetch_retry"]
