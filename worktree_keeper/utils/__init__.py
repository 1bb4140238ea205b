"""Utility functions for worktree-keeper.

This package provides utility modules:
- logging: Logging configuration and logger creation
- threading: Worker pool sizing for concurrent git queries
"""

from .logging import setup_logging, get_logger, ColoredFormatter
from .threading import is_free_threading_enabled, get_optimal_worker_count

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "ColoredFormatter",
    # Threading
    "is_free_threading_enabled",
    "get_optimal_worker_count",
]
