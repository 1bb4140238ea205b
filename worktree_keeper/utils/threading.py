"""Threading utilities for sizing the enrichment worker pool."""

import os
import sys
from typing import Optional


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with free-threading enabled.

    Returns:
        True if running on Python 3.13+ with GIL disabled (free-threading mode)
    """
    return hasattr(sys, "_is_gil_enabled") and not sys._is_gil_enabled()


def get_optimal_worker_count(user_specified: Optional[int] = None, task_count: int = 0) -> int:
    """Calculate worker count for I/O-bound git queries.

    Args:
        user_specified: User-specified worker count, if provided
        task_count: Number of queued tasks; the pool never exceeds it

    Returns:
        Number of workers for parallel processing (at least 1)
    """
    if user_specified is not None and user_specified > 0:
        workers = user_specified
    else:
        cpu_count = os.cpu_count() or 1
        if is_free_threading_enabled():
            workers = min(64, cpu_count * 2)
        else:
            # Subprocess-bound work: CPU_count + 4, capped at 32
            workers = min(32, cpu_count + 4)

    if task_count > 0:
        workers = min(workers, task_count)
    return max(1, workers)
