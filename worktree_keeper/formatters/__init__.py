"""Formatting utilities for worktree-keeper.

- date: Date and time formatting
- status: Ahead/behind, disk size and category formatting
"""

from .date import format_date, format_days_ago
from .status import format_ahead_behind, format_disk_size, format_category

__all__ = [
    # Date
    "format_date",
    "format_days_ago",
    # Status
    "format_ahead_behind",
    "format_disk_size",
    "format_category",
]
