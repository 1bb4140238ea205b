"""Date and time formatting utilities."""

from datetime import datetime
from typing import Any, Optional

from worktree_keeper.services.categorization import days_since


def format_date(date: Any) -> str:
    """
    Format a date object to YYYY-MM-DD string.

    Args:
        date: Date object (datetime or string), or None

    Returns:
        Formatted date string ("" for None)
    """
    if date is None:
        return ""
    if hasattr(date, "strftime"):
        return date.strftime("%Y-%m-%d")
    return str(date)


def format_days_ago(date: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Format the whole days elapsed since date.

    Args:
        date: Past date, or None
        now: Reference time (defaults to the current time)

    Returns:
        e.g. "3d ago", or "" when date is None
    """
    if date is None:
        return ""
    return f"{int(days_since(date, now))}d ago"
