"""Cleanup categorization of worktrees"""

from datetime import datetime, timezone
from typing import Collection, Optional

from worktree_keeper.models.worktree import Worktree, WorktreeCategory

SECONDS_PER_DAY = 60 * 60 * 24


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since(date: datetime, now: Optional[datetime] = None) -> float:
    """Fractional days elapsed between date and now."""
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return (now - _as_utc(date)).total_seconds() / SECONDS_PER_DAY


def is_stale(date: Optional[datetime], threshold_days: float, now: Optional[datetime] = None) -> bool:
    """Return True if date is more than threshold_days in the past.

    A missing date is never stale.
    """
    if date is None:
        return False
    return days_since(date, now) > threshold_days


def categorize(
    worktree: Worktree,
    merged_branch_names: Collection[str],
    stale_days_threshold: float,
    now: Optional[datetime] = None,
) -> WorktreeCategory:
    """Classify a worktree for cleanup. First match wins:

    1. branch merged into the base branch -> MERGED
    2. last activity older than the threshold -> STALE
    3. clean, behind the base and not ahead -> CLEAN_BEHIND
    4. otherwise -> ACTIVE
    """
    if worktree.branch in merged_branch_names:
        return WorktreeCategory.MERGED
    if is_stale(worktree.last_activity_date, stale_days_threshold, now):
        return WorktreeCategory.STALE
    if not worktree.is_dirty and worktree.behind > 0 and worktree.ahead == 0:
        return WorktreeCategory.CLEAN_BEHIND
    return WorktreeCategory.ACTIVE
