"""Resolution of display state for a worktree"""

from datetime import datetime
from typing import Optional

from worktree_keeper.formatters.status import format_ahead_behind
from worktree_keeper.models.worktree import Worktree, WorktreeKind, WorktreeState
from worktree_keeper.services.categorization import is_stale


def resolve_state(
    worktree: Worktree,
    stale_days_threshold: float = 14,
    now: Optional[datetime] = None,
) -> WorktreeState:
    """Determine kind, icon, color and description suffix of a worktree.

    Icon priority is current > locked > default; a stale plain worktree shows
    a warning icon, a dirty plain one is colored yellow.
    """
    color: Optional[str] = None
    if worktree.is_current:
        kind, icon, color = WorktreeKind.CURRENT, "check", "passed"
    elif worktree.is_locked:
        kind, icon = WorktreeKind.LOCKED, "lock"
    else:
        kind, icon = WorktreeKind.WORKTREE, "git-branch"

    if worktree.is_current and worktree.is_locked:
        kind = WorktreeKind.CURRENT_LOCKED

    stale = False
    if not worktree.is_current and not worktree.is_locked:
        stale = is_stale(worktree.last_activity_date, stale_days_threshold, now)
        if stale:
            icon, color = "warning", "orange"

    suffix = ""
    if worktree.is_locked:
        suffix += " 🔒"

    ahead_behind = format_ahead_behind(worktree.ahead, worktree.behind)
    if ahead_behind:
        suffix += f" {ahead_behind}"

    if worktree.is_dirty:
        if worktree.changed_files_count > 0:
            suffix += f" • {worktree.changed_files_count} changes"
        else:
            suffix += " • Modified"
        if kind == WorktreeKind.WORKTREE and icon == "git-branch":
            color = "yellow"

    return WorktreeState(
        kind=kind,
        icon=icon,
        color=color,
        description_suffix=suffix,
        is_stale=stale,
    )
