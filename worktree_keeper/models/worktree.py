"""Worktree data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from worktree_keeper.constants import DETACHED_HEAD


@dataclass
class WorktreeEntry:
    """A worktree record as parsed from porcelain output, before enrichment."""

    path: str
    branch: Optional[str] = None  # None = no branch line (detached HEAD)
    commit: str = ""
    is_locked: bool = False
    lock_reason: Optional[str] = None


@dataclass(frozen=True)
class Worktree:
    """An enriched, immutable view of one git worktree."""

    path: str
    branch: str
    commit: str
    is_current: bool
    is_dirty: bool
    is_locked: bool
    lock_reason: Optional[str] = None
    commit_message: Optional[str] = None
    commit_author: Optional[str] = None
    commit_date: Optional[str] = None  # Relative date, e.g. "2 hours ago"
    ahead: int = 0
    behind: int = 0
    changed_files_count: int = 0
    disk_size_bytes: int = 0
    last_activity_date: Optional[datetime] = None

    @property
    def is_detached(self) -> bool:
        return self.branch == DETACHED_HEAD

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "dirty" if self.is_dirty else "clean"
        current_marker = " (current)" if self.is_current else ""
        locked_marker = " [locked]" if self.is_locked else ""
        return f"{self.branch} @ {self.path}{current_marker}{locked_marker} [{status}]"


class WorktreeCategory(Enum):
    """Cleanup category of a worktree, in precedence order."""
    MERGED = "merged"
    STALE = "stale"
    CLEAN_BEHIND = "clean-behind"
    ACTIVE = "active"


class WorktreeKind(Enum):
    """Presentation kind of a worktree."""
    WORKTREE = "worktree"
    CURRENT = "current"
    LOCKED = "locked"
    CURRENT_LOCKED = "current-locked"


@dataclass(frozen=True)
class WorktreeState:
    """Display hints resolved from a worktree, independent of any UI toolkit."""

    kind: WorktreeKind
    icon: str
    color: Optional[str] = None
    description_suffix: str = ""
    is_stale: bool = False
