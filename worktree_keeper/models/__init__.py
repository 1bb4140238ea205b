"""Data models for worktree-keeper."""

from .worktree import (
    Worktree,
    WorktreeEntry,
    WorktreeCategory,
    WorktreeKind,
    WorktreeState,
)
from .branch import Branch
from .results import (
    BulkResult,
    CleanupCandidate,
    CreateResult,
    HookResult,
    OperationResult,
    Outcome,
    StepWarning,
    UpdateResult,
    UpdateStrategy,
    WarningStep,
)

__all__ = [
    "Worktree",
    "WorktreeEntry",
    "WorktreeCategory",
    "WorktreeKind",
    "WorktreeState",
    "Branch",
    "BulkResult",
    "CleanupCandidate",
    "CreateResult",
    "HookResult",
    "OperationResult",
    "Outcome",
    "StepWarning",
    "UpdateResult",
    "UpdateStrategy",
    "WarningStep",
]
