"""Result models for lifecycle operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from worktree_keeper.models.worktree import Worktree, WorktreeCategory


class Outcome(Enum):
    """Outcome of an operation on a single target."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class UpdateStrategy(Enum):
    """How a worktree branch is brought up to date with the base branch."""
    REBASE = "rebase"
    MERGE = "merge"


class WarningStep(Enum):
    """Best-effort step of worktree creation that can fail without rolling back."""
    STASH = "stash"
    STASH_POP = "stash-pop"
    COLOR = "color"
    ENV_CLONE = "env-clone"
    POST_CREATE = "post-create"
    POST_CREATE_TIMEOUT = "post-create-timeout"


@dataclass
class OperationResult:
    """Result of an operation on one worktree.

    error carries the underlying git message verbatim when available.
    """

    target: str
    outcome: Outcome
    error: Optional[str] = None
    label: Optional[str] = None  # Branch name, for messages

    @property
    def success(self) -> bool:
        return self.outcome == Outcome.SUCCEEDED

    @classmethod
    def ok(cls, target: str, label: Optional[str] = None) -> "OperationResult":
        return cls(target=target, outcome=Outcome.SUCCEEDED, label=label)

    @classmethod
    def failed(cls, target: str, error: str, label: Optional[str] = None) -> "OperationResult":
        return cls(target=target, outcome=Outcome.FAILED, error=error, label=label)

    @classmethod
    def skipped(cls, target: str, reason: str, label: Optional[str] = None) -> "OperationResult":
        return cls(target=target, outcome=Outcome.SKIPPED, error=reason, label=label)


@dataclass
class UpdateResult(OperationResult):
    """Result of rebasing or merging the base branch into a worktree."""

    strategy: UpdateStrategy = UpdateStrategy.REBASE
    base_branch: str = "main"
    conflict: bool = False

    @property
    def needs_manual_resolution(self) -> bool:
        """True when the worktree should be opened to resolve the failure by hand."""
        return self.outcome == Outcome.FAILED


@dataclass
class BulkResult:
    """Aggregate of a sequential operation over several worktrees."""

    action: str
    results: List[OperationResult] = field(default_factory=list)
    prune_result: Optional[OperationResult] = None

    @property
    def succeeded(self) -> List[OperationResult]:
        return [r for r in self.results if r.outcome == Outcome.SUCCEEDED]

    @property
    def failed(self) -> List[OperationResult]:
        return [r for r in self.results if r.outcome == Outcome.FAILED]

    @property
    def skipped(self) -> List[OperationResult]:
        return [r for r in self.results if r.outcome == Outcome.SKIPPED]

    @property
    def attempted(self) -> List[OperationResult]:
        return [r for r in self.results if r.outcome != Outcome.SKIPPED]

    @property
    def success(self) -> bool:
        prune_ok = self.prune_result is None or self.prune_result.success
        return not self.failed and prune_ok

    def summary(self) -> str:
        """Return "N of M succeeded" over the attempted targets."""
        return f"{len(self.succeeded)} of {len(self.attempted)} succeeded"


@dataclass
class StepWarning:
    """A best-effort step that failed after the worktree was created."""

    step: WarningStep
    message: str

    def __str__(self) -> str:
        return f"{self.step.value}: {self.message}"


@dataclass
class HookResult:
    """Result of running the post-create setup script."""

    script: str
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return not self.timed_out and self.returncode == 0


@dataclass
class CreateResult:
    """Result of creating a worktree, including its best-effort post-steps."""

    branch: str
    path: str
    success: bool
    error: Optional[str] = None
    stashed: bool = False
    warnings: List[StepWarning] = field(default_factory=list)
    hook_result: Optional[HookResult] = None
    cloned_files: List[str] = field(default_factory=list)

    def warn(self, step: WarningStep, message: str) -> None:
        self.warnings.append(StepWarning(step, message))


@dataclass
class CleanupCandidate:
    """A worktree proposed for cleanup, with its category and pre-selection."""

    worktree: Worktree
    category: WorktreeCategory
    selected: bool = False
