"""Branch model"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Branch:
    """A branch that a worktree could be created from."""
    name: str
    is_remote: bool
    has_worktree: bool = False  # True if some worktree has this branch checked out
