"""Git-related services for worktree-keeper."""

from .runner import CommandRunner, format_git_error, git_error_output
from .porcelain import parse_worktree_list
from .worktrees import WorktreeService

__all__ = [
    "CommandRunner",
    "format_git_error",
    "git_error_output",
    "parse_worktree_list",
    "WorktreeService",
]
