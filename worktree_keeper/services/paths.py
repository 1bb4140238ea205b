"""Worktree target path templating."""

import os

from worktree_keeper.constants import DEFAULT_REMOTE


def sanitize_branch_name(branch: str, remote_name: str = DEFAULT_REMOTE) -> str:
    """Strip the remote prefix and replace slashes so the name fits in one path segment."""
    prefix = f"{remote_name}/"
    if branch.startswith(prefix):
        branch = branch[len(prefix):]
    return branch.replace("/", "-")


def resolve_worktree_path(
    branch: str,
    repo_root: str,
    template: str,
    remote_name: str = DEFAULT_REMOTE,
) -> str:
    """Resolve a worktree path from a template with {branch} and {repo} placeholders.

    Example:
        resolve_worktree_path("feature/login/oauth", "/repo/root", "../{branch}")
        -> "/repo/feature-login-oauth"

    Args:
        branch: Branch name, possibly remote-tracking (origin/x)
        repo_root: Repository root; relative templates resolve against it
        template: Path template
        remote_name: Remote whose prefix is stripped from the branch

    Returns:
        Absolute, normalized path
    """
    repo_name = os.path.basename(os.path.normpath(repo_root))
    expanded = (
        template
        .replace("{branch}", sanitize_branch_name(branch, remote_name), 1)
        .replace("{repo}", repo_name, 1)
    )
    return os.path.abspath(os.path.join(repo_root, expanded))
