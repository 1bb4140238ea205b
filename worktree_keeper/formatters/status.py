"""Status and size formatting utilities."""

from worktree_keeper.constants import CATEGORY_LABELS
from worktree_keeper.models.worktree import WorktreeCategory


def format_ahead_behind(ahead: int, behind: int) -> str:
    """
    Format ahead/behind counts compactly.

    Args:
        ahead: Commits on the worktree branch not on the base
        behind: Commits on the base not on the worktree branch

    Returns:
        e.g. "↑2 ↓5", or "" if both are 0
    """
    parts = []
    if ahead > 0:
        parts.append(f"↑{ahead}")
    if behind > 0:
        parts.append(f"↓{behind}")
    return " ".join(parts)


def format_disk_size(size_bytes: int) -> str:
    """
    Format a byte count as KB, MB or GB with one decimal.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable size, "0 KB" for zero
    """
    if size_bytes == 0:
        return "0 KB"
    kb = size_bytes / 1024
    if kb < 1024:
        return f"{kb:.1f} KB"
    mb = kb / 1024
    if mb < 1024:
        return f"{mb:.1f} MB"
    return f"{mb / 1024:.1f} GB"


def format_category(category: WorktreeCategory) -> str:
    return CATEGORY_LABELS.get(category.value, category.value)
