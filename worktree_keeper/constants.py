"""Shared constants for worktree-keeper."""

from dataclasses import dataclass
from typing import List


# Porcelain parsing
LOCAL_BRANCH_PREFIX = "refs/heads/"
DETACHED_HEAD = "(detached)"
SHORT_SHA_LENGTH = 7

# Workspace conventions
DEFAULT_REMOTE = "origin"
DEFAULT_SETUP_SCRIPT = ".worktree-setup.sh"
DEFAULT_ENV_CLONE_FILE = ".worktree-env.json"
DEFAULT_PATH_TEMPLATE = "../{branch}"
DEFAULT_HOOK_TIMEOUT = 30
STASH_MESSAGE = "worktree-keeper: carry changes to {branch}"

# Color tag written into the new worktree's editor settings
SETTINGS_DIR = ".vscode"
SETTINGS_FILE = "settings.json"
COLOR_CUSTOMIZATIONS_KEY = "workbench.colorCustomizations"


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("commit", "Commit", 9),
    ColumnDefinition("state", "State", 24),
    ColumnDefinition("activity", "Last Activity", 14),
    ColumnDefinition("size", "Size", 10),
    ColumnDefinition("path", "Path", 0),
]


# Category labels for cleanup listings
CATEGORY_LABELS = {
    "merged": "Merged",
    "stale": "Stale",
    "clean-behind": "Behind",
    "active": "Active",
}


# CLI colors (Rich color names) keyed by resolved state color
CLI_COLORS = {
    "passed": "green",
    "orange": "dark_orange",
    "yellow": "yellow",
    None: None,
}


LEGEND_TEXT = """
Legend:
* = Current worktree      🔒 = Locked
↑ = Commits ahead of base  ↓ = Commits behind base
• N changes = Uncommitted files

Colors:
Green = Current worktree
Orange = Stale (no recent activity)
Yellow = Uncommitted changes
"""
