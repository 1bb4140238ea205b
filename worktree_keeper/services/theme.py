"""Per-branch color tag for a worktree's editor window."""

import json
import os

from worktree_keeper.constants import COLOR_CUSTOMIZATIONS_KEY, SETTINGS_DIR, SETTINGS_FILE
from worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


def branch_color(branch_name: str) -> str:
    """Derive a deterministic #rrggbb color from a branch name.

    Uses the 32-bit string hash h = h * 31 + ord(c); the low three bytes of
    h give red, green and blue.
    """
    h = 0
    for ch in branch_name:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return "#" + "".join(f"{(h >> (i * 8)) & 0xFF:02x}" for i in range(3))


def apply_branch_color(worktree_path: str, branch_name: str) -> str:
    """Write the branch color into <worktree>/.vscode/settings.json.

    Existing settings and unrelated color customizations are preserved.

    Returns:
        Path of the settings file
    """
    settings_dir = os.path.join(worktree_path, SETTINGS_DIR)
    settings_path = os.path.join(settings_dir, SETTINGS_FILE)
    os.makedirs(settings_dir, exist_ok=True)

    settings = {}
    if os.path.exists(settings_path):
        try:
            with open(settings_path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                settings = loaded
        except ValueError as e:
            logger.debug(f"Replacing unreadable settings file {settings_path}: {e}")

    color = branch_color(branch_name)
    customizations = settings.get(COLOR_CUSTOMIZATIONS_KEY)
    if not isinstance(customizations, dict):
        customizations = {}
    customizations.update({
        "titleBar.activeBackground": color,
        "titleBar.activeForeground": "#ffffff",
        "titleBar.inactiveBackground": color,
        "titleBar.inactiveForeground": "#eeeeeecc",
        "activityBar.background": color,
        "activityBar.foreground": "#ffffff",
    })
    settings[COLOR_CUSTOMIZATIONS_KEY] = customizations

    with open(settings_path, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=4)
    logger.debug(f"Applied color {color} for {branch_name} in {settings_path}")
    return settings_path
