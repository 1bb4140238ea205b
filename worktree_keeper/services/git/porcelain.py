"""Parser for `git worktree list --porcelain` output."""

from typing import List, Optional

from worktree_keeper.constants import LOCAL_BRANCH_PREFIX, SHORT_SHA_LENGTH
from worktree_keeper.models.worktree import WorktreeEntry
from worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


def parse_worktree_list(output: str) -> List[WorktreeEntry]:
    """Parse porcelain worktree output into entries, in the order git emitted them.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        locked optional reason
        (blank line between worktrees)

    The first entry is always the repository's own working tree. Unknown
    lines (detached, bare, prunable, ...) are ignored.

    Args:
        output: Raw command output

    Returns:
        List of WorktreeEntry objects
    """
    entries: List[WorktreeEntry] = []
    current: Optional[WorktreeEntry] = None

    for raw_line in output.split("\n"):
        line = raw_line.rstrip("\r")

        if not line.strip():
            # Empty line marks end of worktree entry
            if current is not None:
                entries.append(current)
                current = None
            continue

        if line.startswith("worktree "):
            if current is not None:
                # Unterminated record: keep what was collected
                entries.append(current)
            current = WorktreeEntry(path=line[len("worktree "):])
        elif current is None:
            logger.debug(f"Ignoring porcelain line outside a worktree record: {line!r}")
        elif line.startswith("HEAD "):
            current.commit = line[len("HEAD "):].strip()[:SHORT_SHA_LENGTH]
        elif line.startswith("branch "):
            branch_ref = line[len("branch "):].strip()
            if branch_ref.startswith(LOCAL_BRANCH_PREFIX):
                branch_ref = branch_ref[len(LOCAL_BRANCH_PREFIX):]
            current.branch = branch_ref
        elif line == "locked" or line.startswith("locked "):
            current.is_locked = True
            reason = line[len("locked"):].strip()
            current.lock_reason = reason or None

    # GitPython strips the trailing newline, so the last record may be open
    if current is not None:
        entries.append(current)

    return entries
