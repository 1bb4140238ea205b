"""Command execution for git-backed services."""

from typing import Optional, Sequence

import git

from worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


class CommandRunner:
    """Runs external commands through GitPython and returns their stdout.

    Nonzero exits raise git.exc.GitCommandError, which carries the exit status
    and the captured stderr/stdout of the failed command.
    """

    def __init__(self, repo_root: str):
        """Initialize the runner.

        Args:
            repo_root: Default working directory for commands
        """
        self.repo_root = repo_root

    def run(self, args: Sequence[str], cwd: Optional[str] = None) -> str:
        """Run a command and return its stdout.

        Args:
            args: Command line as a list, e.g. ["git", "worktree", "list"]
            cwd: Working directory (defaults to the repository root)

        Returns:
            Captured standard output with the trailing newline stripped
        """
        workdir = cwd or self.repo_root
        logger.debug(f"Running {' '.join(args)} in {workdir}")
        return git.Git(workdir).execute(list(args))


def _clean_stream(text: Optional[str]) -> str:
    """Strip GitPython's "stderr: '...'" decoration from a captured stream."""
    text = (text or "").strip()
    for prefix in ("stderr:", "stdout:"):
        if text.startswith(prefix):
            text = text[len(prefix):].strip()
    if len(text) >= 2 and text[0] == text[-1] == "'":
        text = text[1:-1]
    return text.strip()


def git_error_output(error: Exception) -> str:
    """Return the underlying tool's message for a failed command."""
    if isinstance(error, git.exc.GitCommandError):
        stderr = _clean_stream(getattr(error, "stderr", ""))
        stdout = _clean_stream(getattr(error, "stdout", ""))
        return "\n".join(part for part in (stderr, stdout) if part)
    return str(error).strip()


def format_git_error(operation: str, error: Exception) -> str:
    """Build a user-facing error message that keeps git's own text.

    Args:
        operation: Short description, e.g. "git worktree remove"
        error: The exception raised by the runner

    Returns:
        e.g. "git worktree remove failed (exit 128): fatal: ... is dirty"
    """
    output = git_error_output(error)
    if isinstance(error, git.exc.GitCommandError):
        status = error.status if getattr(error, "status", None) is not None else "unknown"
        if output:
            return f"{operation} failed (exit {status}): {output}"
        return f"{operation} failed with exit code {status}"
    return f"{operation} failed: {output}" if output else f"{operation} failed"
