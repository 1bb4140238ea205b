"""Custom exceptions for worktree-keeper"""

from typing import Optional


class WorktreeKeeperError(Exception):
    """Base exception for all worktree-keeper errors."""
    pass


class GitOperationError(WorktreeKeeperError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, target: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.target = target
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if target:
            error_msg += f" for '{target}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class WorktreeProtectedError(WorktreeKeeperError):
    """Exception raised when removing the current or a locked worktree without override."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Refusing to remove {reason} worktree at {path}")


class EnvCloneError(WorktreeKeeperError):
    """Exception raised when the environment could not be cloned."""
    pass


class PostCreateScriptError(WorktreeKeeperError):
    """Exception raised when the post-create script exits with a nonzero status."""

    def __init__(self, script: str, returncode: Optional[int] = None, stderr: str = ""):
        self.script = script
        self.returncode = returncode
        self.stderr = stderr

        error_msg = f"Post-create script {script} failed"
        if returncode is not None:
            error_msg += f" (exit {returncode})"
        if stderr:
            error_msg += f": {stderr}"

        super().__init__(error_msg)


class PostCreateTimeoutError(WorktreeKeeperError):
    """Exception raised when the post-create script is killed after its timeout."""

    def __init__(self, script: str, timeout: float):
        self.script = script
        self.timeout = timeout
        super().__init__(f"Post-create script {script} timed out after {timeout:g}s")
