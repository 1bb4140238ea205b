"""Discovery and execution of the post-create setup script."""

import os
import subprocess
from typing import Optional

from worktree_keeper.constants import DEFAULT_HOOK_TIMEOUT, DEFAULT_SETUP_SCRIPT
from worktree_keeper.exceptions import PostCreateScriptError, PostCreateTimeoutError
from worktree_keeper.models.results import HookResult
from worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_script(repo_root: str, configured_path: str = "") -> Optional[str]:
    """Locate the setup script to run after creating a worktree.

    A configured path (relative to the repository root) takes precedence and
    disables the convention; otherwise .worktree-setup.sh in the root is used.

    Returns:
        Absolute path of an executable script, or None
    """
    if configured_path:
        resolved = os.path.abspath(os.path.join(repo_root, configured_path))
        if _is_executable(resolved):
            return resolved
        logger.debug(f"Configured post-create script {resolved} is missing or not executable")
        return None

    default_path = os.path.join(repo_root, DEFAULT_SETUP_SCRIPT)
    return default_path if _is_executable(default_path) else None


def run_post_create_script(
    script: str,
    repo_root: str,
    target_path: str,
    branch: str,
    timeout: float = DEFAULT_HOOK_TIMEOUT,
) -> HookResult:
    """Run the setup script inside the new worktree.

    The script receives (target_path, branch) as arguments and WORKTREE_PATH,
    WORKTREE_BRANCH and REPO_ROOT in its environment.

    Raises:
        PostCreateTimeoutError: The script did not finish in time and was killed
        PostCreateScriptError: The script could not start or exited nonzero
    """
    env = dict(os.environ)
    env.update({
        "WORKTREE_PATH": target_path,
        "WORKTREE_BRANCH": branch,
        "REPO_ROOT": repo_root,
    })

    logger.info(f"Running post-create script {script} for {branch}")
    try:
        completed = subprocess.run(
            [script, target_path, branch],
            cwd=target_path,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"Post-create script {script} timed out after {timeout}s")
        raise PostCreateTimeoutError(script, timeout)
    except OSError as e:
        raise PostCreateScriptError(script, stderr=str(e))

    if completed.returncode != 0:
        raise PostCreateScriptError(script, completed.returncode, completed.stderr.strip())

    return HookResult(
        script=script,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
