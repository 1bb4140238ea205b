"""Worktree operations service for worktree-keeper."""

from datetime import datetime
from typing import List, Optional, Tuple

from worktree_keeper.constants import DEFAULT_REMOTE
from worktree_keeper.models.worktree import WorktreeEntry
from worktree_keeper.services.git.porcelain import parse_worktree_list
from worktree_keeper.services.git.runner import CommandRunner
from worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


class WorktreeService:
    """One method per git command used to query and mutate worktrees.

    Every method raises git.exc.GitCommandError when git fails; callers
    decide whether that is fatal or degrades to a default.
    """

    def __init__(self, repo_root: str, runner: Optional[CommandRunner] = None,
                 remote_name: str = DEFAULT_REMOTE):
        """Initialize the worktree service.

        Args:
            repo_root: Path to the repository's main working tree
            runner: Command runner (defaults to a GitPython-backed runner)
            remote_name: Remote whose tracking branches are recognized by prefix
        """
        self.repo_root = repo_root
        self.runner = runner or CommandRunner(repo_root)
        self.remote_name = remote_name

    def _git(self, *args: str, cwd: Optional[str] = None) -> str:
        return self.runner.run(["git", *args], cwd=cwd)

    # Registry

    def list_entries(self) -> List[WorktreeEntry]:
        """List worktrees as parsed porcelain entries."""
        output = self._git("worktree", "list", "--porcelain")
        entries = parse_worktree_list(output)
        logger.debug(f"Found {len(entries)} worktrees")
        return entries

    def ref_exists(self, ref: str) -> bool:
        """Check whether git can resolve a ref to a commit."""
        try:
            self._git("rev-parse", "--verify", ref)
            return True
        except Exception as e:
            logger.debug(f"Ref {ref} does not resolve: {e}")
            return False

    def is_remote_branch_name(self, branch: str) -> bool:
        return branch.startswith(f"{self.remote_name}/")

    def local_name(self, branch: str) -> str:
        """Strip the remote prefix from a remote-tracking branch name."""
        if self.is_remote_branch_name(branch):
            return branch[len(self.remote_name) + 1:]
        return branch

    def add_worktree(self, branch: str, path: str) -> List[str]:
        """Add a worktree, choosing how the branch is attached.

        - remote-tracking name (origin/x): create local branch x from it
        - existing branch: check it out in the new worktree
        - unknown name: create a new branch from the current HEAD

        Returns:
            The git arguments that were issued
        """
        if self.is_remote_branch_name(branch):
            args = ["worktree", "add", "-b", self.local_name(branch), path, branch]
        elif self.ref_exists(branch):
            args = ["worktree", "add", path, branch]
        else:
            args = ["worktree", "add", "-b", branch, path, "HEAD"]

        self._git(*args)
        logger.info(f"Added worktree at {path} for branch {branch}")
        return args

    def remove_worktree(self, path: str, force: bool = False, force_locked: bool = False) -> None:
        """Remove a worktree.

        Args:
            path: Worktree directory
            force: Remove even with uncommitted changes
            force_locked: Remove even if locked (git requires --force twice)
        """
        args = ["worktree", "remove"]
        if force or force_locked:
            args.append("--force")
        if force_locked:
            args.append("--force")
        args.append(path)
        self._git(*args)
        logger.info(f"Removed worktree at {path}")

    def lock_worktree(self, path: str, reason: Optional[str] = None) -> None:
        args = ["worktree", "lock"]
        if reason:
            args += ["--reason", reason]
        args.append(path)
        self._git(*args)
        logger.info(f"Locked worktree at {path}")

    def unlock_worktree(self, path: str) -> None:
        self._git("worktree", "unlock", path)
        logger.info(f"Unlocked worktree at {path}")

    def prune(self) -> None:
        """Prune administrative data of worktrees whose directories are gone."""
        self._git("worktree", "prune")
        logger.info("Pruned orphaned worktree metadata")

    # Stash

    def has_commits(self) -> bool:
        try:
            self._git("log", "-n", "1", "--oneline")
            return True
        except Exception as e:
            logger.debug(f"Repository has no commits: {e}")
            return False

    def stash_push(self, message: str, cwd: Optional[str] = None) -> None:
        """Stash uncommitted changes, including untracked files."""
        self._git("stash", "push", "-u", "-m", message, cwd=cwd)
        logger.debug(f"Stashed changes: {message}")

    def stash_pop(self, cwd: str) -> None:
        self._git("stash", "pop", cwd=cwd)
        logger.debug(f"Restored stashed changes in {cwd}")

    # Update

    def rebase(self, path: str, base_branch: str) -> str:
        return self._git("-C", path, "rebase", base_branch)

    def merge(self, path: str, base_branch: str) -> str:
        return self._git("-C", path, "merge", base_branch)

    # Branches

    def merged_branches(self, target_branch: str) -> List[str]:
        """List local branches whose tips are reachable from target_branch."""
        output = self._git("branch", "--merged", target_branch, "--format=%(refname:short)")
        return [
            name.strip()
            for name in output.split("\n")
            if name.strip() and name.strip() != target_branch
        ]

    def local_branches(self) -> List[str]:
        output = self._git("branch", "--format=%(refname:short)")
        return [name.strip() for name in output.split("\n") if name.strip()]

    def remote_branches(self) -> List[str]:
        output = self._git("branch", "-r", "--format=%(refname:short)")
        # Symbolic refs (origin/HEAD) show up as "origin" or "origin/HEAD"
        return [
            name.strip()
            for name in output.split("\n")
            if name.strip() and "HEAD" not in name and "/" in name
        ]

    # Per-worktree queries

    def status_porcelain(self, path: str) -> str:
        return self._git("status", "--porcelain", cwd=path)

    def commit_details(self, commit: str) -> Tuple[str, str, str]:
        """Return (subject, author name, relative committer date) of a commit."""
        output = self._git("show", "--no-patch", "--format=%s%x1f%an%x1f%cr", commit)
        parts = output.strip().split("\x1f")
        parts += [""] * (3 - len(parts))
        return parts[0], parts[1], parts[2]

    def ahead_behind(self, path: str, base_branch: str) -> Tuple[int, int]:
        """Return (ahead, behind) of the worktree HEAD relative to base_branch."""
        output = self._git("-C", path, "rev-list", "--left-right", "--count", f"{base_branch}...HEAD")
        counts = output.split()
        behind = int(counts[0]) if len(counts) > 0 else 0
        ahead = int(counts[1]) if len(counts) > 1 else 0
        return ahead, behind

    def last_commit_date(self, path: str) -> Optional[datetime]:
        output = self._git("-C", path, "log", "-1", "--format=%cI").strip()
        if not output:
            return None
        return datetime.fromisoformat(output)

    def disk_size(self, path: str) -> int:
        """Return on-disk size of a directory in bytes (du -sk granularity)."""
        output = self.runner.run(["du", "-sk", path])
        return int(output.split()[0]) * 1024

    def head_commit(self, path: str) -> str:
        return self._git("rev-parse", "--short", "HEAD", cwd=path).strip()

    def changed_files(self, target: str) -> List[str]:
        """List files that differ between the root HEAD and target."""
        output = self._git("diff", "--name-only", f"HEAD..{target}")
        return [line.strip() for line in output.split("\n") if line.strip()]

    def diff_stat(self, target: str) -> str:
        return self._git("diff", "--stat", f"HEAD..{target}")
