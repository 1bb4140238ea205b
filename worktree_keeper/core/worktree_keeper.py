"""Lifecycle orchestration of git worktrees"""

import os
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Union

from worktree_keeper.config import Config
from worktree_keeper.constants import DETACHED_HEAD, STASH_MESSAGE
from worktree_keeper.exceptions import (
    GitOperationError,
    PostCreateScriptError,
    PostCreateTimeoutError,
    WorktreeProtectedError,
)
from worktree_keeper.models.branch import Branch
from worktree_keeper.models.results import (
    BulkResult,
    CleanupCandidate,
    CreateResult,
    HookResult,
    OperationResult,
    Outcome,
    UpdateResult,
    UpdateStrategy,
    WarningStep,
)
from worktree_keeper.models.worktree import Worktree, WorktreeCategory, WorktreeEntry
from worktree_keeper.services.categorization import categorize
from worktree_keeper.services.enrichment import EnrichmentPipeline, is_same_path
from worktree_keeper.services.env_cloner import clone_environment, load_env_clone_config
from worktree_keeper.services.git import CommandRunner, WorktreeService, format_git_error, git_error_output
from worktree_keeper.services.paths import resolve_worktree_path
from worktree_keeper.services.post_create import find_script, run_post_create_script
from worktree_keeper.services.theme import apply_branch_color
from worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

WorktreeTarget = Union[Worktree, str]

# Categories that are pre-selected for removal by smart cleanup
PRESELECTED_CATEGORIES = (WorktreeCategory.MERGED, WorktreeCategory.STALE)

# Output fragments that identify a conflicted rebase or merge
CONFLICT_MARKERS = ("CONFLICT", "could not apply", "Automatic merge failed", "needs merge")


class WorktreeKeeper:
    """Creates, removes, locks, updates and cleans up the worktrees of one repository.

    Every mutating operation returns a result object instead of raising, so a
    failure on one target never hides the outcome of the others. Bulk
    operations run strictly one target at a time: git's shared metadata
    directory does not tolerate concurrent mutation.
    """

    def __init__(
        self,
        repo_root: str,
        config: Union[Config, dict, None] = None,
        runner: Optional[CommandRunner] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        """Initialize WorktreeKeeper.

        Args:
            repo_root: The caller's working tree root
            config: Configuration dict or Config object
            runner: Command runner (defaults to a GitPython-backed runner)
            on_change: Called once after an operation changed the registry
        """
        self.repo_root = repo_root
        if config is None:
            self.config = Config()
        elif isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.on_change = on_change

        self.worktree_service = WorktreeService(
            repo_root, runner or CommandRunner(repo_root), remote_name=self.config.remote_name
        )
        self.enrichment = EnrichmentPipeline(
            self.worktree_service,
            base_branch=self.config.base_branch,
            sequential=self.config.sequential,
            workers=self.config.workers,
        )

    def _notify_change(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change()
        except Exception as e:
            logger.warning(f"Refresh callback failed: {e}")

    # Read views

    def list_worktrees(self) -> List[Worktree]:
        """Return a fresh, enriched snapshot of all worktrees in git's order.

        Raises:
            GitOperationError: If git cannot list worktrees at all
        """
        try:
            entries = self.worktree_service.list_entries()
        except Exception as e:
            raise GitOperationError("worktree list", message=git_error_output(e)) from e
        return self.enrichment.enrich(entries, self.repo_root)

    def list_branches(self, include_remote: Optional[bool] = None,
                      worktrees: Optional[Sequence[Worktree]] = None) -> List[Branch]:
        """List branches a new worktree can be created from.

        Branches already checked out in a worktree are excluded.
        """
        if include_remote is None:
            include_remote = self.config.include_remote_branches
        if worktrees is None:
            entries = self.worktree_service.list_entries()
            used = {entry.branch for entry in entries if entry.branch}
        else:
            used = {wt.branch for wt in worktrees}

        branches = [
            Branch(name=name, is_remote=False, has_worktree=name in used)
            for name in self.worktree_service.local_branches()
        ]

        if include_remote:
            try:
                for name in self.worktree_service.remote_branches():
                    local = self.worktree_service.local_name(name)
                    branches.append(Branch(name=name, is_remote=True, has_worktree=local in used))
            except Exception as e:
                logger.warning(f"Failed to list remote branches: {git_error_output(e)}")

        return [branch for branch in branches if not branch.has_worktree]

    def get_merged_branches(self, base_branch: Optional[str] = None) -> List[str]:
        """Branches merged into base_branch; empty on failure."""
        base_branch = base_branch or self.config.base_branch
        try:
            return self.worktree_service.merged_branches(base_branch)
        except Exception as e:
            logger.warning(f"Failed to get branches merged into {base_branch}: {git_error_output(e)}")
            return []

    def changed_files(self, worktree: WorktreeTarget) -> List[str]:
        """Files that differ between the root HEAD and the worktree's HEAD."""
        path = self._path_of(worktree)
        try:
            head = self.worktree_service.head_commit(path)
            return self.worktree_service.changed_files(head)
        except Exception as e:
            raise GitOperationError("diff", path, git_error_output(e)) from e

    def diff_stat(self, worktree: WorktreeTarget) -> str:
        path = self._path_of(worktree)
        try:
            head = self.worktree_service.head_commit(path)
            return self.worktree_service.diff_stat(head)
        except Exception as e:
            raise GitOperationError("diff", path, git_error_output(e)) from e

    # Target resolution

    @staticmethod
    def _path_of(worktree: WorktreeTarget) -> str:
        return worktree.path if isinstance(worktree, Worktree) else worktree

    def _worktree_from_entry(self, entry: WorktreeEntry) -> Worktree:
        return Worktree(
            path=entry.path,
            branch=entry.branch or DETACHED_HEAD,
            commit=entry.commit,
            is_current=is_same_path(entry.path, self.repo_root),
            is_dirty=False,
            is_locked=entry.is_locked,
            lock_reason=entry.lock_reason,
        )

    def _resolve(self, worktree: WorktreeTarget) -> Worktree:
        """Turn a path into an unenriched Worktree using the current registry."""
        if isinstance(worktree, Worktree):
            return worktree
        try:
            for entry in self.worktree_service.list_entries():
                if is_same_path(entry.path, worktree):
                    return self._worktree_from_entry(entry)
        except Exception as e:
            logger.debug(f"Could not look up worktree {worktree}: {e}")
        return Worktree(
            path=worktree,
            branch=DETACHED_HEAD,
            commit="",
            is_current=is_same_path(worktree, self.repo_root),
            is_dirty=False,
            is_locked=False,
        )

    @staticmethod
    def _check_removable(worktree: Worktree) -> None:
        if worktree.is_current:
            raise WorktreeProtectedError(worktree.path, "the current")
        if worktree.is_locked:
            raise WorktreeProtectedError(worktree.path, "a locked")

    # Create

    def _root_has_changes(self) -> bool:
        try:
            return bool(self.worktree_service.status_porcelain(self.repo_root).strip())
        except Exception as e:
            logger.debug(f"Could not check {self.repo_root} for changes: {e}")
            return False

    def create_worktree(self, branch: str, target_path: Optional[str] = None) -> CreateResult:
        """Create a worktree for branch, then run the best-effort post-steps.

        Uncommitted changes of the caller's tree are carried into the new
        worktree through the stash when configured. Color tagging, environment
        cloning and the setup script each report their own failure without
        undoing the created worktree.

        Args:
            branch: Existing local, remote-tracking (origin/x) or new branch name
            target_path: Worktree directory, relative to repo_root unless absolute
                (defaults to the configured template)

        Returns:
            CreateResult with the outcome and any step warnings
        """
        config = self.config
        if not target_path:
            target_path = resolve_worktree_path(
                branch, self.repo_root, config.default_path_template, config.remote_name
            )
        else:
            # Relative to the repository root, as git resolves it
            target_path = os.path.abspath(os.path.join(self.repo_root, target_path))
        result = CreateResult(branch=branch, path=target_path, success=False)

        if config.carry_changes and self._root_has_changes() and self.worktree_service.has_commits():
            try:
                self.worktree_service.stash_push(STASH_MESSAGE.format(branch=branch), cwd=self.repo_root)
                result.stashed = True
            except Exception as e:
                message = format_git_error("git stash push", e)
                logger.warning(f"Not carrying changes to {branch}: {message}")
                result.warn(WarningStep.STASH, f"Could not stash local changes, created without them: {message}")

        try:
            self.worktree_service.add_worktree(branch, target_path)
        except Exception as e:
            result.error = format_git_error("git worktree add", e)
            logger.error(f"Failed to create worktree for {branch}: {result.error}")
            if result.stashed:
                self._restore_stash_to_root(result)
            return result

        result.success = True

        if result.stashed:
            try:
                self.worktree_service.stash_pop(cwd=target_path)
            except Exception as e:
                message = format_git_error("git stash pop", e)
                logger.warning(f"Could not apply carried changes in {target_path}: {message}")
                result.warn(
                    WarningStep.STASH_POP,
                    f"Changes are still in the stash; run 'git stash pop' in {target_path}. {message}",
                )

        self._run_post_create_steps(result)
        self._notify_change()
        return result

    def _restore_stash_to_root(self, result: CreateResult) -> None:
        try:
            self.worktree_service.stash_pop(cwd=self.repo_root)
            result.stashed = False
        except Exception as e:
            message = format_git_error("git stash pop", e)
            logger.warning(f"Could not restore stashed changes in {self.repo_root}: {message}")
            result.warn(
                WarningStep.STASH_POP,
                f"Changes are still in the stash; run 'git stash pop' in {self.repo_root}. {message}",
            )

    def _run_post_create_steps(self, result: CreateResult) -> None:
        config = self.config

        if config.apply_color:
            try:
                apply_branch_color(result.path, result.branch)
            except Exception as e:
                logger.warning(f"Could not apply color for {result.branch}: {e}")
                result.warn(WarningStep.COLOR, str(e))

        try:
            env_config = load_env_clone_config(self.repo_root, config.env_clone_config_file)
            if env_config is not None:
                result.cloned_files = clone_environment(self.repo_root, result.path, env_config)
        except Exception as e:
            logger.warning(f"Could not clone environment into {result.path}: {e}")
            result.warn(WarningStep.ENV_CLONE, str(e))

        script = find_script(self.repo_root, config.post_create_script)
        if script is None:
            return
        try:
            result.hook_result = run_post_create_script(
                script, self.repo_root, result.path, result.branch, timeout=config.post_create_timeout
            )
        except PostCreateTimeoutError as e:
            result.hook_result = HookResult(script=script, returncode=None, timed_out=True)
            result.warn(WarningStep.POST_CREATE_TIMEOUT, str(e))
        except PostCreateScriptError as e:
            logger.warning(str(e))
            result.hook_result = HookResult(script=script, returncode=e.returncode, stderr=e.stderr)
            result.warn(WarningStep.POST_CREATE, str(e))

    # Remove

    def _remove_one(self, worktree: Worktree, force: bool, allow_protected: bool) -> OperationResult:
        label = worktree.branch or None
        if not allow_protected:
            try:
                self._check_removable(worktree)
            except WorktreeProtectedError as e:
                return OperationResult.failed(worktree.path, str(e), label)

        try:
            self.worktree_service.remove_worktree(
                worktree.path,
                force=force,
                force_locked=allow_protected and worktree.is_locked,
            )
            return OperationResult.ok(worktree.path, label)
        except Exception as e:
            error_msg = format_git_error("git worktree remove", e)
            logger.error(f"Failed to remove worktree at {worktree.path}: {error_msg}")
            return OperationResult.failed(worktree.path, error_msg, label)

    def remove_worktree(self, worktree: WorktreeTarget, force: bool = False,
                        allow_protected: bool = False) -> OperationResult:
        """Remove a worktree.

        Args:
            worktree: Worktree or its path
            force: Remove even if it has uncommitted changes
            allow_protected: Also remove the current or a locked worktree
        """
        result = self._remove_one(self._resolve(worktree), force, allow_protected)
        if result.success:
            self._notify_change()
        return result

    # Lock

    def _lock_one(self, worktree: Worktree, reason: Optional[str] = None) -> OperationResult:
        label = worktree.branch or None
        try:
            self.worktree_service.lock_worktree(worktree.path, reason)
        except Exception as e:
            output = git_error_output(e)
            if "already locked" not in output:
                error_msg = format_git_error("git worktree lock", e)
                logger.error(f"Failed to lock worktree at {worktree.path}: {error_msg}")
                return OperationResult.failed(worktree.path, error_msg, label)
            logger.debug(f"Worktree at {worktree.path} was already locked")
        return OperationResult.ok(worktree.path, label)

    def lock_worktree(self, worktree: WorktreeTarget, reason: Optional[str] = None) -> OperationResult:
        """Lock a worktree. Locking an already locked worktree succeeds."""
        result = self._lock_one(self._resolve(worktree), reason)
        if result.success:
            self._notify_change()
        return result

    def unlock_worktree(self, worktree: WorktreeTarget) -> OperationResult:
        """Unlock a worktree. Unlocking a worktree that is not locked succeeds."""
        target = self._resolve(worktree)
        label = target.branch or None
        try:
            self.worktree_service.unlock_worktree(target.path)
        except Exception as e:
            output = git_error_output(e)
            if "not locked" not in output:
                error_msg = format_git_error("git worktree unlock", e)
                logger.error(f"Failed to unlock worktree at {target.path}: {error_msg}")
                return OperationResult.failed(target.path, error_msg, label)
            logger.debug(f"Worktree at {target.path} was not locked")
        self._notify_change()
        return OperationResult.ok(target.path, label)

    # Prune

    def _prune(self) -> OperationResult:
        try:
            self.worktree_service.prune()
            return OperationResult.ok(self.repo_root)
        except Exception as e:
            error_msg = format_git_error("git worktree prune", e)
            logger.error(f"Failed to prune worktrees: {error_msg}")
            return OperationResult.failed(self.repo_root, error_msg)

    def prune(self) -> OperationResult:
        """Drop administrative data of worktrees whose directories are gone."""
        result = self._prune()
        if result.success:
            self._notify_change()
        return result

    # Update

    def _update_one(self, worktree: Worktree, strategy: UpdateStrategy, base_branch: str) -> UpdateResult:
        label = worktree.branch or None
        try:
            if strategy == UpdateStrategy.REBASE:
                self.worktree_service.rebase(worktree.path, base_branch)
            else:
                self.worktree_service.merge(worktree.path, base_branch)
            logger.info(f"Updated {worktree.path} from {base_branch} via {strategy.value}")
            return UpdateResult(
                target=worktree.path, outcome=Outcome.SUCCEEDED,
                label=label, strategy=strategy, base_branch=base_branch,
            )
        except Exception as e:
            output = git_error_output(e)
            conflict = any(marker in output for marker in CONFLICT_MARKERS)
            error_msg = format_git_error(f"git {strategy.value}", e)
            # Expected and recoverable: the user resolves it in the worktree
            logger.warning(
                f"Update of {worktree.path} from {base_branch} failed; "
                f"open {worktree.path} to resolve manually: {error_msg}"
            )
            return UpdateResult(
                target=worktree.path, outcome=Outcome.FAILED, error=error_msg, label=label,
                strategy=strategy, base_branch=base_branch, conflict=conflict,
            )

    def update_worktree(
        self,
        worktree: WorktreeTarget,
        strategy: Union[UpdateStrategy, str] = UpdateStrategy.REBASE,
        base_branch: Optional[str] = None,
    ) -> UpdateResult:
        """Rebase the worktree branch onto base_branch, or merge base_branch into it.

        Conflicts are never resolved or aborted automatically; the failed
        result names the worktree so it can be opened for manual resolution.
        """
        strategy = UpdateStrategy(strategy)
        result = self._update_one(self._resolve(worktree), strategy, base_branch or self.config.base_branch)
        self._notify_change()
        return result

    # Bulk

    def bulk_remove(self, worktrees: Iterable[Worktree], force: Optional[bool] = None,
                    action: str = "remove") -> BulkResult:
        """Remove several worktrees one at a time, then prune once.

        Current and locked worktrees are skipped before anything is removed.
        A dirty worktree is force-removed unless force is given explicitly.
        """
        bulk = BulkResult(action=action)
        removable: List[Worktree] = []
        for worktree in worktrees:
            try:
                self._check_removable(worktree)
                removable.append(worktree)
            except WorktreeProtectedError as e:
                bulk.results.append(OperationResult.skipped(worktree.path, str(e), worktree.branch or None))

        for worktree in removable:
            item_force = worktree.is_dirty if force is None else force
            bulk.results.append(self._remove_one(worktree, item_force, allow_protected=False))

        if removable:
            bulk.prune_result = self._prune()
            self._notify_change()

        self._log_bulk(bulk)
        return bulk

    def bulk_lock(self, worktrees: Iterable[Worktree], reason: Optional[str] = None) -> BulkResult:
        """Lock several worktrees one at a time; already locked ones are skipped."""
        bulk = BulkResult(action="lock")
        for worktree in worktrees:
            if worktree.is_locked:
                bulk.results.append(OperationResult.skipped(worktree.path, "already locked", worktree.branch or None))
                continue
            bulk.results.append(self._lock_one(worktree, reason))

        if bulk.attempted:
            self._notify_change()
        self._log_bulk(bulk)
        return bulk

    def bulk_update(
        self,
        worktrees: Iterable[Worktree],
        strategy: Union[UpdateStrategy, str] = UpdateStrategy.REBASE,
        base_branch: Optional[str] = None,
    ) -> BulkResult:
        """Update several worktrees one at a time; the current worktree is skipped."""
        strategy = UpdateStrategy(strategy)
        base_branch = base_branch or self.config.base_branch
        bulk = BulkResult(action="update")
        for worktree in worktrees:
            if worktree.is_current:
                bulk.results.append(OperationResult.skipped(worktree.path, "current worktree", worktree.branch or None))
                continue
            bulk.results.append(self._update_one(worktree, strategy, base_branch))

        if bulk.attempted:
            self._notify_change()
        self._log_bulk(bulk)
        return bulk

    @staticmethod
    def _log_bulk(bulk: BulkResult) -> None:
        logger.info(f"Bulk {bulk.action}: {bulk.summary()}, {len(bulk.skipped)} skipped")
        for failure in bulk.failed:
            logger.debug(f"  {failure.target}: {failure.error}")

    # Cleanup

    def plan_cleanup(
        self,
        worktrees: Optional[Sequence[Worktree]] = None,
        merged_branches: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> List[CleanupCandidate]:
        """Categorize every non-current worktree and keep those worth cleaning up.

        Merged and stale worktrees are pre-selected; clean-behind ones are
        offered but not selected. Active worktrees are left out.
        """
        if worktrees is None:
            worktrees = self.list_worktrees()
        if merged_branches is None:
            merged_branches = self.get_merged_branches(self.config.base_branch)
        merged = set(merged_branches)

        candidates = []
        for worktree in worktrees:
            if worktree.is_current:
                continue
            category = categorize(worktree, merged, self.config.stale_days, now)
            if category == WorktreeCategory.ACTIVE:
                continue
            candidates.append(CleanupCandidate(
                worktree=worktree,
                category=category,
                selected=category in PRESELECTED_CATEGORIES,
            ))
        return candidates

    def smart_cleanup(self, candidates: Iterable[CleanupCandidate]) -> BulkResult:
        """Remove the selected candidates; locked ones are always skipped."""
        selected = [candidate.worktree for candidate in candidates if candidate.selected]
        return self.bulk_remove(selected, action="cleanup")

    def find_merged_worktrees(
        self,
        base_branches: Sequence[str] = ("main", "master"),
        worktrees: Optional[Sequence[Worktree]] = None,
    ) -> List[Worktree]:
        """Non-current worktrees whose branch is merged into any of base_branches."""
        merged: List[str] = []
        for base in base_branches:
            for name in self.get_merged_branches(base):
                if name not in merged:
                    merged.append(name)
        if not merged:
            return []

        if worktrees is None:
            worktrees = self.list_worktrees()
        return [wt for wt in worktrees if not wt.is_current and wt.branch in merged]
