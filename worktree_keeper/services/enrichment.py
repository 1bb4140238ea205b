"""Concurrent enrichment of parsed worktree entries."""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from worktree_keeper.constants import DETACHED_HEAD
from worktree_keeper.models.worktree import Worktree, WorktreeEntry
from worktree_keeper.services.git.worktrees import WorktreeService
from worktree_keeper.utils.logging import get_logger
from worktree_keeper.utils.threading import get_optimal_worker_count

logger = get_logger(__name__)

_NO_COMMIT_DETAILS: Tuple[Optional[str], Optional[str], Optional[str]] = (None, None, None)


def is_same_path(path: str, other: str) -> bool:
    """Compare two paths after resolving symlinks."""
    return os.path.realpath(path) == os.path.realpath(other)


class EnrichmentPipeline:
    """Augments parsed entries with derived state queried from git and du.

    Queries for all worktrees are submitted as one flat batch, so they run
    concurrently across worktrees and within a worktree. Each query degrades
    to a safe default on failure; the result order always matches the input
    order.
    """

    def __init__(
        self,
        worktree_service: WorktreeService,
        base_branch: str = "main",
        sequential: bool = False,
        workers: Optional[int] = None,
    ):
        self.worktree_service = worktree_service
        self.base_branch = base_branch
        self.sequential = sequential
        self.workers = workers

    def enrich(self, entries: Sequence[WorktreeEntry], repo_root: str) -> List[Worktree]:
        """Build fully populated Worktree records.

        Args:
            entries: Parsed entries in porcelain order
            repo_root: The caller's repository root, used for is_current

        Returns:
            One Worktree per entry, in the same order
        """
        jobs = []
        for index, entry in enumerate(entries):
            for field_name, func, args, default in self._queries_for(entry):
                jobs.append(((index, field_name), func, args, default, entry.path))

        results: Dict[Tuple[int, str], Any] = {}
        if self.sequential or len(jobs) <= 1:
            for key, func, args, default, path in jobs:
                results[key] = self._safe(key[1], path, func, args, default)
        else:
            max_workers = get_optimal_worker_count(self.workers, task_count=len(jobs))
            logger.debug(f"Enriching {len(entries)} worktrees with {max_workers} workers")
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {
                    key: executor.submit(self._safe, key[1], path, func, args, default)
                    for key, func, args, default, path in jobs
                }
                for key, future in futures.items():
                    results[key] = future.result()

        return [
            self._build(index, entry, repo_root, results)
            for index, entry in enumerate(entries)
        ]

    def _queries_for(self, entry: WorktreeEntry) -> List[Tuple[str, Callable, tuple, Any]]:
        service = self.worktree_service
        path = entry.path
        queries: List[Tuple[str, Callable, tuple, Any]] = [
            ("is_dirty", self._is_dirty, (path,), False),
            ("ahead_behind", service.ahead_behind, (path, self.base_branch), (0, 0)),
            ("changed_files_count", self._changed_files_count, (path,), 0),
            ("last_activity_date", service.last_commit_date, (path,), None),
            ("disk_size_bytes", service.disk_size, (path,), 0),
        ]
        if entry.commit:
            queries.append(("commit_details", service.commit_details, (entry.commit,), _NO_COMMIT_DETAILS))
        return queries

    @staticmethod
    def _safe(name: str, path: str, func: Callable, args: tuple, default: Any) -> Any:
        try:
            return func(*args)
        except Exception as e:
            logger.debug(f"Could not get {name} for {path}: {e}")
            return default

    def _is_dirty(self, path: str) -> bool:
        return bool(self.worktree_service.status_porcelain(path).strip())

    def _changed_files_count(self, path: str) -> int:
        status = self.worktree_service.status_porcelain(path)
        return len([line for line in status.split("\n") if line.strip()])

    @staticmethod
    def _build(index: int, entry: WorktreeEntry, repo_root: str,
               results: Dict[Tuple[int, str], Any]) -> Worktree:
        ahead, behind = results[(index, "ahead_behind")]
        message, author, date = results.get((index, "commit_details"), _NO_COMMIT_DETAILS)
        return Worktree(
            path=entry.path,
            branch=entry.branch or DETACHED_HEAD,
            commit=entry.commit,
            is_current=is_same_path(entry.path, repo_root),
            is_dirty=results[(index, "is_dirty")],
            is_locked=entry.is_locked,
            lock_reason=entry.lock_reason,
            commit_message=message or None,
            commit_author=author or None,
            commit_date=date or None,
            ahead=ahead,
            behind=behind,
            changed_files_count=results[(index, "changed_files_count")],
            disk_size_bytes=results[(index, "disk_size_bytes")],
            last_activity_date=results[(index, "last_activity_date")],
        )
