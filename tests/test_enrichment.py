"""Tests for the enrichment pipeline"""
import os
from datetime import datetime, timezone

import pytest

from worktree_keeper.models.worktree import WorktreeEntry
from worktree_keeper.services.enrichment import EnrichmentPipeline, is_same_path
from worktree_keeper.services.git.worktrees import WorktreeService


def _entries():
    return [
        WorktreeEntry(path="/repo/main", branch="main", commit="1111111"),
        WorktreeEntry(path="/repo/feature", branch="feature", commit="2222222", is_locked=True, lock_reason="wip"),
        WorktreeEntry(path="/repo/detached", branch=None, commit="3333333"),
    ]


@pytest.fixture(params=[True, False], ids=["sequential", "parallel"])
def sequential(request):
    return request.param


class TestEnrichmentDefaults:
    """Test that failing queries degrade to defaults."""

    def test_all_queries_failing(self, runner, sequential):
        """Every field falls back when git and du fail for every worktree."""
        runner.fail("git", "fatal: boom").fail("du", "du: cannot access")
        service = WorktreeService("/repo/main", runner)
        pipeline = EnrichmentPipeline(service, sequential=sequential)

        worktrees = pipeline.enrich(_entries(), "/repo/main")

        assert len(worktrees) == 3
        for wt in worktrees:
            assert wt.is_dirty is False
            assert wt.ahead == 0
            assert wt.behind == 0
            assert wt.changed_files_count == 0
            assert wt.disk_size_bytes == 0
            assert wt.last_activity_date is None
            assert wt.commit_message is None
            assert wt.commit_author is None
            assert wt.commit_date is None

    def test_parsed_fields_survive_failures(self, runner, sequential):
        runner.fail("git", "fatal: boom").fail("du", "nope")
        service = WorktreeService("/repo/main", runner)
        worktrees = EnrichmentPipeline(service, sequential=sequential).enrich(_entries(), "/repo/main")

        assert worktrees[1].is_locked is True
        assert worktrees[1].lock_reason == "wip"
        assert worktrees[2].branch == "(detached)"
        assert worktrees[2].is_detached

    def test_one_failing_worktree_does_not_disturb_siblings(self, runner, sequential):
        """Test failures are isolated per worktree and per field."""
        runner.respond("du -sk", "8\t/repo/x")
        runner.fail("du -sk /repo/feature", "du: permission denied", status=1)
        service = WorktreeService("/repo/main", runner)

        worktrees = EnrichmentPipeline(service, sequential=sequential).enrich(_entries(), "/repo/main")

        assert worktrees[0].disk_size_bytes == 8 * 1024
        assert worktrees[1].disk_size_bytes == 0
        assert worktrees[2].disk_size_bytes == 8 * 1024


class TestEnrichmentValues:
    """Test enrichment with successful queries."""

    def test_fields_are_populated(self, runner, sequential):
        runner.respond("status --porcelain", " M a.txt\n?? b.txt\n")
        runner.respond("rev-list --left-right --count", "5\t2")
        runner.respond("log -1 --format=%cI", "2024-01-02T03:04:05+00:00")
        runner.respond("du -sk", "100\t/repo")
        runner.respond("show --no-patch", "Fix login\x1fAlice\x1f2 hours ago")
        service = WorktreeService("/repo/main", runner)

        worktrees = EnrichmentPipeline(service, sequential=sequential).enrich(_entries()[:1], "/repo/main")
        wt = worktrees[0]

        assert wt.is_current is True
        assert wt.is_dirty is True
        assert wt.changed_files_count == 2
        assert wt.ahead == 2
        assert wt.behind == 5
        assert wt.last_activity_date == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert wt.disk_size_bytes == 100 * 1024
        assert wt.commit_message == "Fix login"
        assert wt.commit_author == "Alice"
        assert wt.commit_date == "2 hours ago"

    def test_order_matches_input(self, runner, sequential):
        service = WorktreeService("/repo/main", runner)
        entries = [WorktreeEntry(path=f"/repo/wt{i}", branch=f"b{i}", commit="abcdef0") for i in range(20)]

        worktrees = EnrichmentPipeline(service, sequential=sequential, workers=8).enrich(entries, "/repo/wt0")

        assert [wt.path for wt in worktrees] == [e.path for e in entries]
        assert [wt.is_current for wt in worktrees] == [True] + [False] * 19

    def test_uses_configured_base_branch(self, runner):
        service = WorktreeService("/repo/main", runner)
        EnrichmentPipeline(service, base_branch="develop", sequential=True).enrich(_entries()[:1], "/repo/main")
        assert runner.count("develop...HEAD") == 1

    def test_no_commit_details_without_commit(self, runner):
        service = WorktreeService("/repo/main", runner)
        EnrichmentPipeline(service, sequential=True).enrich([WorktreeEntry(path="/repo/new")], "/repo/main")
        assert runner.count("show --no-patch") == 0

    def test_empty_input(self, runner):
        service = WorktreeService("/repo/main", runner)
        assert EnrichmentPipeline(service).enrich([], "/repo/main") == []
        assert runner.calls == []


class TestIsSamePath:
    def test_normalized_paths_match(self):
        assert is_same_path("/repo/main/", "/repo/main")
        assert is_same_path("/repo/x/../main", "/repo/main")

    def test_different_paths(self):
        assert not is_same_path("/repo/main", "/repo/main2")

    def test_symlinked_path_matches_target(self, temp_dir):
        real = temp_dir / "real"
        real.mkdir()
        link = temp_dir / "link"
        os.symlink(real, link)

        assert is_same_path(str(link), str(real))
        assert is_same_path(str(link / "sub" / ".."), str(real))
