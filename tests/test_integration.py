"""Integration tests for WorktreeKeeper against real git worktrees"""
import shutil

import git
import pytest

from worktree_keeper.config import Config
from worktree_keeper.core import WorktreeKeeper
from worktree_keeper.models.results import Outcome
from worktree_keeper.models.worktree import WorktreeCategory


@pytest.fixture
def keeper(git_repo):
    return WorktreeKeeper(git_repo.working_dir, Config(apply_color=False, sequential=True))


def commit_file(repo, path, name, content, message):
    (path / name).write_text(content)
    repo.git.add(name)
    repo.git.commit("-m", message)


class TestWorktreeLifecycle:
    """Test create, list, lock and remove with real git."""

    def test_create_and_list(self, keeper, git_repo, temp_dir):
        result = keeper.create_worktree("feature/login")

        assert result.success, result.error
        assert result.path == str(temp_dir / "feature-login")
        assert (temp_dir / "feature-login" / "README.md").exists()

        worktrees = keeper.list_worktrees()
        assert [wt.branch for wt in worktrees] == ["main", "feature/login"]
        assert worktrees[0].is_current
        assert not worktrees[1].is_current
        assert worktrees[1].commit == worktrees[0].commit
        assert worktrees[1].commit_message == "Initial commit"
        assert worktrees[1].last_activity_date is not None
        assert worktrees[1].disk_size_bytes > 0

    def test_existing_branch_is_checked_out(self, keeper, git_repo, temp_dir):
        git_repo.git.branch("existing")
        result = keeper.create_worktree("existing", str(temp_dir / "wt-existing"))
        assert result.success, result.error
        assert [wt.branch for wt in keeper.list_worktrees()][1] == "existing"

    def test_uncommitted_changes_are_carried(self, keeper, git_repo, temp_dir):
        root = temp_dir / "test_repo"
        (root / "notes.txt").write_text("work in progress\n")

        result = keeper.create_worktree("carry")

        assert result.success, result.error
        assert result.stashed
        assert result.warnings == []
        assert (temp_dir / "carry" / "notes.txt").read_text() == "work in progress\n"
        assert not (root / "notes.txt").exists()

    def test_relative_path_from_another_directory(self, keeper, git_repo, temp_dir, monkeypatch):
        root = temp_dir / "test_repo"
        (root / "notes.txt").write_text("work in progress\n")
        elsewhere = temp_dir / "x" / "y"
        elsewhere.mkdir(parents=True)
        monkeypatch.chdir(elsewhere)
        keeper.config.apply_color = True

        result = keeper.create_worktree("rel", "../rel")

        assert result.success, result.error
        assert result.path == str(temp_dir / "rel")
        assert result.warnings == []
        assert (temp_dir / "rel" / "notes.txt").read_text() == "work in progress\n"
        assert (temp_dir / "rel" / ".vscode" / "settings.json").exists()
        assert not (temp_dir / "x" / "rel").exists()

    def test_duplicate_create_fails_verbatim(self, keeper):
        assert keeper.create_worktree("dup").success
        result = keeper.create_worktree("dup")
        assert not result.success
        assert result.error.startswith("git worktree add failed (exit ")

    def test_lock_protects_from_bulk_remove(self, keeper):
        keeper.create_worktree("keep")
        target = keeper.list_worktrees()[1]

        assert keeper.lock_worktree(target, "important").success
        assert keeper.lock_worktree(target).success

        locked = keeper.list_worktrees()[1]
        assert locked.is_locked
        assert locked.lock_reason == "important"

        bulk = keeper.bulk_remove([locked])
        assert bulk.results[0].outcome == Outcome.SKIPPED
        assert len(keeper.list_worktrees()) == 2

        assert keeper.unlock_worktree(locked.path).success
        assert keeper.unlock_worktree(locked.path).success
        assert keeper.remove_worktree(keeper.list_worktrees()[1]).success
        assert len(keeper.list_worktrees()) == 1

    def test_dirty_worktree_needs_force(self, keeper, temp_dir):
        keeper.create_worktree("dirty")
        (temp_dir / "dirty" / "scratch.txt").write_text("x")
        worktree = keeper.list_worktrees()[1]
        assert worktree.is_dirty

        result = keeper.remove_worktree(worktree)
        assert not result.success
        assert "git worktree remove failed" in result.error

        bulk = keeper.bulk_remove([worktree])
        assert bulk.success
        assert bulk.prune_result.success
        assert not (temp_dir / "dirty").exists()

    def test_prune_after_directory_deleted(self, keeper, temp_dir):
        keeper.create_worktree("gone")
        shutil.rmtree(temp_dir / "gone")

        assert keeper.prune().success
        assert len(keeper.list_worktrees()) == 1


class TestUpdateAndCleanup:
    """Test updates and cleanup categorization with real history."""

    def test_rebase_brings_worktree_up_to_date(self, keeper, git_repo, temp_dir):
        keeper.create_worktree("behind")
        commit_file(git_repo, temp_dir / "test_repo", "new.txt", "new\n", "Add new file")

        worktree = keeper.list_worktrees()[1]
        assert worktree.behind == 1
        assert worktree.ahead == 0

        result = keeper.update_worktree(worktree)

        assert result.success, result.error
        assert keeper.list_worktrees()[1].behind == 0
        assert (temp_dir / "behind" / "new.txt").exists()

    def test_conflict_is_left_for_manual_resolution(self, keeper, git_repo, temp_dir):
        keeper.create_worktree("clash")
        wt_repo = git.Repo(str(temp_dir / "clash"))
        commit_file(wt_repo, temp_dir / "clash", "README.md", "worktree side\n", "Worktree change")
        wt_repo.close()
        commit_file(git_repo, temp_dir / "test_repo", "README.md", "main side\n", "Main change")

        result = keeper.update_worktree(str(temp_dir / "clash"))

        assert not result.success
        assert result.conflict
        assert result.target == str(temp_dir / "clash")

    def test_merged_worktree_is_planned_for_cleanup(self, keeper):
        keeper.create_worktree("done")
        keeper.create_worktree("current-work")

        candidates = keeper.plan_cleanup(merged_branches=["done"])

        assert [(c.worktree.branch, c.category) for c in candidates] == [("done", WorktreeCategory.MERGED)]
        bulk = keeper.smart_cleanup(candidates)
        assert bulk.summary() == "1 of 1 succeeded"
        assert [wt.branch for wt in keeper.list_worktrees()] == ["main", "current-work"]

    def test_merged_branches_from_git(self, keeper):
        keeper.create_worktree("finished")
        assert "finished" in keeper.get_merged_branches()
        assert [wt.branch for wt in keeper.find_merged_worktrees()] == ["finished"]

    def test_changed_files_between_trees(self, keeper, temp_dir):
        keeper.create_worktree("diffs")
        wt_path = temp_dir / "diffs"
        wt_repo = git.Repo(str(wt_path))
        commit_file(wt_repo, wt_path, "added.txt", "x\n", "Add file")
        wt_repo.close()

        worktree = keeper.list_worktrees()[1]
        assert keeper.changed_files(worktree) == ["added.txt"]
        assert "added.txt" in keeper.diff_stat(worktree)

    def test_branches_available(self, keeper, git_repo):
        git_repo.git.branch("free")
        keeper.create_worktree("taken")
        names = [b.name for b in keeper.list_branches()]
        assert names == ["free"]
