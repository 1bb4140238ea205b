"""Tests for the post-create setup script"""
import os
import stat

import pytest

from worktree_keeper.exceptions import PostCreateScriptError, PostCreateTimeoutError
from worktree_keeper.services.post_create import find_script, run_post_create_script


def write_script(path, body):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


@pytest.fixture
def repo_root(temp_dir):
    root = temp_dir / "repo"
    root.mkdir()
    return root


@pytest.fixture
def target(temp_dir):
    wt = temp_dir / "wt"
    wt.mkdir()
    return wt


class TestFindScript:
    """Test discovery of the setup script."""

    def test_none_without_script(self, repo_root):
        assert find_script(str(repo_root)) is None

    def test_default_script(self, repo_root):
        script = write_script(repo_root / ".worktree-setup.sh", "exit 0\n")
        assert find_script(str(repo_root)) == script

    def test_not_executable_is_ignored(self, repo_root):
        (repo_root / ".worktree-setup.sh").write_text("#!/bin/sh\n")
        assert find_script(str(repo_root)) is None

    def test_configured_path_wins(self, repo_root):
        write_script(repo_root / ".worktree-setup.sh", "exit 0\n")
        (repo_root / "scripts").mkdir()
        custom = write_script(repo_root / "scripts" / "setup.sh", "exit 0\n")
        assert find_script(str(repo_root), "scripts/setup.sh") == custom

    def test_missing_configured_path(self, repo_root):
        write_script(repo_root / ".worktree-setup.sh", "exit 0\n")
        assert find_script(str(repo_root), "scripts/missing.sh") is None


class TestRunPostCreateScript:
    """Test running the setup script."""

    def test_arguments_and_environment(self, repo_root, target):
        script = write_script(
            repo_root / "setup.sh",
            'echo "$1|$2|$WORKTREE_PATH|$WORKTREE_BRANCH|$REPO_ROOT|$(pwd)"\n',
        )
        result = run_post_create_script(script, str(repo_root), str(target), "feature/x")

        assert result.success
        assert result.returncode == 0
        fields = result.stdout.strip().split("|")
        assert fields[:5] == [str(target), "feature/x", str(target), "feature/x", str(repo_root)]
        assert os.path.realpath(fields[5]) == os.path.realpath(str(target))

    def test_nonzero_exit(self, repo_root, target):
        script = write_script(repo_root / "setup.sh", "echo 'npm install failed' >&2\nexit 3\n")
        with pytest.raises(PostCreateScriptError) as exc_info:
            run_post_create_script(script, str(repo_root), str(target), "feature")
        assert exc_info.value.returncode == 3
        assert exc_info.value.stderr == "npm install failed"

    def test_timeout_is_a_distinct_error(self, repo_root, target):
        script = write_script(repo_root / "setup.sh", "sleep 5\n")
        with pytest.raises(PostCreateTimeoutError) as exc_info:
            run_post_create_script(script, str(repo_root), str(target), "feature", timeout=0.2)
        assert not isinstance(exc_info.value, PostCreateScriptError)
        assert exc_info.value.timeout == 0.2
