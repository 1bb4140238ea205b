"""Pytest fixtures for worktree-keeper tests"""
import tempfile
from pathlib import Path

import git
import pytest

from worktree_keeper.config import Config
from worktree_keeper.models.worktree import Worktree


class FakeRunner:
    """Scripted command runner that records every command line.

    Outputs and failures are matched by substring against the joined
    command; the most recently registered match wins.
    """

    def __init__(self):
        self.calls = []
        self._outputs = []
        self._failures = []

    def respond(self, fragment, output):
        self._outputs.append((fragment, output))
        return self

    def fail(self, fragment, stderr="", status=128, stdout=""):
        self._failures.append((fragment, stderr, status, stdout))
        return self

    def run(self, args, cwd=None):
        command = " ".join(args)
        self.calls.append((command, cwd))
        for fragment, stderr, status, stdout in reversed(self._failures):
            if fragment in command:
                raise git.exc.GitCommandError(list(args), status, stderr, stdout)
        for fragment, output in reversed(self._outputs):
            if fragment in command:
                return output
        return ""

    @property
    def commands(self):
        return [command for command, _ in self.calls]

    def count(self, fragment):
        return sum(1 for command in self.commands if fragment in command)

    def cwd_of(self, fragment):
        for command, cwd in self.calls:
            if fragment in command:
                return cwd
        return None


def make_worktree(path, branch="feature", **kwargs):
    """Build a Worktree with plain defaults for orchestration tests."""
    values = dict(
        path=path,
        branch=branch,
        commit="abc1234",
        is_current=False,
        is_dirty=False,
        is_locked=False,
    )
    values.update(kwargs)
    return Worktree(**values)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def config():
    """Default configuration without editor color tagging."""
    return Config(apply_color=False)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository on branch main for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch("-M", "main")

    yield repo

    repo.close()


@pytest.fixture
def worktree_factory():
    return make_worktree
