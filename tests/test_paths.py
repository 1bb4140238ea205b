"""Tests for worktree path templating"""
from worktree_keeper.services.paths import resolve_worktree_path, sanitize_branch_name


class TestResolveWorktreePath:
    """Test template expansion."""

    def test_nested_branch_next_to_repo(self):
        assert resolve_worktree_path("feature/login/oauth", "/repo/root", "../{branch}") == "/repo/feature-login-oauth"

    def test_remote_prefix_is_stripped(self):
        assert resolve_worktree_path("origin/fix/bug", "/repo/root", "../{branch}") == "/repo/fix-bug"

    def test_repo_placeholder(self):
        path = resolve_worktree_path("feature", "/src/myapp", "../{repo}-worktrees/{branch}")
        assert path == "/src/myapp-worktrees/feature"

    def test_absolute_template(self):
        assert resolve_worktree_path("feature", "/repo/root", "/tmp/wt/{branch}") == "/tmp/wt/feature"

    def test_custom_remote(self):
        assert sanitize_branch_name("upstream/a/b", "upstream") == "a-b"
        assert sanitize_branch_name("origin/a", "upstream") == "origin-a"
