"""Tests for the branch color tag"""
import json

from worktree_keeper.services.theme import apply_branch_color, branch_color


class TestBranchColor:
    def test_single_character(self):
        assert branch_color("a") == "#610000"

    def test_empty_name(self):
        assert branch_color("") == "#000000"

    def test_deterministic_and_distinct(self):
        assert branch_color("feature/login") == branch_color("feature/login")
        assert branch_color("feature/login") != branch_color("feature/logout")

    def test_format(self):
        color = branch_color("some/long/branch-name")
        assert color.startswith("#")
        assert len(color) == 7
        int(color[1:], 16)


class TestApplyBranchColor:
    """Test writing the color into editor settings."""

    def test_creates_settings(self, temp_dir):
        path = apply_branch_color(str(temp_dir), "a")
        settings = json.loads(open(path).read())
        colors = settings["workbench.colorCustomizations"]
        assert colors["titleBar.activeBackground"] == "#610000"
        assert colors["activityBar.background"] == "#610000"

    def test_preserves_existing_settings(self, temp_dir):
        settings_dir = temp_dir / ".vscode"
        settings_dir.mkdir()
        (settings_dir / "settings.json").write_text(json.dumps({
            "editor.tabSize": 2,
            "workbench.colorCustomizations": {"statusBar.background": "#123456"},
        }))

        apply_branch_color(str(temp_dir), "a")

        settings = json.loads((settings_dir / "settings.json").read_text())
        assert settings["editor.tabSize"] == 2
        assert settings["workbench.colorCustomizations"]["statusBar.background"] == "#123456"
        assert settings["workbench.colorCustomizations"]["titleBar.activeBackground"] == "#610000"
