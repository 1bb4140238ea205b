"""Command-line argument parsing for worktree-keeper."""

import argparse

from worktree_keeper.__version__ import __version__
from worktree_keeper.models.results import UpdateStrategy


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worktree-keeper",
        description="Create, list, update and clean up git worktrees",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"worktree-keeper {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--base-branch", default="main", help="Base branch for ahead/behind, update and merge checks")
    parser.add_argument("--stale-days", type=int, default=14, help="Days without activity until a worktree is stale")
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers for worktree queries (default: auto-detect)",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Force sequential processing (disable parallelism)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    list_parser = subparsers.add_parser("list", help="List worktrees")
    list_parser.add_argument("--legend", action="store_true", help="Show the legend below the table")

    branches = subparsers.add_parser("branches", help="List branches available for a new worktree")
    branches.add_argument("--remote", action="store_true", help="Include remote-tracking branches")

    create = subparsers.add_parser("create", help="Create a worktree for a branch")
    create.add_argument("branch", help="Local, remote (origin/x) or new branch name")
    create.add_argument("path", nargs="?", help="Worktree directory (default: ../<branch>)")
    create.add_argument("--no-carry", action="store_true", help="Do not carry uncommitted changes")
    create.add_argument("--no-color", action="store_true", help="Do not write the branch color tag")

    remove = subparsers.add_parser("remove", help="Remove a worktree")
    remove.add_argument("path", help="Worktree path")
    remove.add_argument("--force", action="store_true", help="Remove even with uncommitted changes")
    remove.add_argument(
        "--allow-protected", action="store_true", help="Also remove the current or a locked worktree"
    )

    lock = subparsers.add_parser("lock", help="Lock a worktree")
    lock.add_argument("path", help="Worktree path")
    lock.add_argument("--reason", help="Lock reason")

    unlock = subparsers.add_parser("unlock", help="Unlock a worktree")
    unlock.add_argument("path", help="Worktree path")

    subparsers.add_parser("prune", help="Prune worktrees whose directories are gone")

    update = subparsers.add_parser("update", help="Update worktrees from the base branch")
    update.add_argument("paths", nargs="+", metavar="PATH", help="Worktree paths")
    update.add_argument(
        "--strategy",
        choices=[s.value for s in UpdateStrategy],
        default=UpdateStrategy.REBASE.value,
        help="Rebase onto or merge the base branch (default: rebase)",
    )

    cleanup = subparsers.add_parser("cleanup", help="Remove merged and stale worktrees")
    cleanup.add_argument(
        "--dry-run", action="store_true", help="Show what would be removed without removing"
    )
    cleanup.add_argument("--yes", action="store_true", help="Skip the confirmation")
    cleanup.add_argument(
        "--include-behind", action="store_true", help="Also remove clean worktrees that are only behind"
    )

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
