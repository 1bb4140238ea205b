"""Command-line interface for worktree-keeper"""

import os
import sys

import git
from rich.console import Console
from rich.markup import escape

from worktree_keeper.cli.args import parse_args
from worktree_keeper.config import Config
from worktree_keeper.core import WorktreeKeeper
from worktree_keeper.exceptions import WorktreeKeeperError
from worktree_keeper.models.worktree import WorktreeCategory
from worktree_keeper.services.display_service import DisplayService
from worktree_keeper.services.enrichment import is_same_path
from worktree_keeper.utils.logging import setup_logging
from worktree_keeper.utils.threading import get_optimal_worker_count, is_free_threading_enabled

console = Console()


def find_repo_root(path: str) -> str:
    """Working tree root containing path (a linked worktree counts as its own root)."""
    repo = git.Repo(path, search_parent_directories=True)
    return repo.working_tree_dir


def build_config(parsed_args) -> Config:
    overrides = dict(
        base_branch=parsed_args.base_branch,
        stale_days=parsed_args.stale_days,
        verbose=parsed_args.verbose,
        debug=parsed_args.debug,
        sequential=parsed_args.sequential,
        workers=parsed_args.workers,
    )
    if parsed_args.command == "branches":
        overrides["include_remote_branches"] = parsed_args.remote
    if parsed_args.command == "create":
        overrides["carry_changes"] = not parsed_args.no_carry
        overrides["apply_color"] = not parsed_args.no_color
    return Config(**overrides)


def _find_worktree(keeper: WorktreeKeeper, path: str):
    """Enriched worktree at path, or the path itself when it is not registered."""
    path = os.path.abspath(path)
    for worktree in keeper.list_worktrees():
        if is_same_path(worktree.path, path):
            return worktree
    return path


def run_command(parsed_args, keeper: WorktreeKeeper, display: DisplayService) -> bool:
    command = parsed_args.command

    if command == "list":
        display.display_worktree_table(keeper.list_worktrees(), show_legend=parsed_args.legend)
        return True

    if command == "branches":
        display.display_branches(keeper.list_branches())
        return True

    if command == "create":
        target = os.path.abspath(parsed_args.path) if parsed_args.path else None
        result = keeper.create_worktree(parsed_args.branch, target)
        display.display_create_result(result)
        return result.success

    if command == "remove":
        result = keeper.remove_worktree(
            _find_worktree(keeper, parsed_args.path),
            force=parsed_args.force,
            allow_protected=parsed_args.allow_protected,
        )
        display.display_result("Removed", result)
        return result.success

    if command == "lock":
        result = keeper.lock_worktree(os.path.abspath(parsed_args.path), parsed_args.reason)
        display.display_result("Locked", result)
        return result.success

    if command == "unlock":
        result = keeper.unlock_worktree(os.path.abspath(parsed_args.path))
        display.display_result("Unlocked", result)
        return result.success

    if command == "prune":
        result = keeper.prune()
        display.display_result("Pruned", result)
        return result.success

    if command == "update":
        worktrees = [_find_worktree(keeper, path) for path in parsed_args.paths]
        if len(worktrees) == 1:
            result = keeper.update_worktree(worktrees[0], parsed_args.strategy)
            display.display_result("Updated", result)
            return result.success
        bulk = keeper.bulk_update(
            [wt for wt in worktrees if not isinstance(wt, str)], parsed_args.strategy
        )
        for path in worktrees:
            if isinstance(path, str):
                console.print(f"[yellow]- Skipped {path}: not a worktree[/yellow]")
        display.display_bulk_result(bulk)
        return bulk.success

    if command == "cleanup":
        return run_cleanup(parsed_args, keeper, display)

    raise WorktreeKeeperError(f"Unknown command: {command}")


def run_cleanup(parsed_args, keeper: WorktreeKeeper, display: DisplayService) -> bool:
    candidates = keeper.plan_cleanup()
    if parsed_args.include_behind:
        for candidate in candidates:
            if candidate.category == WorktreeCategory.CLEAN_BEHIND:
                candidate.selected = True

    display.display_cleanup_candidates(candidates)
    selected = [c for c in candidates if c.selected]
    if not selected:
        return True

    dirty = [c.worktree for c in selected if c.worktree.is_dirty and not c.worktree.is_locked]
    if dirty:
        console.print("\n[yellow]Uncommitted changes will be discarded in:[/yellow]")
        for worktree in dirty:
            console.print(f"  {worktree.branch} ({worktree.path})", markup=False)

    if parsed_args.dry_run:
        console.print(f"\n[yellow]Dry run: {len(selected)} worktree(s) would be removed[/yellow]")
        return True

    if not parsed_args.yes:
        prompt = f"\nRemove {len(selected)} worktree(s)"
        if dirty:
            names = ", ".join(worktree.branch for worktree in dirty)
            prompt += f" and discard uncommitted changes in {names}"
        response = console.input(escape(f"{prompt}? [y/N] "))
        if response.strip().lower() != "y":
            console.print("[yellow]Cleanup cancelled[/yellow]")
            return True

    bulk = keeper.smart_cleanup(candidates)
    display.display_bulk_result(bulk)
    return bulk.success


def main(argv=None):
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        config = build_config(parsed_args)

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print(f"  Free-threading enabled: {is_free_threading_enabled()}")
            console.print(f"  Optimal workers: {get_optimal_worker_count(config.workers)}")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        repo_root = find_repo_root(os.getcwd())
        keeper = WorktreeKeeper(repo_root, config)
        display = DisplayService(stale_days=config.stale_days, verbose=config.verbose)

        return 0 if run_command(parsed_args, keeper, display) else 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        console.print("[red]Error: not inside a git repository[/red]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
