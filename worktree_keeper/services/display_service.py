"""Display and formatting service for worktree information"""

from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from worktree_keeper.constants import CLI_COLORS, COLUMNS, LEGEND_TEXT
from worktree_keeper.formatters import format_category, format_date, format_days_ago, format_disk_size
from worktree_keeper.models.branch import Branch
from worktree_keeper.models.results import BulkResult, CleanupCandidate, CreateResult, OperationResult, Outcome
from worktree_keeper.models.worktree import Worktree
from worktree_keeper.services.state import resolve_state

console = Console()


class DisplayService:
    def __init__(self, stale_days: float = 14, verbose: bool = False, output: Optional[Console] = None):
        self.stale_days = stale_days
        self.verbose = verbose
        self.console = output or console

    def worktree_row(self, worktree: Worktree, now: Optional[datetime] = None) -> List[str]:
        """Cells of one table row, in COLUMNS order."""
        state = resolve_state(worktree, self.stale_days, now)
        branch = f"* {worktree.branch}" if worktree.is_current else worktree.branch
        state_text = state.kind.value + state.description_suffix
        if state.is_stale:
            state_text += " (stale)"
        return [
            branch,
            worktree.commit,
            state_text,
            format_days_ago(worktree.last_activity_date, now),
            format_disk_size(worktree.disk_size_bytes),
            worktree.path,
        ]

    def display_worktree_table(self, worktrees: List[Worktree], show_legend: bool = False,
                               now: Optional[datetime] = None) -> None:
        """Display a table of worktree information."""
        table = Table()
        for col in COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for worktree in worktrees:
            state = resolve_state(worktree, self.stale_days, now)
            cells = [escape(cell) for cell in self.worktree_row(worktree, now)]
            table.add_row(*cells, style=CLI_COLORS.get(state.color))

        self.console.print(table)

        if self.verbose:
            for worktree in worktrees:
                if worktree.commit_message:
                    details = (
                        f"{worktree.branch}: {worktree.commit_message} "
                        f"({worktree.commit_author}, {worktree.commit_date}; "
                        f"last activity {format_date(worktree.last_activity_date) or 'unknown'})"
                    )
                    self.console.print(details, style="dim", markup=False)

        if show_legend:
            self.console.print(LEGEND_TEXT)

    def display_branches(self, branches: List[Branch]) -> None:
        if not branches:
            self.console.print("[yellow]No branches available for a new worktree[/yellow]")
            return
        for branch in branches:
            suffix = " [dim](remote)[/dim]" if branch.is_remote else ""
            self.console.print(f"  {escape(branch.name)}{suffix}")

    def display_cleanup_candidates(self, candidates: List[CleanupCandidate]) -> None:
        if not candidates:
            self.console.print("[green]Nothing to clean up[/green]")
            return
        self.console.print("\nWorktrees that could be cleaned up:")
        for candidate in candidates:
            marker = "[x]" if candidate.selected else "[ ]"
            lock = " 🔒" if candidate.worktree.is_locked else ""
            self.console.print(
                f"  {marker} {candidate.worktree.branch} "
                f"({format_category(candidate.category)}{lock}) {candidate.worktree.path}",
                markup=False,
            )

    def display_result(self, action: str, result: OperationResult) -> None:
        name = escape(result.label or result.target)
        if result.outcome == Outcome.SUCCEEDED:
            self.console.print(f"[green]✓ {action} {name}[/green]")
        elif result.outcome == Outcome.SKIPPED:
            self.console.print(f"[yellow]- Skipped {name}: {escape(str(result.error))}[/yellow]")
        else:
            self.console.print(f"[red]✗ Failed to {action.lower()} {name}: {escape(str(result.error))}[/red]")
            if getattr(result, "needs_manual_resolution", False):
                self.console.print(f"  Open {result.target} to resolve manually")

    def display_bulk_result(self, bulk: BulkResult) -> None:
        for result in bulk.results:
            self.display_result(bulk.action.capitalize(), result)
        if bulk.prune_result is not None and not bulk.prune_result.success:
            self.console.print(f"[red]✗ Prune failed: {escape(str(bulk.prune_result.error))}[/red]")
        color = "green" if bulk.success else "yellow"
        self.console.print(f"\n[{color}]{bulk.action.capitalize()}: {bulk.summary()}[/{color}]")

    def display_create_result(self, result: CreateResult) -> None:
        if not result.success:
            self.console.print(f"[red]✗ Failed to create worktree for {escape(result.branch)}: {escape(str(result.error))}[/red]")
            for warning in result.warnings:
                self.console.print(f"[yellow]  ! {escape(str(warning))}[/yellow]")
            return

        self.console.print(f"[green]✓ Created worktree for {escape(result.branch)} at {escape(result.path)}[/green]")
        if result.stashed:
            self.console.print("  Carried uncommitted changes into the new worktree")
        if result.cloned_files:
            self.console.print(f"  Cloned environment: {', '.join(result.cloned_files)}")
        if result.hook_result is not None and result.hook_result.success:
            self.console.print(f"  Ran {result.hook_result.script}")
        for warning in result.warnings:
            self.console.print(f"[yellow]  ! {escape(str(warning))}[/yellow]")
