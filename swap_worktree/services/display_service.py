"""Display service for swap plans, results and failures"""
from typing import List

from rich.console import Console
from rich.markup import escape

from swap_worktree.exceptions import InconsistentStateError, SwapError
from swap_worktree.formatters import (
    format_partial_notice,
    format_plan,
    format_restore_outcome,
    format_stash_apply_command,
    format_swap_summary,
)
from swap_worktree.logging_config import get_logger
from swap_worktree.models.swap import RestoreStatus, SwapPlan, SwapResult, SwapStatus

console = Console()
error_console = Console(stderr=True)
logger = get_logger(__name__)


class DisplayService:
    """Writes progress and summaries to stdout, problems to stderr."""

    def __init__(self, verbose: bool = False, debug: bool = False):
        self.verbose = verbose
        self.debug_mode = debug

    def display_plan(self, plan: SwapPlan) -> None:
        """Show what a swap would do."""
        console.print("[bold]Planned swap:[/bold]")
        for line in format_plan(plan).splitlines():
            console.print(f"  {escape(line)}")

    def display_result(self, result: SwapResult) -> None:
        """Show the outcome of a swap that exchanged the branches."""
        for outcome in result.restores:
            if outcome.status == RestoreStatus.NOTHING:
                continue
            text = escape(format_restore_outcome(outcome))
            if outcome.status == RestoreStatus.APPLIED:
                if self.verbose or self.debug_mode:
                    console.print(f"[green]{text}[/green]")
            elif outcome.status == RestoreStatus.APPLIED_NOT_DROPPED:
                error_console.print(f"[yellow]Warning: {text}[/yellow]")
            else:
                error_console.print(f"[red]{text}[/red]")
                if outcome.message:
                    error_console.print(f"[dim]{escape(outcome.message)}[/dim]")

        console.print(escape(format_swap_summary(result.plan)))
        if result.status == SwapStatus.PARTIAL:
            error_console.print(f"[yellow]{escape(format_partial_notice(result))}[/yellow]")

    def display_error(self, error: SwapError) -> None:
        """Show a fatal swap failure with whatever recovery facts it carries."""
        style = "bold red" if isinstance(error, InconsistentStateError) else "red"
        error_console.print(f"[{style}]Error: {escape(error.message)}[/{style}]")
        if error.pending_stashes and not isinstance(error, InconsistentStateError):
            self.display_pending_stashes(error.pending_stashes)

    def display_pending_stashes(self, captures: List) -> None:
        """List stashes that are still waiting to be applied."""
        error_console.print("[yellow]These stashes were kept and can be applied manually:[/yellow]")
        for capture in captures:
            error_console.print(f"  {escape(format_stash_apply_command(capture))}")

    def display_branches(self, branches: List[str]) -> None:
        """Print one branch name per line, unstyled (used by shell completion)."""
        for branch in branches:
            console.print(branch, markup=False, highlight=False, soft_wrap=True)

    def display_interrupted(self, phase_name: str) -> None:
        error_console.print(
            f"\n[yellow]Operation cancelled by user during the {phase_name} phase.[/yellow]"
        )
        error_console.print(
            "[yellow]The worktrees were left as that phase had them; check `git worktree list` "
            "and `git stash list` before retrying.[/yellow]"
        )
