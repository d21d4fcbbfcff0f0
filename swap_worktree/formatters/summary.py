"""Plan and result formatting utilities."""

from swap_worktree.constants import SYMBOL_ARROW, SYMBOL_FAIL, SYMBOL_OK, SYMBOL_WARN
from swap_worktree.models.swap import RestoreOutcome, RestoreStatus, SwapPlan, SwapResult
from swap_worktree.formatters.recovery import format_stash_apply_command, format_stash_label


def format_dirty(is_dirty) -> str:
    """Format a worktree's dirty flag (None = not inspected)."""
    if is_dirty is None:
        return "unknown"
    return "uncommitted changes" if is_dirty else "clean"


def format_plan(plan: SwapPlan) -> str:
    """
    Format a swap plan as the two moves it will perform.

    Example:
        "'/wt/a' (main, clean) → feature\\n'/wt/b' (feature, uncommitted changes) → main"
    """
    return "\n".join([
        f"'{plan.destination.path}' ({plan.destination_branch}, "
        f"{format_dirty(plan.destination.is_dirty)}) {SYMBOL_ARROW} {plan.source_branch}",
        f"'{plan.source.path}' ({plan.source_branch}, "
        f"{format_dirty(plan.source.is_dirty)}) {SYMBOL_ARROW} {plan.destination_branch}",
    ])


def format_swap_summary(plan: SwapPlan) -> str:
    """One-line summary of a completed swap."""
    return (
        f"Swap complete: '{plan.destination.path}' -> '{plan.source_branch}', "
        f"'{plan.source.path}' -> '{plan.destination_branch}'."
    )


def format_restore_outcome(outcome: RestoreOutcome) -> str:
    """Describe what happened to one stash."""
    capture = outcome.capture
    if outcome.status == RestoreStatus.NOTHING:
        return f"No stash from '{capture.branch}' to apply to '{outcome.worktree_path}'."
    if outcome.status == RestoreStatus.APPLIED:
        return (
            f"{SYMBOL_OK} Changes from '{capture.branch}' restored in '{outcome.worktree_path}'."
        )
    if outcome.status == RestoreStatus.APPLIED_NOT_DROPPED:
        return (
            f"{SYMBOL_WARN} Changes from '{capture.branch}' restored in '{outcome.worktree_path}', "
            f"but stash {format_stash_label(capture)} could not be dropped "
            f"and remains in the stash list."
        )
    return (
        f"{SYMBOL_FAIL} Failed to apply stash {format_stash_label(capture)} "
        f"(from '{capture.branch}') to '{outcome.worktree_path}'. "
        f"The stash has been kept; resolve manually with:\n"
        f"  {format_stash_apply_command(capture, outcome.worktree_path)}"
    )


def format_partial_notice(result: SwapResult) -> str:
    """Explain a partial success: branches swapped, stashes pending."""
    count = len(result.pending_restores)
    noun = "stash was" if count == 1 else "stashes were"
    return (
        f"Branches were swapped, but {count} {noun} not applied and "
        f"{'is' if count == 1 else 'are'} still in the stash list."
    )
