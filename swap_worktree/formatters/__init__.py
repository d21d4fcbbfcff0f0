"""Formatting utilities for swap-worktree.

- summary: Plans, restore outcomes and swap summaries
- recovery: Manual recovery commands after a failed swap
"""

from .summary import (
    format_dirty,
    format_plan,
    format_swap_summary,
    format_restore_outcome,
    format_partial_notice,
)
from .recovery import (
    format_git_command,
    format_stash_label,
    format_stash_apply_command,
    format_recovery_commands,
    format_worktree_state,
)

__all__ = [
    # Summary
    "format_dirty",
    "format_plan",
    "format_swap_summary",
    "format_restore_outcome",
    "format_partial_notice",
    # Recovery
    "format_git_command",
    "format_stash_label",
    "format_stash_apply_command",
    "format_recovery_commands",
    "format_worktree_state",
]
