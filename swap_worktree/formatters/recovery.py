"""Manual recovery instructions."""

import shlex
from typing import List

from swap_worktree.models.swap import StashCapture, SwapPlan
from swap_worktree.models.worktree import WorktreeRef


def format_git_command(path: str, *args: str) -> str:
    """Render a ``git -C <path> ...`` command line with shell quoting."""
    return " ".join(["git", "-C", shlex.quote(path)] + [shlex.quote(arg) for arg in args])


def format_stash_label(capture: StashCapture) -> str:
    """Stash hash, with the message it is listed under in `git stash list`."""
    if capture.message:
        return f"{capture.stash_hash} ({capture.message})"
    return capture.stash_hash


def format_stash_apply_command(capture: StashCapture, path: str = "") -> str:
    """
    Command that applies a kept stash, by default in its own worktree.

    The stash message is appended as a shell comment so the command can
    be matched against `git stash list`.
    """
    command = format_git_command(path or capture.worktree_path, "stash", "apply", capture.stash_hash)
    if capture.message:
        command += f"  # {capture.message}"
    return command


def format_recovery_commands(plan: SwapPlan, pending_stashes: List[StashCapture]) -> List[str]:
    """
    Commands that put both worktrees back on their original branches.

    Both worktrees are detached first so that neither branch is held by
    the other worktree when it is switched back. Kept stashes are then
    applied to the worktree they were taken from.

    Args:
        plan: The swap that failed
        pending_stashes: Stashes that are still in the stash list

    Returns:
        Command lines, in the order they must be run
    """
    destination = plan.destination.path
    source = plan.source.path
    commands = [
        format_git_command(destination, "switch", "--detach"),
        format_git_command(source, "switch", "--detach"),
        format_git_command(destination, "switch", plan.destination_branch),
        format_git_command(source, "switch", plan.source_branch),
    ]
    commands.extend(
        format_stash_apply_command(capture) for capture in pending_stashes if capture.captured
    )
    return commands


def format_worktree_state(worktrees: List[WorktreeRef]) -> str:
    """
    Format the branch or commit each worktree holds.

    Example:
        "  '/wt/a' is on 'feature'\\n  '/wt/b' is detached at 1c1cdd9c68b3"
    """
    lines = []
    for wt in worktrees:
        if wt.current_branch:
            lines.append(f"  '{wt.path}' is on '{wt.current_branch}'")
        elif wt.commit_sha:
            lines.append(f"  '{wt.path}' is detached at {wt.commit_sha[:12]}")
        else:
            lines.append(f"  '{wt.path}' is in an unknown state")
    return "\n".join(lines)
