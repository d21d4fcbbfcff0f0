"""Custom exceptions for swap-worktree"""

from typing import TYPE_CHECKING, List, Optional

from swap_worktree.constants import (
    EXIT_FAILURE,
    EXIT_INCONSISTENT,
)

if TYPE_CHECKING:
    from swap_worktree.models.swap import StashCapture
    from swap_worktree.models.worktree import WorktreeRef


class SwapWorktreeError(Exception):
    """Base exception for all swap-worktree errors."""
    pass


class GitOperationError(SwapWorktreeError):
    """Exception raised for errors in Git operations."""

    def __init__(
        self,
        operation: str,
        branch: Optional[str] = None,
        message: Optional[str] = None,
        path: Optional[str] = None,
    ):
        self.operation = operation
        self.branch = branch
        self.message = message
        self.path = path

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if path:
            error_msg += f" in '{path}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class NotAWorktreeError(GitOperationError):
    """Exception raised when a path is not inside a git worktree."""

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(
            "resolve_worktree", path=path, message=message or "Not a git worktree"
        )


class StashApplyError(GitOperationError):
    """Exception raised when a stash cannot be applied. The stash is kept."""

    def __init__(self, path: str, stash: str, message: Optional[str] = None):
        self.stash = stash
        super().__init__("stash_apply", path=path, message=message)


class StashDropError(GitOperationError):
    """Exception raised when an applied stash cannot be dropped."""

    def __init__(self, path: str, stash: str, message: Optional[str] = None):
        self.stash = stash
        super().__init__("stash_drop", path=path, message=message)


class SwapError(SwapWorktreeError):
    """Base class for failures reported by the swap orchestrator.

    Attributes:
        exit_code: Process exit status the CLI should use
        pending_stashes: Captured stashes that were not re-applied and are
            still in the stash list
    """

    exit_code = EXIT_FAILURE

    def __init__(self, message: str, pending_stashes: Optional[List["StashCapture"]] = None):
        self.message = message
        self.pending_stashes = list(pending_stashes or [])
        super().__init__(message)


class PreconditionError(SwapError):
    """Invalid invocation. Nothing was changed."""
    pass


class CaptureError(SwapError):
    """A stash snapshot could not be created. No branch was changed."""

    def __init__(self, message: str, worktree_path: str, pending_stashes=None):
        self.worktree_path = worktree_path
        super().__init__(message, pending_stashes)


class DetachError(SwapError):
    """A worktree could not be detached. Branch assignment was rolled back."""
    pass


class CheckoutError(SwapError):
    """A branch could not be checked out. Branch assignment was rolled back."""
    pass


class InconsistentStateError(SwapError):
    """Rollback failed; the worktrees need manual git intervention.

    Attributes:
        current_state: WorktreeRef per worktree, re-read after the failure;
            ``current_branch`` is None when it is detached at ``commit_sha``
        recovery_commands: Shell commands that restore a consistent state
    """

    exit_code = EXIT_INCONSISTENT

    def __init__(
        self,
        message: str,
        current_state: List["WorktreeRef"],
        recovery_commands: List[str],
        pending_stashes=None,
    ):
        self.current_state = current_state
        self.recovery_commands = recovery_commands
        super().__init__(message, pending_stashes)


class RestoreConflictError(SwapWorktreeError):
    """A stash could not be re-applied after a successful branch swap.

    Recorded on the restore outcome rather than raised out of a swap.
    """

    def __init__(self, worktree_path: str, stash_hash: str, message: Optional[str] = None):
        self.worktree_path = worktree_path
        self.stash_hash = stash_hash
        self.message = message

        error_msg = f"Could not apply stash {stash_hash} to '{worktree_path}'"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)
