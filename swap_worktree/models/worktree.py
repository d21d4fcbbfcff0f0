"""Worktree data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass
class WorktreeRef:
    """A worktree of the repository, identified by its top-level path.

    ``current_branch`` is a snapshot taken when the ref was built. Any
    checkout or detach in the worktree makes it stale; ask the backend
    again instead of trusting it.
    """

    path: str
    current_branch: Optional[str]  # None = detached HEAD
    commit_sha: str = ""
    is_dirty: Optional[bool] = None  # None = not inspected
    is_main: bool = False  # Is this the main working tree?
    is_orphaned: bool = False  # Directory missing?

    @property
    def is_detached(self) -> bool:
        return self.current_branch is None

    def describe_head(self) -> str:
        """Branch name, or the detached commit. A ref with neither was never read."""
        if self.current_branch:
            return self.current_branch
        if self.commit_sha:
            return f"detached at {self.commit_sha[:12]}"
        return "unknown"

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "orphaned" if self.is_orphaned else "active"
        main_marker = " (main)" if self.is_main else ""
        return f"{self.describe_head()} @ {self.path}{main_marker} [{status}]"


class LocationState(Enum):
    """Where a branch was found relative to the destination worktree."""
    FOUND = "found"
    NOT_CHECKED_OUT = "not-checked-out"
    IN_DESTINATION = "in-destination"


@dataclass
class BranchLocation:
    """The worktree hosting a branch, if any."""

    branch: str
    state: LocationState
    worktree: Optional[WorktreeRef] = None

    @property
    def found(self) -> bool:
        return self.state == LocationState.FOUND
