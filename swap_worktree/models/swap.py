"""Swap plan, stash and result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from swap_worktree.constants import EXIT_PARTIAL, EXIT_SUCCESS
from swap_worktree.models.worktree import WorktreeRef


class SwapPhase(Enum):
    """Phases of a swap, in execution order."""
    RESOLVE = "resolve"
    CAPTURE = "capture"
    DETACH = "detach"
    EXCHANGE = "exchange"
    RESTORE = "restore"
    DONE = "done"


@dataclass
class StashCapture:
    """Snapshot of one worktree's dirty state.

    ``stash_hash`` is the stash commit. It stays valid while the stash
    entry exists, unlike ``stash@{n}`` references which shift whenever
    another stash is pushed or dropped.
    """

    worktree_path: str
    branch: str
    stash_hash: Optional[str] = None
    message: Optional[str] = None

    @property
    def captured(self) -> bool:
        return self.stash_hash is not None


@dataclass
class SwapPlan:
    """Resolved and validated description of a swap."""

    destination: WorktreeRef
    source: WorktreeRef
    destination_branch: str
    source_branch: str

    def __post_init__(self):
        if self.destination.path == self.source.path:
            raise ValueError("destination and source must be different worktrees")
        if self.destination_branch == self.source_branch:
            raise ValueError("destination and source branches must differ")


class RestoreStatus(Enum):
    """What happened to one stash during the restore phase."""
    NOTHING = "nothing"  # nothing was captured
    APPLIED = "applied"  # applied and dropped
    APPLIED_NOT_DROPPED = "applied-not-dropped"  # applied, entry still listed
    CONFLICT = "conflict"  # not applied, stash kept


@dataclass
class RestoreOutcome:
    """Result of restoring one captured stash into a worktree."""

    worktree_path: str
    capture: StashCapture
    status: RestoreStatus
    message: Optional[str] = None

    @property
    def pending(self) -> bool:
        """True when the stash still has to be applied by hand."""
        return self.status == RestoreStatus.CONFLICT


class SwapStatus(Enum):
    """Overall result of a swap that did not fail fatally."""
    SUCCESS = "success"
    PARTIAL = "partial"


@dataclass
class SwapResult:
    """Outcome of a completed branch exchange."""

    plan: SwapPlan
    restores: List[RestoreOutcome] = field(default_factory=list)

    @property
    def pending_restores(self) -> List[RestoreOutcome]:
        return [r for r in self.restores if r.pending]

    @property
    def status(self) -> SwapStatus:
        return SwapStatus.PARTIAL if self.pending_restores else SwapStatus.SUCCESS

    @property
    def exit_code(self) -> int:
        return EXIT_PARTIAL if self.status == SwapStatus.PARTIAL else EXIT_SUCCESS
