"""Data models for swap-worktree."""

from .worktree import WorktreeRef, BranchLocation, LocationState
from .swap import (
    StashCapture,
    SwapPlan,
    SwapPhase,
    RestoreStatus,
    RestoreOutcome,
    SwapStatus,
    SwapResult,
)

__all__ = [
    "WorktreeRef",
    "BranchLocation",
    "LocationState",
    "StashCapture",
    "SwapPlan",
    "SwapPhase",
    "RestoreStatus",
    "RestoreOutcome",
    "SwapStatus",
    "SwapResult",
]
