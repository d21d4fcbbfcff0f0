"""Core functionality for swap-worktree."""

from .swap_orchestrator import SwapOrchestrator

__all__ = ["SwapOrchestrator"]
