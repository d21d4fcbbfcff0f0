"""
swap-worktree - Swap branches (and uncommitted work) between two Git worktrees
"""

from .__version__ import __version__
from .core import SwapOrchestrator
from .cli.main import main

__all__ = ["SwapOrchestrator", "main", "__version__"]
