"""Git-related services for swap-worktree."""

from .backend import RepoBackend
from .operations import GitBackend
from .worktrees import parse_worktree_porcelain, find_worktree_for_branch

__all__ = [
    "RepoBackend",
    "GitBackend",
    "parse_worktree_porcelain",
    "find_worktree_for_branch",
]
