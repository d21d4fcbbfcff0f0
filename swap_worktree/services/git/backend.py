"""Version-control capability interface used by the swap orchestrator."""

from abc import ABC, abstractmethod
from typing import List, Optional

from swap_worktree.models.worktree import WorktreeRef


class RepoBackend(ABC):
    """Primitives the swap needs from version control.

    Implementations raise ``GitOperationError`` (or a subclass) when an
    operation fails. Nothing here caches repository state between calls.
    """

    @abstractmethod
    def resolve_worktree(self, path: str) -> WorktreeRef:
        """Resolve ``path`` to the worktree containing it.

        Raises:
            NotAWorktreeError: If the path is missing or not in a worktree
        """

    @abstractmethod
    def repository_root(self, worktree: WorktreeRef) -> str:
        """Directory of the main repository the worktree belongs to."""

    @abstractmethod
    def list_worktrees(self, worktree: WorktreeRef) -> List[WorktreeRef]:
        """All worktrees of the repository ``worktree`` belongs to."""

    @abstractmethod
    def current_branch(self, worktree: WorktreeRef) -> Optional[str]:
        """Branch checked out in the worktree, or None when detached."""

    @abstractmethod
    def head_commit(self, worktree: WorktreeRef) -> str:
        """Commit currently checked out in the worktree."""

    @abstractmethod
    def is_dirty(self, worktree: WorktreeRef) -> bool:
        """True if the worktree has staged, unstaged or untracked changes."""

    @abstractmethod
    def create_stash(
        self, worktree: WorktreeRef, message: str, include_untracked: bool = True
    ) -> Optional[str]:
        """Stash the worktree's changes.

        Returns:
            The stash commit hash, or None if there was nothing to stash
        """

    @abstractmethod
    def apply_and_drop_stash(
        self, worktree: WorktreeRef, stash_hash: str, restore_index: bool = False
    ) -> None:
        """Apply a stash to the worktree, then remove it from the stash list.

        Staged changes are restored as staged. When they no longer apply to
        the index they come back unstaged, unless ``restore_index`` is set.

        Raises:
            StashApplyError: If the stash could not be applied; it is kept
            StashDropError: If it was applied but could not be removed
        """

    @abstractmethod
    def detach(self, worktree: WorktreeRef) -> None:
        """Detach HEAD at the current commit, freeing the branch."""

    @abstractmethod
    def checkout_branch(self, worktree: WorktreeRef, branch: str) -> None:
        """Check out ``branch`` in the worktree."""

    def worktree_branches(self, worktree: WorktreeRef) -> List[str]:
        """Sorted names of the branches checked out in any worktree."""
        return sorted({wt.current_branch for wt in self.list_worktrees(worktree) if wt.current_branch})
