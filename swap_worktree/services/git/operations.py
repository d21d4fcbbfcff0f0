"""GitPython implementation of the repository backend"""

import os
from contextlib import contextmanager
from typing import List, Optional

import git

from swap_worktree.constants import INDEX_REFUSED_MARKER, NO_LOCAL_CHANGES, STASH_LIST_FORMAT
from swap_worktree.exceptions import (
    GitOperationError,
    NotAWorktreeError,
    StashApplyError,
    StashDropError,
)
from swap_worktree.logging_config import get_logger
from swap_worktree.models.worktree import WorktreeRef
from swap_worktree.services.git.backend import RepoBackend
from swap_worktree.services.git.worktrees import canonical_path, parse_worktree_porcelain

logger = get_logger(__name__)


def describe_git_error(error: Exception) -> str:
    """Turn a GitCommandError into a one-paragraph message."""
    if isinstance(error, git.exc.GitCommandError):
        stderr = (error.stderr if hasattr(error, "stderr") else "") or ""
        stdout = (error.stdout if hasattr(error, "stdout") else "") or ""
        # GitPython wraps captured streams as "\n  stderr: '...'"
        parts = []
        for label, text in (("stdout", stdout), ("stderr", stderr)):
            text = text.strip()
            prefix = f"{label}:"
            if text.startswith(prefix):
                text = text[len(prefix):].strip().strip("'").strip()
            if text:
                parts.append(text)
        status = error.status if hasattr(error, "status") else "unknown"
        command = error.command
        if isinstance(command, (list, tuple)):
            command = " ".join(str(arg) for arg in command)
        if parts:
            return f"{command} (exit {status}): " + "\n".join(parts)
        return f"{command} failed with exit code {status}"
    return str(error)


class GitBackend(RepoBackend):
    """Repository backend that drives git through GitPython."""

    def _get_repo(self, path: str) -> git.Repo:
        """Open the repository of the worktree at ``path``.

        A fresh instance per call, so nothing read before a checkout is
        reused after it.
        """
        return git.Repo(path)

    @contextmanager
    def _git_operation(self, operation: str, path: str, branch: Optional[str] = None):
        """Translate GitPython failures into GitOperationError."""
        try:
            yield
        except git.exc.GitCommandError as e:
            message = describe_git_error(e)
            logger.debug(f"{operation} failed in {path}: {message}")
            raise GitOperationError(operation, branch=branch, message=message, path=path) from e
        except git.exc.GitCommandNotFound as e:
            raise GitOperationError(operation, message="git executable not found", path=path) from e
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise GitOperationError(operation, message=f"Not a git repository: {e}", path=path) from e

    def resolve_worktree(self, path: str) -> WorktreeRef:
        if not os.path.exists(path):
            raise NotAWorktreeError(path, f"Directory '{path}' does not exist.")
        if not os.path.isdir(path):
            raise NotAWorktreeError(path, f"'{path}' is not a directory.")

        path = canonical_path(path)
        cmd = git.Git(path)
        try:
            inside = cmd.rev_parse("--is-inside-work-tree")
            if inside.strip() != "true":
                raise NotAWorktreeError(path, f"'{path}' is not inside a git worktree.")
            toplevel = cmd.rev_parse("--show-toplevel")
        except git.exc.GitCommandError as e:
            raise NotAWorktreeError(path, describe_git_error(e)) from e
        except git.exc.GitCommandNotFound as e:
            raise GitOperationError("resolve_worktree", message="git executable not found", path=path) from e

        worktree = WorktreeRef(path=canonical_path(toplevel.strip()), current_branch=None)
        worktree.current_branch = self.current_branch(worktree)
        worktree.commit_sha = self.head_commit(worktree)
        worktree.is_dirty = self.is_dirty(worktree)
        logger.debug(f"Resolved {path} to worktree {worktree}")
        return worktree

    def repository_root(self, worktree: WorktreeRef) -> str:
        with self._git_operation("repository_root", worktree.path):
            common_dir = self._get_repo(worktree.path).git.rev_parse("--git-common-dir").strip()
        git_dir = canonical_path(common_dir, worktree.path)
        return os.path.dirname(git_dir) or worktree.path

    def list_worktrees(self, worktree: WorktreeRef) -> List[WorktreeRef]:
        with self._git_operation("list_worktrees", worktree.path):
            output = self._get_repo(worktree.path).git.worktree("list", "--porcelain")
        return parse_worktree_porcelain(output, base=worktree.path)

    def current_branch(self, worktree: WorktreeRef) -> Optional[str]:
        with self._git_operation("current_branch", worktree.path):
            repo = self._get_repo(worktree.path)
            try:
                branch = repo.git.symbolic_ref("--short", "-q", "HEAD")
            except git.exc.GitCommandError as e:
                if e.status == 1:
                    return None  # Detached HEAD
                raise
            return branch.strip() or None

    def head_commit(self, worktree: WorktreeRef) -> str:
        with self._git_operation("head_commit", worktree.path):
            repo = self._get_repo(worktree.path)
            try:
                return repo.git.rev_parse("--verify", "-q", "HEAD").strip()
            except git.exc.GitCommandError as e:
                if e.status == 1:
                    return ""  # Unborn branch, no commits yet
                raise

    def is_dirty(self, worktree: WorktreeRef) -> bool:
        with self._git_operation("is_dirty", worktree.path):
            return self._get_repo(worktree.path).is_dirty(
                index=True, working_tree=True, untracked_files=True
            )

    def create_stash(
        self, worktree: WorktreeRef, message: str, include_untracked: bool = True
    ) -> Optional[str]:
        args = ["push"]
        if include_untracked:
            args.append("--include-untracked")
        args.extend(["-m", message])

        with self._git_operation("stash_push", worktree.path):
            repo = self._get_repo(worktree.path)
            output = repo.git.stash(*args)
            if output.strip() == NO_LOCAL_CHANGES:
                logger.debug(f"No changes to stash in '{worktree.path}'")
                return None
            stash_hash = repo.git.rev_parse("stash@{0}").strip()

        logger.debug(f"Stashed changes from '{worktree.path}' as {stash_hash}")
        return stash_hash

    def find_stash_reference(self, worktree: WorktreeRef, stash_hash: str) -> Optional[str]:
        """Current ``stash@{n}`` reference of a stash commit, if still listed."""
        with self._git_operation("stash_list", worktree.path):
            output = self._get_repo(worktree.path).git.stash("list", STASH_LIST_FORMAT)
        for line in output.splitlines():
            commit, sep, reference = line.partition(":")
            if sep and commit == stash_hash:
                return reference.strip()
        return None

    def _stash_apply(self, worktree: WorktreeRef, stash_hash: str, require_index: bool) -> None:
        """Apply a stash with its staged changes, unstaged only if git refuses the index."""
        repo = self._get_repo(worktree.path)
        try:
            repo.git.stash("apply", "--index", stash_hash)
        except git.exc.GitCommandError as e:
            # The worktree is left untouched when only the index part is refused
            if require_index or INDEX_REFUSED_MARKER not in (e.stderr or "").lower():
                raise
            logger.warning(
                f"Staged changes in stash {stash_hash} do not apply to the index of "
                f"'{worktree.path}'; restoring them as unstaged changes."
            )
            repo.git.stash("apply", stash_hash)

    def apply_and_drop_stash(
        self, worktree: WorktreeRef, stash_hash: str, restore_index: bool = False
    ) -> None:
        try:
            with self._git_operation("stash_apply", worktree.path):
                self._stash_apply(worktree, stash_hash, require_index=restore_index)
        except GitOperationError as e:
            raise StashApplyError(worktree.path, stash_hash, e.message) from e
        logger.debug(f"Applied stash {stash_hash} to '{worktree.path}'")

        try:
            reference = self.find_stash_reference(worktree, stash_hash)
        except GitOperationError as e:
            raise StashDropError(worktree.path, stash_hash, e.message) from e
        if reference is None:
            raise StashDropError(
                worktree.path, stash_hash, "Could not determine stash reference"
            )

        try:
            with self._git_operation("stash_drop", worktree.path):
                self._get_repo(worktree.path).git.stash("drop", reference)
        except GitOperationError as e:
            raise StashDropError(worktree.path, stash_hash, e.message) from e
        logger.debug(f"Dropped stash {reference} ({stash_hash})")

    def detach(self, worktree: WorktreeRef) -> None:
        with self._git_operation("detach", worktree.path):
            self._get_repo(worktree.path).git.switch("--detach")

    def checkout_branch(self, worktree: WorktreeRef, branch: str) -> None:
        with self._git_operation("checkout_branch", worktree.path, branch=branch):
            self._get_repo(worktree.path).git.switch(branch)
