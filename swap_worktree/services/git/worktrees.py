"""Parsing of `git worktree list --porcelain` output."""

import os
from typing import Any, Dict, List

from swap_worktree.constants import (
    BRANCH_REF_PREFIX,
    PORCELAIN_BARE,
    PORCELAIN_BRANCH,
    PORCELAIN_DETACHED,
    PORCELAIN_HEAD,
    PORCELAIN_WORKTREE,
)
from swap_worktree.models.worktree import WorktreeRef
from swap_worktree.logging_config import get_logger

logger = get_logger(__name__)


def normalize_branch_name(branch_ref: str) -> str:
    """Strip the ``refs/heads/`` prefix from a branch ref."""
    branch_ref = branch_ref.strip()
    if branch_ref.startswith(BRANCH_REF_PREFIX):
        return branch_ref[len(BRANCH_REF_PREFIX):]
    return branch_ref


def canonical_path(path: str, base: str = "") -> str:
    """Absolute, symlink-resolved form of ``path`` (relative to ``base``)."""
    if base and not os.path.isabs(path):
        path = os.path.join(base, path)
    return os.path.realpath(path)


def _to_worktree_ref(entry: Dict[str, Any], is_main: bool, base: str) -> WorktreeRef:
    path = canonical_path(entry["path"], base)
    return WorktreeRef(
        path=path,
        current_branch=entry.get("branch") or None,
        commit_sha=entry.get("HEAD", ""),
        is_main=is_main,
        is_orphaned=not os.path.exists(path),
    )


def parse_worktree_porcelain(output: str, base: str = "") -> List[WorktreeRef]:
    """Parse `git worktree list --porcelain` output.

    Format::

        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (blank line between worktrees)

    Detached worktrees carry a ``detached`` line instead of ``branch``.
    Bare entries are skipped since nothing can be checked out in them.

    Args:
        output: Raw porcelain output
        base: Directory that relative worktree paths are resolved against

    Returns:
        List of WorktreeRef, main worktree first
    """
    worktrees: List[WorktreeRef] = []
    current: Dict[str, Any] = {}
    seen_entries = 0

    def flush():
        nonlocal seen_entries
        if current.get("path"):
            if not current.get("bare"):
                worktrees.append(_to_worktree_ref(current, seen_entries == 0, base))
            seen_entries += 1

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            # Empty line marks end of worktree entry
            flush()
            current = {}
            continue

        if line.startswith(PORCELAIN_WORKTREE):
            current["path"] = line.split(" ", 1)[1]
        elif line.startswith(PORCELAIN_HEAD):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith(PORCELAIN_BRANCH):
            branch_ref = line.split(" ", 1)[1].strip()
            current["branch"] = normalize_branch_name(branch_ref) if branch_ref else ""
        elif line == PORCELAIN_DETACHED:
            current["branch"] = ""
        elif line == PORCELAIN_BARE:
            current["bare"] = True

    # Handle last entry if no trailing blank line
    flush()

    logger.debug(f"Found {len(worktrees)} worktrees")
    for wt in worktrees:
        logger.debug(f"  {wt}")
    return worktrees


def find_worktree_for_branch(worktrees: List[WorktreeRef], branch: str):
    """Return the first worktree with ``branch`` checked out, or None."""
    for wt in worktrees:
        if wt.current_branch == branch:
            return wt
    return None
