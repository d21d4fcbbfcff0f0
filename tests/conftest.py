"""Pytest fixtures for swap-worktree tests"""
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from swap_worktree.config import Config
from swap_worktree.models.worktree import WorktreeRef
from swap_worktree.services.git import GitBackend, RepoBackend


@dataclass
class WorktreePair:
    """A repository with its main worktree on 'main' and a linked one on 'feature'."""

    repo: git.Repo
    main_path: Path
    feature_path: Path

    def branch_of(self, path: Path):
        """Branch checked out at path, None when detached."""
        try:
            return git.Repo(path).git.symbolic_ref("--short", "-q", "HEAD").strip()
        except git.exc.GitCommandError:
            return None

    def status_of(self, path: Path) -> list:
        """`git status --porcelain` lines of the worktree at path."""
        return git.Repo(path).git.status("--porcelain").splitlines()

    def stash_list(self) -> str:
        return self.repo.git.stash("list")

    def snapshot(self) -> dict:
        """Branch assignment, HEADs and stash list, for before/after comparisons."""
        return {
            "main_branch": self.branch_of(self.main_path),
            "feature_branch": self.branch_of(self.feature_path),
            "main_head": git.Repo(self.main_path).git.rev_parse("HEAD"),
            "feature_head": git.Repo(self.feature_path).git.rev_parse("HEAD"),
            "stashes": self.stash_list(),
        }


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Worktree paths are reported symlink-resolved
        yield Path(os.path.realpath(tmpdir))


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        'verbose': False,
        'debug': False,
        'include_untracked': True,
        'restore_index': False,
        'stash_message_prefix': 'swap-stash',
        'dry_run': False,
    }


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits (and stashes)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    (repo_path / "README.md").write_text("# Test Repository\n")
    (repo_path / "y.txt").write_text("original y\n")
    (repo_path / "docs").mkdir()
    (repo_path / "docs" / "index.md").write_text("docs\n")
    repo.git.add("README.md", "y.txt", "docs/index.md")
    repo.git.commit("-m", "Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    yield repo

    repo.close()


@pytest.fixture
def worktree_pair(git_repo, temp_dir):
    """Main worktree on 'main', linked worktree on 'feature' with one extra commit."""
    repo = git_repo
    main_path = Path(repo.working_dir)
    feature_path = temp_dir / "wt-feature"

    repo.git.branch("feature")
    repo.git.worktree("add", str(feature_path), "feature")

    feature_repo = git.Repo(feature_path)
    (feature_path / "feature.txt").write_text("Feature content\n")
    feature_repo.git.add("feature.txt")
    feature_repo.git.commit("-m", "Add feature")
    feature_repo.close()

    yield WorktreePair(repo=repo, main_path=main_path, feature_path=feature_path)


@pytest.fixture
def backend():
    """A real GitPython backend."""
    return GitBackend()


@pytest.fixture
def mock_backend():
    """A RepoBackend mock with main at /wt/a and feature at /wt/b, both clean."""
    backend = Mock(spec=RepoBackend)
    destination = WorktreeRef(path="/wt/a", current_branch="main", commit_sha="a" * 40, is_dirty=False)
    source = WorktreeRef(path="/wt/b", current_branch="feature", commit_sha="b" * 40, is_dirty=False)
    refs = {"/wt/a": destination, "/wt/b": source}

    backend.resolve_worktree.side_effect = lambda path: refs[path]
    backend.repository_root.return_value = "/wt/a"
    backend.list_worktrees.return_value = [
        WorktreeRef(path="/wt/a", current_branch="main", is_main=True),
        WorktreeRef(path="/wt/b", current_branch="feature"),
    ]
    backend.is_dirty.return_value = False
    backend.create_stash.return_value = None
    backend.current_branch.side_effect = lambda wt: refs[wt.path].current_branch
    backend.head_commit.side_effect = lambda wt: refs[wt.path].commit_sha
    return backend


@pytest.fixture
def config():
    return Config()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they don't outlive a test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
