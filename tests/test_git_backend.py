"""Tests for GitBackend"""
from unittest.mock import patch

import git
import pytest

from swap_worktree.exceptions import (
    GitOperationError,
    NotAWorktreeError,
    StashApplyError,
    StashDropError,
)
from swap_worktree.services.git.operations import describe_git_error


class TestResolveWorktree:
    """Test resolving paths to worktrees."""

    def test_resolve_main_worktree(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        assert wt.path == str(worktree_pair.main_path)
        assert wt.current_branch == "main"
        assert wt.is_dirty is False
        assert wt.commit_sha == worktree_pair.repo.head.commit.hexsha

    def test_resolve_linked_worktree(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.feature_path))
        assert wt.path == str(worktree_pair.feature_path)
        assert wt.current_branch == "feature"

    def test_resolve_subdirectory_to_toplevel(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.main_path / "docs"))
        assert wt.path == str(worktree_pair.main_path)

    def test_resolve_missing_directory(self, backend, temp_dir):
        with pytest.raises(NotAWorktreeError, match="does not exist"):
            backend.resolve_worktree(str(temp_dir / "nonexistent"))

    def test_resolve_file(self, backend, worktree_pair):
        with pytest.raises(NotAWorktreeError, match="is not a directory"):
            backend.resolve_worktree(str(worktree_pair.main_path / "README.md"))

    def test_resolve_non_repository(self, backend, temp_dir):
        plain = temp_dir / "plain"
        plain.mkdir()
        with pytest.raises(NotAWorktreeError):
            backend.resolve_worktree(str(plain))

    def test_resolve_detached(self, backend, worktree_pair):
        worktree_pair.repo.git.switch("--detach")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        assert wt.current_branch is None
        assert wt.is_detached


class TestWorktreeQueries:
    """Test read-only queries."""

    def test_list_worktrees(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.feature_path))
        worktrees = backend.list_worktrees(wt)
        by_branch = {w.current_branch: w.path for w in worktrees}
        assert by_branch == {
            "main": str(worktree_pair.main_path),
            "feature": str(worktree_pair.feature_path),
        }

    def test_worktree_branches(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        assert backend.worktree_branches(wt) == ["feature", "main"]

    def test_repository_root_from_linked_worktree(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.feature_path))
        assert backend.repository_root(wt) == str(worktree_pair.main_path)

    @pytest.mark.parametrize("change", ["untracked", "unstaged", "staged"])
    def test_is_dirty(self, backend, worktree_pair, change):
        wt = backend.resolve_worktree(str(worktree_pair.feature_path))
        assert backend.is_dirty(wt) is False

        path = worktree_pair.feature_path
        if change == "untracked":
            (path / "new.txt").write_text("new\n")
        else:
            (path / "y.txt").write_text("changed\n")
            if change == "staged":
                git.Repo(path).git.add("y.txt")

        assert backend.is_dirty(wt) is True


class TestStashes:
    """Test stash creation, application and removal."""

    def test_create_stash_nothing_to_save(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        assert backend.create_stash(wt, "swap-stash-main") is None
        assert worktree_pair.stash_list() == ""

    def test_create_stash_includes_untracked(self, backend, worktree_pair):
        (worktree_pair.main_path / "x.txt").write_text("x\n")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))

        stash_hash = backend.create_stash(wt, "swap-stash-main")

        assert stash_hash == worktree_pair.repo.git.rev_parse("stash@{0}")
        assert not (worktree_pair.main_path / "x.txt").exists()
        assert "swap-stash-main" in worktree_pair.stash_list()

    def test_create_stash_without_untracked(self, backend, worktree_pair):
        (worktree_pair.main_path / "x.txt").write_text("x\n")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))

        assert backend.create_stash(wt, "swap-stash-main", include_untracked=False) is None
        assert (worktree_pair.main_path / "x.txt").exists()

    def test_apply_and_drop_stash(self, backend, worktree_pair):
        (worktree_pair.main_path / "x.txt").write_text("x\n")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        stash_hash = backend.create_stash(wt, "swap-stash-main")

        backend.apply_and_drop_stash(wt, stash_hash)

        assert (worktree_pair.main_path / "x.txt").read_text() == "x\n"
        assert worktree_pair.stash_list() == ""

    def test_drop_finds_shifted_reference(self, backend, worktree_pair):
        """The older stash moves to stash@{1} once another one is pushed."""
        (worktree_pair.main_path / "x.txt").write_text("x\n")
        (worktree_pair.feature_path / "z.txt").write_text("z\n")
        main_wt = backend.resolve_worktree(str(worktree_pair.main_path))
        feature_wt = backend.resolve_worktree(str(worktree_pair.feature_path))
        first = backend.create_stash(main_wt, "swap-stash-main")
        second = backend.create_stash(feature_wt, "swap-stash-feature")

        backend.apply_and_drop_stash(main_wt, first)

        assert backend.find_stash_reference(main_wt, first) is None
        assert backend.find_stash_reference(main_wt, second) == "stash@{0}"
        assert (worktree_pair.main_path / "x.txt").exists()

    def test_apply_failure_keeps_stash(self, backend, worktree_pair):
        (worktree_pair.main_path / "x.txt").write_text("stashed\n")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        stash_hash = backend.create_stash(wt, "swap-stash-main")
        # An untracked file in the way makes the apply fail
        (worktree_pair.main_path / "x.txt").write_text("in the way\n")

        with pytest.raises(StashApplyError) as exc_info:
            backend.apply_and_drop_stash(wt, stash_hash)

        assert exc_info.value.stash == stash_hash
        assert backend.find_stash_reference(wt, stash_hash) == "stash@{0}"

    def test_drop_failure_when_reference_missing(self, backend, worktree_pair):
        (worktree_pair.main_path / "x.txt").write_text("x\n")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        stash_hash = backend.create_stash(wt, "swap-stash-main")

        with patch.object(backend, "find_stash_reference", return_value=None):
            with pytest.raises(StashDropError, match="Could not determine stash reference"):
                backend.apply_and_drop_stash(wt, stash_hash)

        # Applied, and still listed
        assert (worktree_pair.main_path / "x.txt").exists()
        assert stash_hash in worktree_pair.repo.git.stash("list", "--format=%H")

    def test_apply_restores_staged_changes_as_staged(self, backend, worktree_pair):
        (worktree_pair.main_path / "y.txt").write_text("staged y\n")
        worktree_pair.repo.git.add("y.txt")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        stash_hash = backend.create_stash(wt, "swap-stash-main")

        backend.apply_and_drop_stash(wt, stash_hash)

        assert worktree_pair.status_of(worktree_pair.main_path) == ["M  y.txt"]
        assert worktree_pair.stash_list() == ""

    def _stash_staged_edit_onto_moved_branch(self, backend, worktree_pair):
        """Stash a staged edit of line 1 on main, then switch to a branch that changed line 4."""
        repo = worktree_pair.repo
        path = worktree_pair.main_path / "lines.txt"
        lines = [f"line {i}\n" for i in range(1, 9)]
        path.write_text("".join(lines))
        repo.git.add("lines.txt")
        repo.git.commit("-m", "Add lines")

        repo.git.switch("-c", "moved")
        moved = list(lines)
        moved[3] = "line 4 on moved\n"
        path.write_text("".join(moved))
        repo.git.commit("-am", "Change line 4")
        repo.git.switch("main")

        staged = list(lines)
        staged[0] = "line 1 staged\n"
        path.write_text("".join(staged))
        repo.git.add("lines.txt")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        stash_hash = backend.create_stash(wt, "swap-stash-main")
        repo.git.switch("moved")
        return wt, stash_hash, path

    def test_index_refused_falls_back_to_unstaged(self, backend, worktree_pair):
        wt, stash_hash, path = self._stash_staged_edit_onto_moved_branch(backend, worktree_pair)

        backend.apply_and_drop_stash(wt, stash_hash)

        assert path.read_text().splitlines()[0] == "line 1 staged"
        assert path.read_text().splitlines()[3] == "line 4 on moved"
        assert worktree_pair.status_of(worktree_pair.main_path) == [" M lines.txt"]
        assert worktree_pair.stash_list() == ""

    def test_index_required_keeps_stash(self, backend, worktree_pair):
        wt, stash_hash, path = self._stash_staged_edit_onto_moved_branch(backend, worktree_pair)

        with pytest.raises(StashApplyError, match="--index"):
            backend.apply_and_drop_stash(wt, stash_hash, restore_index=True)

        assert worktree_pair.status_of(worktree_pair.main_path) == []
        assert backend.find_stash_reference(wt, stash_hash) == "stash@{0}"

    def test_apply_in_vanished_worktree_keeps_stash(self, backend, worktree_pair, temp_dir):
        (worktree_pair.feature_path / "z.txt").write_text("z\n")
        wt = backend.resolve_worktree(str(worktree_pair.feature_path))
        stash_hash = backend.create_stash(wt, "swap-stash-feature")
        worktree_pair.feature_path.rename(temp_dir / "moved-away")

        with pytest.raises(StashApplyError) as exc_info:
            backend.apply_and_drop_stash(wt, stash_hash)

        assert exc_info.value.path == str(worktree_pair.feature_path)
        assert stash_hash in worktree_pair.repo.git.stash("list", "--format=%H")

    def test_drop_in_vanished_worktree_is_drop_error(self, backend, worktree_pair):
        (worktree_pair.main_path / "x.txt").write_text("x\n")
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        stash_hash = backend.create_stash(wt, "swap-stash-main")
        repo = git.Repo(worktree_pair.main_path)

        with patch.object(backend, "find_stash_reference", return_value="stash@{0}"):
            with patch.object(
                backend, "_get_repo", side_effect=[repo, git.exc.NoSuchPathError("gone")]
            ):
                with pytest.raises(StashDropError, match="Not a git repository"):
                    backend.apply_and_drop_stash(wt, stash_hash)

        assert (worktree_pair.main_path / "x.txt").exists()


class TestBranchSwitching:
    """Test detach and checkout."""

    def test_detach_and_checkout(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.main_path))

        backend.detach(wt)
        assert backend.current_branch(wt) is None
        assert backend.head_commit(wt) == wt.commit_sha

        backend.checkout_branch(wt, "main")
        assert backend.current_branch(wt) == "main"

    def test_checkout_branch_held_elsewhere_fails(self, backend, worktree_pair):
        wt = backend.resolve_worktree(str(worktree_pair.main_path))
        with pytest.raises(GitOperationError) as exc_info:
            backend.checkout_branch(wt, "feature")
        assert exc_info.value.branch == "feature"
        assert exc_info.value.path == str(worktree_pair.main_path)
        assert backend.current_branch(wt) == "main"


class TestDescribeGitError:
    """Test GitCommandError messages."""

    def test_strips_gitpython_wrapping(self):
        error = git.exc.GitCommandError(["git", "switch", "main"], 128, stderr="fatal: 'main' is already used")
        message = describe_git_error(error)
        assert "git switch main (exit 128)" in message
        assert "fatal: 'main' is already used" in message
        assert "stderr:" not in message

    def test_no_output(self):
        error = git.exc.GitCommandError(["git", "switch", "main"], 1)
        assert describe_git_error(error) == "git switch main failed with exit code 1"

    def test_other_exceptions(self):
        assert describe_git_error(ValueError("boom")) == "boom"
