"""Command-line argument parsing for swap-worktree."""

import argparse
from swap_worktree.__version__ import __version__
from swap_worktree.constants import DEFAULT_STASH_PREFIX


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="swap-worktree",
        description="Swap branches (and state) between two Git worktrees.",
        epilog="Staged, unstaged and untracked changes travel with their branch. "
        "Exit codes: 0 success, 1 failure, 3 branches swapped but a stash was kept, "
        "4 manual recovery required.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show each step of the swap")
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"swap-worktree {__version__}")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be swapped without changing anything",
    )
    parser.add_argument(
        "--index",
        action="store_true",
        dest="restore_index",
        help="Keep a stash whose staged changes cannot be restored as staged, "
        "instead of restoring them as unstaged changes",
    )
    parser.add_argument(
        "--no-untracked",
        action="store_true",
        help="Leave untracked files in their worktree instead of moving them with the branch",
    )
    parser.add_argument(
        "--stash-prefix",
        default=DEFAULT_STASH_PREFIX,
        metavar="PREFIX",
        help=f"Prefix for stash messages (default: {DEFAULT_STASH_PREFIX})",
    )
    parser.add_argument(
        "--list-branches",
        action="store_true",
        help="List branches checked out in the destination's worktrees (for shell completion)",
    )
    parser.add_argument(
        "destination_worktree_dir",
        metavar="DESTINATION_WORKTREE_DIR",
        help="Destination worktree directory",
    )
    parser.add_argument(
        "source_branch_name",
        metavar="SOURCE_BRANCH_NAME",
        nargs="?",
        help="Source branch to take over the destination worktree",
    )
    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.list_branches and not args.source_branch_name:
        parser.error("the following arguments are required: SOURCE_BRANCH_NAME")
    return args
