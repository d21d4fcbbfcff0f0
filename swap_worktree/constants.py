"""Shared constants for swap-worktree."""

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2  # argparse
EXIT_PARTIAL = 3  # branches swapped, stash left for manual application
EXIT_INCONSISTENT = 4  # rollback failed
EXIT_INTERRUPTED = 130


# Stash handling
DEFAULT_STASH_PREFIX = "swap-stash"
NO_LOCAL_CHANGES = "No local changes to save"
STASH_LIST_FORMAT = "--format=%H:%gd"
INDEX_REFUSED_MARKER = "try without --index"  # `git stash apply --index` refusal, lowercased


# `git worktree list --porcelain` markers
PORCELAIN_WORKTREE = "worktree "
PORCELAIN_HEAD = "HEAD "
PORCELAIN_BRANCH = "branch "
PORCELAIN_DETACHED = "detached"
PORCELAIN_BARE = "bare"
BRANCH_REF_PREFIX = "refs/heads/"


# Logging (log file only written in debug mode)
LOG_DIR_NAME = ".swap-worktree"
LOG_FILE_NAME = "swap-worktree.log"
LOG_SIMPLE_FORMAT = "%(message)s"
LOG_DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# Symbols used in console output
SYMBOL_OK = "✓"
SYMBOL_WARN = "⚠"
SYMBOL_FAIL = "✗"
SYMBOL_ARROW = "→"
