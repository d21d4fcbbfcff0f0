"""Services for swap-worktree."""
