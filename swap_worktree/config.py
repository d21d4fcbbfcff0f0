"""Configuration handling for swap-worktree"""

from dataclasses import dataclass, fields

from swap_worktree.constants import DEFAULT_STASH_PREFIX


@dataclass
class Config:
    """Configuration for swap-worktree with validation."""

    # Output
    verbose: bool = False
    debug: bool = False

    # Stash handling
    include_untracked: bool = True
    restore_index: bool = False  # Keep the stash rather than restore staged changes unstaged
    stash_message_prefix: str = DEFAULT_STASH_PREFIX

    # Execution modes
    dry_run: bool = False  # Resolve and show the plan only

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_stash_message_prefix()

    def _validate_stash_message_prefix(self):
        """Validate stash_message_prefix is a single non-empty word."""
        if not self.stash_message_prefix or not self.stash_message_prefix.strip():
            raise ValueError("stash_message_prefix cannot be empty")
        self.stash_message_prefix = self.stash_message_prefix.strip()
        if any(ch.isspace() for ch in self.stash_message_prefix):
            raise ValueError(
                f"stash_message_prefix cannot contain whitespace, got '{self.stash_message_prefix}'"
            )

    def stash_message(self, branch: str) -> str:
        """Message recorded on the stash taken from a worktree on ``branch``."""
        return f"{self.stash_message_prefix}-{branch}"

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
