"""Configuration handling for worktree-keeper"""

from dataclasses import dataclass, asdict, fields
from typing import Optional

from worktree_keeper.constants import (
    DEFAULT_ENV_CLONE_FILE,
    DEFAULT_HOOK_TIMEOUT,
    DEFAULT_PATH_TEMPLATE,
    DEFAULT_REMOTE,
)


@dataclass
class Config:
    """Configuration for worktree-keeper with validation.

    A Config is passed explicitly into every operation; no component reads
    settings from global state.
    """

    # Branch comparison
    base_branch: str = "main"
    remote_name: str = DEFAULT_REMOTE
    include_remote_branches: bool = False

    # Stale worktree threshold
    stale_days: int = 14

    # Worktree creation
    default_path_template: str = DEFAULT_PATH_TEMPLATE
    env_clone_config_file: str = DEFAULT_ENV_CLONE_FILE
    post_create_script: str = ""  # Empty = use .worktree-setup.sh convention
    post_create_timeout: float = DEFAULT_HOOK_TIMEOUT
    carry_changes: bool = True
    apply_color: bool = True

    # Execution modes
    verbose: bool = False
    debug: bool = False
    sequential: bool = False  # Force sequential enrichment (disable parallelism)
    workers: Optional[int] = None  # Number of parallel workers (None = auto-detect)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_base_branch()
        self._validate_remote_name()
        self._validate_stale_days()
        self._validate_path_template()
        self._validate_timeout()
        self._validate_workers()

    def _validate_base_branch(self):
        """Validate base_branch is not empty."""
        if not self.base_branch or not self.base_branch.strip():
            raise ValueError("base_branch cannot be empty")
        self.base_branch = self.base_branch.strip()

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_stale_days(self):
        """Validate stale_days is positive."""
        if self.stale_days <= 0:
            raise ValueError(f"stale_days must be positive, got {self.stale_days}")

    def _validate_path_template(self):
        """Validate default_path_template places the branch somewhere."""
        if "{branch}" not in self.default_path_template:
            raise ValueError(
                f"default_path_template must contain '{{branch}}', got '{self.default_path_template}'"
            )

    def _validate_timeout(self):
        """Validate post_create_timeout is positive."""
        if self.post_create_timeout <= 0:
            raise ValueError(
                f"post_create_timeout must be positive, got {self.post_create_timeout}"
            )

    def _validate_workers(self):
        """Validate workers is positive when given."""
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary."""
        return asdict(self)

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
