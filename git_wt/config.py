"""Configuration handling for git-wt"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


ENV_FINDER = "GIT_WT_FINDER"
ENV_WORKTREE_DIR = "GIT_WT_DIR"


@dataclass
class Config:
    """Configuration for git-wt with validation."""

    # Where new worktrees are created (None = sibling "<repo>-worktrees" directory)
    worktree_dir: Optional[str] = None
    # Base ref for new branches (None = main worktree's branch, else HEAD)
    base_ref: Optional[str] = None

    # Fuzzy finder
    finder: str = "fzf"
    finder_args: List[str] = field(default_factory=list)

    # Menu options
    sort_by: str = "recent"  # recent, path
    show_status: bool = True  # Check each worktree for uncommitted changes

    # Execution modes
    force: bool = False
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_finder()
        self._validate_sort_by()
        self._validate_worktree_dir()
        self._validate_base_ref()

    def _validate_finder(self):
        """Validate finder is not empty."""
        if not self.finder or not self.finder.strip():
            raise ValueError("finder cannot be empty")
        self.finder = self.finder.strip()
        if not isinstance(self.finder_args, list):
            raise ValueError("finder_args must be a list")

    def _validate_sort_by(self):
        """Validate sort_by is one of allowed values."""
        allowed = ["recent", "path"]
        if self.sort_by not in allowed:
            raise ValueError(f"sort_by must be one of {allowed}, got '{self.sort_by}'")

    def _validate_worktree_dir(self):
        """Normalize worktree_dir to an absolute path."""
        if self.worktree_dir is not None:
            if not self.worktree_dir.strip():
                raise ValueError("worktree_dir cannot be empty")
            self.worktree_dir = os.path.abspath(os.path.expanduser(self.worktree_dir.strip()))

    def _validate_base_ref(self):
        """Validate base_ref is not blank."""
        if self.base_ref is not None:
            if not self.base_ref.strip():
                raise ValueError("base_ref cannot be empty")
            self.base_ref = self.base_ref.strip()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "worktree_dir": self.worktree_dir,
            "base_ref": self.base_ref,
            "finder": self.finder,
            "finder_args": self.finder_args,
            "sort_by": self.sort_by,
            "show_status": self.show_status,
            "force": self.force,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        known_fields = {
            "worktree_dir",
            "base_ref",
            "finder",
            "finder_args",
            "sort_by",
            "show_status",
            "force",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)

    @classmethod
    def from_env(cls, environ: Optional[dict] = None, **overrides) -> "Config":
        """Create Config from GIT_WT_* environment variables plus explicit overrides.

        Overrides whose value is None are ignored so that unset CLI flags
        fall through to the environment.
        """
        if environ is None:
            environ = os.environ

        values: dict = {}
        if environ.get(ENV_FINDER):
            values["finder"] = environ[ENV_FINDER]
        if environ.get(ENV_WORKTREE_DIR):
            values["worktree_dir"] = environ[ENV_WORKTREE_DIR]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)
