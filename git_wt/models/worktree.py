"""Worktree data models."""

from dataclasses import dataclass, field
from typing import Optional

from git_wt.constants import DETACHED_MARKER


@dataclass(frozen=True)
class Worktree:
    """A git worktree as reported by `git worktree list`.

    A worktree is identified by its path; equality compares the reported
    state as well (branch, commit, lock and prune flags).
    """

    path: str
    branch: Optional[str]  # None = detached HEAD
    head_commit: str
    is_locked: bool = False
    is_prunable: bool = False
    is_main: bool = False  # Is this the main working tree?
    lock_reason: Optional[str] = field(default=None, compare=False)
    prunable_reason: Optional[str] = field(default=None, compare=False)
    last_used: Optional[float] = field(default=None, compare=False)  # Used only for ordering

    @property
    def is_detached(self) -> bool:
        return self.branch is None

    @property
    def display_branch(self) -> str:
        """Branch name, or the detached marker."""
        return self.branch if self.branch is not None else DETACHED_MARKER

    @property
    def short_commit(self) -> str:
        return self.head_commit[:7]

    def __str__(self) -> str:
        """String representation of worktree."""
        flags = []
        if self.is_main:
            flags.append("main")
        if self.is_locked:
            flags.append("locked")
        if self.is_prunable:
            flags.append("prunable")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{self.display_branch} @ {self.path}{suffix}"
