"""Read-only snapshot of a repository's worktrees."""

import os
from typing import Iterator, List, Optional, TYPE_CHECKING

from git_wt.logging_config import get_logger
from git_wt.models.worktree import Worktree

if TYPE_CHECKING:
    from git_wt.services.git import GitGateway

logger = get_logger(__name__)

SORT_RECENT = "recent"
SORT_PATH = "path"


def order_worktrees(worktrees: List[Worktree], sort_by: str = SORT_RECENT) -> List[Worktree]:
    """Order worktrees for display: main first, then most recently used.

    Entries without a timestamp follow those with one; ties and the
    "path" mode fall back to lexical path order, so identical input
    always yields identical output.
    """
    main = [wt for wt in worktrees if wt.is_main]
    rest = [wt for wt in worktrees if not wt.is_main]

    if sort_by == SORT_RECENT:
        rest.sort(key=lambda wt: (
            wt.last_used is None,
            -(wt.last_used or 0.0),
            wt.path,
        ))
    else:
        rest.sort(key=lambda wt: wt.path)
    return main + rest


class WorktreeRegistry:
    """Worktrees as git reports them right now.

    There are no mutation methods; build a new registry to observe new
    state.
    """

    def __init__(self, worktrees: List[Worktree], current_path: Optional[str] = None):
        self._worktrees = tuple(worktrees)
        self.current_path = current_path

    @classmethod
    def build(
        cls,
        gateway: "GitGateway",
        sort_by: str = SORT_RECENT,
        current_path: Optional[str] = None,
    ) -> "WorktreeRegistry":
        """Build a snapshot from the gateway.

        Entries whose directory no longer exists are dropped unless git
        flags them prunable; prunable ones are kept so the user can
        clean them up.

        Args:
            gateway: Gateway to query
            sort_by: "recent" or "path"
            current_path: Worktree the user is in, if known

        Returns:
            A new registry

        Raises:
            VcsUnavailable: If not inside a git repository
        """
        kept = []
        for wt in gateway.list_worktrees():
            if wt.is_prunable or os.path.exists(wt.path):
                kept.append(wt)
            else:
                logger.debug(f"Skipping stale worktree {wt.path} (directory missing)")
        return cls(order_worktrees(kept, sort_by), current_path)

    @property
    def worktrees(self) -> List[Worktree]:
        return list(self._worktrees)

    @property
    def main(self) -> Optional[Worktree]:
        for wt in self._worktrees:
            if wt.is_main:
                return wt
        return None

    @property
    def current(self) -> Optional[Worktree]:
        """The worktree containing current_path, if any."""
        if not self.current_path:
            return None
        current = os.path.realpath(self.current_path)
        best = None
        for wt in self._worktrees:
            root = os.path.realpath(wt.path)
            if current == root or current.startswith(root.rstrip(os.sep) + os.sep):
                if best is None or len(root) > len(os.path.realpath(best.path)):
                    best = wt
        return best

    def find(self, path: str) -> Optional[Worktree]:
        """Find the worktree registered at path."""
        target = os.path.realpath(path)
        for wt in self._worktrees:
            if wt.path == path or os.path.realpath(wt.path) == target:
                return wt
        return None

    def find_branch(self, branch: str) -> Optional[Worktree]:
        """Find the worktree that has branch checked out."""
        for wt in self._worktrees:
            if wt.branch == branch:
                return wt
        return None

    def paths(self) -> List[str]:
        return [wt.path for wt in self._worktrees]

    def removable(self) -> List[Worktree]:
        """Worktrees that may be offered for deletion (everything but main)."""
        return [wt for wt in self._worktrees if not wt.is_main]

    def __len__(self) -> int:
        return len(self._worktrees)

    def __iter__(self) -> Iterator[Worktree]:
        return iter(self._worktrees)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.find(path) is not None
