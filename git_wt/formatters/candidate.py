"""Render worktrees as finder lines and parse the chosen lines back."""

import os
from typing import Dict, Iterable, List, Optional, TYPE_CHECKING

from git_wt.constants import (
    CREATE_KEY,
    CREATE_LABEL,
    FORBIDDEN_LABEL_CHARS,
    LABEL_DELIMITER,
    SYMBOL_CURRENT,
    SYMBOL_DIRTY,
    SYMBOL_LOCKED,
    SYMBOL_MAIN,
    SYMBOL_PRUNABLE,
)
from git_wt.exceptions import FormatCollision
from git_wt.models.candidate import Candidate, CandidateKind
from git_wt.models.worktree import Worktree

if TYPE_CHECKING:
    from git_wt.services.registry import WorktreeRegistry

BRANCH_WIDTH = 32


def check_renderable(value: str) -> str:
    """Reject values that would break the label format.

    Raises:
        FormatCollision: If value contains the delimiter or a line break
    """
    for char in FORBIDDEN_LABEL_CHARS:
        if char in value:
            raise FormatCollision(value, f"contains reserved character {char!r}")
    return value


def shorten_path(path: str, home: Optional[str] = None) -> str:
    """Abbreviate the home directory to ~."""
    home = home if home is not None else os.path.expanduser("~")
    home = home.rstrip(os.sep)
    if home and (path == home or path.startswith(home + os.sep)):
        return "~" + path[len(home):]
    return path


def format_markers(worktree: Worktree, dirty: bool = False, current: bool = False) -> str:
    markers = ""
    if current:
        markers += SYMBOL_CURRENT
    if dirty:
        markers += SYMBOL_DIRTY
    if worktree.is_locked:
        markers += SYMBOL_LOCKED
    if worktree.is_prunable:
        markers += SYMBOL_PRUNABLE
    return markers


class CandidateFormatter:
    """Turns a registry into finder candidates and back.

    Every label is `<columns><TAB><key>` where the key is the worktree's
    absolute path (or a fixed key for the create entry). Paths are
    unique per worktree, so labels are too. Only labels emitted by this
    formatter instance can be parsed.
    """

    def __init__(self, home: Optional[str] = None):
        self.home = home
        self._index: Dict[str, Candidate] = {}

    def _label(self, columns: str, key: str) -> str:
        return f"{columns}{LABEL_DELIMITER}{key}"

    def _register(self, candidate: Candidate, key: str) -> Candidate:
        # Latest rendering wins; parse() also checks the full label
        self._index[key] = candidate
        return candidate

    def format_worktree(
        self,
        worktree: Worktree,
        kind: CandidateKind = CandidateKind.EXISTING_WORKTREE,
        dirty: bool = False,
        current: bool = False,
    ) -> Candidate:
        """Render one worktree.

        Raises:
            FormatCollision: If the branch name or path cannot be rendered
        """
        check_renderable(worktree.path)
        if worktree.branch is not None:
            check_renderable(worktree.branch)

        branch = worktree.display_branch
        if worktree.is_main:
            branch = f"{branch} [{SYMBOL_MAIN}]"
        markers = format_markers(worktree, dirty=dirty, current=current)
        prefix = "- " if kind is CandidateKind.DELETE_MARKER else ""
        columns = (
            f"{prefix}{branch:<{BRANCH_WIDTH}} {markers:<4} "
            f"{worktree.short_commit:<8} {shorten_path(worktree.path, self.home)}"
        )
        candidate = Candidate(self._label(columns, worktree.path), kind, worktree)
        return self._register(candidate, worktree.path)

    def format_create(self) -> Candidate:
        """Render the synthetic "create new worktree" entry."""
        candidate = Candidate(self._label(CREATE_LABEL, CREATE_KEY), CandidateKind.NEW_WORKTREE_PROMPT)
        return self._register(candidate, CREATE_KEY)

    def render_select(
        self,
        registry: "WorktreeRegistry",
        dirty_paths: Iterable[str] = (),
    ) -> List[Candidate]:
        """Candidates for the select-or-create flow: every worktree plus "create new"."""
        dirty = set(dirty_paths)
        current = registry.current
        candidates = [
            self.format_worktree(
                wt,
                dirty=wt.path in dirty,
                current=current is not None and wt.path == current.path,
            )
            for wt in registry
        ]
        candidates.append(self.format_create())
        return candidates

    def render_delete(
        self,
        registry: "WorktreeRegistry",
        dirty_paths: Iterable[str] = (),
    ) -> List[Candidate]:
        """Candidates for the delete flow: every worktree except main."""
        dirty = set(dirty_paths)
        current = registry.current
        return [
            self.format_worktree(
                wt,
                kind=CandidateKind.DELETE_MARKER,
                dirty=wt.path in dirty,
                current=current is not None and wt.path == current.path,
            )
            for wt in registry.removable()
        ]

    def parse(self, label: str) -> Candidate:
        """Recover the candidate a label was rendered from.

        Raises:
            FormatCollision: If the label was not produced by this formatter
        """
        line = label.rstrip("\r\n")
        parts = line.split(LABEL_DELIMITER)
        if len(parts) != 2:
            raise FormatCollision(line, "is not a candidate label")
        candidate = self._index.get(parts[1])
        if candidate is None or candidate.label != line:
            raise FormatCollision(line, "does not match any candidate")
        return candidate

    @staticmethod
    def to_input(candidates: Iterable[Candidate]) -> str:
        """Newline-separated labels, as fed to the finder."""
        return "".join(f"{c.label}\n" for c in candidates)
