"""Finder candidate models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from git_wt.models.worktree import Worktree


class CandidateKind(Enum):
    """What choosing a candidate means."""
    EXISTING_WORKTREE = "existing-worktree"
    NEW_WORKTREE_PROMPT = "new-worktree-prompt"
    DELETE_MARKER = "delete-marker"


@dataclass(frozen=True)
class Candidate:
    """One line shown in the fuzzy finder."""
    label: str
    kind: CandidateKind
    worktree: Optional[Worktree] = None  # None for new-worktree prompts
