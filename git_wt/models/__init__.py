"""Data models for git-wt."""

from .worktree import Worktree
from .candidate import Candidate, CandidateKind
from .action import Action, ActionKind
from .session import SessionResult, SessionStatus

__all__ = [
    "Worktree",
    "Candidate",
    "CandidateKind",
    "Action",
    "ActionKind",
    "SessionResult",
    "SessionStatus",
]
