"""Formatting utilities for git-wt."""

from .candidate import CandidateFormatter, check_renderable, shorten_path

__all__ = [
    "CandidateFormatter",
    "check_renderable",
    "shorten_path",
]
