"""
git-wt - Interactive git worktree manager with fuzzy finder
"""

from .__version__ import __version__
from .core import WorktreeManager, run
from .cli.main import main

__all__ = ["WorktreeManager", "run", "main", "__version__"]
