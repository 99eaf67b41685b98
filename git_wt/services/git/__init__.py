"""Git-related services for git-wt."""

from .gateway import GitGateway, parse_worktree_porcelain

__all__ = [
    "GitGateway",
    "parse_worktree_porcelain",
]
