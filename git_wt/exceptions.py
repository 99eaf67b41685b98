"""Custom exceptions for git-wt"""

from typing import Optional


class GitWtError(Exception):
    """Base exception for all git-wt errors."""
    pass


class GitOperationError(GitWtError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, target: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.target = target
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if target:
            error_msg += f" for '{target}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class VcsUnavailable(GitWtError):
    """Exception raised when not running inside a git repository."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        error_msg = f"Not inside a git repository: {path}"
        if message:
            error_msg += f" ({message})"
        super().__init__(error_msg)


class VcsError(GitOperationError):
    """Exception raised for git failures that map to no specific error kind."""

    def __init__(self, raw_message: str, operation: str = "git"):
        self.raw_message = raw_message
        super().__init__(operation, message=raw_message)


class FinderUnavailable(GitWtError):
    """Exception raised when the fuzzy finder is missing or misbehaves."""

    def __init__(self, finder: str, message: Optional[str] = None):
        self.finder = finder
        error_msg = f"Fuzzy finder '{finder}' is unavailable"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)


class FormatCollision(GitWtError):
    """Exception raised when a name cannot be rendered into a candidate label."""

    def __init__(self, value: str, reason: str = "contains a reserved label delimiter"):
        self.value = value
        super().__init__(f"Cannot render {value!r}: {reason}")


class StaleSelection(GitWtError):
    """Exception raised when live worktree state no longer matches the menu."""

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"Selection is stale for '{target}': {reason}. Re-run git-wt to refresh.")


class DirtyTree(GitOperationError):
    """Exception raised when removing a worktree with uncommitted changes."""

    def __init__(self, path: str):
        super().__init__(
            "remove_worktree", path, "Worktree has uncommitted or untracked changes (use --force)"
        )


class WorktreeLocked(GitOperationError):
    """Exception raised when removing a locked worktree."""

    def __init__(self, path: str, reason: Optional[str] = None):
        message = "Worktree is locked"
        if reason:
            message += f" ({reason})"
        message += "; unlock it with 'git worktree unlock' first"
        super().__init__("remove_worktree", path, message)


class PathOccupied(GitOperationError):
    """Exception raised when a new worktree's path is already in use."""

    def __init__(self, path: str):
        super().__init__("create_worktree", path, "Path already exists")


class BranchExists(GitOperationError):
    """Exception raised when creating a branch that already exists."""

    def __init__(self, branch: str, checked_out_at: Optional[str] = None):
        self.checked_out_at = checked_out_at
        message = "Branch already exists"
        if checked_out_at:
            message += f" and is checked out at {checked_out_at}"
        super().__init__("create_worktree", branch, message)


class RefNotFound(GitOperationError):
    """Exception raised when a base ref does not resolve to a commit."""

    def __init__(self, ref: str):
        super().__init__("resolve_ref", ref, "Ref not found")


class PathNotFound(GitOperationError):
    """Exception raised when a path is not a registered worktree."""

    def __init__(self, path: str):
        super().__init__("find_worktree", path, "Not a registered worktree")


class MainWorktreeProtected(GitOperationError):
    """Exception raised when attempting to remove the main worktree."""

    def __init__(self, path: str):
        super().__init__("remove_worktree", path, "The main worktree cannot be removed")
