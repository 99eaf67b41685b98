"""Gateway to the git command line for worktree operations."""

import os
import re
from typing import Dict, List, Optional

import git

from git_wt.exceptions import (
    BranchExists,
    DirtyTree,
    MainWorktreeProtected,
    PathNotFound,
    PathOccupied,
    RefNotFound,
    VcsError,
    VcsUnavailable,
    WorktreeLocked,
)
from git_wt.logging_config import get_logger
from git_wt.models.worktree import Worktree

logger = get_logger(__name__)

_STDERR_RE = re.compile(r"stderr: '(.*)'\s*$", re.DOTALL)


def _stderr_text(error: git.exc.GitCommandError) -> str:
    """Extract git's own message from a GitCommandError."""
    stderr = (error.stderr if hasattr(error, "stderr") else str(error)) or ""
    stderr = stderr.strip()
    match = _STDERR_RE.search(stderr)
    if match:
        stderr = match.group(1).strip()
    if not stderr:
        status = error.status if hasattr(error, "status") else "unknown"
        stderr = f"git exited with code {status}"
    return stderr


def _same_path(a: str, b: str) -> bool:
    return os.path.realpath(a) == os.path.realpath(b)


def parse_worktree_porcelain(output: str) -> List[Worktree]:
    """Parse `git worktree list --porcelain` output.

    Format (blank line between entries, first entry is the main worktree):

        worktree /path/to/worktree
        HEAD <sha>
        branch refs/heads/<name>    (or "detached")
        locked [reason]             (optional)
        prunable [reason]           (optional)

    Args:
        output: Raw porcelain output

    Returns:
        Worktrees in the order git reported them
    """
    worktrees: List[Worktree] = []
    entry: Dict[str, object] = {}

    def flush():
        if entry.get("path"):
            worktrees.append(
                Worktree(
                    path=str(entry["path"]),
                    branch=entry.get("branch"),  # type: ignore[arg-type]
                    head_commit=str(entry.get("HEAD", "")),
                    is_locked=bool(entry.get("locked", False)),
                    is_prunable=bool(entry.get("prunable", False)),
                    is_main=not worktrees,
                    lock_reason=entry.get("lock_reason"),  # type: ignore[arg-type]
                    prunable_reason=entry.get("prunable_reason"),  # type: ignore[arg-type]
                )
            )
        entry.clear()

    for line in output.split("\n"):
        line = line.rstrip("\r")
        if not line:
            flush()
            continue

        key, _, value = line.partition(" ")
        if key == "worktree":
            if entry:
                flush()
            entry["path"] = value
        elif key == "HEAD":
            entry["HEAD"] = value
        elif key == "branch":
            if value.startswith("refs/heads/"):
                entry["branch"] = value[len("refs/heads/"):]
            else:
                entry["branch"] = value
        elif key == "detached":
            entry["branch"] = None
        elif key == "locked":
            entry["locked"] = True
            entry["lock_reason"] = value or None
        elif key == "prunable":
            entry["prunable"] = True
            entry["prunable_reason"] = value or None

    # Handle last entry if no trailing blank line
    flush()
    return worktrees


class GitGateway:
    """All interaction with git goes through here.

    Every operation is a synchronous round-trip to git; nothing is cached.
    """

    def __init__(self, repo_path: Optional[str] = None):
        """Initialize the gateway.

        Args:
            repo_path: Any path inside the repository (defaults to the cwd)
        """
        self.repo_path = repo_path or os.getcwd()
        self._anchor: Optional[str] = None

    def _get_repo(self) -> git.Repo:
        """Open the repository containing repo_path.

        Once the repository has been found, the main worktree is remembered
        and used instead of repo_path if repo_path is itself a worktree that
        has since been removed.

        Returns:
            git.Repo: A fresh repository instance

        Raises:
            VcsUnavailable: If repo_path is not inside a git work tree
        """
        path = self.repo_path
        if self._anchor is not None and not os.path.isdir(path):
            logger.debug(f"{path} is gone, using {self._anchor}")
            path = self._anchor
        try:
            repo = git.Repo(path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise VcsUnavailable(path) from e
        if repo.bare:
            raise VcsUnavailable(path, "repository has no work tree")
        if self._anchor is None:
            self._anchor = os.path.dirname(os.path.abspath(repo.common_dir))
        return repo

    def _worktree_cmd(self, operation: str, *args: str, **context: Optional[str]) -> str:
        """Run `git worktree <args>` and translate failures.

        Args:
            operation: Logical operation name, selects the error mapping
            *args: Arguments after `git worktree`
            **context: path, branch and ref the failure may refer to
        """
        repo = self._get_repo()
        logger.debug(f"git worktree {' '.join(args)}")
        try:
            return repo.git.worktree(*args)
        except git.exc.GitCommandError as e:
            raise self._translate_error(operation, e, **context) from e
        except git.exc.GitCommandNotFound as e:
            raise VcsUnavailable(self.repo_path, "git executable not found") from e

    @staticmethod
    def _translate_error(
        operation: str,
        error: git.exc.GitCommandError,
        path: Optional[str] = None,
        branch: Optional[str] = None,
        ref: Optional[str] = None,
    ) -> Exception:
        """Map a git failure onto the matching error kind using its stderr."""
        message = _stderr_text(error)
        lowered = message.lower()
        logger.debug(f"{operation} failed: {message}")

        if "not a git repository" in lowered:
            return VcsUnavailable(path or "", message)
        if operation == "create_worktree":
            if "a branch named" in lowered and "already exists" in lowered:
                return BranchExists(branch or message)
            if "invalid reference" in lowered or "not a valid object name" in lowered:
                return RefNotFound(ref or message)
            if "already exists" in lowered or "already registered" in lowered:
                return PathOccupied(path or message)
        if operation == "remove_worktree":
            if "is a main working tree" in lowered:
                return MainWorktreeProtected(path or message)
            if "locked working tree" in lowered:
                reason = None
                if "lock reason:" in lowered:
                    reason = message[lowered.index("lock reason:") + len("lock reason:"):]
                    reason = reason.split("\n", 1)[0].strip() or None
                return WorktreeLocked(path or message, reason)
            if "modified or untracked files" in lowered:
                return DirtyTree(path or message)
            if "is not a working tree" in lowered:
                return PathNotFound(path or message)
        return VcsError(message, operation=operation)

    def repo_root(self) -> str:
        """Get the top level of the work tree containing repo_path."""
        repo = self._get_repo()
        return str(repo.working_tree_dir)

    def current_branch(self) -> Optional[str]:
        """Get the branch checked out at repo_path, or None when detached."""
        repo = self._get_repo()
        try:
            return repo.active_branch.name
        except TypeError:
            return None  # Detached HEAD

    def _last_used_times(self, repo: git.Repo) -> Dict[str, float]:
        """Map worktree path to the mtime of its HEAD reflog (or HEAD).

        The main worktree's admin dir is the common git dir; linked
        worktrees live under <common>/worktrees/<name>, whose `gitdir` file
        points back at <worktree>/.git.
        """
        times: Dict[str, float] = {}
        common_dir = repo.common_dir

        def head_mtime(admin_dir: str) -> Optional[float]:
            for candidate in (os.path.join(admin_dir, "logs", "HEAD"), os.path.join(admin_dir, "HEAD")):
                try:
                    return os.path.getmtime(candidate)
                except OSError:
                    continue
            return None

        main_time = head_mtime(common_dir)
        if main_time is not None:
            times[os.path.realpath(os.path.dirname(os.path.abspath(common_dir)))] = main_time

        admin_root = os.path.join(common_dir, "worktrees")
        if os.path.isdir(admin_root):
            for name in sorted(os.listdir(admin_root)):
                admin_dir = os.path.join(admin_root, name)
                try:
                    with open(os.path.join(admin_dir, "gitdir"), encoding="utf-8") as f:
                        dot_git = f.read().strip()
                except OSError:
                    continue
                mtime = head_mtime(admin_dir)
                if mtime is not None:
                    times[os.path.realpath(os.path.dirname(dot_git))] = mtime
        return times

    def list_worktrees(self) -> List[Worktree]:
        """Get all worktrees of the repository, main worktree first.

        Returns:
            List of Worktree objects in git's order

        Raises:
            VcsUnavailable: If not inside a git repository
        """
        output = self._worktree_cmd("list_worktrees", "list", "--porcelain")
        worktrees = parse_worktree_porcelain(output)

        try:
            times = self._last_used_times(self._get_repo())
        except OSError as e:
            logger.debug(f"Could not read worktree timestamps: {e}")
            times = {}
        if times:
            worktrees = [
                Worktree(
                    path=wt.path,
                    branch=wt.branch,
                    head_commit=wt.head_commit,
                    is_locked=wt.is_locked,
                    is_prunable=wt.is_prunable,
                    is_main=wt.is_main,
                    lock_reason=wt.lock_reason,
                    prunable_reason=wt.prunable_reason,
                    last_used=times.get(os.path.realpath(wt.path)),
                )
                for wt in worktrees
            ]

        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def find_worktree(self, path: str) -> Optional[Worktree]:
        """Get the worktree registered at path, if any."""
        for wt in self.list_worktrees():
            if _same_path(wt.path, path):
                return wt
        return None

    def create_worktree(self, path: str, branch_name: str, base_ref: str) -> Worktree:
        """Create a new branch from base_ref and check it out at path.

        Args:
            path: Directory for the new worktree (must not exist or be empty)
            branch_name: Name of the branch to create
            base_ref: Commit-ish the branch starts from

        Returns:
            The newly registered Worktree

        Raises:
            BranchExists: If branch_name already exists
            PathOccupied: If path already exists
            RefNotFound: If base_ref does not resolve
        """
        # git creates the branch before it checks the path, so check first
        if os.path.lexists(path) and not (os.path.isdir(path) and not os.listdir(path)):
            raise PathOccupied(path)
        parent = os.path.dirname(os.path.abspath(path))
        os.makedirs(parent, exist_ok=True)

        self._worktree_cmd(
            "create_worktree", "add", "-b", branch_name, path, base_ref,
            path=path, branch=branch_name, ref=base_ref,
        )
        logger.info(f"Created worktree at {path} for branch {branch_name} (from {base_ref})")

        created = self.find_worktree(path)
        if created is None:
            raise VcsError(f"worktree for '{branch_name}' not listed after creation", "create_worktree")
        return created

    def remove_worktree(self, path: str, force: bool = False) -> None:
        """Remove the worktree at path.

        Args:
            path: Path to the worktree directory
            force: Remove even if the working tree has uncommitted changes

        Raises:
            DirtyTree: If the tree has changes and force is False
            WorktreeLocked: If the worktree is locked
            PathNotFound: If path is not a registered worktree
        """
        args = ["remove"]
        if force:
            args.append("--force")
        args.append(path)
        self._worktree_cmd("remove_worktree", *args, path=path)
        logger.info(f"Removed worktree at {path}")

    def prune_worktrees(self) -> None:
        """Prune metadata of worktrees whose directories are gone."""
        self._worktree_cmd("prune_worktrees", "prune")
        logger.info("Pruned stale worktree metadata")

    def is_clean(self, path: str) -> bool:
        """Check whether the worktree at path has no changes, untracked files included.

        Raises:
            PathNotFound: If path does not exist
        """
        if not os.path.isdir(path):
            raise PathNotFound(path)
        repo = self._get_repo()
        try:
            status = repo.git.execute(["git", "-C", path, "status", "--porcelain"])
        except git.exc.GitCommandError as e:
            raise VcsError(_stderr_text(e), operation="is_clean") from e
        return not status.strip()

    def branch_exists(self, branch_name: str) -> bool:
        """Check if a local branch exists."""
        repo = self._get_repo()
        try:
            repo.git.show_ref("--verify", "--quiet", f"refs/heads/{branch_name}")
            return True
        except git.exc.GitCommandError:
            return False

    def ref_exists(self, ref: str) -> bool:
        """Check if ref resolves to a commit."""
        repo = self._get_repo()
        try:
            repo.git.rev_parse("--verify", "--quiet", f"{ref}^{{commit}}")
            return True
        except git.exc.GitCommandError:
            return False

