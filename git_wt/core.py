"""Core functionality for git-wt"""

import argparse
import os
from typing import List, Optional, Sequence, Union

from git_wt.cli.args import parse_args
from git_wt.config import Config
from git_wt.constants import WORKTREE_DIR_SUFFIX
from git_wt.exceptions import GitWtError, PathNotFound
from git_wt.formatters.candidate import CandidateFormatter, check_renderable
from git_wt.logging_config import get_logger
from git_wt.models.action import Action
from git_wt.models.session import SessionResult
from git_wt.services.display_service import DisplayService
from git_wt.services.executor import ActionExecutor
from git_wt.services.git import GitGateway
from git_wt.services.registry import WorktreeRegistry
from git_wt.services.selection import SelectionDriver

logger = get_logger(__name__)


def sanitize_branch_for_path(branch_name: str) -> str:
    """Directory name for a branch (feat/x -> feat-x)."""
    return branch_name.replace("/", "-").replace(os.sep, "-")


class WorktreeManager:
    """Runs one git-wt session: snapshot, select, execute."""

    def __init__(
        self,
        repo_path: str,
        config: Union[Config, dict, None] = None,
        gateway: Optional[GitGateway] = None,
        driver: Optional[SelectionDriver] = None,
        display: Optional[DisplayService] = None,
    ):
        """Initialize WorktreeManager.

        Args:
            repo_path: Directory git-wt was started from
            config: Configuration dict or Config object
            gateway: Git gateway (created for repo_path if omitted)
            driver: Finder driver (created from config if omitted)
            display: Output for the list command
        """
        self.repo_path = repo_path
        if config is None:
            self.config = Config()
        elif isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.gateway = gateway or GitGateway(repo_path)
        self.driver = driver or SelectionDriver(self.config.finder, self.config.finder_args)
        self.display = display or DisplayService()

    def build_registry(self) -> WorktreeRegistry:
        """Take a fresh snapshot of the repository's worktrees."""
        return WorktreeRegistry.build(
            self.gateway, sort_by=self.config.sort_by, current_path=self.repo_path
        )

    def dirty_paths(self, registry: WorktreeRegistry) -> List[str]:
        """Paths of worktrees with uncommitted changes (empty if show_status is off)."""
        if not self.config.show_status:
            return []
        dirty = []
        for wt in registry:
            if wt.is_prunable or not os.path.isdir(wt.path):
                continue
            try:
                if not self.gateway.is_clean(wt.path):
                    dirty.append(wt.path)
            except GitWtError as e:
                logger.warning(f"Could not check status of {wt.path}: {e}")
        return dirty

    def worktree_dir(self, registry: WorktreeRegistry) -> str:
        """Directory new worktrees are created in."""
        if self.config.worktree_dir:
            return self.config.worktree_dir
        main = registry.main
        root = main.path if main is not None else self.gateway.repo_root()
        root = root.rstrip(os.sep)
        return os.path.join(os.path.dirname(root), os.path.basename(root) + WORKTREE_DIR_SUFFIX)

    def derive_path(self, branch_name: str, registry: WorktreeRegistry) -> str:
        return os.path.join(self.worktree_dir(registry), sanitize_branch_for_path(branch_name))

    def default_base_ref(self, registry: WorktreeRegistry) -> str:
        """Configured base ref, else the main worktree's branch, else HEAD."""
        if self.config.base_ref:
            return self.config.base_ref
        main = registry.main
        if main is not None and main.branch:
            return main.branch
        return "HEAD"

    def _create_action(self, registry: WorktreeRegistry, branch_name: str, base_ref: Optional[str]) -> Action:
        check_renderable(branch_name)
        return Action.create(
            path=self.derive_path(branch_name, registry),
            branch_name=branch_name,
            base_ref=base_ref or self.default_base_ref(registry),
        )

    def select_or_create(self, base_ref: Optional[str] = None) -> SessionResult:
        """Interactive flow: pick a worktree to switch to, or create a new one."""
        try:
            registry = self.build_registry()
            formatter = CandidateFormatter()
            candidates = formatter.render_select(registry, self.dirty_paths(registry))
            action = self.driver.select(
                candidates,
                formatter,
                on_create=lambda name: self._create_action(registry, name, base_ref),
            )
            logger.info(f"Selected action: {action.kind.value} {action.target_path or ''}")
            return ActionExecutor(self.gateway, registry).execute(action)
        except GitWtError as e:
            logger.debug(f"select-or-create failed: {e}")
            return SessionResult.failed(str(e))

    def delete(self, paths: Optional[Sequence[str]] = None, force: bool = False) -> SessionResult:
        """Remove worktrees, chosen in the finder or given explicitly.

        Args:
            paths: Worktree paths to remove; None or empty opens the finder
            force: Remove even with uncommitted changes
        """
        force = force or self.config.force
        try:
            registry = self.build_registry()
            if paths:
                actions = []
                for path in paths:
                    worktree = registry.find(os.path.normpath(os.path.join(self.repo_path, path)))
                    if worktree is None:
                        raise PathNotFound(path)
                    actions.append(Action.delete(worktree, force=force))
            else:
                formatter = CandidateFormatter()
                candidates = formatter.render_delete(registry, self.dirty_paths(registry))
                if not candidates:
                    return SessionResult.cancelled("No worktrees to delete besides the main worktree")
                actions = self.driver.select_for_delete(candidates, formatter, force=force)
            return ActionExecutor.execute_all(self.gateway, registry, actions)
        except GitWtError as e:
            logger.debug(f"delete failed: {e}")
            return SessionResult.failed(str(e))

    def add(self, branch_name: str, base_ref: Optional[str] = None) -> SessionResult:
        """Create a worktree for a new branch without opening the finder."""
        try:
            registry = self.build_registry()
            action = self._create_action(registry, branch_name, base_ref)
            return ActionExecutor(self.gateway, registry).execute(action)
        except GitWtError as e:
            return SessionResult.failed(str(e))

    def list(self) -> SessionResult:
        """Print the worktree table."""
        try:
            registry = self.build_registry()
            self.display.display_worktree_table(registry, self.dirty_paths(registry))
            return SessionResult.success()
        except GitWtError as e:
            return SessionResult.failed(str(e))

    def prune(self) -> SessionResult:
        """Drop metadata for worktrees whose directories are gone."""
        try:
            before = [wt.path for wt in self.build_registry() if wt.is_prunable]
            self.gateway.prune_worktrees()
        except GitWtError as e:
            return SessionResult.failed(str(e))
        if not before:
            return SessionResult.success(message="Nothing to prune")
        return SessionResult.success(message="Pruned:\n  " + "\n  ".join(before))



def config_from_args(args: argparse.Namespace) -> Config:
    """Build a Config from parsed arguments layered over GIT_WT_* variables."""
    return Config.from_env(
        finder=args.finder,
        worktree_dir=args.worktree_dir,
        base_ref=getattr(args, "base", None),
        sort_by=args.sort_by,
        show_status=False if args.no_status else None,
        force=getattr(args, "force", None) or None,
        verbose=args.verbose or None,
        debug=args.debug or None,
    )


def dispatch(manager: WorktreeManager, args: argparse.Namespace) -> SessionResult:
    """Run the sub-operation named in args."""
    command = args.command or "select"
    if command == "select":
        return manager.select_or_create(base_ref=args.base)
    if command == "delete":
        return manager.delete(args.paths, force=args.force)
    if command == "add":
        return manager.add(args.branch, base_ref=args.base)
    if command == "list":
        return manager.list()
    if command == "prune":
        return manager.prune()
    if command == "shell-init":
        return SessionResult.failed(
            "shell-init only prints a shell function and does not run a session; "
            "run 'git-wt shell-init' from the command line"
        )
    return SessionResult.failed(f"Unknown command: {command}")


def run(
    initial_args: Optional[Sequence[str]] = None,
    repo_path: Optional[str] = None,
    gateway: Optional[GitGateway] = None,
    driver: Optional[SelectionDriver] = None,
) -> SessionResult:
    """Parse arguments and run one session.

    Args:
        initial_args: Command-line arguments (defaults to sys.argv[1:])
        repo_path: Directory to operate in (defaults to the cwd)
        gateway: Gateway override
        driver: Finder driver override

    Returns:
        The session result
    """
    args = parse_args(initial_args)
    try:
        config = config_from_args(args)
    except ValueError as e:
        return SessionResult.failed(str(e))
    manager = WorktreeManager(repo_path or os.getcwd(), config, gateway=gateway, driver=driver)
    return dispatch(manager, args)
