"""Action executor: validates a selection against live state, then applies it."""

import os
from enum import Enum
from typing import Callable, List, Optional, Sequence, TYPE_CHECKING

from git_wt.exceptions import (
    BranchExists,
    GitWtError,
    MainWorktreeProtected,
    PathOccupied,
    StaleSelection,
)
from git_wt.logging_config import get_logger
from git_wt.models.action import Action, ActionKind
from git_wt.models.session import SessionResult
from git_wt.services.registry import WorktreeRegistry

if TYPE_CHECKING:
    from git_wt.services.git import GitGateway

logger = get_logger(__name__)


class ExecutorState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    EXECUTING = "executing"
    DONE = "done"
    FAILED = "failed"


class ActionExecutor:
    """Executes one Action at a time.

    idle -> validating -> executing -> done, with any error moving to
    failed. Errors from git are reported as they are; nothing is retried
    and a dirty tree is never removed unless the action asked for force.
    """

    def __init__(
        self,
        gateway: "GitGateway",
        snapshot: WorktreeRegistry,
        rebuild: Optional[Callable[[], WorktreeRegistry]] = None,
    ):
        """Initialize the executor.

        Args:
            gateway: Gateway used for validation and execution
            snapshot: Registry the action was built from
            rebuild: Builds a fresh registry (defaults to WorktreeRegistry.build)
        """
        self.gateway = gateway
        self.snapshot = snapshot
        self.rebuild = rebuild or (lambda: WorktreeRegistry.build(gateway, current_path=snapshot.current_path))
        self.state = ExecutorState.IDLE
        self.error: Optional[Exception] = None

    def _transition(self, state: ExecutorState):
        logger.debug(f"executor: {self.state.value} -> {state.value}")
        self.state = state

    def _validate(self, action: Action) -> WorktreeRegistry:
        """Check the action still makes sense against live state.

        Conflicts already present in the snapshot are reported as what they
        are; StaleSelection is only for state that changed since then.

        Raises:
            MainWorktreeProtected: For a delete aimed at the main worktree
            PathOccupied: For a create aimed at a listed worktree's path
            BranchExists: For a create of a branch that is already checked out
            StaleSelection: If the live state no longer matches
        """
        target = action.target_path or ""
        branch_name = action.branch_name or ""

        if action.kind is ActionKind.DELETE:
            snapshot_wt = action.worktree or self.snapshot.find(target)
            if snapshot_wt is not None and snapshot_wt.is_main:
                raise MainWorktreeProtected(target)
        elif action.kind is ActionKind.CREATE:
            if self.snapshot.find(target) is not None:
                raise PathOccupied(target)
            listed = self.snapshot.find_branch(branch_name)
            if listed is not None:
                raise BranchExists(branch_name, listed.path)

        live = self.rebuild()

        if action.kind in (ActionKind.SWITCH, ActionKind.DELETE):
            expected = action.worktree or self.snapshot.find(target)
            if expected is None:
                raise StaleSelection(target, "it was not part of the listed worktrees")
            current = live.find(expected.path)
            if current is None:
                raise StaleSelection(target, "the worktree no longer exists")
            if current.branch != expected.branch:
                raise StaleSelection(
                    target,
                    f"it now has '{current.display_branch}' checked out instead of "
                    f"'{expected.display_branch}'",
                )
            if action.kind is ActionKind.DELETE and current.is_main:
                raise MainWorktreeProtected(target)
        elif action.kind is ActionKind.CREATE:
            if live.find(target) is not None:
                raise StaleSelection(target, "a worktree now exists at that path")
            existing = live.find_branch(branch_name)
            if existing is not None:
                raise StaleSelection(
                    branch_name,
                    f"the branch is now checked out at {existing.path}",
                )
        return live

    def _perform(self, action: Action, live: WorktreeRegistry) -> SessionResult:
        if action.kind is ActionKind.SWITCH:
            return SessionResult.success(target_path=live.find(action.target_path).path)

        if action.kind is ActionKind.CREATE:
            created = self.gateway.create_worktree(
                action.target_path, action.branch_name, action.base_ref
            )
            return SessionResult.success(
                target_path=created.path,
                message=f"Created worktree for '{action.branch_name}' at {created.path}",
            )

        target = live.find(action.target_path)
        if target.is_prunable and not os.path.exists(target.path):
            # git cannot remove a worktree whose directory is gone; prune its metadata
            self.gateway.prune_worktrees()
        else:
            self.gateway.remove_worktree(target.path, force=action.force)
        return SessionResult.success(
            target_path=self._escape_path(target.path, live),
            message=f"Removed worktree '{target.display_branch}' at {target.path}",
        )

    def _escape_path(self, removed_path: str, live: WorktreeRegistry) -> Optional[str]:
        """Where the shell should go if it was inside the removed worktree."""
        current = self.snapshot.current
        if current is not None and os.path.realpath(current.path) == os.path.realpath(removed_path):
            main = live.main
            return main.path if main is not None else None
        return None

    def execute(self, action: Action) -> SessionResult:
        """Execute a single action.

        Returns:
            The session result; failures are reported, never raised
        """
        if self.state is not ExecutorState.IDLE:
            raise RuntimeError(f"executor already used (state: {self.state.value})")

        if action.kind is ActionKind.CANCEL:
            return SessionResult.cancelled()

        try:
            self._transition(ExecutorState.VALIDATING)
            live = self._validate(action)
            self._transition(ExecutorState.EXECUTING)
            result = self._perform(action, live)
        except GitWtError as e:
            self.error = e
            self._transition(ExecutorState.FAILED)
            logger.info(f"{action.kind.value} failed: {e}")
            return SessionResult.failed(str(e))

        self._transition(ExecutorState.DONE)
        return result

    @classmethod
    def execute_all(
        cls,
        gateway: "GitGateway",
        snapshot: WorktreeRegistry,
        actions: Sequence[Action],
    ) -> SessionResult:
        """Execute several DELETE actions in order, stopping at the first failure."""
        if not actions or all(a.kind is ActionKind.CANCEL for a in actions):
            return SessionResult.cancelled()

        done: List[str] = []
        target_path = None
        for action in actions:
            result = cls(gateway, snapshot).execute(action)
            if not result.ok:
                message = result.message or "failed"
                if done:
                    message += "\nAlready done:\n  " + "\n  ".join(done)
                return SessionResult.failed(message)
            if result.message:
                done.append(result.message)
            target_path = target_path or result.target_path
        return SessionResult.success(target_path=target_path, message="\n".join(done) or None)
