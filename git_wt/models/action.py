"""Action model produced by selection and consumed by the executor."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from git_wt.models.worktree import Worktree


class ActionKind(Enum):
    """Kind of action to execute."""
    SWITCH = "switch"
    CREATE = "create"
    DELETE = "delete"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Action:
    """A single user decision.

    SWITCH and DELETE carry the snapshot Worktree they were built from so
    the executor can detect drift; CREATE carries the branch to create,
    its base ref and the derived worktree path.
    """
    kind: ActionKind
    target_path: Optional[str] = None
    branch_name: Optional[str] = None
    base_ref: Optional[str] = None
    worktree: Optional[Worktree] = None
    force: bool = False

    @classmethod
    def cancel(cls) -> "Action":
        return cls(ActionKind.CANCEL)

    @classmethod
    def switch(cls, worktree: Worktree) -> "Action":
        return cls(ActionKind.SWITCH, target_path=worktree.path, worktree=worktree)

    @classmethod
    def create(cls, path: str, branch_name: str, base_ref: str) -> "Action":
        return cls(ActionKind.CREATE, target_path=path, branch_name=branch_name, base_ref=base_ref)

    @classmethod
    def delete(cls, worktree: Worktree, force: bool = False) -> "Action":
        return cls(ActionKind.DELETE, target_path=worktree.path, worktree=worktree, force=force)
