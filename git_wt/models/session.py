"""Session result model."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionStatus(Enum):
    """Terminal status of one invocation."""
    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionResult:
    """Outcome handed to the session bridge. Never mutated after creation."""
    status: SessionStatus
    target_path: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, target_path: Optional[str] = None, message: Optional[str] = None) -> "SessionResult":
        return cls(SessionStatus.SUCCESS, target_path, message)

    @classmethod
    def cancelled(cls, message: Optional[str] = None) -> "SessionResult":
        return cls(SessionStatus.CANCELLED, None, message)

    @classmethod
    def failed(cls, message: str) -> "SessionResult":
        return cls(SessionStatus.FAILED, None, message)

    @property
    def ok(self) -> bool:
        return self.status is not SessionStatus.FAILED
