"""Request state tracking for flow controllers"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")


class RequestPhase(str, Enum):
    """Lifecycle of a single tracked operation"""
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class RequestState:
    """
    Tagged request state: idle | pending(op) | success | error(reason).

    One value is kept per operation key, so an in-flight update on one
    cart row never hides the state of another.
    """
    phase: RequestPhase = RequestPhase.IDLE
    operation: Optional[str] = None
    reason: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def idle(cls) -> "RequestState":
        return cls()

    @classmethod
    def pending(cls, operation: str) -> "RequestState":
        return cls(RequestPhase.PENDING, operation, None, datetime.utcnow())

    @classmethod
    def success(cls, operation: str) -> "RequestState":
        return cls(RequestPhase.SUCCESS, operation, None, datetime.utcnow())

    @classmethod
    def error(cls, operation: str, reason: str) -> "RequestState":
        return cls(RequestPhase.ERROR, operation, reason, datetime.utcnow())

    @property
    def is_pending(self) -> bool:
        return self.phase == RequestPhase.PENDING

    @property
    def is_error(self) -> bool:
        return self.phase == RequestPhase.ERROR


class RequestTracker:
    """Keeps a RequestState per operation key"""

    def __init__(self):
        self._states: dict[Hashable, RequestState] = {}

    @staticmethod
    def _key(operation: str, target: Optional[Hashable] = None) -> Hashable:
        return operation if target is None else (operation, target)

    def get(self, operation: str, target: Optional[Hashable] = None) -> RequestState:
        """Get the state for an operation (and optional target id)"""
        return self._states.get(self._key(operation, target), RequestState.idle())

    def start(self, operation: str, target: Optional[Hashable] = None) -> None:
        self._states[self._key(operation, target)] = RequestState.pending(operation)

    def succeed(self, operation: str, target: Optional[Hashable] = None) -> None:
        self._states[self._key(operation, target)] = RequestState.success(operation)

    def fail(self, operation: str, reason: str, target: Optional[Hashable] = None) -> None:
        self._states[self._key(operation, target)] = RequestState.error(operation, reason)

    def is_pending(self, operation: str, target: Optional[Hashable] = None) -> bool:
        """Check a single key"""
        return self.get(operation, target).is_pending

    def any_pending(self, operation: str) -> bool:
        """Check every key of an operation, including per-target ones"""
        for key, state in self._states.items():
            name = key[0] if isinstance(key, tuple) else key
            if name == operation and state.is_pending:
                return True
        return False


@dataclass
class BatchFailure(Generic[T]):
    """One input of a batch that did not go through"""
    input: T
    error: str


@dataclass
class BatchResult(Generic[T]):
    """
    Outcome of a sequential multi-step operation.

    Steps are attempted independently; a failed step does not roll back
    the ones that already succeeded.
    """
    succeeded: list[Any] = field(default_factory=list)
    failed: list[BatchFailure[T]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def partial(self) -> bool:
        return bool(self.succeeded) and bool(self.failed)
