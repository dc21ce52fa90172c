"""
Request lifecycle state machine shared by every AI-backed operation.

Each start() takes a new request token. When an operation settles, its
outcome is applied only if its token is still the latest one issued, so a
superseded call can never overwrite a newer state. reset() and fail() also
take a token, which discards whatever is still in flight.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from common.errors import ErrorKind, OperationError, PantryAIError
from common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RequestStatus(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestState(Generic[T]):
    """Immutable tagged state; data only when SUCCEEDED, error only when FAILED."""

    status: RequestStatus
    data: Optional[T] = None
    error: Optional[OperationError] = None

    def __post_init__(self) -> None:
        if self.data is not None and self.status != RequestStatus.SUCCEEDED:
            raise ValueError(f"{self.status.value} state cannot carry data")
        if (self.error is not None) != (self.status == RequestStatus.FAILED):
            raise ValueError("error must be set exactly when the state is failed")

    @classmethod
    def idle(cls) -> "RequestState[T]":
        return cls(RequestStatus.IDLE)

    @classmethod
    def in_flight(cls) -> "RequestState[T]":
        return cls(RequestStatus.IN_FLIGHT)

    @classmethod
    def succeeded(cls, data: T) -> "RequestState[T]":
        return cls(RequestStatus.SUCCEEDED, data=data)

    @classmethod
    def failed(cls, error: OperationError) -> "RequestState[T]":
        return cls(RequestStatus.FAILED, error=error)

    @property
    def is_idle(self) -> bool:
        return self.status == RequestStatus.IDLE

    @property
    def is_in_flight(self) -> bool:
        return self.status == RequestStatus.IN_FLIGHT

    @property
    def is_succeeded(self) -> bool:
        return self.status == RequestStatus.SUCCEEDED

    @property
    def is_failed(self) -> bool:
        return self.status == RequestStatus.FAILED


Listener = Callable[[RequestState[Any]], None]


class RequestLifecycle(Generic[T]):
    """Uniform idle / in-flight / succeeded / failed view over one logical operation."""

    def __init__(self, name: str = "request"):
        self.name = name
        self._state: RequestState[T] = RequestState.idle()
        self._token = 0
        self._listeners: List[Listener] = []

    @property
    def state(self) -> RequestState[T]:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state.is_in_flight

    @property
    def data(self) -> Optional[T]:
        return self._state.data

    @property
    def error(self) -> Optional[OperationError]:
        return self._state.error

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _next_token(self) -> int:
        self._token += 1
        return self._token

    def _transition(self, state: RequestState[T]) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.warning(
                    event="lifecycle_listener_failed", lifecycle=self.name, error=str(e)
                )

    async def start(self, operation: Callable[[], Awaitable[T]]) -> RequestState[T]:
        """
        Run ``operation`` and reflect its outcome.

        Never raises: failures become a FAILED state. If another start(),
        reset() or fail() happened meanwhile, the outcome is discarded and
        the current state is returned unchanged.
        """
        token = self._next_token()
        self._transition(RequestState.in_flight())

        try:
            outcome: RequestState[T] = RequestState.succeeded(await operation())
        except PantryAIError as e:
            logger.warning(
                event="lifecycle_operation_failed",
                lifecycle=self.name,
                kind=e.kind.value,
                details=e.details,
            )
            outcome = RequestState.failed(e.to_operation_error())
        except Exception as e:
            logger.error(
                event="lifecycle_operation_crashed",
                lifecycle=self.name,
                error=str(e),
                exc_info=True,
            )
            outcome = RequestState.failed(
                OperationError(
                    kind=ErrorKind.UPSTREAM_ERROR,
                    message="An unexpected error occurred. Please try again.",
                    details=str(e),
                )
            )

        if token != self._token:
            logger.info(
                event="lifecycle_stale_result_discarded",
                lifecycle=self.name,
                token=token,
                latest_token=self._token,
            )
            return self._state

        self._transition(outcome)
        return outcome

    def fail(self, error: OperationError) -> RequestState[T]:
        """Fail immediately without running anything (precondition violations)."""
        self._next_token()
        self._transition(RequestState.failed(error))
        return self._state

    def reset(self) -> RequestState[T]:
        """Force IDLE. Does not cancel an in-flight call; its result is discarded."""
        self._next_token()
        self._transition(RequestState.idle())
        return self._state
