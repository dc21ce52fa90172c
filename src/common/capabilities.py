"""
Injected platform capabilities.

Consumers receive a capability explicitly instead of reaching for a
process-wide handle; a missing platform feature is the no-op implementation.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from common.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class PantryRefresh(Protocol):
    """Something that must be told when pantry contents changed (e.g. a home-screen widget)."""

    @property
    def available(self) -> bool: ...

    def refresh(self) -> None: ...


class NoopPantryRefresh:
    """Used when the platform has nothing to refresh."""

    @property
    def available(self) -> bool:
        return False

    def refresh(self) -> None:
        return None


class CallbackPantryRefresh:
    """Adapts a plain callable to the PantryRefresh capability."""

    def __init__(self, callback: Optional[Callable[[], None]]):
        self._callback = callback

    @property
    def available(self) -> bool:
        return self._callback is not None

    def refresh(self) -> None:
        if self._callback is None:
            return
        try:
            self._callback()
        except Exception as e:
            # A failed refresh must not turn a successful scan into a failure
            logger.warning(event="pantry_refresh_failed", error=str(e))
