"""
Notification surface for transient user-facing messages (toasts).

Producers append; a toast leaves the queue when the user dismisses it or
when its display duration runs out.
"""

import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from straywatch.config import get_logger, get_settings
from straywatch.services.exceptions import StrayWatchError
from straywatch.stores.base import Store

logger = get_logger(__name__)


class ToastType(str, Enum):
    """Visual category of a toast."""

    success = "success"
    error = "error"
    info = "info"


@dataclass(frozen=True)
class Toast:
    """
    A single transient message.

    Attributes:
        id: Queue-unique identifier used for dismissal
        type: success, error or info
        title: Short headline
        description: Optional detail, e.g. the backend's error message
        expires_at: Clock reading after which the toast is dropped, if any
    """

    id: int
    type: ToastType
    title: str
    description: str | None = None
    expires_at: float | None = None


@dataclass(frozen=True)
class ToastState:
    toasts: tuple[Toast, ...] = ()


class Notifier(Store[ToastState]):
    """
    Append-only toast queue with explicit dismissal and auto-expiry.

    Example:
        >>> notifier = Notifier()
        >>> notifier.toast("Report submitted successfully", ToastType.success)
        >>> [t.title for t in notifier.toasts]
        ['Report submitted successfully']
    """

    def __init__(
        self,
        *,
        duration: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            duration: Seconds a toast stays visible; 0 disables expiry.
                      Defaults to the toast_duration_seconds setting.
            clock: Monotonic time source
        """
        super().__init__(ToastState())
        if duration is None:
            duration = get_settings().toast_duration_seconds
        self._duration = duration
        self._clock = clock
        self._ids = itertools.count(1)

    @property
    def toasts(self) -> tuple[Toast, ...]:
        """Visible toasts, oldest first. Expired ones are pruned on read."""
        self.expire()
        return self.state.toasts

    def toast(
        self,
        title: str,
        type: ToastType = ToastType.info,
        description: str | None = None,
        *,
        duration: float | None = None,
    ) -> Toast:
        """Append a toast and return it."""
        duration = self._duration if duration is None else duration
        toast = Toast(
            id=next(self._ids),
            type=type,
            title=title,
            description=description,
            expires_at=self._clock() + duration if duration > 0 else None,
        )
        self.set(toasts=(*self.state.toasts, toast))
        return toast

    def success(self, title: str, description: str | None = None) -> Toast:
        return self.toast(title, ToastType.success, description)

    def info(self, title: str, description: str | None = None) -> Toast:
        return self.toast(title, ToastType.info, description)

    def error(
        self, title: str, error: StrayWatchError | str | None = None
    ) -> Toast:
        """Append an error toast, using the error's message as detail."""
        if isinstance(error, StrayWatchError):
            description: str | None = error.message
        else:
            description = error
        return self.toast(title, ToastType.error, description)

    def dismiss(self, toast_id: int) -> bool:
        """Remove a toast. Returns False if it was already gone."""
        remaining = tuple(t for t in self.state.toasts if t.id != toast_id)
        if len(remaining) == len(self.state.toasts):
            return False
        self.set(toasts=remaining)
        return True

    def expire(self) -> int:
        """Drop toasts whose duration has elapsed. Returns how many."""
        now = self._clock()
        remaining = tuple(
            t for t in self.state.toasts if t.expires_at is None or t.expires_at > now
        )
        dropped = len(self.state.toasts) - len(remaining)
        if dropped:
            self.set(toasts=remaining)
        return dropped

    def clear(self) -> None:
        self.set(toasts=())


_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """Get or create the process-wide Notifier."""
    global _notifier

    if _notifier is None:
        _notifier = Notifier()

    return _notifier
