"""
Observable state container shared between view controllers.

State is an immutable dataclass snapshot. Mutations go through set(),
which swaps the snapshot and notifies subscribers synchronously.
"""

from collections.abc import Callable
from dataclasses import replace
from typing import Any, Generic, TypeVar

from straywatch.config import get_logger

logger = get_logger(__name__)

S = TypeVar("S")

Listener = Callable[[S, S], None]


class Store(Generic[S]):
    """
    Holds one state snapshot and a list of subscribers.

    Example:
        >>> store = Store(UIState())
        >>> unsubscribe = store.subscribe(lambda new, old: print(new))
        >>> store.set(is_auth_modal_open=True)
    """

    def __init__(self, initial: S) -> None:
        self._state = initial
        self._listeners: list[Listener[S]] = []

    @property
    def state(self) -> S:
        """The current snapshot."""
        return self._state

    def set(self, **changes: Any) -> S:
        """Replace fields of the snapshot and notify subscribers."""
        previous = self._state
        self._state = replace(previous, **changes)
        if self._state != previous:
            self._notify(previous)
        return self._state

    def subscribe(self, listener: Listener[S]) -> Callable[[], None]:
        """
        Register a listener called as ``listener(new_state, old_state)``.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, previous: S) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state, previous)
            except Exception as e:
                logger.error(
                    "Store listener failed",
                    store=type(self).__name__,
                    error=str(e),
                )
