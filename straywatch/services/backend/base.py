"""
Abstract boundary to the backend collaborator.

The backend owns authentication, persistence and querying. Everything in
StrayWatch talks to it through this interface so an alternative provider
(or an in-memory fake in tests) can be dropped in.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from straywatch.config import get_logger
from straywatch.schemas.auth import AuthChange, Identity, Session
from straywatch.schemas.reports import Report, ReportCreate

logger = get_logger(__name__)

AuthListener = Callable[[AuthChange], None]


class ReportBackend(ABC):
    """
    Abstract base class for report persistence and session management.

    Implementations must map provider failures onto TransportError and
    report missing rows by returning None/False rather than raising.
    """

    def __init__(self) -> None:
        self._auth_listeners: list[AuthListener] = []

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the backend has the settings it needs to be reached."""
        ...

    # -- Reports --------------------------------------------------------------

    @abstractmethod
    async def select_reports(self, owner_id: str | None = None) -> list[Report]:
        """
        Fetch reports ordered by created_at descending.

        Args:
            owner_id: When given, only reports created by this identity

        Raises:
            TransportError: If the backend could not be queried
        """
        ...

    @abstractmethod
    async def insert_report(self, data: ReportCreate, owner_id: str) -> Report:
        """
        Insert a report owned by ``owner_id``.

        Returns:
            The persisted report with its assigned id and created_at
        """
        ...

    @abstractmethod
    async def update_report(
        self, report_id: str, changes: dict[str, Any]
    ) -> Report | None:
        """
        Apply a partial update.

        Returns:
            The updated report, or None if no report has this id
        """
        ...

    @abstractmethod
    async def delete_report(self, report_id: str) -> bool:
        """
        Delete a report.

        Returns:
            True if a report was deleted, False if no report has this id
        """
        ...

    # -- Sessions -------------------------------------------------------------

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Identity | None:
        """
        Register a new identity.

        Returns:
            The created identity; None if the backend returned no user
        """
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Start a session with email and password."""
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session."""
        ...

    @abstractmethod
    async def get_user(self) -> Identity | None:
        """Return the identity behind the current session, if any."""
        ...

    @abstractmethod
    async def refresh_session(self) -> Session | None:
        """Exchange the refresh token for a new session, if possible."""
        ...

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """
        Subscribe to session changes.

        Returns:
            A callable that removes the subscription
        """
        self._auth_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._auth_listeners:
                self._auth_listeners.remove(callback)

        return unsubscribe

    def _emit(self, change: AuthChange) -> None:
        """Deliver a session change to every subscriber."""
        for listener in list(self._auth_listeners):
            try:
                listener(change)
            except Exception as e:
                logger.error(
                    "Auth listener failed",
                    auth_event=change.event.value,
                    error=str(e),
                )

    async def close(self) -> None:  # noqa: B027
        """
        Clean up any resources (e.g., HTTP clients).

        Subclasses should override if they need cleanup.
        """
        pass
