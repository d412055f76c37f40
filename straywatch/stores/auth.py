"""
Auth state: the process-wide cache of the signed-in identity.

Initialized lazily and exactly once. After that it follows the backend's
session change notifications without further validation.
"""

from dataclasses import dataclass
from typing import Any

from straywatch.config import bind_context, get_logger, unbind_context
from straywatch.schemas.auth import AuthChange, Identity
from straywatch.services.backend import ReportBackend, get_backend
from straywatch.stores.base import Store

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthState:
    """Snapshot of the current identity."""

    user: Identity | None = None
    loading: bool = True
    initialized: bool = False


class AuthStore(Store[AuthState]):
    """
    Caches the current identity.

    initialize() never raises: a failed session lookup settles to
    "no identity" so first render is never blocked.
    """

    def __init__(self, backend: ReportBackend) -> None:
        super().__init__(AuthState())
        self._backend = backend
        self._unsubscribe = None

    @property
    def user(self) -> Identity | None:
        return self.state.user

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def is_authenticated(self) -> bool:
        return self.state.user is not None

    def set_user(self, user: Identity | None) -> None:
        self.set(user=user)

    async def initialize(self) -> None:
        """
        Resolve the current identity once.

        Subsequent calls are no-ops, whether the first one succeeded or not.
        """
        if self.state.initialized:
            return
        # Mark before awaiting so concurrent callers do not query twice
        self.set(initialized=True)

        if not self._backend.is_configured:
            self.set(user=None, loading=False)
            return

        try:
            user = await self._backend.get_user()
        except Exception as e:
            logger.error("Auth initialization error", error=str(e))
            user = None

        self.set(user=user, loading=False)
        self._unsubscribe = self._backend.on_auth_state_change(self._on_auth_change)
        logger.debug("Auth initialized", signed_in=user is not None)

    def set(self, **changes: Any) -> AuthState:
        state = super().set(**changes)
        if "user" in changes:
            # Tag subsequent log lines with the signed-in identity
            if state.user is not None:
                bind_context(user_id=state.user.id)
            else:
                unbind_context("user_id")
        return state

    def _on_auth_change(self, change: AuthChange) -> None:
        self.set(user=change.user)

    def close(self) -> None:
        """Stop following session change notifications."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


_auth_store: AuthStore | None = None


def get_auth_store() -> AuthStore:
    """Get or create the AuthStore singleton bound to the shared backend."""
    global _auth_store

    if _auth_store is None:
        _auth_store = AuthStore(get_backend())

    return _auth_store
