"""
Sign-in / sign-up dialog controller.
"""

from straywatch.config import get_logger, get_settings
from straywatch.schemas.auth import Identity
from straywatch.services.backend import ReportBackend
from straywatch.services.exceptions import InvalidCredentialsError, StrayWatchError
from straywatch.services.notifications import Notifier
from straywatch.stores.auth import AuthStore
from straywatch.stores.ui import UIStore

logger = get_logger(__name__, view="auth_dialog")

TAB_SIGN_IN = "signin"
TAB_SIGN_UP = "signup"


def validate_sign_in(email: str, password: str) -> None:
    if not email or not password:
        raise InvalidCredentialsError("Please fill in all fields")


def validate_sign_up(
    email: str, password: str, confirm_password: str, *, min_length: int = 6
) -> None:
    """
    Raises:
        InvalidCredentialsError: If a field is empty, the passwords differ,
            or the password is too short
    """
    if not email or not password or not confirm_password:
        raise InvalidCredentialsError("Please fill in all fields")
    if password != confirm_password:
        raise InvalidCredentialsError("Passwords do not match")
    if len(password) < min_length:
        raise InvalidCredentialsError(
            f"Password must be at least {min_length} characters"
        )


class AuthDialog:
    """Drives the auth modal; every failure ends as a notification."""

    def __init__(
        self,
        ui: UIStore,
        auth: AuthStore,
        backend: ReportBackend,
        notifier: Notifier,
    ) -> None:
        self._ui = ui
        self._auth = auth
        self._backend = backend
        self._notifier = notifier
        self._min_password_length = get_settings().min_password_length
        self.active_tab = TAB_SIGN_IN
        self.loading = False

    @property
    def is_open(self) -> bool:
        return self._ui.state.is_auth_modal_open

    def select_tab(self, tab: str) -> None:
        if tab not in (TAB_SIGN_IN, TAB_SIGN_UP):
            raise ValueError(f"Unknown tab: {tab}")
        self.active_tab = tab

    def close(self) -> None:
        self._ui.close_auth_modal()

    async def sign_in(self, email: str, password: str) -> Identity | None:
        try:
            validate_sign_in(email, password)
        except InvalidCredentialsError as e:
            self._notifier.error(e.message)
            return None

        self.loading = True
        try:
            session = await self._backend.sign_in(email, password)
        except StrayWatchError as e:
            self._notifier.error(
                "Sign in failed", e.message or "Please check your credentials"
            )
            return None
        finally:
            self.loading = False

        self._auth.set_user(session.user)
        self._notifier.success("Welcome back!")
        self.close()
        return session.user

    async def sign_up(
        self, email: str, password: str, confirm_password: str
    ) -> Identity | None:
        try:
            validate_sign_up(
                email,
                password,
                confirm_password,
                min_length=self._min_password_length,
            )
        except InvalidCredentialsError as e:
            self._notifier.error(e.message)
            return None

        self.loading = True
        try:
            user = await self._backend.sign_up(email, password)
        except StrayWatchError as e:
            self._notifier.error("Sign up failed", e.message or "Please try again")
            return None
        finally:
            self.loading = False

        if user is None:
            logger.warning("Sign up returned no user")
            return None

        self._auth.set_user(user)
        self._notifier.success(
            "Account created!", "Please check your email to verify your account"
        )
        self.close()
        return user
