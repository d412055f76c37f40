"""
Supabase implementation of the ReportBackend.

Uses httpx for async HTTP requests to PostgREST (reports) and GoTrue
(sessions). Transient failures are retried with exponential backoff and
every call carries a hard timeout.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from straywatch.config import get_logger
from straywatch.schemas.auth import AuthChange, AuthEvent, Identity, Session
from straywatch.schemas.reports import Report, ReportCreate
from straywatch.services.exceptions import BackendNotConfiguredError, TransportError

from .base import ReportBackend

logger = get_logger(__name__)

REST_PATH = "/rest/v1"
AUTH_PATH = "/auth/v1"

# Keys GoTrue and PostgREST use for human-readable error text
_ERROR_MESSAGE_KEYS = ("message", "msg", "error_description", "error")

# Status codes worth retrying
_TRANSIENT_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class SupabaseBackend(ReportBackend):
    """
    Supabase gateway for reports and email/password sessions.

    The current session is kept in memory. Subscribers registered with
    on_auth_state_change() hear about sign-in, sign-out and refreshes.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff: float = 0.5,
        reports_table: str = "reports",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the Supabase gateway.

        Args:
            url: Project URL, e.g. https://abc.supabase.co
            anon_key: Public anon API key
            http_client: Optional pre-configured httpx client
            timeout: Hard timeout per request in seconds
            max_retries: Retries for transient failures
            backoff: Base delay in seconds; doubles on each retry
            reports_table: PostgREST table holding reports
            sleep: Awaitable used between retries
            clock: Source of the current UTC time
        """
        super().__init__()
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff = backoff
        self._table = reports_table
        self._sleep = sleep
        self._clock = clock or (lambda: datetime.now(UTC))
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None
        self._session: Session | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self._url and self._anon_key)

    @property
    def session(self) -> Session | None:
        """The current session, if signed in."""
        return self._session

    def restore_session(self, session: Session | None) -> None:
        """Adopt a session persisted elsewhere without emitting an event."""
        self._session = session

    # -- Reports --------------------------------------------------------------

    async def select_reports(self, owner_id: str | None = None) -> list[Report]:
        params = {"select": "*", "order": "created_at.desc"}
        if owner_id is not None:
            params["user_id"] = f"eq.{owner_id}"

        rows = await self._request("GET", self._table_path(), params=params)
        reports = [_validate(Report, row, "report") for row in _expect_rows(rows)]

        logger.debug(
            "Fetched reports",
            count=len(reports),
            owner_scoped=owner_id is not None,
        )
        return reports

    async def insert_report(self, data: ReportCreate, owner_id: str) -> Report:
        payload = {**data.to_payload(), "user_id": owner_id}
        rows = await self._request(
            "POST",
            self._table_path(),
            json=payload,
            prefer="return=representation",
            idempotent=False,
        )
        rows = _expect_rows(rows)
        if not rows:
            raise TransportError("Backend did not return the created report")

        report = _validate(Report, rows[0], "report")
        logger.info("Inserted report", report_id=report.id, report_type=report.type.value)
        return report

    async def update_report(
        self, report_id: str, changes: dict[str, Any]
    ) -> Report | None:
        rows = await self._request(
            "PATCH",
            self._table_path(),
            params={"id": f"eq.{report_id}"},
            json=changes,
            prefer="return=representation",
        )
        rows = _expect_rows(rows)
        if not rows:
            return None

        logger.info("Updated report", report_id=report_id, fields=sorted(changes))
        return _validate(Report, rows[0], "report")

    async def delete_report(self, report_id: str) -> bool:
        rows = await self._request(
            "DELETE",
            self._table_path(),
            params={"id": f"eq.{report_id}"},
            prefer="return=representation",
        )
        deleted = bool(_expect_rows(rows))
        if deleted:
            logger.info("Deleted report", report_id=report_id)
        return deleted

    # -- Sessions -------------------------------------------------------------

    async def sign_up(self, email: str, password: str) -> Identity | None:
        data = await self._request(
            "POST",
            f"{AUTH_PATH}/signup",
            json={"email": email, "password": password},
            idempotent=False,
        )
        data = _expect_object(data)

        if "access_token" in data:
            # Email confirmation disabled: the user is signed in immediately
            session = self._parse_session(data)
            self._set_session(session, AuthEvent.signed_in)
            return session.user

        user = data.get("user", data)
        if not isinstance(user, dict) or "id" not in user:
            return None
        return _validate(Identity, user, "user")

    async def sign_in(self, email: str, password: str) -> Session:
        data = await self._request(
            "POST",
            f"{AUTH_PATH}/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            idempotent=False,
        )
        session = self._parse_session(data)
        self._set_session(session, AuthEvent.signed_in)
        logger.info("Signed in", user_id=session.user.id)
        return session

    async def sign_out(self) -> None:
        if self._session is None:
            return

        try:
            await self._request("POST", f"{AUTH_PATH}/logout")
        except TransportError as e:
            # 401/403 means the session is already gone server-side
            if e.status_code not in (401, 403):
                raise

        user_id = self._session.user.id
        self._set_session(None, AuthEvent.signed_out)
        logger.info("Signed out", user_id=user_id)

    async def get_user(self) -> Identity | None:
        if not self.is_configured or self._session is None:
            return None

        if self._session.is_expired(self._clock()):
            if await self.refresh_session() is None:
                return None

        try:
            data = await self._request("GET", f"{AUTH_PATH}/user")
        except TransportError as e:
            if e.status_code in (401, 403):
                logger.info("Session rejected by backend")
                self._set_session(None, AuthEvent.signed_out)
                return None
            raise

        return _validate(Identity, data, "user")

    async def refresh_session(self) -> Session | None:
        if self._session is None or not self._session.refresh_token:
            return None

        try:
            data = await self._request(
                "POST",
                f"{AUTH_PATH}/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": self._session.refresh_token},
                idempotent=False,
            )
        except TransportError as e:
            if e.transient:
                raise
            logger.info("Session expired", status_code=e.status_code)
            self._set_session(None, AuthEvent.signed_out)
            return None

        session = self._parse_session(data)
        self._set_session(session, AuthEvent.token_refreshed)
        return session

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    # -- Internals ------------------------------------------------------------

    def _table_path(self) -> str:
        return f"{REST_PATH}/{self._table}"

    def _set_session(self, session: Session | None, event: AuthEvent) -> None:
        self._session = session
        self._emit(AuthChange(event=event, session=session))

    def _parse_session(self, data: Any) -> Session:
        data = _expect_object(data)
        if "access_token" not in data or "user" not in data:
            raise TransportError("Backend returned an incomplete session")

        session = _validate(Session, data, "session")
        if session.expires_at is None and session.expires_in is not None:
            expires_at = int(self._clock().timestamp()) + session.expires_in
            session = session.model_copy(update={"expires_at": expires_at})
        return session

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        token = self._session.access_token if self._session else self._anon_key
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
        idempotent: bool = True,
    ) -> Any:
        """
        Send a request, retrying transient failures.

        Non-idempotent calls (inserts, sign-in, token refresh) are retried
        only when the connection was never established.

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            BackendNotConfiguredError: If URL or key is missing
            TransportError: If the request ultimately fails
        """
        if not self.is_configured:
            raise BackendNotConfiguredError()

        attempt = 0
        while True:
            sent = True
            try:
                response = await self._client.request(
                    method,
                    f"{self._url}{path}",
                    params=params,
                    json=json,
                    headers=self._headers(prefer),
                    timeout=self._timeout,
                )
            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                error = TransportError(
                    f"Failed to connect to backend: {e}", transient=True
                )
                error.__cause__ = e
                sent = False
            except httpx.TimeoutException as e:
                error = TransportError(
                    "Request to backend timed out", transient=True
                )
                error.__cause__ = e
            except httpx.RequestError as e:
                error = TransportError(
                    f"Failed to connect to backend: {e}", transient=True
                )
                error.__cause__ = e
            else:
                if response.is_success:
                    return self._decode(response)
                error = self._error_from_response(response)

            retryable = error.transient and (idempotent or not sent)
            if not retryable or attempt >= self._max_retries:
                logger.error(
                    "Backend request failed",
                    method=method,
                    path=path,
                    status_code=error.status_code,
                    attempts=attempt + 1,
                    error=error.message,
                )
                raise error

            delay = self._backoff * 2**attempt
            logger.warning(
                "Retrying backend request",
                method=method,
                path=path,
                attempt=attempt + 1,
                delay_seconds=delay,
                error=error.message,
            )
            await self._sleep(delay)
            attempt += 1

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                "Backend returned an invalid response body",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _error_from_response(response: httpx.Response) -> TransportError:
        message = f"Backend request failed with status {response.status_code}"
        details: dict[str, Any] = {}
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            details = body
            for key in _ERROR_MESSAGE_KEYS:
                if isinstance(body.get(key), str) and body[key]:
                    message = body[key]
                    break

        return TransportError(
            message,
            status_code=response.status_code,
            transient=response.status_code in _TRANSIENT_STATUS_CODES,
            details=details,
        )


M = TypeVar("M", bound=BaseModel)


def _validate(model: type[M], data: Any, what: str) -> M:
    """Validate a backend record, mapping schema failures onto TransportError."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        logger.error("Backend returned invalid data", record=what, errors=e.error_count())
        raise TransportError(
            f"Backend returned an invalid {what}",
            details={"errors": e.errors(include_url=False, include_input=False)},
        ) from e


def _expect_rows(data: Any) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise TransportError("Backend returned an invalid report list")
    return data


def _expect_object(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TransportError("Backend returned an invalid response body")
    return data
