"""
Pytest configuration and shared fixtures for unit tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio

from straywatch.schemas.auth import AuthChange, AuthEvent, Identity, Session
from straywatch.schemas.reports import Report, ReportCreate, ReportType
from straywatch.services.backend import ReportBackend
from straywatch.services.exceptions import BackendNotConfiguredError, TransportError
from straywatch.services.notifications import Notifier
from straywatch.services.reports import ReportService
from straywatch.stores.auth import AuthStore
from straywatch.stores.ui import UIStore

BASE_TIME = datetime(2025, 1, 5, 15, 7, tzinfo=UTC)


class FakeBackend(ReportBackend):
    """
    In-memory backend with the same contract as SupabaseBackend.

    Attributes:
        get_user_calls: How many times get_user() was called
        fail_with: When set, every call raises this error
    """

    def __init__(self, *, configured: bool = True) -> None:
        super().__init__()
        self.configured = configured
        self.rows: dict[str, Report] = {}
        self.accounts: dict[str, tuple[str, Identity]] = {}
        self.current: Identity | None = None
        self.get_user_calls = 0
        self.insert_calls = 0
        self.fail_with: Exception | None = None
        self.closed = False
        self._next_id = 1

    @property
    def is_configured(self) -> bool:
        return self.configured

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        if not self.configured:
            raise BackendNotConfiguredError()

    def seed(self, report_type: ReportType, count: int = 1, **fields: Any) -> Report:
        """Insert a row directly, bypassing auth."""
        report_id = f"r{self._next_id}"
        report = Report(
            id=report_id,
            type=report_type,
            lat=fields.pop("lat", 34.15),
            lng=fields.pop("lng", 77.57),
            count=count,
            created_at=BASE_TIME + timedelta(minutes=self._next_id),
            **fields,
        )
        self._next_id += 1
        self.rows[report_id] = report
        return report

    def register(self, email: str, password: str, user_id: str = "user-1") -> Identity:
        identity = Identity(id=user_id, email=email)
        self.accounts[email] = (password, identity)
        return identity

    def login_as(self, identity: Identity) -> None:
        self.current = identity
        self._emit(AuthChange(AuthEvent.signed_in, _session_for(identity)))

    async def select_reports(self, owner_id: str | None = None) -> list[Report]:
        self._check()
        rows = [
            r for r in self.rows.values() if owner_id is None or r.user_id == owner_id
        ]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    async def insert_report(self, data: ReportCreate, owner_id: str) -> Report:
        self._check()
        self.insert_calls += 1
        return self.seed(
            data.type,
            data.count,
            lat=data.lat,
            lng=data.lng,
            severity=data.severity,
            notes=data.notes,
            user_id=owner_id,
        )

    async def update_report(self, report_id: str, changes: dict[str, Any]) -> Report | None:
        self._check()
        existing = self.rows.get(report_id)
        if existing is None:
            return None
        updated = Report.model_validate({**existing.model_dump(), **changes})
        self.rows[report_id] = updated
        return updated

    async def delete_report(self, report_id: str) -> bool:
        self._check()
        return self.rows.pop(report_id, None) is not None

    async def sign_up(self, email: str, password: str) -> Identity | None:
        self._check()
        if email in self.accounts:
            raise TransportError("User already registered", status_code=422)
        return self.register(email, password, user_id=f"user-{len(self.accounts) + 1}")

    async def sign_in(self, email: str, password: str) -> Session:
        self._check()
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise TransportError("Invalid login credentials", status_code=400)
        self.login_as(account[1])
        return _session_for(account[1])

    async def sign_out(self) -> None:
        self._check()
        self.current = None
        self._emit(AuthChange(AuthEvent.signed_out, None))

    async def get_user(self) -> Identity | None:
        self.get_user_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return self.current

    async def refresh_session(self) -> Session | None:
        return _session_for(self.current) if self.current else None

    async def close(self) -> None:
        self.closed = True


def _session_for(identity: Identity) -> Session:
    return Session(access_token="token", refresh_token="refresh", user=identity)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def unconfigured_backend() -> FakeBackend:
    return FakeBackend(configured=False)


@pytest.fixture
def identity(backend: FakeBackend) -> Identity:
    """A registered account (not signed in)."""
    return backend.register("walker@example.com", "secret123")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier(clock: FakeClock) -> Notifier:
    return Notifier(duration=5.0, clock=clock)


@pytest.fixture
def ui() -> UIStore:
    return UIStore()


@pytest.fixture
def auth(backend: FakeBackend) -> AuthStore:
    return AuthStore(backend)


@pytest.fixture
def service(backend: FakeBackend) -> ReportService:
    return ReportService(backend)


@pytest_asyncio.fixture
async def signed_in(backend: FakeBackend, auth: AuthStore, identity: Identity) -> Identity:
    """Sign the identity in and initialize the auth store."""
    backend.login_as(identity)
    await auth.initialize()
    return identity
