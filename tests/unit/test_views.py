"""
Unit tests for the home and profile page controllers and app wiring.
"""

import httpx
import pytest

from straywatch.app import StrayWatchApp, create_app
from straywatch.schemas.auth import Identity
from straywatch.schemas.base import Location
from straywatch.schemas.reports import ReportStats, ReportType, Severity
from straywatch.services.backend import SupabaseBackend, clear_backend_cache, get_backend
from straywatch.services.exceptions import TransportError
from straywatch.services.notifications import Notifier, ToastType, get_notifier
from straywatch.services.reports import ReportService
from straywatch.stores.auth import AuthStore
from straywatch.stores.ui import UIStore, get_ui_store
from straywatch.views.home import CONFIGURATION_WARNING, HomeView
from straywatch.views.profile import ProfileView, report_card

from .conftest import FakeBackend


@pytest.fixture
def home(
    ui: UIStore,
    auth: AuthStore,
    service: ReportService,
    backend: FakeBackend,
    notifier: Notifier,
) -> HomeView:
    return HomeView(ui, auth, service, backend, notifier)


@pytest.fixture
def profile(
    ui: UIStore,
    auth: AuthStore,
    service: ReportService,
    backend: FakeBackend,
    notifier: Notifier,
) -> ProfileView:
    return ProfileView(ui, auth, service, backend, notifier)


# =============================================================================
# Tests for HomeView
# =============================================================================


class TestHomeView:
    """Tests for the home page controller."""

    @pytest.mark.asyncio
    async def test_mount_loads_reports_and_stats(
        self, home: HomeView, backend: FakeBackend
    ) -> None:
        backend.seed(ReportType.sighting, 2)
        backend.seed(ReportType.bite, 1)
        backend.seed(ReportType.sighting, 4)

        await home.mount()

        assert len(home.reports) == 3
        assert home.stats == ReportStats(sighting=6, bite=1, garbage=0)
        assert len(home.markers) == 3
        assert home.configuration_warning is None

    @pytest.mark.asyncio
    async def test_unconfigured_backend(
        self,
        ui: UIStore,
        notifier: Notifier,
        unconfigured_backend: FakeBackend,
    ) -> None:
        """Without configuration the page still renders, empty, with a warning."""
        auth = AuthStore(unconfigured_backend)
        home = HomeView(
            ui, auth, ReportService(unconfigured_backend), unconfigured_backend, notifier
        )

        await home.mount()

        assert home.reports == []
        assert home.stats.total == 0
        assert home.configuration_warning == CONFIGURATION_WARNING
        assert home.query.error is None

    @pytest.mark.asyncio
    async def test_load_failure_is_recorded(
        self, home: HomeView, auth: AuthStore, backend: FakeBackend
    ) -> None:
        await auth.initialize()
        backend.fail_with = TransportError("connection refused")

        await home.refresh()

        assert home.reports == []
        assert isinstance(home.query.error, TransportError)

    @pytest.mark.asyncio
    async def test_malformed_rows_are_recorded(
        self, ui: UIStore, notifier: Notifier
    ) -> None:
        """A row the schema rejects leaves the page empty instead of raising."""
        rows = [
            {
                "id": report_id,
                "type": "sighting",
                "lat": 34.16,
                "lng": 77.58,
                "count": count,
                "user_id": "user-1",
                "created_at": "2025-01-05T15:07:00+00:00",
            }
            for report_id, count in (("r1", 2), ("legacy", 0))
        ]
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=rows))
        )
        backend = SupabaseBackend(
            "https://demo.supabase.co", "anon-key", http_client=http_client
        )
        home = HomeView(ui, AuthStore(backend), ReportService(backend), backend, notifier)

        await home.mount()

        assert home.reports == []
        assert home.stats.total == 0
        assert isinstance(home.query.error, TransportError)
        assert "invalid report" in home.query.error.message
        await http_client.aclose()

    def test_add_report_signed_out_prompts_sign_in(
        self, home: HomeView, ui: UIStore, notifier: Notifier
    ) -> None:
        home.add_report()

        assert ui.state.is_auth_modal_open
        assert not ui.state.is_report_form_open
        toast = notifier.toasts[-1]
        assert toast.type == ToastType.info
        assert toast.title == "Please sign in to submit a report"

    @pytest.mark.asyncio
    async def test_add_report_signed_in_opens_form(
        self, home: HomeView, ui: UIStore, signed_in: Identity
    ) -> None:
        home.add_report()

        assert ui.state.is_report_form_open
        assert not ui.state.is_auth_modal_open
        assert not home.report_form.is_editing

    @pytest.mark.asyncio
    async def test_submit_refreshes_reports(
        self, home: HomeView, ui: UIStore, signed_in: Identity
    ) -> None:
        await home.mount()
        assert home.reports == []

        home.add_report()
        ui.set_selected_location(Location(lat=34.16, lng=77.58))
        home.report_form.count = "3"
        await home.report_form.submit()

        assert len(home.reports) == 1
        assert home.stats.sighting == 3

    @pytest.mark.asyncio
    async def test_sign_out(
        self,
        home: HomeView,
        auth: AuthStore,
        notifier: Notifier,
        signed_in: Identity,
    ) -> None:
        home.toggle_menu()

        assert await home.sign_out() is True

        assert auth.user is None
        assert home.menu_open is False
        assert notifier.toasts[-1].title == "Signed out successfully"

    @pytest.mark.asyncio
    async def test_sign_out_failure(
        self,
        home: HomeView,
        auth: AuthStore,
        backend: FakeBackend,
        notifier: Notifier,
        signed_in: Identity,
    ) -> None:
        backend.fail_with = TransportError("offline")

        assert await home.sign_out() is False

        assert auth.user == signed_in
        assert notifier.toasts[-1].title == "Failed to sign out"


# =============================================================================
# Tests for ProfileView
# =============================================================================


class TestProfileView:
    """Tests for the profile page controller."""

    @pytest.mark.asyncio
    async def test_signed_out_shows_nothing(
        self, profile: ProfileView, backend: FakeBackend
    ) -> None:
        backend.seed(ReportType.sighting, user_id="user-1")

        await profile.mount()

        assert profile.reports == []
        assert profile.summary == "0 reports submitted"

    @pytest.mark.asyncio
    async def test_lists_only_own_reports(
        self, profile: ProfileView, backend: FakeBackend, signed_in: Identity
    ) -> None:
        backend.seed(ReportType.sighting, user_id=signed_in.id)
        backend.seed(ReportType.bite, user_id="someone-else")

        await profile.mount()

        assert profile.summary == "1 report submitted"
        assert profile.cards[0]["label"] == "Stray Dog Sighting"
        assert profile.cards[0]["count"] == "Count: 1"

    @pytest.mark.asyncio
    async def test_identity_change_invalidates_cache(
        self,
        profile: ProfileView,
        backend: FakeBackend,
        signed_in: Identity,
    ) -> None:
        backend.seed(ReportType.sighting, user_id=signed_in.id)
        await profile.mount()
        assert len(profile.reports) == 1

        await backend.sign_out()

        assert profile.query.is_stale
        assert await profile.query.get() == []

    @pytest.mark.asyncio
    async def test_close_stops_following_identity(
        self,
        profile: ProfileView,
        backend: FakeBackend,
        signed_in: Identity,
    ) -> None:
        await profile.mount()
        profile.close()
        profile.close()

        await backend.sign_out()

        assert not profile.query.is_stale

    @pytest.mark.asyncio
    async def test_edit_form_is_not_the_home_form(
        self,
        home: HomeView,
        profile: ProfileView,
        ui: UIStore,
        backend: FakeBackend,
        signed_in: Identity,
    ) -> None:
        """Each page's form only reports open when it opened the shared flag."""
        report = backend.seed(ReportType.garbage, user_id=signed_in.id)

        profile.edit(report)

        assert ui.state.is_report_form_open
        assert profile.report_form.is_open
        assert not home.report_form.is_open

        profile.report_form.close()
        assert not profile.report_form.is_open
        assert not ui.state.is_report_form_open

    @pytest.mark.asyncio
    async def test_edit_and_save(
        self,
        profile: ProfileView,
        ui: UIStore,
        backend: FakeBackend,
        signed_in: Identity,
    ) -> None:
        report = backend.seed(
            ReportType.garbage, 2, severity=Severity.low, user_id=signed_in.id
        )
        await profile.mount()

        profile.edit(report)
        assert profile.editing_report == report
        assert ui.selected_location == report.location

        profile.report_form.count = "5"
        await profile.report_form.submit()

        assert profile.editing_report is None
        assert profile.reports[0].count == 5
        assert ui.selected_location is None

    @pytest.mark.asyncio
    async def test_delete_flow(
        self,
        profile: ProfileView,
        backend: FakeBackend,
        notifier: Notifier,
        signed_in: Identity,
    ) -> None:
        report = backend.seed(ReportType.bite, user_id=signed_in.id)
        await profile.mount()

        profile.request_delete(report.id)
        assert await profile.confirm_delete() is True

        assert report.id not in backend.rows
        assert profile.reports == []
        assert profile.delete_confirm_id is None
        assert notifier.toasts[-1].title == "Report deleted successfully"

    @pytest.mark.asyncio
    async def test_cancel_delete(self, profile: ProfileView, backend: FakeBackend) -> None:
        report = backend.seed(ReportType.bite)
        profile.request_delete(report.id)
        profile.cancel_delete()

        assert await profile.confirm_delete() is False
        assert report.id in backend.rows

    @pytest.mark.asyncio
    async def test_delete_missing_report(
        self,
        profile: ProfileView,
        notifier: Notifier,
        signed_in: Identity,
    ) -> None:
        profile.request_delete("gone")

        assert await profile.confirm_delete() is False

        toast = notifier.toasts[-1]
        assert toast.title == "Failed to delete report"
        assert toast.description == "Report gone not found"
        assert profile.delete_confirm_id == "gone"

    def test_report_card_formats_fields(self, backend: FakeBackend) -> None:
        card = report_card(backend.seed(ReportType.garbage, 3, notes="overflowing bin"))

        assert card["label"] == "Garbage Hotspot"
        assert card["severity"] is None
        assert card["notes"] == "overflowing bin"
        assert card["date"] == "Jan 5, 2025, 03:08 PM"


# =============================================================================
# Tests for app wiring
# =============================================================================


class TestApp:
    """Tests for the composition root."""

    @pytest.mark.asyncio
    async def test_views_share_state(self, backend: FakeBackend, identity: Identity) -> None:
        app = create_app(backend)
        assert isinstance(app, StrayWatchApp)

        await app.home.mount()
        await app.home.auth_dialog.sign_in(identity.email, "secret123")

        assert app.auth.user == identity
        assert app.profile.query.is_enabled
        app.ui.set_selected_location(Location(lat=34.2, lng=77.6))
        assert app.profile.report_form.selected_location == Location(lat=34.2, lng=77.6)
        await app.profile.mount()

        await app.shutdown()
        assert backend.closed

        # The profile page no longer follows identity changes
        app.auth.set(user=None)
        assert not app.profile.query.is_stale

    @pytest.mark.asyncio
    async def test_default_app_uses_shared_singletons(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without a backend argument the process-wide instances are wired in."""
        for target in (
            "straywatch.services.backend.factory._backend",
            "straywatch.services.reports._report_service",
            "straywatch.services.notifications._notifier",
            "straywatch.stores.auth._auth_store",
            "straywatch.stores.ui._ui_store",
        ):
            monkeypatch.setattr(target, None)

        app = create_app()

        assert app.shared
        assert app.backend is get_backend()
        assert app.ui is get_ui_store()
        assert app.notifier is get_notifier()

        # Unconfigured: the page mounts empty without touching the network
        await app.home.mount()
        assert app.home.reports == []
        assert app.home.configuration_warning == CONFIGURATION_WARNING

        await app.shutdown()
        assert get_backend() is not app.backend
        clear_backend_cache()
