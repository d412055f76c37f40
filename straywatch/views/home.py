"""
Home view: the map of all reports, the stats bar and the header menu.
"""

from straywatch.config import get_logger, get_settings
from straywatch.schemas.reports import Report, ReportStats
from straywatch.services.backend import ReportBackend
from straywatch.services.exceptions import StrayWatchError
from straywatch.services.notifications import Notifier
from straywatch.services.query import Query
from straywatch.services.reports import ReportService, aggregate_by_category
from straywatch.stores.auth import AuthStore
from straywatch.stores.ui import UIStore
from straywatch.views.auth_dialog import AuthDialog
from straywatch.views.map_view import MapView, Marker
from straywatch.views.report_form import ReportForm

logger = get_logger(__name__, view="home")

CONFIGURATION_WARNING = (
    "Backend not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY "
    "environment variables to enable all features."
)


class HomeView:
    """Composes the map, the report form and the auth dialog."""

    def __init__(
        self,
        ui: UIStore,
        auth: AuthStore,
        reports: ReportService,
        backend: ReportBackend,
        notifier: Notifier,
    ) -> None:
        settings = get_settings()
        self._ui = ui
        self._auth = auth
        self._backend = backend
        self._notifier = notifier

        self.query: Query[list[Report]] = Query(
            "reports",
            reports.list_all_reports,
            default=[],
            stale_seconds=settings.reports_stale_seconds,
            retry=settings.reports_query_retries,
        )
        self.map_view = MapView(ui)
        self.report_form = ReportForm(
            ui, auth, reports, notifier, on_success=self.query.refetch
        )
        self.auth_dialog = AuthDialog(ui, auth, backend, notifier)
        self.menu_open = False

    @property
    def configuration_warning(self) -> str | None:
        return None if self._backend.is_configured else CONFIGURATION_WARNING

    @property
    def reports(self) -> list[Report]:
        return self.query.data

    @property
    def stats(self) -> ReportStats:
        return aggregate_by_category(self.query.data)

    @property
    def markers(self) -> list[Marker]:
        return self.map_view.markers(self.query.data)

    async def mount(self) -> None:
        """Resolve the identity and load reports."""
        await self._auth.initialize()
        await self.query.get()

    async def refresh(self) -> list[Report]:
        """Reload reports if the cached set has gone stale."""
        return await self.query.get()

    def add_report(self) -> None:
        """Open the report form, or ask for sign-in first."""
        if not self._auth.is_authenticated:
            self._ui.open_auth_modal()
            self._notifier.info("Please sign in to submit a report")
            return
        self.report_form.open()

    def toggle_menu(self) -> None:
        self.menu_open = not self.menu_open

    async def sign_out(self) -> bool:
        try:
            await self._backend.sign_out()
        except StrayWatchError as e:
            logger.warning("Sign out failed", error=e.message)
            self._notifier.error("Failed to sign out")
            return False

        self._auth.set_user(None)
        self._notifier.success("Signed out successfully")
        self.menu_open = False
        return True
