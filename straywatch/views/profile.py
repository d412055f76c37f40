"""
Profile view: the signed-in user's own reports with edit and delete.
"""

from collections.abc import Callable

from straywatch.config import get_logger, get_settings
from straywatch.config.constants import REPORT_COLORS, REPORT_LABELS, format_date
from straywatch.schemas.reports import Report
from straywatch.services.backend import ReportBackend
from straywatch.services.exceptions import StrayWatchError
from straywatch.services.notifications import Notifier
from straywatch.services.query import Query
from straywatch.services.reports import ReportService
from straywatch.stores.auth import AuthStore
from straywatch.stores.ui import UIStore
from straywatch.views.auth_dialog import AuthDialog
from straywatch.views.report_form import ReportForm

logger = get_logger(__name__, view="profile")


def report_card(report: Report) -> dict[str, str | None]:
    """Display fields for one report in the list."""
    return {
        "label": REPORT_LABELS[report.type],
        "color": REPORT_COLORS[report.type],
        "severity": report.severity.value if report.severity else None,
        "count": f"Count: {report.count}",
        "notes": report.notes,
        "date": format_date(report.created_at),
    }


class ProfileView:
    """Lists, edits and deletes the current identity's reports."""

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
        self._reports = reports
        self._notifier = notifier

        self.query: Query[list[Report]] = Query(
            "user_reports",
            self._fetch_own_reports,
            default=[],
            stale_seconds=settings.reports_stale_seconds,
            retry=settings.reports_query_retries,
            enabled=lambda: self._auth.is_authenticated,
        )
        self.report_form = ReportForm(
            ui, auth, reports, notifier, on_success=self._on_form_success
        )
        self.auth_dialog = AuthDialog(ui, auth, backend, notifier)
        self.editing_report: Report | None = None
        self.delete_confirm_id: str | None = None
        self.deleting = False

        self._unsubscribe_auth: Callable[[], None] | None = auth.subscribe(
            self._on_auth_change
        )

    async def _fetch_own_reports(self) -> list[Report]:
        user = self._auth.user
        if user is None:
            return []
        return await self._reports.list_reports_by_owner(user.id)

    def _on_auth_change(self, new, old) -> None:
        # Cached rows belong to the previous identity
        if new.user != old.user:
            self.query.invalidate()

    def close(self) -> None:
        """Stop following identity changes."""
        if self._unsubscribe_auth is not None:
            self._unsubscribe_auth()
            self._unsubscribe_auth = None

    @property
    def reports(self) -> list[Report]:
        return self.query.data

    @property
    def summary(self) -> str:
        n = len(self.query.data)
        return f"{n} report{'' if n == 1 else 's'} submitted"

    @property
    def cards(self) -> list[dict[str, str | None]]:
        return [report_card(report) for report in self.query.data]

    async def mount(self) -> None:
        await self._auth.initialize()
        await self.query.get()

    def edit(self, report: Report) -> None:
        self.editing_report = report
        self.report_form.open(report)

    async def _on_form_success(self) -> None:
        self.editing_report = None
        await self.query.refetch()

    def request_delete(self, report_id: str) -> None:
        self.delete_confirm_id = report_id

    def cancel_delete(self) -> None:
        self.delete_confirm_id = None

    async def confirm_delete(self) -> bool:
        """Delete the report awaiting confirmation; failures become toasts."""
        report_id = self.delete_confirm_id
        if report_id is None:
            return False

        self.deleting = True
        try:
            await self._reports.delete_report(report_id)
        except StrayWatchError as e:
            logger.warning("Delete failed", report_id=report_id, error=e.message)
            self._notifier.error("Failed to delete report", e)
            return False
        finally:
            self.deleting = False

        self._notifier.success("Report deleted successfully")
        self.delete_confirm_id = None
        await self.query.refetch()
        return True
