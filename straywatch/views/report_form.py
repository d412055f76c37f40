"""
Report form controller for creating and editing reports.

One instance serves both modes; passing an existing report to open()
switches it to edit mode.
"""

import inspect
import re
from collections.abc import Awaitable, Callable

from straywatch.config import get_logger, get_settings
from straywatch.config.constants import REPORT_TYPE_OPTIONS, SEVERITY_OPTIONS
from straywatch.schemas.base import Location
from straywatch.schemas.reports import (
    Report,
    ReportCreate,
    ReportType,
    ReportUpdate,
    Severity,
)
from straywatch.services.exceptions import (
    AuthRequiredError,
    InvalidCountError,
    LocationRequiredError,
    StrayWatchError,
)
from straywatch.services.notifications import Notifier
from straywatch.services.reports import ReportService
from straywatch.stores.auth import AuthStore
from straywatch.stores.ui import UIStore
from straywatch.views.map_view import MapView, to_location

logger = get_logger(__name__, view="report_form")

# Async device geolocation lookup returning (lat, lng)
Locator = Callable[[], Awaitable[tuple[float, float]]]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_COUNT = "1"


def parse_count(raw: str | int, *, strict: bool = True) -> int:
    """
    Parse the count field.

    Strict mode accepts only whole numbers of at least 1. Lenient mode
    is the legacy behaviour: it reads a leading integer and falls back
    to 1 whenever that is missing or below 1, so it never raises.

    Raises:
        InvalidCountError: If the value is not acceptable
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        value: int | None = raw
    elif strict:
        text = str(raw).strip()
        value = int(text) if re.fullmatch(r"[+-]?\d+", text) else None
    else:
        match = _LEADING_INT.match(str(raw))
        value = int(match.group(1)) if match else None

    if value is None or value < 1:
        if not strict:
            return 1
        raise InvalidCountError(raw)
    return value


class ReportForm:
    """
    Create/edit workflow for a single report.

    Reads the shared selection from the UI store and the identity from
    the auth store; writes go through the ReportService.
    """

    type_options = REPORT_TYPE_OPTIONS
    severity_options = SEVERITY_OPTIONS

    def __init__(
        self,
        ui: UIStore,
        auth: AuthStore,
        reports: ReportService,
        notifier: Notifier,
        *,
        on_success: Callable[[], object] | None = None,
        strict_count: bool | None = None,
    ) -> None:
        self._ui = ui
        self._auth = auth
        self._reports = reports
        self._notifier = notifier
        self._on_success = on_success
        if strict_count is None:
            strict_count = get_settings().strict_count_validation
        self._strict_count = strict_count

        self.edit_report: Report | None = None
        self._active = False
        self.is_submitting = False
        self.getting_location = False
        self.show_map = False
        self.map_view = MapView(ui, select_mode=True, on_location_select=self._on_map_pick)
        self._reset_fields()

    # -- Field state ----------------------------------------------------------

    def _reset_fields(self) -> None:
        self.report_type = ReportType.sighting
        self.count = DEFAULT_COUNT
        self.severity: Severity | None = None
        self.notes = ""

    def set_severity(self, value: Severity | str | None) -> None:
        """Set severity from an option value; an empty value clears it."""
        self.severity = Severity(value) if value else None

    def set_report_type(self, value: ReportType | str) -> None:
        self.report_type = ReportType(value)

    @property
    def is_open(self) -> bool:
        """True while this form holds the shared report form flag."""
        return self._active and self._ui.state.is_report_form_open

    @property
    def is_editing(self) -> bool:
        return self.edit_report is not None

    @property
    def title(self) -> str:
        return "Edit Report" if self.is_editing else "Submit New Report"

    @property
    def submit_label(self) -> str:
        if self.is_submitting:
            return "Saving..."
        return "Update Report" if self.is_editing else "Submit Report"

    @property
    def selected_location(self) -> Location | None:
        return self._ui.selected_location

    @property
    def can_submit(self) -> bool:
        return not self.is_submitting and self.selected_location is not None

    # -- Lifecycle ------------------------------------------------------------

    def load(self, edit_report: Report | None = None) -> None:
        """
        Populate the fields for edit mode, or reset them for create mode.

        Create mode keeps any location already selected so a point can
        be picked before the form is opened.
        """
        self.edit_report = edit_report
        if edit_report is None:
            self._reset_fields()
            return

        self.report_type = edit_report.type
        self.count = str(edit_report.count)
        self.severity = edit_report.severity
        self.notes = edit_report.notes or ""
        self._ui.set_selected_location(edit_report.location)

    def open(self, edit_report: Report | None = None) -> None:
        self.load(edit_report)
        self._active = True
        self._ui.open_report_form()

    def close(self) -> None:
        """Hide the form, clear the shared selection and reset every field."""
        self._ui.close_report_form()
        self._active = False
        self.show_map = False
        self.edit_report = None
        self._reset_fields()

    # -- Location picking -----------------------------------------------------

    def toggle_map(self) -> None:
        self.show_map = not self.show_map

    def pick_on_map(self, lat: float, lng: float) -> None:
        try:
            self.map_view.click(lat, lng)
        except StrayWatchError as e:
            self._notifier.error("Invalid location", e)

    def _on_map_pick(self, location: Location) -> None:
        self._ui.set_selected_location(location)
        self._notifier.success("Location selected")

    async def use_device_location(self, locator: Locator | None) -> Location | None:
        """
        Select the device's current position.

        Args:
            locator: Async geolocation lookup, or None when unsupported
        """
        if locator is None:
            self._notifier.error("Geolocation not supported")
            return None

        self.getting_location = True
        try:
            lat, lng = await locator()
            location = to_location(lat, lng)
        except Exception as e:
            logger.warning("Device location failed", error=str(e))
            self._notifier.error("Could not get location", str(e))
            return None
        finally:
            self.getting_location = False

        self._ui.set_selected_location(location)
        self._notifier.success("Location detected")
        return location

    # -- Submission -----------------------------------------------------------

    def validate(self) -> ReportCreate:
        """
        Check the form in order, stopping at the first failure.

        Raises:
            AuthRequiredError: If nobody is signed in
            LocationRequiredError: If no location is selected
            InvalidCountError: If the count is not acceptable
        """
        if not self._auth.is_authenticated:
            raise AuthRequiredError("Please sign in to submit a report")

        location = self.selected_location
        if location is None:
            raise LocationRequiredError()

        count = parse_count(self.count, strict=self._strict_count)

        return ReportCreate(
            type=self.report_type,
            lat=location.lat,
            lng=location.lng,
            count=count,
            severity=self.severity,
            notes=self.notes.strip() or None,
        )

    async def submit(self) -> Report | None:
        """
        Validate and save the form.

        Failures become error notifications; nothing is raised.

        Returns:
            The saved report, or None if validation or the backend failed
        """
        if self.is_submitting:
            return None

        try:
            data = self.validate()
        except StrayWatchError as e:
            self._notifier.error(e.message)
            return None

        editing = self.edit_report
        self.is_submitting = True
        try:
            if editing is not None:
                # Full-field update; None clears severity and notes
                report = await self._reports.update_report(
                    editing.id, ReportUpdate(**data.model_dump())
                )
                self._notifier.success("Report updated successfully")
            else:
                report = await self._reports.create_report(data)
                self._notifier.success("Report submitted successfully")
        except StrayWatchError as e:
            title = "Failed to update report" if editing else "Failed to submit report"
            logger.warning(title, error=e.message)
            self._notifier.error(title, e)
            return None
        finally:
            self.is_submitting = False

        logger.info(
            "Report saved",
            report_id=report.id,
            report_type=report.type.value,
            edited=editing is not None,
        )
        if self._on_success is not None:
            result = self._on_success()
            if inspect.isawaitable(result):
                await result
        self.close()
        return report
