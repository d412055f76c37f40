"""
Report data access layer.

Translates UI intents into backend calls and computes derived statistics.
Ownership and row-level access are left to the backend.
"""

from collections.abc import Iterable

from straywatch.config import get_logger
from straywatch.schemas.reports import (
    Report,
    ReportCreate,
    ReportStats,
    ReportType,
    ReportUpdate,
)
from straywatch.services.backend import ReportBackend, get_backend
from straywatch.services.exceptions import (
    AuthRequiredError,
    NotFoundError,
    ValidationError,
)

logger = get_logger(__name__)


def aggregate_by_category(reports: Iterable[Report]) -> ReportStats:
    """
    Sum report counts per category.

    Categories with no reports yield 0.
    """
    totals = {report_type: 0 for report_type in ReportType}
    for report in reports:
        totals[report.type] += report.count
    return ReportStats(**{t.value: n for t, n in totals.items()})


class ReportService:
    """
    CRUD and query operations over reports.

    Example:
        >>> service = ReportService(get_backend())
        >>> reports = await service.list_all_reports()
        >>> stats = aggregate_by_category(reports)
    """

    def __init__(self, backend: ReportBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> ReportBackend:
        return self._backend

    async def list_all_reports(self) -> list[Report]:
        """
        Fetch every report, newest first.

        Returns an empty list when the backend is not configured.

        Raises:
            TransportError: If the backend query fails
        """
        if not self._backend.is_configured:
            return []
        return await self._backend.select_reports()

    async def list_reports_by_owner(self, owner_id: str) -> list[Report]:
        """
        Fetch the reports created by one identity, newest first.

        Returns an empty list when the backend is not configured.
        """
        if not self._backend.is_configured:
            return []
        return await self._backend.select_reports(owner_id=owner_id)

    async def create_report(self, data: ReportCreate) -> Report:
        """
        Persist a new report owned by the current identity.

        Raises:
            AuthRequiredError: If no identity is signed in
            TransportError: If the backend insert fails
        """
        user = await self._backend.get_user()
        if user is None:
            logger.info("Rejected report creation without identity")
            raise AuthRequiredError()

        return await self._backend.insert_report(data, owner_id=user.id)

    async def update_report(self, report_id: str, update: ReportUpdate) -> Report:
        """
        Apply a partial update.

        Fields set on ``update`` replace the stored values; unset fields
        are left untouched.

        Raises:
            ValidationError: If the update carries no fields
            NotFoundError: If no report has this id
            TransportError: If the backend update fails
        """
        try:
            changes = update.to_changes()
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not changes:
            raise ValidationError("No fields to update")

        report = await self._backend.update_report(report_id, changes)
        if report is None:
            raise NotFoundError(f"Report {report_id} not found", report_id=report_id)
        return report

    async def delete_report(self, report_id: str) -> None:
        """
        Irreversibly delete a report.

        Raises:
            NotFoundError: If no report has this id
            TransportError: If the backend delete fails
        """
        deleted = await self._backend.delete_report(report_id)
        if not deleted:
            raise NotFoundError(f"Report {report_id} not found", report_id=report_id)


_report_service: ReportService | None = None


def get_report_service() -> ReportService:
    """
    Get or create the ReportService singleton bound to the shared backend.
    """
    global _report_service

    if _report_service is None:
        _report_service = ReportService(get_backend())

    return _report_service
