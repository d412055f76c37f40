"""
Pydantic schemas for incident reports.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from straywatch.schemas.base import Latitude, Location, Longitude, StrayWatchModel


class ReportType(str, Enum):
    """Report categories."""

    sighting = "sighting"
    bite = "bite"
    garbage = "garbage"


class Severity(str, Enum):
    """Optional severity levels."""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class ReportCreate(StrayWatchModel):
    """Schema for creating a new report. Owner is attached from the session."""

    type: ReportType
    lat: Latitude
    lng: Longitude
    count: int = Field(default=1, ge=1)
    severity: Severity | None = None
    notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire representation; unset optional fields are omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class ReportUpdate(StrayWatchModel):
    """
    Schema for a partial update.

    Only fields that were explicitly set are sent, so passing
    ``severity=None`` clears the severity while omitting it leaves it alone.
    """

    type: ReportType | None = None
    lat: Latitude | None = None
    lng: Longitude | None = None
    count: int | None = Field(default=None, ge=1)
    severity: Severity | None = None
    notes: str | None = None

    def to_changes(self) -> dict[str, Any]:
        """Fields present in the update, ready for the wire."""
        changes = self.model_dump(mode="json", exclude_unset=True)
        for required in ("type", "lat", "lng", "count"):
            if required in changes and changes[required] is None:
                raise ValueError(f"{required} cannot be cleared")
        return changes


class Report(StrayWatchModel):
    """A persisted report as returned by the backend."""

    id: str
    type: ReportType
    lat: Latitude
    lng: Longitude
    count: int = Field(default=1, ge=1)
    severity: Severity | None = None
    notes: str | None = None
    user_id: str | None = None
    created_at: datetime

    @property
    def location(self) -> Location:
        return Location(lat=self.lat, lng=self.lng)


class ReportStats(StrayWatchModel):
    """Summed counts per category."""

    sighting: int = 0
    bite: int = 0
    garbage: int = 0

    @property
    def total(self) -> int:
        return self.sighting + self.bite + self.garbage
