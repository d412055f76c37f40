"""
Display constants for the map and report lists.

Category and severity lookups are checked for completeness at import
time, so adding an enum member without a colour or label fails loudly.
"""

from datetime import datetime

from straywatch.schemas.base import Location
from straywatch.schemas.reports import ReportType, Severity

# Leh, Ladakh
DEFAULT_CENTER = Location(lat=34.1526, lng=77.5771)
DEFAULT_ZOOM = 13
SELECTED_ZOOM = 16

SELECTION_COLOR = "#3B82F6"
SELECTION_RADIUS = 12

MARKER_MIN_RADIUS = 8
MARKER_RADIUS_PER_COUNT = 2
MARKER_MAX_RADIUS = 25

REPORT_COLORS: dict[ReportType, str] = {
    ReportType.sighting: "#F59E0B",
    ReportType.bite: "#EF4444",
    ReportType.garbage: "#10B981",
}

REPORT_LABELS: dict[ReportType, str] = {
    ReportType.sighting: "Stray Dog Sighting",
    ReportType.bite: "Bite Incident",
    ReportType.garbage: "Garbage Hotspot",
}

SEVERITY_LABELS: dict[Severity, str] = {
    Severity.low: "Low",
    Severity.medium: "Medium",
    Severity.high: "High",
    Severity.critical: "Critical",
}

# (value, label) pairs in display order
SEVERITY_OPTIONS: list[tuple[str, str]] = [
    (severity.value, SEVERITY_LABELS[severity]) for severity in Severity
]
REPORT_TYPE_OPTIONS: list[tuple[str, str]] = [
    (report_type.value, REPORT_LABELS[report_type]) for report_type in ReportType
]


def _check_exhaustive(name: str, table: dict, enum_cls: type) -> None:
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise RuntimeError(f"{name} is missing entries for: {', '.join(missing)}")


_check_exhaustive("REPORT_COLORS", REPORT_COLORS, ReportType)
_check_exhaustive("REPORT_LABELS", REPORT_LABELS, ReportType)
_check_exhaustive("SEVERITY_LABELS", SEVERITY_LABELS, Severity)


def marker_radius(count: int) -> int:
    """Marker radius grows linearly with the count and is capped."""
    return min(MARKER_MIN_RADIUS + MARKER_RADIUS_PER_COUNT * count, MARKER_MAX_RADIUS)


def format_date(value: str | datetime) -> str:
    """
    Format a timestamp for display, e.g. ``Jan 5, 2025, 03:07 PM``.

    Accepts a datetime or an ISO 8601 string (a trailing ``Z`` is allowed).
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return f"{value:%b} {value.day}, {value.year}, {value:%I:%M %p}"
