"""
Map view: projects reports or the selected point onto markers.

The view holds no state of its own. Report markers and the selection
marker are never rendered together.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from straywatch.config.constants import (
    DEFAULT_CENTER,
    DEFAULT_ZOOM,
    REPORT_COLORS,
    REPORT_LABELS,
    SELECTED_ZOOM,
    SELECTION_COLOR,
    SELECTION_RADIUS,
    format_date,
    marker_radius,
)
from straywatch.schemas.base import Location
from straywatch.schemas.reports import Report
from straywatch.services.exceptions import InvalidLocationError
from straywatch.stores.ui import UIStore

LocationCallback = Callable[[Location], None]


@dataclass(frozen=True)
class Marker:
    """A circle marker with its popup lines."""

    lat: float
    lng: float
    radius: int
    color: str
    popup: tuple[str, ...]
    report_id: str | None = None


def report_popup(report: Report) -> tuple[str, ...]:
    lines = [REPORT_LABELS[report.type], f"Count: {report.count}"]
    if report.severity is not None:
        lines.append(f"Severity: {report.severity.value}")
    if report.notes:
        lines.append(f"Notes: {report.notes}")
    lines.append(format_date(report.created_at))
    return tuple(lines)


def report_marker(report: Report) -> Marker:
    return Marker(
        lat=report.lat,
        lng=report.lng,
        radius=marker_radius(report.count),
        color=REPORT_COLORS[report.type],
        popup=report_popup(report),
        report_id=report.id,
    )


def selection_marker(location: Location) -> Marker:
    return Marker(
        lat=location.lat,
        lng=location.lng,
        radius=SELECTION_RADIUS,
        color=SELECTION_COLOR,
        popup=("Selected Location", str(location)),
    )


class MapView:
    """
    Pure projection of UI state onto the map.

    In select mode a click reports the clicked point through
    ``on_location_select``; otherwise clicks are ignored.
    """

    def __init__(
        self,
        ui: UIStore,
        *,
        select_mode: bool = False,
        on_location_select: LocationCallback | None = None,
    ) -> None:
        self._ui = ui
        self.select_mode = select_mode
        self._on_location_select = on_location_select

    def markers(self, reports: Sequence[Report]) -> list[Marker]:
        """Markers to draw for the given report set."""
        if self.select_mode:
            selected = self._ui.selected_location
            return [selection_marker(selected)] if selected is not None else []
        return [report_marker(report) for report in reports]

    @property
    def center(self) -> Location:
        return self._ui.selected_location or DEFAULT_CENTER

    @property
    def zoom(self) -> int:
        return SELECTED_ZOOM if self._ui.selected_location is not None else DEFAULT_ZOOM

    def click(self, lat: float, lng: float) -> Location | None:
        """
        Handle a map click.

        Returns:
            The picked location in select mode, otherwise None

        Raises:
            InvalidLocationError: If the coordinates are out of range
        """
        if not self.select_mode or self._on_location_select is None:
            return None

        location = to_location(lat, lng)
        self._on_location_select(location)
        return location


def to_location(lat: float, lng: float) -> Location:
    """Build a Location, mapping range errors onto InvalidLocationError."""
    try:
        return Location(lat=lat, lng=lng)
    except ValueError as e:
        raise InvalidLocationError(
            f"Invalid coordinates: {lat}, {lng}", {"lat": lat, "lng": lng}
        ) from e
