"""
UI state: modal visibility and the shared selected location.

No I/O happens here; every transition is synchronous.
"""

from dataclasses import dataclass

from straywatch.schemas.base import Location
from straywatch.stores.base import Store


@dataclass(frozen=True)
class UIState:
    """Snapshot of which dialogs are open and which point is selected."""

    is_auth_modal_open: bool = False
    is_report_form_open: bool = False
    selected_location: Location | None = None


class UIStore(Store[UIState]):
    """
    Coordinates the auth dialog, the report form and location picking.

    The two modal flags are independent; opening one does not close
    the other.
    """

    def __init__(self) -> None:
        super().__init__(UIState())

    @property
    def selected_location(self) -> Location | None:
        return self.state.selected_location

    def open_auth_modal(self) -> None:
        self.set(is_auth_modal_open=True)

    def close_auth_modal(self) -> None:
        self.set(is_auth_modal_open=False)

    def open_report_form(self, location: Location | None = None) -> None:
        """
        Show the report form.

        A location passed here replaces the selection; without one, any
        point picked beforehand is kept.
        """
        if location is not None:
            self.set(is_report_form_open=True, selected_location=location)
        else:
            self.set(is_report_form_open=True)

    def close_report_form(self) -> None:
        """Hide the report form and always clear the selection."""
        self.set(is_report_form_open=False, selected_location=None)

    def set_selected_location(self, location: Location | None) -> None:
        self.set(selected_location=location)


_ui_store: UIStore | None = None


def get_ui_store() -> UIStore:
    """Get or create the UIStore singleton."""
    global _ui_store

    if _ui_store is None:
        _ui_store = UIStore()

    return _ui_store
