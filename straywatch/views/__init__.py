"""Headless view controllers."""

from straywatch.views.auth_dialog import AuthDialog
from straywatch.views.home import HomeView
from straywatch.views.map_view import MapView, Marker
from straywatch.views.profile import ProfileView
from straywatch.views.report_form import ReportForm

__all__ = [
    "AuthDialog",
    "HomeView",
    "MapView",
    "Marker",
    "ProfileView",
    "ReportForm",
]
