"""
Pydantic schemas for StrayWatch records.
"""

from straywatch.schemas.auth import AuthChange, AuthEvent, Identity, Session
from straywatch.schemas.base import Location, StrayWatchModel
from straywatch.schemas.reports import (
    Report,
    ReportCreate,
    ReportStats,
    ReportType,
    ReportUpdate,
    Severity,
)

__all__ = [
    # Base
    "StrayWatchModel",
    "Location",
    # Reports
    "Report",
    "ReportCreate",
    "ReportUpdate",
    "ReportStats",
    "ReportType",
    "Severity",
    # Auth
    "Identity",
    "Session",
    "AuthEvent",
    "AuthChange",
]
