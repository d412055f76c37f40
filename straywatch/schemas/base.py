"""
Base Pydantic schemas and utilities.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

Latitude = Annotated[float, Field(ge=-90.0, le=90.0, allow_inf_nan=False)]
Longitude = Annotated[float, Field(ge=-180.0, le=180.0, allow_inf_nan=False)]


class StrayWatchModel(BaseModel):
    """Base model for records exchanged with the backend (snake_case on the wire)."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class Location(StrayWatchModel):
    """Geographic point for location data."""

    model_config = ConfigDict(frozen=True)

    lat: Latitude
    lng: Longitude

    def __str__(self) -> str:
        return f"{self.lat:.5f}, {self.lng:.5f}"
