"""
Coordinate Type Definitions

Pydantic model for a WGS84 point, shared by location queries, location
responses and search filters.
"""

from typing import Tuple

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """
    Geographic coordinates (latitude and longitude).
    """

    latitude: float = Field(..., ge=-90.0, le=90.0, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Longitude in decimal degrees")

    def as_tuple(self) -> Tuple[float, float]:
        return self.latitude, self.longitude

    def __str__(self) -> str:
        return f"({self.latitude}, {self.longitude})"
