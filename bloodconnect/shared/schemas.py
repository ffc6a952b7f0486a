"""Schemas shared across domains"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ..utils.geo import lat_lng_to_coordinates
from .validators import validate_coordinates


class LocationIn(BaseModel):
    """Schema for a user's location, coordinates are GeoJSON [longitude, latitude]"""

    city: str
    state: str
    country: Optional[str] = None
    coordinates: Optional[list[float]] = None

    @field_validator("city", "state")
    @classmethod
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v):
        return validate_coordinates(v)


class LocationOut(BaseModel):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[list[float]] = None


def location_of(user) -> LocationOut:
    return LocationOut(
        city=user.city,
        state=user.state,
        country=user.country,
        coordinates=lat_lng_to_coordinates(user.latitude, user.longitude),
    )


class MessageResponse(BaseModel):
    message: str
