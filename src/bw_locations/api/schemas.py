from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from bw_locations.cascade import LocationSelection


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class SelectionPayload(BaseModel):
    """Wire form of the cascade's consolidated selection."""

    state: str = ""
    city: str = ""
    ward: str = ""

    @classmethod
    def from_selection(cls, selection: LocationSelection) -> "SelectionPayload":
        return cls(**selection.to_dict())


class LocationSource(StrEnum):
    USER_PIN = "user_pin"
    GEOCODE = "geocode"


class PinnedLocation(BaseModel):
    """Map-pin location the listing form accepts next to ``SelectionPayload``.

    Coordinates come as a pair or not at all.
    """

    area_text: str = Field(min_length=1)
    place_name: Optional[str] = None
    place_id: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    location_source: LocationSource

    @model_validator(mode="after")
    def _coordinates_paired(self) -> "PinnedLocation":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None
