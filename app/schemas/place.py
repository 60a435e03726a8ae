"""Normalized Google Places models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class PlaceGeometry(BaseModel):
    """Place coordinates."""

    latitude: float = Field(..., description="Latitude")
    longitude: float = Field(..., description="Longitude")


class PlaceReview(BaseModel):
    author: str | None = None
    rating: float | None = None
    text: str = ""


class Place(BaseModel):
    """Place summary returned by a text search."""

    place_id: str = Field(..., description="Google Places ID")
    name: str = Field(..., description="Place name")
    address: str | None = Field(default=None, description="Formatted address")
    geometry: PlaceGeometry = Field(..., description="Coordinates")
    url: str | None = Field(default=None, description="Google Maps URL")
    types: list[str] = Field(default_factory=list, description="Google place types")


class PlaceDetails(Place):
    """Full attributes for one place."""

    rating: float | None = None
    user_ratings_total: int | None = None
    photo_references: list[str] = Field(default_factory=list)
    opening_hours: dict[str, str] = Field(default_factory=dict)
    phone: str | None = None
    website: str | None = None
    editorial_summary: str | None = None
    reviews: list[PlaceReview] = Field(default_factory=list)

    def to_place_data(self) -> dict[str, object]:
        """Return the ``placeData`` document stored on a location."""
        return {
            "rating": self.rating,
            "userRatingsTotal": self.user_ratings_total,
            "photoReferences": list(self.photo_references),
            "hours": dict(self.opening_hours),
            "phone": self.phone or "",
            "website": self.website or "",
            "address": self.address or "",
            "last_fetched": datetime.now(timezone.utc).isoformat(),
        }
