"""Location models shared by the cache, the search engine and the admin API.

Field aliases follow the camelCase keys stored in the ``locations``
collection, so ``model_dump(by_alias=True)`` yields a document ready to be
written back.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.enums import ActivityType

AGE_MIN = 0
AGE_MAX = 18


class Coordinates(BaseModel):
    """Map position."""

    lat: float = Field(default=0.0, description="Latitude")
    lng: float = Field(default=0.0, description="Longitude")


class AgeRange(BaseModel):
    """Inclusive age range a location caters for."""

    min: int = Field(default=0, ge=AGE_MIN, le=AGE_MAX)
    max: int = Field(default=16, ge=AGE_MIN, le=AGE_MAX)

    @model_validator(mode="after")
    def _validate_order(self) -> AgeRange:
        if self.min > self.max:
            raise ValueError("ageRange.min must be less than or equal to ageRange.max.")
        return self

    def covers(self, age: int) -> bool:
        return self.min <= age <= self.max


class Contact(BaseModel):
    """Contact details entered by an admin."""

    phone: str | None = None
    email: str | None = None
    website: str | None = None


class PlaceData(BaseModel):
    """Attributes sourced from the places provider, opaque to cache and search."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    rating: float | None = None
    user_ratings_total: int | None = Field(default=None, alias="userRatingsTotal")
    photo_urls: list[str] | None = Field(default=None, alias="photoUrls")
    stored_photo_urls: list[str] | None = Field(default=None, alias="storedPhotoUrls")
    photo_references: list[str] | None = Field(default=None, alias="photoReferences")
    last_fetched: str | None = None
    hours: dict[str, str] | None = None
    phone: str | None = None
    website: str | None = None
    address: str | None = None


class Location(BaseModel):
    """A child-friendly activity location as served to callers."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Google Place ID, also the document id")
    name: str = ""
    coordinates: Coordinates = Field(default_factory=Coordinates)
    types: list[ActivityType] = Field(default_factory=list)
    primary_type: ActivityType = Field(default=ActivityType.ENTERTAINMENT, alias="primaryType")
    description: str = ""
    address: str = ""
    age_range: AgeRange = Field(default_factory=AgeRange, alias="ageRange")
    price_range: str | None = Field(default=None, alias="priceRange")
    opening_hours: dict[str, str] = Field(default_factory=dict, alias="openingHours")
    contact: Contact = Field(default_factory=Contact)
    place_data: PlaceData | None = Field(default=None, alias="placeData")
    images: list[str] | None = None
    featured: bool | None = None
    featured_position: int | None = Field(default=None, alias="featuredPosition")
    pro_tips: str = Field(default="", alias="proTips")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LocationCreate(BaseModel):
    """Admin payload for adding a location."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Google Place ID")
    name: str = Field(..., min_length=1)
    coordinates: Coordinates
    types: list[ActivityType] = Field(..., min_length=1)
    primary_type: ActivityType | None = Field(default=None, alias="primaryType")
    description: str = ""
    address: str = ""
    age_range: AgeRange = Field(default_factory=AgeRange, alias="ageRange")
    price_range: str | None = Field(default=None, alias="priceRange")
    opening_hours: dict[str, str] = Field(default_factory=dict, alias="openingHours")
    contact: Contact = Field(default_factory=Contact)
    place_data: PlaceData | None = Field(default=None, alias="placeData")
    images: list[str] | None = None
    featured: bool | None = None
    pro_tips: str = Field(default="", alias="proTips")

    @field_validator("types")
    @classmethod
    def _dedupe_types(cls, value: list[ActivityType]) -> list[ActivityType]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _resolve_primary_type(self) -> LocationCreate:
        if self.primary_type is None:
            self.primary_type = self.types[0]
        elif self.primary_type not in self.types:
            raise ValueError("primaryType must be one of types.")
        return self


class LocationUpdate(BaseModel):
    """Admin payload for a partial location update; unset fields are preserved."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    coordinates: Coordinates | None = None
    types: list[ActivityType] | None = Field(default=None, min_length=1)
    primary_type: ActivityType | None = Field(default=None, alias="primaryType")
    description: str | None = None
    address: str | None = None
    age_range: AgeRange | None = Field(default=None, alias="ageRange")
    price_range: str | None = Field(default=None, alias="priceRange")
    opening_hours: dict[str, str] | None = Field(default=None, alias="openingHours")
    contact: Contact | None = None
    place_data: PlaceData | None = Field(default=None, alias="placeData")
    images: list[str] | None = None
    featured: bool | None = None
    featured_position: int | None = Field(default=None, alias="featuredPosition")
    pro_tips: str | None = Field(default=None, alias="proTips")

    @model_validator(mode="after")
    def _validate_primary_type(self) -> LocationUpdate:
        if self.primary_type is not None and self.types is not None and self.primary_type not in self.types:
            raise ValueError("primaryType must be one of types.")
        return self

    def to_document(self) -> dict[str, Any]:
        """Return only the fields the caller actually set, keyed by store name."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class CreateFromPlaceRequest(BaseModel):
    """Admin payload for creating a location straight from a place id."""

    model_config = ConfigDict(populate_by_name=True)

    place_id: str = Field(..., alias="placeId")
    types: list[ActivityType] = Field(..., min_length=1)
    primary_type: ActivityType | None = Field(default=None, alias="primaryType")
    age_range: AgeRange = Field(default_factory=AgeRange, alias="ageRange")


class FeaturedSlotRequest(BaseModel):
    """Assign (or clear, with ``locationId=None``) one featured slot."""

    model_config = ConfigDict(populate_by_name=True)

    location_id: str | None = Field(default=None, alias="locationId")


class StoredPhotoUrlsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stored_photo_urls: list[str] = Field(..., min_length=1, alias="storedPhotoUrls")
