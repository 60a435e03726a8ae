"""Google Places API (New) client."""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any

import requests

from app.core.config import get_settings
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy, to_requests_timeout
from app.schemas.place import Place, PlaceDetails, PlaceGeometry, PlaceReview
from app.services.places_service import PlacesServiceProtocol

logger = get_logger(__name__)

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class GooglePlacesError(RuntimeError):
    """Raised when the Google Places client is misconfigured."""


class GooglePlacesService(PlacesServiceProtocol):
    """Places provider backed by the Google Places API."""

    _BASE_URL = "https://places.googleapis.com/v1"
    _SEARCH_PATH = "/places:searchText"

    _SEARCH_FIELD_MASK = (
        "places.id,places.displayName,places.formattedAddress,places.location,places.types,places.googleMapsUri"
    )
    _DETAILS_FIELD_MASK = (
        "id,displayName,formattedAddress,location,types,googleMapsUri,rating,userRatingCount,photos,"
        "regularOpeningHours,nationalPhoneNumber,websiteUri,editorialSummary,reviews"
    )

    def __init__(
        self,
        api_key: str,
        timeout_seconds: int = 10,
        page_size: int = 10,
        language_code: str = "en",
    ) -> None:
        if not api_key:
            raise GooglePlacesError("GOOGLE_PLACES_API_KEY is not configured.")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._page_size = page_size
        self._language_code = language_code.strip() if language_code else ""

    @classmethod
    def from_settings(cls) -> GooglePlacesService:
        """Build the client from application settings."""
        settings = get_settings()
        timeout_seconds = get_timeout_policy(settings).google_places_timeout_seconds
        if not settings.GOOGLE_PLACES_API_KEY:
            logger.error("GOOGLE_PLACES_API_KEY is not configured.")
        return cls(
            api_key=settings.GOOGLE_PLACES_API_KEY or "",
            timeout_seconds=timeout_seconds,
            language_code=settings.GOOGLE_PLACES_LANGUAGE_CODE,
        )

    async def search(self, query: str) -> list[Place]:
        if not query.strip():
            return []

        payload: dict[str, Any] = {"textQuery": query, "pageSize": self._page_size}
        if self._language_code:
            payload["languageCode"] = self._language_code

        data = await self._request(
            method="POST",
            url=f"{self._BASE_URL}{self._SEARCH_PATH}",
            payload=payload,
            params=None,
            field_mask=self._SEARCH_FIELD_MASK,
        )

        places_raw = (data or {}).get("places", [])
        places = [place for place in (self._map_place(item) for item in places_raw) if place]
        logger.info("Google Places search completed: query=%s candidate_count=%d", query, len(places))
        return places

    async def details(self, place_id: str) -> PlaceDetails | None:
        if not place_id:
            return None

        resource = place_id if place_id.startswith("places/") else f"places/{place_id}"
        params = {"languageCode": self._language_code} if self._language_code else None

        data = await self._request(
            method="GET",
            url=f"{self._BASE_URL}/{resource}",
            payload=None,
            params=params,
            field_mask=self._DETAILS_FIELD_MASK,
        )
        if not data:
            return None
        return self._map_details(data)

    async def _request(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None,
        params: dict[str, Any] | None,
        field_mask: str,
    ) -> dict[str, Any] | None:
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self._api_key,
            "X-Goog-FieldMask": field_mask,
        }
        request_timeout = to_requests_timeout(self._timeout_seconds)

        def _send() -> requests.Response:
            with requests.Session() as session:
                return session.request(
                    method=method,
                    url=url,
                    json=payload,
                    params=params,
                    headers=headers,
                    timeout=request_timeout,
                )

        try:
            response = await asyncio.to_thread(_send)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as exc:
            response = exc.response
            status_code = response.status_code if response is not None else None
            if status_code == 404:
                logger.info("Google Places returned not-found: url=%s", url)
                return None
            body = (response.text or "")[:200] if response is not None else ""
            logger.error("Google Places API error: status=%s body=%s", status_code, body)
            return None
        except requests.RequestException as exc:
            logger.error("Google Places API request failed: %s", exc)
            return None
        except ValueError as exc:
            logger.error("Google Places API response parse failed: %s", exc)
            return None

    def _map_place(self, raw: dict[str, Any]) -> Place | None:
        fields = self._base_fields(raw)
        return Place(**fields) if fields else None

    def _map_details(self, raw: dict[str, Any]) -> PlaceDetails | None:
        fields = self._base_fields(raw)
        if not fields:
            return None

        photos = raw.get("photos") or []
        reviews = [
            PlaceReview(
                author=(review.get("authorAttribution") or {}).get("displayName"),
                rating=review.get("rating"),
                text=(review.get("text") or {}).get("text") or "",
            )
            for review in raw.get("reviews") or []
        ]
        return PlaceDetails(
            **fields,
            rating=raw.get("rating"),
            user_ratings_total=raw.get("userRatingCount"),
            photo_references=[photo["name"] for photo in photos if photo.get("name")],
            opening_hours=self._map_opening_hours(raw.get("regularOpeningHours") or {}),
            phone=raw.get("nationalPhoneNumber"),
            website=raw.get("websiteUri"),
            editorial_summary=(raw.get("editorialSummary") or {}).get("text"),
            reviews=reviews,
        )

    @staticmethod
    def _base_fields(raw: dict[str, Any]) -> dict[str, Any] | None:
        display_name = raw.get("displayName") or {}
        name = display_name.get("text")
        location = raw.get("location") or {}
        latitude = location.get("latitude")
        longitude = location.get("longitude")
        place_id = raw.get("id") or raw.get("placeId")

        if not (name and place_id and latitude is not None and longitude is not None):
            return None

        return {
            "place_id": place_id,
            "name": name,
            "address": raw.get("formattedAddress"),
            "geometry": PlaceGeometry(latitude=latitude, longitude=longitude),
            "url": raw.get("googleMapsUri"),
            "types": raw.get("types") or [],
        }

    @staticmethod
    def _map_opening_hours(raw: dict[str, Any]) -> dict[str, str]:
        # entries read "Monday: 9:00 AM - 8:00 PM"
        hours: dict[str, str] = {}
        for description in raw.get("weekdayDescriptions") or []:
            day, _, value = str(description).partition(":")
            if day.strip() in _WEEKDAYS:
                hours[day.strip()] = value.strip()
        return hours


@lru_cache(maxsize=1)
def get_google_places_service() -> GooglePlacesService:
    """Return the process-wide Places client."""
    return GooglePlacesService.from_settings()
