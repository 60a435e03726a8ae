"""Places client mapping and details cache tests."""

from __future__ import annotations

import asyncio

import pytest

from app.services.google_places_service import GooglePlacesError, GooglePlacesService
from app.services.local_cache import PersistentLocalCache
from app.services.places_service import CachedPlacesService
from tests.mocks.fake_clock import FakeClock
from tests.mocks.mock_places_service import MockGooglePlacesService

_RAW_DETAILS = {
    "id": "ChIJ-playroom",
    "displayName": {"text": "Athens Playroom"},
    "formattedAddress": "Kifisias 10, Marousi",
    "location": {"latitude": 38.0451, "longitude": 23.8069},
    "types": ["amusement_center"],
    "rating": 4.6,
    "userRatingCount": 812,
    "photos": [{"name": "places/ChIJ-playroom/photos/AAA"}, {}],
    "regularOpeningHours": {
        "weekdayDescriptions": ["Monday: 9:00 AM - 8:00 PM", "Tuesday: Closed"],
    },
    "nationalPhoneNumber": "210 000 0000",
    "editorialSummary": {"text": "Soft play centre."},
    "reviews": [
        {"authorAttribution": {"displayName": "Maria"}, "rating": 5, "text": {"text": "Loved it."}},
    ],
}


def test_google_places_requires_api_key() -> None:
    with pytest.raises(GooglePlacesError):
        GooglePlacesService(api_key="")


def test_details_mapping(monkeypatch) -> None:
    service = GooglePlacesService(api_key="test-key")
    requests_seen: list[dict] = []

    async def _fake_request(**kwargs):
        requests_seen.append(kwargs)
        return _RAW_DETAILS

    monkeypatch.setattr(service, "_request", _fake_request)

    details = asyncio.run(service.details("ChIJ-playroom"))

    assert requests_seen[0]["url"].endswith("/places/ChIJ-playroom")
    assert details is not None
    assert details.name == "Athens Playroom"
    assert details.user_ratings_total == 812
    assert details.photo_references == ["places/ChIJ-playroom/photos/AAA"]
    assert details.opening_hours == {"Monday": "9:00 AM - 8:00 PM", "Tuesday": "Closed"}
    assert details.website is None
    assert details.reviews[0].author == "Maria"

    place_data = details.to_place_data()
    assert place_data["website"] == ""
    assert place_data["phone"] == "210 000 0000"
    assert place_data["userRatingsTotal"] == 812


def test_search_skips_incomplete_places(monkeypatch) -> None:
    service = GooglePlacesService(api_key="test-key")

    async def _fake_request(**kwargs):
        return {"places": [_RAW_DETAILS, {"id": "no-location", "displayName": {"text": "Nowhere"}}]}

    monkeypatch.setattr(service, "_request", _fake_request)

    places = asyncio.run(service.search("playroom"))

    assert [place.place_id for place in places] == ["ChIJ-playroom"]


def test_failed_request_yields_no_details(monkeypatch) -> None:
    service = GooglePlacesService(api_key="test-key")

    async def _fake_request(**kwargs):
        return None

    monkeypatch.setattr(service, "_request", _fake_request)

    assert asyncio.run(service.details("ChIJ-playroom")) is None
    assert asyncio.run(service.search("   ")) == []


def test_details_are_cached_until_ttl(tmp_path) -> None:
    delegate = MockGooglePlacesService()
    clock = FakeClock()
    cached = CachedPlacesService(delegate, PersistentLocalCache(tmp_path, "1.0"), ttl_seconds=60, clock=clock)

    first = asyncio.run(cached.details("ChIJ-playroom"))
    second = asyncio.run(cached.details("ChIJ-playroom"))
    clock.advance(61)
    asyncio.run(cached.details("ChIJ-playroom"))

    assert first == second
    assert delegate.details_calls == ["ChIJ-playroom", "ChIJ-playroom"]
    assert PersistentLocalCache(tmp_path, "1.0").keys("pamekids_place_") == ["pamekids_place_ChIJ-playroom"]


def test_unknown_place_is_not_cached(tmp_path) -> None:
    delegate = MockGooglePlacesService()
    cached = CachedPlacesService(delegate, PersistentLocalCache(tmp_path, "1.0"), clock=FakeClock())

    assert asyncio.run(cached.details("missing")) is None
    assert asyncio.run(cached.details("missing")) is None
    assert delegate.details_calls == ["missing", "missing"]
