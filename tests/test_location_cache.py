"""Two-tier locations cache tests."""

from __future__ import annotations

import asyncio

import pytest
from google.api_core import exceptions as google_exceptions

from app.core.errors import PermissionDenied, RemoteUnavailable
from app.schemas.enums import ActivityType
from app.schemas.location import Location
from app.services import location_cache
from app.services.local_cache import PersistentLocalCache
from app.services.location_cache import LOCATIONS_CACHE_KEY, LocationCacheCoordinator, normalize_location
from app.services.store import StoredDocument
from tests.mocks.fake_clock import FakeClock
from tests.mocks.in_memory_store import InMemoryDocumentStore

FRESH_TTL = 24 * 60 * 60
BACKGROUND_REFRESH = 60 * 60


def _store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(
        {
            "locations": {
                "place-1": {
                    "name": "Athens Playroom",
                    "types": ["indoor-play"],
                    "primaryType": "indoor-play",
                    "ageRange": {"min": 0, "max": 8},
                    "coordinates": {"lat": 38.04, "lng": 23.8},
                },
                "place-2": {
                    "name": "City Sports Club",
                    "types": ["sports"],
                    "primaryType": "sports",
                    "ageRange": {"min": 5, "max": 16},
                },
            }
        }
    )


def _coordinator(store, tmp_path, clock, version: str = "1.0") -> LocationCacheCoordinator:
    return LocationCacheCoordinator(
        store,
        PersistentLocalCache(tmp_path, version),
        fresh_ttl_seconds=FRESH_TTL,
        background_refresh_seconds=BACKGROUND_REFRESH,
        clock=clock,
    )


def test_concurrent_cold_reads_share_one_fetch(tmp_path) -> None:
    store = _store()
    coordinator = _coordinator(store, tmp_path, FakeClock())

    async def _run():
        store.gate = asyncio.Event()
        tasks = [asyncio.create_task(coordinator.get_all()) for _ in range(5)]
        await asyncio.sleep(0)
        assert coordinator.has_in_flight_fetch
        store.gate.set()
        return await asyncio.gather(*tasks)

    results = asyncio.run(_run())

    assert store.calls["get_all_documents"] == 1
    assert all(result is results[0] for result in results)
    assert [location.name for location in results[0]] == ["Athens Playroom", "City Sports Club"]
    assert not coordinator.has_in_flight_fetch


def test_memory_tier_served_just_inside_ttl(tmp_path) -> None:
    store = _store()
    clock = FakeClock()
    coordinator = _coordinator(store, tmp_path, clock)

    async def _run():
        await coordinator.get_all()
        clock.advance(FRESH_TTL - 0.001)
        return await coordinator.get_all()

    asyncio.run(_run())

    assert store.calls["get_all_documents"] == 1


def test_fetches_again_just_past_ttl(tmp_path) -> None:
    store = _store()
    clock = FakeClock()
    coordinator = _coordinator(store, tmp_path, clock)

    async def _run():
        await coordinator.get_all()
        clock.advance(FRESH_TTL + 0.001)
        return await coordinator.get_all()

    asyncio.run(_run())

    assert store.calls["get_all_documents"] == 2


def test_persistent_tier_from_other_version_is_ignored(tmp_path) -> None:
    store = _store()
    clock = FakeClock()

    asyncio.run(_coordinator(store, tmp_path, clock, version="1.0").get_all())
    assert PersistentLocalCache(tmp_path, "1.0").read(LOCATIONS_CACHE_KEY) is not None

    upgraded = _coordinator(store, tmp_path, clock, version="1.1")
    asyncio.run(upgraded.get_all())

    assert store.calls["get_all_documents"] == 2
    assert PersistentLocalCache(tmp_path, "1.1").read(LOCATIONS_CACHE_KEY) is not None


def test_persistent_tier_is_adopted_by_a_new_process(tmp_path) -> None:
    store = _store()
    clock = FakeClock()
    asyncio.run(_coordinator(store, tmp_path, clock).get_all())

    restarted = _coordinator(store, tmp_path, clock)
    locations = asyncio.run(restarted.get_all())

    assert store.calls["get_all_documents"] == 1
    assert [location.id for location in locations] == ["place-1", "place-2"]
    assert restarted.memory_timestamp == clock.now


def test_force_refresh_bypasses_fresh_memory(tmp_path) -> None:
    store = _store()
    coordinator = _coordinator(store, tmp_path, FakeClock())

    async def _run():
        await coordinator.get_all()
        store.collections["locations"]["place-1"]["name"] = "Athens Playroom Renamed"
        return await coordinator.get_all(force_refresh=True)

    locations = asyncio.run(_run())

    assert store.calls["get_all_documents"] == 2
    assert locations[0].name == "Athens Playroom Renamed"


def test_aging_persistent_tier_triggers_background_refresh(tmp_path) -> None:
    store = _store()
    clock = FakeClock()
    asyncio.run(_coordinator(store, tmp_path, clock).get_all())

    store.collections["locations"]["place-1"]["name"] = "Athens Playroom Renamed"
    clock.advance(BACKGROUND_REFRESH + 60)
    restarted = _coordinator(store, tmp_path, clock)

    async def _run():
        served = await restarted.get_all()
        await restarted.drain_background_refreshes()
        refreshed = await restarted.get_all()
        return served, refreshed

    served, refreshed = asyncio.run(_run())

    assert served[0].name == "Athens Playroom"
    assert refreshed[0].name == "Athens Playroom Renamed"
    assert store.calls["get_all_documents"] == 2


def test_background_refresh_failure_keeps_cached_data(tmp_path) -> None:
    store = _store()
    clock = FakeClock()
    asyncio.run(_coordinator(store, tmp_path, clock).get_all())

    store.fail_with = google_exceptions.ServiceUnavailable("offline")
    clock.advance(BACKGROUND_REFRESH + 60)
    restarted = _coordinator(store, tmp_path, clock)

    async def _run():
        served = await restarted.get_all()
        await restarted.drain_background_refreshes()
        return served, await restarted.get_all()

    served, after = asyncio.run(_run())

    assert served is after
    assert len(after) == 2


def test_fetch_failure_reaches_every_coalesced_caller(tmp_path) -> None:
    store = _store()
    store.fail_with = google_exceptions.ServiceUnavailable("offline")
    coordinator = _coordinator(store, tmp_path, FakeClock())

    async def _run():
        tasks = [asyncio.create_task(coordinator.get_all()) for _ in range(3)]
        return await asyncio.gather(*tasks, return_exceptions=True)

    results = asyncio.run(_run())

    assert store.calls["get_all_documents"] == 1
    assert all(isinstance(result, RemoteUnavailable) for result in results)
    assert not coordinator.has_in_flight_fetch


def test_next_call_retries_after_failure(tmp_path) -> None:
    store = _store()
    store.fail_with = google_exceptions.PermissionDenied("rules")
    coordinator = _coordinator(store, tmp_path, FakeClock())

    with pytest.raises(PermissionDenied):
        asyncio.run(coordinator.get_all())

    store.fail_with = None
    locations = asyncio.run(coordinator.get_all())

    assert len(locations) == 2
    assert store.calls["get_all_documents"] == 2


def test_invalidate_during_fetch_does_not_cache_result(tmp_path) -> None:
    store = _store()
    coordinator = _coordinator(store, tmp_path, FakeClock())

    async def _run():
        store.gate = asyncio.Event()
        pending = asyncio.create_task(coordinator.get_all())
        await asyncio.sleep(0)
        coordinator.invalidate()
        store.gate.set()
        result = await pending
        store.gate = None
        return result

    locations = asyncio.run(_run())

    assert len(locations) == 2
    assert coordinator.memory_timestamp is None
    assert PersistentLocalCache(tmp_path, "1.0").read(LOCATIONS_CACHE_KEY) is None

    asyncio.run(coordinator.get_all())
    assert store.calls["get_all_documents"] == 2


def test_normalize_location_fills_defaults() -> None:
    location = normalize_location(
        StoredDocument(
            id="place-9",
            data={
                "name": "Mystery Spot",
                "types": ["sports", "bowling-alley", "sports"],
                "primaryType": "bowling-alley",
                "ageRange": {"min": 12, "max": 30},
                "placeData": {"rating": "not-a-number"},
            },
        )
    )

    assert location.types == [ActivityType.SPORTS]
    assert location.primary_type == ActivityType.ENTERTAINMENT
    assert (location.age_range.min, location.age_range.max) == (12, 18)
    assert (location.coordinates.lat, location.coordinates.lng) == (0, 0)
    assert location.place_data is None
    assert location.pro_tips == ""
    assert location.opening_hours == {}


def test_normalize_location_swaps_inverted_age_range() -> None:
    location = normalize_location(StoredDocument(id="place-10", data={"ageRange": {"min": 10, "max": 3}}))

    assert (location.age_range.min, location.age_range.max) == (3, 10)


def test_normalize_location_defaults_missing_age_range() -> None:
    location = normalize_location(StoredDocument(id="place-11", data={"name": "No Ages"}))

    assert (location.age_range.min, location.age_range.max) == (0, 16)


def test_malformed_record_does_not_blank_the_catalogue(tmp_path) -> None:
    store = _store()
    store.collections["locations"]["place-3"] = {
        "name": 123,
        "coordinates": {"lat": None, "lng": "23.7"},
        "types": ["arts", {"bad": "type"}],
        "primaryType": ["arts"],
        "contact": "call us",
        "featuredPosition": "first",
    }
    coordinator = _coordinator(store, tmp_path, FakeClock())

    locations = asyncio.run(coordinator.get_all())

    assert [location.id for location in locations] == ["place-1", "place-2", "place-3"]
    odd = locations[2]
    assert odd.name == "123"
    assert (odd.coordinates.lat, odd.coordinates.lng) == (0.0, 23.7)
    assert odd.types == [ActivityType.ARTS]
    assert odd.primary_type == ActivityType.ENTERTAINMENT
    assert odd.featured_position is None


def test_record_failing_validation_is_skipped(tmp_path, monkeypatch) -> None:
    store = _store()
    coordinator = _coordinator(store, tmp_path, FakeClock())
    original = location_cache.normalize_location

    def _normalize(document):
        if document.id == "place-1":
            Location.model_validate({"id": document.id, "coordinates": {"lat": "north"}})
        return original(document)

    monkeypatch.setattr(location_cache, "normalize_location", _normalize)

    locations = asyncio.run(coordinator.get_all())

    assert [location.id for location in locations] == ["place-2"]
