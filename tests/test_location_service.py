"""Location admin service tests."""

from __future__ import annotations

import asyncio

import pytest

from app.core.config import get_settings
from app.core.errors import NotFound, ValidationError
from app.schemas.enums import ActivityType
from app.schemas.location import AgeRange, Coordinates, LocationCreate, LocationUpdate, PlaceData
from app.services.local_cache import PersistentLocalCache
from app.services.location_cache import LocationCacheCoordinator
from app.services.location_service import LocationService, arrange_featured_slots, drop_empty_dicts
from tests.mocks.fake_clock import FakeClock
from tests.mocks.in_memory_store import InMemoryDocumentStore
from tests.mocks.mock_places_service import MockGooglePlacesService


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("ADMIN_API_SECRET", "test-admin-secret")
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()


class _FixedDescriber:
    async def generate(self, details) -> str:
        return f"{details.name} has a ball pit."


def _service(tmp_path, store=None) -> tuple[LocationService, InMemoryDocumentStore]:
    store = store or InMemoryDocumentStore(
        {
            "locations": {
                "p1": {"name": "Athens Playroom", "types": ["indoor-play"], "primaryType": "indoor-play"},
                "p2": {"name": "City Sports Club", "types": ["sports"], "primaryType": "sports"},
            }
        }
    )
    coordinator = LocationCacheCoordinator(store, PersistentLocalCache(tmp_path, "1.0"), clock=FakeClock())
    service = LocationService(store, coordinator, MockGooglePlacesService(), _FixedDescriber())
    return service, store


def _create_payload(**overrides) -> LocationCreate:
    fields = {
        "id": "p3",
        "name": "Little Picassos",
        "coordinates": Coordinates(lat=37.98, lng=23.73),
        "types": [ActivityType.ARTS],
        "place_data": PlaceData(rating=4.5),
    }
    fields.update(overrides)
    return LocationCreate(**fields)


def test_add_location_uses_place_id_and_fills_place_data(tmp_path) -> None:
    service, store = _service(tmp_path)

    location_id = asyncio.run(service.add_location(_create_payload()))

    stored = store.collections["locations"]["p3"]
    assert location_id == "p3"
    assert stored["primaryType"] == "arts"
    assert stored["placeData"]["phone"] == ""
    assert stored["placeData"]["website"] == ""
    assert stored["placeData"]["address"] == ""
    assert stored["created_at"] == stored["updated_at"]


def test_add_location_rejects_blank_place_id(tmp_path) -> None:
    service, store = _service(tmp_path)

    with pytest.raises(ValidationError):
        asyncio.run(service.add_location(_create_payload(id="  ")))

    assert store.calls["set_document"] == 0


def test_primary_type_must_be_one_of_types() -> None:
    with pytest.raises(ValueError):
        _create_payload(primary_type=ActivityType.MUSIC)


def test_mutation_invalidates_cached_list(tmp_path) -> None:
    service, store = _service(tmp_path)

    async def _run():
        before = await service.list_locations()
        await service.add_location(_create_payload())
        after = await service.list_locations()
        return before, after

    before, after = asyncio.run(_run())

    assert len(before) == 2
    assert len(after) == 3
    assert store.calls["get_all_documents"] == 2


def test_update_location_merges_only_set_fields(tmp_path) -> None:
    service, store = _service(tmp_path)

    update = LocationUpdate.model_validate({"description": "Soft play for toddlers", "contact": {}})
    asyncio.run(service.update_location("p1", update))

    stored = store.collections["locations"]["p1"]
    assert stored["description"] == "Soft play for toddlers"
    assert stored["name"] == "Athens Playroom"
    assert "contact" not in stored
    assert "updated_at" in stored


def test_update_location_explicit_null_clears_field(tmp_path) -> None:
    service, store = _service(tmp_path)
    store.collections["locations"]["p1"]["featuredPosition"] = 4

    asyncio.run(service.update_location("p1", LocationUpdate.model_validate({"featuredPosition": None})))

    assert store.collections["locations"]["p1"]["featuredPosition"] is None


def test_update_missing_location_raises_not_found(tmp_path) -> None:
    service, _ = _service(tmp_path)

    with pytest.raises(NotFound):
        asyncio.run(service.update_location("nope", LocationUpdate(name="x")))


def test_get_location_normalizes_document(tmp_path) -> None:
    service, store = _service(tmp_path)
    store.collections["locations"]["p1"]["ageRange"] = {"min": 9, "max": 2}

    location = asyncio.run(service.get_location("p1"))

    assert (location.age_range.min, location.age_range.max) == (2, 9)


def test_delete_location(tmp_path) -> None:
    service, store = _service(tmp_path)

    asyncio.run(service.delete_location("p2"))

    assert "p2" not in store.collections["locations"]
    with pytest.raises(NotFound):
        asyncio.run(service.delete_location("p2"))


def test_update_stored_photo_urls_keeps_other_place_data(tmp_path) -> None:
    service, store = _service(tmp_path)
    store.collections["locations"]["p1"]["placeData"] = {"rating": 4.2, "photoUrls": ["https://old"]}

    asyncio.run(service.update_stored_photo_urls("p1", ["https://storage/a.jpg"]))

    stored = store.collections["locations"]["p1"]
    assert stored["placeData"] == {
        "rating": 4.2,
        "photoUrls": ["https://old"],
        "storedPhotoUrls": ["https://storage/a.jpg"],
    }
    assert "placeData_updated_at" in stored


def test_create_location_from_place(monkeypatch, tmp_path) -> None:
    _set_required_env(monkeypatch)
    service, store = _service(tmp_path)

    location_id = asyncio.run(
        service.create_location_from_place(
            "ChIJ-playroom",
            [ActivityType.INDOOR_PLAY, ActivityType.ENTERTAINMENT],
            age_range=AgeRange(min=1, max=8),
        )
    )

    stored = store.collections["locations"][location_id]
    assert location_id == "ChIJ-playroom"
    assert stored["description"] == "Athens Playroom has a ball pit."
    assert stored["primaryType"] == "indoor-play"
    assert stored["ageRange"] == {"min": 1, "max": 8}
    assert stored["coordinates"] == {"lat": 38.0451, "lng": 23.8069}
    assert stored["placeData"]["rating"] == 4.6
    assert stored["placeData"]["website"] == ""


def test_create_location_from_unknown_place(tmp_path) -> None:
    service, _ = _service(tmp_path)

    with pytest.raises(NotFound):
        asyncio.run(service.create_location_from_place("missing", [ActivityType.ARTS]))


def test_drop_empty_dicts_keeps_lists_and_none() -> None:
    assert drop_empty_dicts({"a": {}, "b": {"c": {}}, "d": [], "e": None, "f": {"g": 1}}) == {
        "d": [],
        "e": None,
        "f": {"g": 1},
    }


def _featured_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(
        {
            "locations": {
                "a": {"name": "A", "types": ["arts"], "featured": True, "featuredPosition": 2},
                "b": {"name": "B", "types": ["arts"], "featured": True},
                "c": {"name": "C", "types": ["arts"], "featured": True},
                "d": {"name": "D", "types": ["arts"], "featured": False, "featuredPosition": 0},
                "e": {"name": "E", "types": ["arts"]},
            }
        }
    )


def test_featured_slots_place_positioned_then_backfill(tmp_path) -> None:
    service, _ = _service(tmp_path, _featured_store())

    slots = asyncio.run(service.get_featured_slots())

    assert [slot.id if slot else None for slot in slots] == ["b", "c", "a", None, None, None, None, None, None]


def test_assign_featured_slot_replaces_previous_occupant(tmp_path) -> None:
    service, store = _service(tmp_path, _featured_store())

    slots = asyncio.run(service.assign_featured_slot(2, "e"))

    assert store.collections["locations"]["a"]["featured"] is False
    assert store.collections["locations"]["a"]["featuredPosition"] is None
    assert store.collections["locations"]["e"]["featured"] is True
    assert store.collections["locations"]["e"]["featuredPosition"] == 2
    assert slots[2].id == "e"


def test_assign_featured_slot_can_clear(tmp_path) -> None:
    service, store = _service(tmp_path, _featured_store())

    slots = asyncio.run(service.assign_featured_slot(2, None))

    assert store.collections["locations"]["a"]["featured"] is False
    assert slots[2] is None


def test_assign_featured_slot_rejects_bad_slot(tmp_path) -> None:
    service, _ = _service(tmp_path, _featured_store())

    with pytest.raises(ValidationError):
        asyncio.run(service.assign_featured_slot(9, "e"))


def test_arrange_featured_slots_ignores_out_of_range_positions(tmp_path) -> None:
    service, store = _service(tmp_path, _featured_store())
    store.collections["locations"]["a"]["featuredPosition"] = 12

    locations = asyncio.run(service.list_locations())
    slots = arrange_featured_slots(locations)

    assert "a" not in [slot.id for slot in slots if slot]


def test_featured_slots_backfill_location_sharing_a_position(tmp_path) -> None:
    service, store = _service(tmp_path, _featured_store())
    store.collections["locations"]["e"].update(featured=True, featuredPosition=2)

    slots = asyncio.run(service.get_featured_slots())

    assert [slot.id if slot else None for slot in slots] == ["b", "c", "a", "e", None, None, None, None, None]


def test_update_types_only_resets_primary_type_when_no_longer_listed(tmp_path) -> None:
    service, store = _service(tmp_path)

    asyncio.run(service.update_location("p2", LocationUpdate(types=[ActivityType.ARTS])))

    location = asyncio.run(service.get_location("p2"))
    assert location.types == [ActivityType.ARTS]
    assert location.primary_type == ActivityType.ARTS
    assert store.collections["locations"]["p2"]["primaryType"] == "arts"


def test_update_types_only_keeps_primary_type_still_listed(tmp_path) -> None:
    service, store = _service(tmp_path)

    update = LocationUpdate(types=[ActivityType.MUSIC, ActivityType.SPORTS])
    asyncio.run(service.update_location("p2", update))

    assert store.collections["locations"]["p2"]["primaryType"] == "sports"


def test_update_primary_type_only_must_be_one_of_stored_types(tmp_path) -> None:
    service, store = _service(tmp_path)

    with pytest.raises(ValidationError):
        asyncio.run(service.update_location("p2", LocationUpdate(primary_type=ActivityType.ARTS)))

    assert store.collections["locations"]["p2"]["primaryType"] == "sports"
    assert "updated_at" not in store.collections["locations"]["p2"]
