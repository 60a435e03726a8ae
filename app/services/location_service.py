"""Location reads, admin mutations and featured-slot curation."""

from __future__ import annotations

from typing import Any

from app.core.errors import NotFound, ValidationError
from app.core.logger import get_logger
from app.schemas.enums import ActivityType
from app.schemas.location import (
    AgeRange,
    Coordinates,
    Contact,
    Location,
    LocationCreate,
    LocationUpdate,
    PlaceData,
)
from app.services.description_service import DescriptionGenerator
from app.services.location_cache import LocationCacheCoordinator, normalize_location
from app.services.places_service import PlacesServiceProtocol
from app.services.store import Collections, DocumentStore

logger = get_logger(__name__)

FEATURED_SLOT_COUNT = 9
_PLACE_DATA_TEXT_FIELDS = ("phone", "website", "address")


def drop_empty_dicts(value: Any) -> Any:
    """Recursively remove nested dicts that end up empty; lists and None are kept."""
    if not isinstance(value, dict):
        return value
    cleaned: dict[str, Any] = {}
    for key, item in value.items():
        item = drop_empty_dicts(item)
        if isinstance(item, dict) and not item:
            continue
        cleaned[key] = item
    return cleaned


def reconcile_primary_type(current: Location, changes: dict[str, Any]) -> dict[str, Any]:
    """Return ``changes`` with a ``primaryType`` that is one of the resulting ``types``.

    A new ``types`` list without a ``primaryType`` keeps the stored primary
    type when it is still listed, and falls back to the first type otherwise.
    An explicit ``primaryType`` outside the resulting types is rejected.
    """
    if "types" in changes:
        types = changes["types"]
        if not types:
            raise ValidationError("types must contain at least one activity type.")
    else:
        types = [activity_type.value for activity_type in current.types]

    requested = changes.get("primaryType")
    if requested is not None:
        if requested not in types:
            raise ValidationError("primaryType must be one of types.")
        primary_type = requested
    elif current.primary_type.value in types and "primaryType" not in changes:
        primary_type = current.primary_type.value
    elif types:
        primary_type = types[0]
    else:
        raise ValidationError("Location has no activity types to choose a primaryType from.")

    return {**changes, "primaryType": primary_type}


def arrange_featured_slots(locations: list[Location]) -> list[Location | None]:
    """Lay featured locations out over the fixed slots.

    Locations with a valid ``featuredPosition`` take their slot first; the
    remaining featured locations fill free slots in list order. When two
    locations claim the same position the first keeps it and the other is
    back-filled like an unpositioned one.
    """
    slots: list[Location | None] = [None] * FEATURED_SLOT_COUNT
    featured = [location for location in locations if location.featured]

    unpositioned: list[Location] = []
    for location in featured:
        position = location.featured_position
        if position is None:
            unpositioned.append(location)
        elif 0 <= position < FEATURED_SLOT_COUNT:
            occupant = slots[position]
            if occupant is None:
                slots[position] = location
            else:
                logger.warning(
                    "Featured position %d claimed by %s and %s; back-filling %s",
                    position,
                    occupant.id,
                    location.id,
                    location.id,
                )
                unpositioned.append(location)

    next_slot = 0
    for location in unpositioned:
        while next_slot < FEATURED_SLOT_COUNT and slots[next_slot] is not None:
            next_slot += 1
        if next_slot >= FEATURED_SLOT_COUNT:
            break
        slots[next_slot] = location
        next_slot += 1
    return slots


class LocationService:
    """Admin and public operations on the ``locations`` collection.

    Reads of the full collection go through the cache coordinator; every
    successful mutation invalidates it.
    """

    def __init__(
        self,
        store: DocumentStore,
        coordinator: LocationCacheCoordinator,
        places: PlacesServiceProtocol | None = None,
        describer: DescriptionGenerator | None = None,
    ) -> None:
        self._store = store
        self._coordinator = coordinator
        self._places = places
        self._describer = describer or DescriptionGenerator()

    async def list_locations(self, force_refresh: bool = False) -> list[Location]:
        return await self._coordinator.get_all(force_refresh=force_refresh)

    async def get_location(self, location_id: str) -> Location:
        document = await self._store.get_document(Collections.LOCATIONS, location_id)
        if document is None:
            raise NotFound(f"Location not found: {location_id}")
        return normalize_location(document)

    async def add_location(self, payload: LocationCreate) -> str:
        """Create a location keyed by its Google Place ID and return that id."""
        location_id = payload.id.strip()
        if not location_id:
            raise ValidationError("Location must have a Google Place ID.")

        document = payload.model_dump(mode="json", by_alias=True, exclude={"id"}, exclude_none=True)
        place_data = document.get("placeData")
        if isinstance(place_data, dict):
            for field_name in _PLACE_DATA_TEXT_FIELDS:
                if place_data.get(field_name) is None:
                    place_data[field_name] = ""

        timestamp = self._store.server_timestamp()
        document["created_at"] = timestamp
        document["updated_at"] = timestamp

        await self._store.set_document(Collections.LOCATIONS, location_id, document)
        self._coordinator.invalidate()
        logger.info("Location added: id=%s name=%s", location_id, payload.name)
        return location_id

    async def update_location(self, location_id: str, payload: LocationUpdate) -> str:
        changes = payload.to_document()
        if "types" in changes or "primaryType" in changes:
            document = await self._store.get_document(Collections.LOCATIONS, location_id)
            if document is None:
                raise NotFound(f"Location not found: {location_id}")
            changes = reconcile_primary_type(normalize_location(document), changes)
        await self._merge(location_id, changes)
        return location_id

    async def delete_location(self, location_id: str) -> str:
        if await self._store.get_document(Collections.LOCATIONS, location_id) is None:
            raise NotFound(f"Location not found: {location_id}")
        await self._store.delete_document(Collections.LOCATIONS, location_id)
        self._coordinator.invalidate()
        logger.info("Location deleted: id=%s", location_id)
        return location_id

    async def update_stored_photo_urls(self, location_id: str, stored_photo_urls: list[str]) -> str:
        """Replace ``placeData.storedPhotoUrls``, keeping the rest of ``placeData``."""
        if not stored_photo_urls:
            raise ValidationError("storedPhotoUrls must not be empty.")

        document = await self._store.get_document(Collections.LOCATIONS, location_id)
        if document is None:
            raise NotFound(f"Location not found: {location_id}")

        existing = document.data.get("placeData")
        place_data = dict(existing) if isinstance(existing, dict) else {}
        place_data["storedPhotoUrls"] = list(stored_photo_urls)

        await self._store.set_document(
            Collections.LOCATIONS,
            location_id,
            {"placeData": place_data, "placeData_updated_at": self._store.server_timestamp()},
            merge=True,
        )
        self._coordinator.invalidate()
        logger.info("Stored photo URLs updated: id=%s count=%d", location_id, len(stored_photo_urls))
        return location_id

    async def create_location_from_place(
        self,
        place_id: str,
        types: list[ActivityType],
        primary_type: ActivityType | None = None,
        age_range: AgeRange | None = None,
    ) -> str:
        """Create a location from Places details plus a generated description."""
        if not place_id.strip():
            raise ValidationError("Location must have a Google Place ID.")
        if self._places is None:
            raise ValidationError("Places lookups are not configured.")

        details = await self._places.details(place_id)
        if details is None:
            raise NotFound(f"Place not found: {place_id}")

        description = await self._describer.generate(details)
        payload = LocationCreate(
            id=details.place_id,
            name=details.name,
            coordinates=Coordinates(lat=details.geometry.latitude, lng=details.geometry.longitude),
            types=types,
            primary_type=primary_type,
            description=description,
            address=details.address or "",
            age_range=age_range or AgeRange(),
            opening_hours=dict(details.opening_hours),
            contact=Contact(phone=details.phone, website=details.website),
            place_data=PlaceData.model_validate(details.to_place_data()),
        )
        return await self.add_location(payload)

    async def get_featured_slots(self) -> list[Location | None]:
        return arrange_featured_slots(await self.list_locations())

    async def assign_featured_slot(self, slot: int, location_id: str | None) -> list[Location | None]:
        """Put ``location_id`` in ``slot`` (or empty the slot) and return the new layout."""
        if not 0 <= slot < FEATURED_SLOT_COUNT:
            raise ValidationError(f"Featured slot must be between 0 and {FEATURED_SLOT_COUNT - 1}.")

        slots = arrange_featured_slots(await self.list_locations(force_refresh=True))
        previous = slots[slot]

        if previous is not None and previous.id != location_id:
            in_other_slot = any(
                other is not None and other.id == previous.id for index, other in enumerate(slots) if index != slot
            )
            if in_other_slot:
                logger.info("Location %s also holds another featured slot; keeping it featured", previous.id)
            else:
                await self._merge(previous.id, {"featured": False, "featuredPosition": None})

        if location_id is not None:
            await self.get_location(location_id)
            await self._merge(location_id, {"featured": True, "featuredPosition": slot})

        logger.info("Featured slot %d assigned: location=%s", slot, location_id)
        return await self.get_featured_slots()

    async def _merge(self, location_id: str, changes: dict[str, Any]) -> None:
        if await self._store.get_document(Collections.LOCATIONS, location_id) is None:
            raise NotFound(f"Location not found: {location_id}")

        document = drop_empty_dicts(changes)
        document["updated_at"] = self._store.server_timestamp()
        await self._store.set_document(Collections.LOCATIONS, location_id, document, merge=True)
        self._coordinator.invalidate()
        logger.info("Location updated: id=%s fields=%s", location_id, sorted(document))
