"""Two-tier locations cache with single-flight fetching.

Lookup order for ``get_all``:

1. memory tier, served while younger than the fresh TTL;
2. persistent tier (version-stamped), adopted into memory while younger than
   the fresh TTL, with a detached background refresh once it is older than
   the background-refresh threshold;
3. the remote store, through one shared in-flight fetch per coordinator.

The coordinator never mutates a Location; it only caches snapshots.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from app.core.config import get_settings
from app.core.errors import PameKidsError, classify_store_error
from app.core.logger import get_logger
from app.schemas.enums import DEFAULT_ACTIVITY_TYPE, ActivityType
from app.schemas.location import AGE_MAX, AGE_MIN, Location, PlaceData
from app.services.local_cache import PersistentLocalCache
from app.services.store import Collections, DocumentStore, StoredDocument

logger = get_logger(__name__)

LOCATIONS_CACHE_KEY = "pamekids_locations_cache"
DEFAULT_AGE_RANGE = {"min": 0, "max": 16}
_ACTIVITY_VALUES = {item.value for item in ActivityType}


def _normalize_types(raw_types: Any, document_id: str) -> list[str]:
    if not isinstance(raw_types, list):
        return []
    types: list[str] = []
    for value in raw_types:
        if not isinstance(value, str) or value not in _ACTIVITY_VALUES:
            logger.warning("Unknown activity type dropped: location=%s type=%s", document_id, value)
        elif value not in types:
            types.append(value)
    return types


def _normalize_age_range(raw: Any) -> dict[str, int]:
    if not isinstance(raw, dict):
        return dict(DEFAULT_AGE_RANGE)
    try:
        low = int(raw.get("min", DEFAULT_AGE_RANGE["min"]))
        high = int(raw.get("max", DEFAULT_AGE_RANGE["max"]))
    except (TypeError, ValueError):
        return dict(DEFAULT_AGE_RANGE)
    low = min(AGE_MAX, max(AGE_MIN, low))
    high = min(AGE_MAX, max(AGE_MIN, high))
    if low > high:
        low, high = high, low
    return {"min": low, "max": high}


def _normalize_place_data(raw: Any, document_id: str) -> dict[str, Any] | None:
    if not isinstance(raw, dict):
        return None
    try:
        return PlaceData.model_validate(raw).model_dump(by_alias=True, exclude_none=True)
    except PydanticValidationError as exc:
        logger.warning("Malformed placeData dropped: location=%s error=%s", document_id, exc.errors()[:1])
        return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> str | None:
    return None if value is None else _text(value)


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _normalize_coordinates(raw: Any) -> dict[str, float]:
    if not isinstance(raw, dict):
        return {"lat": 0.0, "lng": 0.0}
    return {"lat": _number(raw.get("lat")), "lng": _number(raw.get("lng"))}


def _string_map(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {_text(key): _text(value) for key, value in raw.items() if value is not None}


def _normalize_contact(raw: Any) -> dict[str, str | None]:
    if not isinstance(raw, dict):
        return {}
    return {field: _optional_text(raw.get(field)) for field in ("phone", "email", "website")}


def _normalize_images(raw: Any) -> list[str] | None:
    if not isinstance(raw, list):
        return None
    return [item for item in raw if isinstance(item, str)]


def _normalize_featured_position(raw: Any) -> int | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return int(raw)


def normalize_location(document: StoredDocument) -> Location:
    """Turn a raw store record into a Location, filling defaults for missing fields.

    Scalars of the wrong type are coerced or defaulted, so a single odd
    record still yields a usable Location.
    """
    data = document.data
    primary_type = data.get("primaryType")
    if not isinstance(primary_type, str) or primary_type not in _ACTIVITY_VALUES:
        primary_type = DEFAULT_ACTIVITY_TYPE.value

    featured = data.get("featured")
    return Location.model_validate(
        {
            "id": document.id,
            "name": _text(data.get("name")),
            "coordinates": _normalize_coordinates(data.get("coordinates")),
            "types": _normalize_types(data.get("types"), document.id),
            "primaryType": primary_type,
            "description": _text(data.get("description")),
            "address": _text(data.get("address")),
            "ageRange": _normalize_age_range(data.get("ageRange")),
            "priceRange": _optional_text(data.get("priceRange")),
            "openingHours": _string_map(data.get("openingHours")),
            "contact": _normalize_contact(data.get("contact")),
            "placeData": _normalize_place_data(data.get("placeData"), document.id),
            "images": _normalize_images(data.get("images")),
            "featured": featured if isinstance(featured, bool) else None,
            "featuredPosition": _normalize_featured_position(data.get("featuredPosition")),
            "proTips": _text(data.get("proTips")),
            "created_at": data.get("created_at"),
            "updated_at": data.get("updated_at"),
        }
    )


def normalize_locations(documents: list[StoredDocument]) -> list[Location]:
    """Normalize every record, skipping (and logging) any that still fails validation."""
    locations: list[Location] = []
    for document in documents:
        try:
            locations.append(normalize_location(document))
        except PydanticValidationError as exc:
            logger.warning("Malformed location skipped: id=%s error=%s", document.id, exc.errors()[:1])
    return locations


@dataclass(slots=True)
class _MemoryEntry:
    data: list[Location]
    timestamp: float


class LocationCacheCoordinator:
    """Owns the memory and persistent tiers for the full locations collection."""

    def __init__(
        self,
        store: DocumentStore,
        local_cache: PersistentLocalCache,
        *,
        fresh_ttl_seconds: float = 24 * 60 * 60,
        background_refresh_seconds: float = 60 * 60,
        clock: Callable[[], float] = time.time,
        collection: str = Collections.LOCATIONS,
    ) -> None:
        self._store = store
        self._local_cache = local_cache
        self._fresh_ttl = float(fresh_ttl_seconds)
        self._background_threshold = float(background_refresh_seconds)
        self._clock = clock
        self._collection = collection
        self._memory: _MemoryEntry | None = None
        self._in_flight: asyncio.Task[list[Location]] | None = None
        self._background_tasks: set[asyncio.Task[None]] = set()
        self._generation = 0

    @classmethod
    def from_settings(cls, store: DocumentStore, local_cache: PersistentLocalCache) -> LocationCacheCoordinator:
        settings = get_settings()
        return cls(
            store,
            local_cache,
            fresh_ttl_seconds=settings.LOCATIONS_CACHE_FRESH_TTL_SECONDS,
            background_refresh_seconds=settings.LOCATIONS_CACHE_BACKGROUND_REFRESH_SECONDS,
        )

    @property
    def has_in_flight_fetch(self) -> bool:
        return self._in_flight is not None

    @property
    def memory_timestamp(self) -> float | None:
        return self._memory.timestamp if self._memory else None

    async def get_all(self, force_refresh: bool = False) -> list[Location]:
        """Return the full locations collection.

        Raises:
            PameKidsError: the remote fetch failed and no usable cache tier
                existed. Every caller coalesced onto that fetch receives the
                same error.
        """
        now = self._clock()
        if force_refresh:
            logger.info("Force refreshing locations from the store")
            self._clear_tiers()
        else:
            cached = self._read_memory(now)
            if cached is not None:
                return cached
            cached = self._read_persistent(now)
            if cached is not None:
                return cached

        return await self._shared_fetch()

    def invalidate(self) -> None:
        """Clear both tiers; the next ``get_all`` goes to the store.

        A fetch already in flight is left to finish (it is never cancelled),
        but its result is not written back into the tiers.
        """
        self._generation += 1
        self._clear_tiers()
        logger.info("Locations cache invalidated")

    async def drain_background_refreshes(self) -> None:
        """Wait for detached background refreshes; used on shutdown and in tests."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def _clear_tiers(self) -> None:
        self._memory = None
        self._local_cache.clear(LOCATIONS_CACHE_KEY)

    def _read_memory(self, now: float) -> list[Location] | None:
        if self._memory is None:
            return None
        age = now - self._memory.timestamp
        if age >= self._fresh_ttl:
            return None
        logger.info("Using in-memory cached locations (age: %ds)", round(age))
        return self._memory.data

    def _read_persistent(self, now: float) -> list[Location] | None:
        payload = self._local_cache.read(LOCATIONS_CACHE_KEY)
        if payload is None:
            return None

        age = now - payload.timestamp
        if age >= self._fresh_ttl:
            return None

        try:
            locations = [Location.model_validate(item) for item in payload.data]
        except (PydanticValidationError, TypeError) as exc:
            logger.warning("Persistent locations cache unreadable, discarding: %s", exc)
            self._local_cache.clear(LOCATIONS_CACHE_KEY)
            return None

        logger.info("Using persistent cached locations (age: %dm)", round(age / 60))
        self._memory = _MemoryEntry(data=locations, timestamp=payload.timestamp)

        if age > self._background_threshold:
            logger.info("Cached locations are valid but aging, refreshing in background")
            self._schedule_background_refresh()
        return locations

    def _shared_fetch(self) -> asyncio.Future[list[Location]]:
        # Check-and-set of the in-flight marker happens without suspending.
        task = self._in_flight
        if task is not None:
            logger.info("Reusing in-flight locations request")
        else:
            logger.info("No valid cache found. Fetching locations from the store")
            task = asyncio.create_task(self._fetch(self._generation))
            self._in_flight = task
        # shield: a cancelled caller must not cancel the fetch the others wait on
        return asyncio.shield(task)

    async def _fetch(self, generation: int) -> list[Location]:
        try:
            documents = await self._store.get_all_documents(self._collection)
        except PameKidsError:
            raise
        except Exception as exc:
            raise classify_store_error(exc) from exc
        finally:
            if self._in_flight is asyncio.current_task():
                self._in_flight = None

        locations = normalize_locations(documents)
        if generation != self._generation:
            logger.info("Locations fetched before an invalidation; not caching the result")
            return locations

        timestamp = self._clock()
        self._memory = _MemoryEntry(data=locations, timestamp=timestamp)
        self._write_persistent(locations, timestamp)
        logger.info("Locations fetched and cached: count=%d", len(locations))
        return locations

    def _write_persistent(self, locations: list[Location], timestamp: float) -> None:
        serialized = [location.model_dump(mode="json", by_alias=True) for location in locations]
        try:
            self._local_cache.write(LOCATIONS_CACHE_KEY, serialized, timestamp)
        except OSError as exc:
            logger.warning("Error saving locations to the persistent cache: %s", exc)

    def _schedule_background_refresh(self) -> None:
        task = asyncio.create_task(self._background_refresh())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _background_refresh(self) -> None:
        try:
            locations = await self._shared_fetch()
        except Exception as exc:
            logger.warning("Background refresh error; keeping cached locations: %s", exc)
            return
        logger.info("Background refresh completed: count=%d", len(locations))
