"""Admin inspection and clearing of the persistent caches."""

from __future__ import annotations

import time
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from app.core.logger import get_logger
from app.services.local_cache import PersistentLocalCache
from app.services.location_cache import LOCATIONS_CACHE_KEY, LocationCacheCoordinator
from app.services.places_service import PLACE_DETAILS_PREFIX

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "pamekids_"


class CacheInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    locations_cache_exists: bool = Field(..., alias="locationsCacheExists")
    locations_cache_age_minutes: int | None = Field(default=None, alias="locationsCacheAge")
    place_cache_count: int = Field(..., alias="placeCacheCount")
    cache_version: str = Field(..., alias="cacheVersion")


class CacheAdminService:
    def __init__(
        self,
        local_cache: PersistentLocalCache,
        coordinator: LocationCacheCoordinator,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._local_cache = local_cache
        self._coordinator = coordinator
        self._clock = clock

    def info(self) -> CacheInfo:
        payload = self._local_cache.read(LOCATIONS_CACHE_KEY)
        age_minutes = None
        if payload is not None:
            age_minutes = int((self._clock() - payload.timestamp) // 60)
        return CacheInfo(
            locations_cache_exists=payload is not None,
            locations_cache_age_minutes=age_minutes,
            place_cache_count=len(self._local_cache.keys(PLACE_DETAILS_PREFIX)),
            cache_version=self._local_cache.version,
        )

    def clear_locations(self) -> None:
        self._coordinator.invalidate()

    def clear_place(self, place_id: str) -> None:
        self._local_cache.clear(f"{PLACE_DETAILS_PREFIX}{place_id}")
        logger.info("Place cache cleared: place_id=%s", place_id)

    def clear_all_places(self) -> int:
        count = self._local_cache.clear_prefix(PLACE_DETAILS_PREFIX)
        logger.info("All place caches cleared: count=%d", count)
        return count

    def clear_all(self) -> None:
        self.clear_locations()
        self.clear_all_places()
        logger.info("All application caches cleared")

    def estimate_size_bytes(self) -> int:
        return self._local_cache.size_bytes(CACHE_KEY_PREFIX)
