"""Places provider protocol and its persistent-cache decorator."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from app.core.logger import get_logger
from app.schemas.place import Place, PlaceDetails
from app.services.local_cache import PersistentLocalCache

logger = get_logger(__name__)

PLACE_DETAILS_PREFIX = "pamekids_place_"


class PlacesServiceProtocol(ABC):
    """Interface for external place lookups."""

    @abstractmethod
    async def search(self, query: str) -> list[Place]:
        """Search places by free text.

        Args:
            query: Text query, e.g. "soft play Athens".

        Returns:
            Matching places; empty on blank query or provider failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def details(self, place_id: str) -> PlaceDetails | None:
        """Fetch details for one place.

        Args:
            place_id: Google Places ID.

        Returns:
            Place details, or None when the place is unknown or the call failed.
        """
        raise NotImplementedError


class CachedPlacesService(PlacesServiceProtocol):
    """Keeps place details in the persistent cache for a fixed TTL."""

    def __init__(
        self,
        delegate: PlacesServiceProtocol,
        local_cache: PersistentLocalCache,
        ttl_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._delegate = delegate
        self._local_cache = local_cache
        self._ttl = float(ttl_seconds)
        self._clock = clock

    async def search(self, query: str) -> list[Place]:
        return await self._delegate.search(query)

    async def details(self, place_id: str) -> PlaceDetails | None:
        key = f"{PLACE_DETAILS_PREFIX}{place_id}"
        cached = self._local_cache.read(key)
        if cached is not None and self._clock() - cached.timestamp < self._ttl:
            try:
                return PlaceDetails.model_validate(cached.data)
            except PydanticValidationError:
                logger.warning("Cached place details unreadable, refetching: place_id=%s", place_id)
                self._local_cache.clear(key)

        details = await self._delegate.details(place_id)
        if details is not None:
            try:
                self._local_cache.write(key, details.model_dump(mode="json"), self._clock())
            except OSError as exc:
                logger.warning("Failed to save place to cache: place_id=%s error=%s", place_id, exc)
        return details
