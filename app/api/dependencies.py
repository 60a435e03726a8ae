"""API dependencies: admin authentication and service providers."""

import secrets
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status

from app.core.config import get_settings
from app.core.errors import PermissionDenied
from app.core.logger import get_logger
from app.services.blog_service import BlogService
from app.services.cache_admin import CacheAdminService
from app.services.firestore_store import get_firestore_store
from app.services.google_places_service import GooglePlacesError, get_google_places_service
from app.services.local_cache import PersistentLocalCache
from app.services.location_cache import LocationCacheCoordinator
from app.services.location_service import LocationService
from app.services.places_service import CachedPlacesService, PlacesServiceProtocol
from app.services.store import DocumentStore
from app.services.submission_service import SubmissionService

logger = get_logger(__name__)


def require_admin_secret(
    x_admin_secret: str | None = Header(default=None, alias="x-admin-secret"),
) -> None:
    """Check the admin shared-secret header."""
    settings = get_settings()
    if not settings.ADMIN_API_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="ADMIN_API_SECRET is not configured.",
        )

    if x_admin_secret is None or not secrets.compare_digest(x_admin_secret, settings.ADMIN_API_SECRET):
        raise PermissionDenied()


def get_document_store() -> DocumentStore:
    return get_firestore_store()


@lru_cache(maxsize=1)
def get_local_cache() -> PersistentLocalCache:
    return PersistentLocalCache.from_settings()


@lru_cache(maxsize=1)
def get_location_cache() -> LocationCacheCoordinator:
    """One coordinator per process, so concurrent requests share its in-flight fetch."""
    return LocationCacheCoordinator.from_settings(get_document_store(), get_local_cache())


@lru_cache(maxsize=1)
def get_places_service() -> PlacesServiceProtocol | None:
    """Places provider wrapped in the details cache, or None when no API key is set."""
    try:
        delegate = get_google_places_service()
    except GooglePlacesError as exc:
        logger.warning("Places lookups disabled: %s", exc)
        return None
    return CachedPlacesService(
        delegate,
        get_local_cache(),
        ttl_seconds=get_settings().PLACE_DETAILS_CACHE_TTL_SECONDS,
    )


def get_location_service(
    store: DocumentStore = Depends(get_document_store),
    coordinator: LocationCacheCoordinator = Depends(get_location_cache),
    places: PlacesServiceProtocol | None = Depends(get_places_service),
) -> LocationService:
    return LocationService(store, coordinator, places)


def get_blog_service(store: DocumentStore = Depends(get_document_store)) -> BlogService:
    return BlogService(store)


def get_submission_service(store: DocumentStore = Depends(get_document_store)) -> SubmissionService:
    return SubmissionService(store)


def get_cache_admin_service(
    local_cache: PersistentLocalCache = Depends(get_local_cache),
    coordinator: LocationCacheCoordinator = Depends(get_location_cache),
) -> CacheAdminService:
    return CacheAdminService(local_cache, coordinator)
