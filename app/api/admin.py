"""Admin-only API: submission listings, update status, caches and place lookups."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import (
    get_cache_admin_service,
    get_places_service,
    get_submission_service,
    require_admin_secret,
)
from app.core.errors import NotFound, RemoteUnavailable
from app.schemas.place import Place, PlaceDetails
from app.schemas.submission import UpdateStatus
from app.services.cache_admin import CacheAdminService, CacheInfo
from app.services.places_service import PlacesServiceProtocol
from app.services.submission_service import SubmissionService

router = APIRouter(prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin_secret)])


def _require_places(places: PlacesServiceProtocol | None) -> PlacesServiceProtocol:
    if places is None:
        raise RemoteUnavailable("Google Places is not configured.")
    return places


@router.get("/newsletter-subscribers")
async def list_newsletter_subscribers(
    service: SubmissionService = Depends(get_submission_service),  # noqa: B008
) -> list[dict[str, Any]]:
    return await service.list_newsletter_subscribers()


@router.get("/reports")
async def list_reports(
    service: SubmissionService = Depends(get_submission_service),  # noqa: B008
) -> list[dict[str, Any]]:
    return await service.list_reports()


@router.get("/activity-suggestions")
async def list_activity_suggestions(
    service: SubmissionService = Depends(get_submission_service),  # noqa: B008
) -> list[dict[str, Any]]:
    return await service.list_activity_suggestions()


@router.get("/update-status", response_model=UpdateStatus)
async def get_update_status(
    service: SubmissionService = Depends(get_submission_service),  # noqa: B008
) -> UpdateStatus:
    """Return the scheduled places refresh status, zeroed when it never ran."""
    return await service.get_update_status()


@router.get("/cache", response_model=CacheInfo)
def get_cache_info(service: CacheAdminService = Depends(get_cache_admin_service)) -> CacheInfo:  # noqa: B008
    return service.info()


@router.get("/cache/size")
def get_cache_size(service: CacheAdminService = Depends(get_cache_admin_service)) -> dict[str, int]:  # noqa: B008
    return {"bytes": service.estimate_size_bytes()}


@router.delete("/cache/locations")
def clear_locations_cache(service: CacheAdminService = Depends(get_cache_admin_service)) -> dict[str, bool]:  # noqa: B008
    service.clear_locations()
    return {"success": True}


@router.delete("/cache/places")
def clear_all_place_caches(
    service: CacheAdminService = Depends(get_cache_admin_service),  # noqa: B008
) -> dict[str, int | bool]:
    return {"success": True, "cleared": service.clear_all_places()}


@router.delete("/cache/places/{place_id}")
def clear_place_cache(
    place_id: str,
    service: CacheAdminService = Depends(get_cache_admin_service),  # noqa: B008
) -> dict[str, bool]:
    service.clear_place(place_id)
    return {"success": True}


@router.delete("/cache")
def clear_all_caches(service: CacheAdminService = Depends(get_cache_admin_service)) -> dict[str, bool]:  # noqa: B008
    service.clear_all()
    return {"success": True}


@router.get("/places/search", response_model=list[Place])
async def search_places(
    q: str = Query(..., min_length=1, max_length=200),
    places: PlacesServiceProtocol | None = Depends(get_places_service),  # noqa: B008
) -> list[Place]:
    """Look up Google Places candidates for a new location."""
    return await _require_places(places).search(q)


@router.get("/places/{place_id}", response_model=PlaceDetails)
async def get_place_details(
    place_id: str,
    places: PlacesServiceProtocol | None = Depends(get_places_service),  # noqa: B008
) -> PlaceDetails:
    details = await _require_places(places).details(place_id)
    if details is None:
        raise NotFound(f"Place not found: {place_id}")
    return details
