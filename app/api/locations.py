"""Location read and admin mutation API."""

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_location_service, require_admin_secret
from app.core.logger import get_logger
from app.schemas.blog import CreatedResponse
from app.schemas.location import (
    CreateFromPlaceRequest,
    FeaturedSlotRequest,
    Location,
    LocationCreate,
    LocationUpdate,
    StoredPhotoUrlsRequest,
)
from app.services.location_service import LocationService

router = APIRouter(prefix="/api/v1", tags=["locations"])
logger = get_logger(__name__)


@router.get("/locations", response_model=list[Location])
async def list_locations(
    force_refresh: bool = Query(default=False),
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> list[Location]:
    """Return every location, served from cache while it is fresh."""
    return await service.list_locations(force_refresh=force_refresh)


@router.get("/locations/featured", response_model=list[Location | None])
async def get_featured_locations(
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> list[Location | None]:
    """Return the featured slots in order; empty slots are null."""
    return await service.get_featured_slots()


@router.put(
    "/locations/featured/{slot}",
    response_model=list[Location | None],
    dependencies=[Depends(require_admin_secret)],
)
async def assign_featured_slot(
    slot: int,
    request: FeaturedSlotRequest,
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> list[Location | None]:
    return await service.assign_featured_slot(slot, request.location_id)


@router.post(
    "/locations/from-place",
    response_model=CreatedResponse,
    status_code=201,
    dependencies=[Depends(require_admin_secret)],
)
async def create_location_from_place(
    request: CreateFromPlaceRequest,
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> CreatedResponse:
    """Create a location from Google Places details with a generated description."""
    location_id = await service.create_location_from_place(
        request.place_id,
        request.types,
        request.primary_type,
        request.age_range,
    )
    return CreatedResponse(id=location_id)


@router.get("/locations/{location_id}", response_model=Location)
async def get_location(
    location_id: str,
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> Location:
    return await service.get_location(location_id)


@router.post(
    "/locations",
    response_model=CreatedResponse,
    status_code=201,
    dependencies=[Depends(require_admin_secret)],
)
async def add_location(
    request: LocationCreate,
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> CreatedResponse:
    return CreatedResponse(id=await service.add_location(request))


@router.patch(
    "/locations/{location_id}",
    response_model=CreatedResponse,
    dependencies=[Depends(require_admin_secret)],
)
async def update_location(
    location_id: str,
    request: LocationUpdate,
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> CreatedResponse:
    """Merge the fields set in the body into the stored location."""
    return CreatedResponse(id=await service.update_location(location_id, request))


@router.delete(
    "/locations/{location_id}",
    response_model=CreatedResponse,
    dependencies=[Depends(require_admin_secret)],
)
async def delete_location(
    location_id: str,
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> CreatedResponse:
    return CreatedResponse(id=await service.delete_location(location_id))


@router.put(
    "/locations/{location_id}/stored-photo-urls",
    response_model=CreatedResponse,
    dependencies=[Depends(require_admin_secret)],
)
async def update_stored_photo_urls(
    location_id: str,
    request: StoredPhotoUrlsRequest,
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> CreatedResponse:
    return CreatedResponse(id=await service.update_stored_photo_urls(location_id, request.stored_photo_urls))
