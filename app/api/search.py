"""Location search API."""

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_location_service
from app.core.activity_registry import ACTIVITY_CATEGORIES
from app.core.logger import get_logger
from app.schemas.search import QuerySignals, SearchResponse
from app.services.location_service import LocationService
from app.services.search_service import (
    extract_activities_from_query,
    extract_ages_from_query,
    search_locations,
)

router = APIRouter(prefix="/api/v1", tags=["search"])
logger = get_logger(__name__)


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str = Query(default="", max_length=200, description="Free-text query"),
    limit: int | None = Query(default=None, ge=1, le=500),
    service: LocationService = Depends(get_location_service),  # noqa: B008
) -> SearchResponse:
    """Rank cached locations against a free-text query.

    Each location appears at most once, with its best-matching field. Exact
    name matches come first, then lower priority classes, then matches with
    more age/activity corroboration, then names in alphabetical order.
    """
    locations = await service.list_locations()
    results = search_locations(locations, q, ACTIVITY_CATEGORIES)
    if limit is not None:
        results = results[:limit]

    logger.info("Search completed: query=%s result_count=%d", q, len(results))
    return SearchResponse(
        query=q,
        signals=QuerySignals(
            ages=extract_ages_from_query(q),
            activity_types=[item.value for item in extract_activities_from_query(q, ACTIVITY_CATEGORIES)],
        ),
        results=results,
    )


@router.get("/activity-types")
def list_activity_types() -> list[dict[str, str]]:
    """Return the activity categories with their display names and colors."""
    return [
        {"value": activity_type.value, "name": category.name, "color": category.color}
        for activity_type, category in ACTIVITY_CATEGORIES.items()
    ]
