"""Public submission endpoints: newsletter, reports and activity suggestions."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_submission_service
from app.schemas.blog import CreatedResponse
from app.schemas.submission import ActivitySuggestion, LocationReport, NewsletterSubscription
from app.services.submission_service import SubmissionService

router = APIRouter(prefix="/api/v1", tags=["submissions"])


@router.post("/newsletter", response_model=CreatedResponse, status_code=201)
async def subscribe_newsletter(
    request: NewsletterSubscription,
    service: SubmissionService = Depends(get_submission_service),  # noqa: B008
) -> CreatedResponse:
    return CreatedResponse(id=await service.subscribe_newsletter(request))


@router.post("/reports", response_model=CreatedResponse, status_code=201)
async def report_location(
    request: LocationReport,
    service: SubmissionService = Depends(get_submission_service),  # noqa: B008
) -> CreatedResponse:
    return CreatedResponse(id=await service.report_location(request))


@router.post("/activity-suggestions", response_model=CreatedResponse, status_code=201)
async def suggest_activity(
    request: ActivitySuggestion,
    service: SubmissionService = Depends(get_submission_service),  # noqa: B008
) -> CreatedResponse:
    return CreatedResponse(id=await service.suggest_activity(request))
