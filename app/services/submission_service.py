"""Visitor submissions and the scheduled-update status document."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from app.core.logger import get_logger
from app.schemas.submission import ActivitySuggestion, LocationReport, NewsletterSubscription, UpdateStatus
from app.services.store import Collections, DocumentStore

logger = get_logger(__name__)

UPDATE_STATUS_DOCUMENT = "update_status"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionService:
    """Writes public submissions and lists them for admins."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def subscribe_newsletter(self, payload: NewsletterSubscription) -> str:
        document = payload.model_dump(mode="json", exclude_none=True)
        document["subscribedAt"] = _now()
        subscriber_id = await self._store.add_document(Collections.NEWSLETTER, document)
        logger.info("Newsletter subscriber added: id=%s", subscriber_id)
        return subscriber_id

    async def report_location(self, payload: LocationReport) -> str:
        document = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        document["timestamp"] = _now()
        document["status"] = "new"
        report_id = await self._store.add_document(Collections.REPORTS, document)
        logger.info("Location report added: id=%s location=%s", report_id, payload.location_id)
        return report_id

    async def suggest_activity(self, payload: ActivitySuggestion) -> str:
        document = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        document["timestamp"] = _now()
        document["status"] = "pending"
        suggestion_id = await self._store.add_document(Collections.ACTIVITIES, document)
        logger.info("Activity suggestion added: id=%s name=%s", suggestion_id, payload.name)
        return suggestion_id

    async def list_newsletter_subscribers(self) -> list[dict[str, Any]]:
        return await self._list(Collections.NEWSLETTER)

    async def list_reports(self) -> list[dict[str, Any]]:
        return await self._list(Collections.REPORTS)

    async def list_activity_suggestions(self) -> list[dict[str, Any]]:
        return await self._list(Collections.ACTIVITIES)

    async def get_update_status(self) -> UpdateStatus:
        """Return ``system/update_status``, or zeroed defaults when it was never written."""
        document = await self._store.get_document(Collections.SYSTEM, UPDATE_STATUS_DOCUMENT)
        if document is None:
            return UpdateStatus()
        return UpdateStatus.model_validate(document.data)

    async def _list(self, collection: str) -> list[dict[str, Any]]:
        documents = await self._store.get_all_documents(collection)
        return [{"id": document.id, **document.data} for document in documents]
