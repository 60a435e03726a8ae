"""Public submission models: newsletter, issue reports and activity suggestions."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NewsletterSubscription(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: str | None = None
    consent: bool = True


class LocationReport(BaseModel):
    """A visitor report that a location's data is wrong."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    location_id: str = Field(..., min_length=1, alias="locationId")
    location_name: str | None = Field(default=None, alias="locationName")
    issue_type: str = Field(..., min_length=1, alias="issueType")
    description: str = ""
    email: str | None = None


class ActivitySuggestion(BaseModel):
    """A visitor suggestion for a new location."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., min_length=1)
    location: str = ""
    description: str = ""
    activity_type: str | None = Field(default=None, alias="activityType")
    website: str | None = None
    email: str | None = None


class UpdateStatus(BaseModel):
    """Status document written by the scheduled places refresh job."""

    model_config = ConfigDict(extra="allow")

    last_update: datetime | str | None = None
    next_scheduled_update: datetime | str | None = None
    success_count: int = 0
    failed_count: int = 0
    last_run_type: str | None = None
