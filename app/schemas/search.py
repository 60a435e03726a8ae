"""Search match models.

A location yields at most one match per query. Each match variant pins its
field, match type and priority class, so the payload stays consistent with
the field that produced it.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.enums import MatchField, MatchType
from app.schemas.location import Location


class _BaseMatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    location: Location
    match_text: str = Field(..., alias="matchText")
    age_match: bool = Field(default=False, alias="ageMatch")
    activity_match: bool = Field(default=False, alias="activityMatch")

    @property
    def corroboration_score(self) -> int:
        """Tie-break score: activity corroboration weighs twice age corroboration."""
        return (1 if self.age_match else 0) + (2 if self.activity_match else 0)


class NameMatch(_BaseMatch):
    match_field: Literal[MatchField.NAME] = Field(default=MatchField.NAME, alias="matchField")
    match_type: Literal[MatchType.EXACT, MatchType.PARTIAL] = Field(..., alias="matchType")
    priority: Literal[1] = 1


class ActivityTypeMatch(_BaseMatch):
    match_field: Literal[MatchField.ACTIVITY_TYPE] = Field(default=MatchField.ACTIVITY_TYPE, alias="matchField")
    match_type: Literal[MatchType.SEMANTIC] = Field(default=MatchType.SEMANTIC, alias="matchType")
    priority: Literal[2] = 2


class AgeRangeMatch(_BaseMatch):
    match_field: Literal[MatchField.AGE_RANGE] = Field(default=MatchField.AGE_RANGE, alias="matchField")
    match_type: Literal[MatchType.SEMANTIC] = Field(default=MatchType.SEMANTIC, alias="matchType")
    priority: Literal[3] = 3


class AddressMatch(_BaseMatch):
    match_field: Literal[MatchField.ADDRESS] = Field(default=MatchField.ADDRESS, alias="matchField")
    match_type: Literal[MatchType.PARTIAL] = Field(default=MatchType.PARTIAL, alias="matchType")
    priority: Literal[4] = 4


class DescriptionMatch(_BaseMatch):
    match_field: Literal[MatchField.DESCRIPTION] = Field(default=MatchField.DESCRIPTION, alias="matchField")
    match_type: Literal[MatchType.PARTIAL] = Field(default=MatchType.PARTIAL, alias="matchType")
    priority: Literal[5] = 5


SearchMatch = Annotated[
    Union[NameMatch, ActivityTypeMatch, AgeRangeMatch, AddressMatch, DescriptionMatch],
    Field(discriminator="match_field"),
]


class QuerySignals(BaseModel):
    """Structured signals extracted from a free-text query."""

    model_config = ConfigDict(populate_by_name=True)

    ages: list[int] = Field(default_factory=list)
    activity_types: list[str] = Field(default_factory=list, alias="activityTypes")


class SearchResponse(BaseModel):
    """Search API response."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(..., description="Query as typed by the user")
    signals: QuerySignals
    results: list[SearchMatch] = Field(default_factory=list)
