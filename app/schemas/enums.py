"""Shared enumerations."""

from enum import StrEnum


class ActivityType(StrEnum):
    """Closed set of location categories."""

    INDOOR_PLAY = "indoor-play"
    OUTDOOR_PLAY = "outdoor-play"
    SPORTS = "sports"
    ARTS = "arts"
    MUSIC = "music"
    EDUCATION = "education"
    ENTERTAINMENT = "entertainment"


DEFAULT_ACTIVITY_TYPE = ActivityType.ENTERTAINMENT


class MatchField(StrEnum):
    """Location field that produced a search match."""

    NAME = "name"
    ACTIVITY_TYPE = "activityType"
    AGE_RANGE = "ageRange"
    ADDRESS = "address"
    DESCRIPTION = "description"


class MatchType(StrEnum):
    """How closely the query matched."""

    EXACT = "exact"
    PARTIAL = "partial"
    SEMANTIC = "semantic"
