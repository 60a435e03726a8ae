"""Multi-field relevance search over the cached locations.

Pure functions only: no I/O, no shared state, same inputs give the same
ordered output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Iterable, Sequence

from app.core.activity_registry import ACTIVITY_CATEGORIES, ActivityRegistry, display_name
from app.schemas.enums import ActivityType, MatchType
from app.schemas.location import AGE_MAX, AGE_MIN, Location
from app.schemas.search import (
    ActivityTypeMatch,
    AddressMatch,
    AgeRangeMatch,
    DescriptionMatch,
    NameMatch,
    SearchMatch,
)

_AGE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # "5 year old", "5 years old", "5-year-old", "5 years"
    re.compile(r"\b(\d{1,2})\s*-?\s*years?(?:\s*-?\s*old)?\b", re.IGNORECASE),
    # "age 5", "ages 3 and 7", "ages 3, 5 or 7"
    re.compile(r"\bages?\s*(\d{1,2}(?:\s*(?:,|&|and|or|to|-)\s*\d{1,2})*)\b", re.IGNORECASE),
    # "6yo"
    re.compile(r"\b(\d{1,2})\s*yo\b", re.IGNORECASE),
)
_NUMBER = re.compile(r"\d{1,2}")


def extract_ages_from_query(query: str) -> list[int]:
    """Return the child ages (0-18) mentioned in ``query`` in order of appearance."""
    found: list[tuple[int, int]] = []
    for pattern in _AGE_PATTERNS:
        for match in pattern.finditer(query):
            group_start = match.start(1)
            for number in _NUMBER.finditer(match.group(1)):
                found.append((group_start + number.start(), int(number.group())))

    ages: list[int] = []
    for _, age in sorted(found):
        if AGE_MIN <= age <= AGE_MAX and age not in ages:
            ages.append(age)
    return ages


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)


def extract_activities_from_query(
    query: str,
    registry: ActivityRegistry = ACTIVITY_CATEGORIES,
) -> list[ActivityType]:
    """Return the activity types a query refers to, in registry order.

    A type matches when the query contains its display name, or any of its
    keywords as a whole word.
    """
    query_lower = query.lower()
    matched: list[ActivityType] = []
    for activity_type, category in registry.items():
        if category.name.lower() in query_lower or any(
            _keyword_pattern(keyword).search(query_lower) for keyword in category.keywords
        ):
            matched.append(activity_type)
    return matched


@dataclass(frozen=True, slots=True)
class _QueryContext:
    query_lower: str
    ages: tuple[int, ...]
    activity_types: tuple[ActivityType, ...]
    registry: ActivityRegistry


def _age_match(location: Location, context: _QueryContext) -> bool:
    return any(location.age_range.covers(age) for age in context.ages)


def _activity_match(location: Location, context: _QueryContext) -> bool:
    return any(activity_type in context.activity_types for activity_type in location.types)


def _match_name(location: Location, context: _QueryContext) -> SearchMatch | None:
    name_lower = location.name.lower()
    if context.query_lower not in name_lower:
        return None
    return NameMatch(
        location=location,
        match_text=location.name,
        match_type=MatchType.EXACT if name_lower == context.query_lower else MatchType.PARTIAL,
        age_match=_age_match(location, context),
        activity_match=_activity_match(location, context),
    )


def _match_activity_type(location: Location, context: _QueryContext) -> SearchMatch | None:
    matching_type = next((item for item in location.types if item in context.activity_types), None)
    if matching_type is None:
        return None
    return ActivityTypeMatch(
        location=location,
        match_text=display_name(matching_type, context.registry),
        age_match=_age_match(location, context),
        activity_match=True,
    )


def _match_age_range(location: Location, context: _QueryContext) -> SearchMatch | None:
    if not _age_match(location, context):
        return None
    return AgeRangeMatch(
        location=location,
        match_text=f"Ages {location.age_range.min}-{location.age_range.max}",
        age_match=True,
        activity_match=_activity_match(location, context),
    )


def _match_address(location: Location, context: _QueryContext) -> SearchMatch | None:
    if context.query_lower not in location.address.lower():
        return None
    return AddressMatch(
        location=location,
        match_text=location.address,
        age_match=_age_match(location, context),
        activity_match=_activity_match(location, context),
    )


def _match_description(location: Location, context: _QueryContext) -> SearchMatch | None:
    if context.query_lower not in location.description.lower():
        return None
    return DescriptionMatch(
        location=location,
        match_text=location.description,
        age_match=_age_match(location, context),
        activity_match=_activity_match(location, context),
    )


# Evaluated in priority order; the first hit is the location's only match.
MATCHERS: tuple[Callable[[Location, _QueryContext], SearchMatch | None], ...] = (
    _match_name,
    _match_activity_type,
    _match_age_range,
    _match_address,
    _match_description,
)


def _best_match(location: Location, context: _QueryContext) -> SearchMatch | None:
    for matcher in MATCHERS:
        match = matcher(location, context)
        if match is not None:
            return match
    return None


def _ranking_key(match: SearchMatch) -> tuple[int, int, int, str, str]:
    return (
        0 if match.match_type == MatchType.EXACT else 1,
        match.priority,
        -match.corroboration_score,
        match.location.name.casefold(),
        match.location.id,
    )


def rank_matches(matches: Iterable[SearchMatch]) -> list[SearchMatch]:
    """Order matches: exact first, then priority, corroboration score, name."""
    return sorted(matches, key=_ranking_key)


def search_locations(
    locations: Sequence[Location],
    query: str,
    registry: ActivityRegistry = ACTIVITY_CATEGORIES,
) -> list[SearchMatch]:
    """Rank ``locations`` against a free-text ``query``.

    Blank queries return an empty list. Locations with no matching field are
    left out; each remaining location appears once, with its best match.
    """
    query_text = query.strip()
    if not query_text:
        return []

    context = _QueryContext(
        query_lower=query_text.lower(),
        ages=tuple(extract_ages_from_query(query_text)),
        activity_types=tuple(extract_activities_from_query(query_text, registry)),
        registry=registry,
    )

    matches: list[SearchMatch] = []
    seen_ids: set[str] = set()
    for location in locations:
        if location.id in seen_ids:
            continue
        match = _best_match(location, context)
        if match is not None:
            matches.append(match)
            seen_ids.add(location.id)

    return rank_matches(matches)
