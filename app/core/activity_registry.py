"""Static activity category registry.

Maps every ActivityType to its display name, map marker color and the
free-text keywords that signal it in a search query.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from app.schemas.enums import ActivityType


@dataclass(frozen=True, slots=True)
class ActivityCategory:
    """Display metadata and query synonyms for one ActivityType."""

    name: str
    color: str
    keywords: tuple[str, ...]


ActivityRegistry = Mapping[ActivityType, ActivityCategory]

ACTIVITY_CATEGORIES: ActivityRegistry = {
    ActivityType.INDOOR_PLAY: ActivityCategory(
        name="Indoor Play",
        color="#FF4444",
        keywords=(
            "indoor",
            "inside",
            "playroom",
            "playspace",
            "play area",
            "play space",
            "playground",
            "soft play",
        ),
    ),
    ActivityType.OUTDOOR_PLAY: ActivityCategory(
        name="Outdoor Play",
        color="#33B679",
        keywords=("outdoor", "outside", "playground", "park", "garden", "field", "nature"),
    ),
    ActivityType.SPORTS: ActivityCategory(
        name="Sports",
        color="#FF8C00",
        keywords=(
            "sport",
            "sports",
            "athletic",
            "athletics",
            "football",
            "soccer",
            "basketball",
            "tennis",
            "swimming",
            "gym",
            "gymnastics",
            "dance",
            "ballet",
            "martial art",
            "karate",
            "judo",
            "taekwondo",
            "baseball",
            "volleyball",
        ),
    ),
    ActivityType.ARTS: ActivityCategory(
        name="Arts",
        color="#9C27B0",
        keywords=(
            "art",
            "arts",
            "craft",
            "crafts",
            "drawing",
            "painting",
            "pottery",
            "ceramics",
            "sculpture",
            "theater",
            "theatre",
            "drama",
            "creative",
        ),
    ),
    ActivityType.MUSIC: ActivityCategory(
        name="Music",
        color="#3F51B5",
        keywords=(
            "music",
            "musical",
            "instrument",
            "piano",
            "guitar",
            "violin",
            "drums",
            "singing",
            "choir",
            "band",
            "orchestra",
        ),
    ),
    ActivityType.EDUCATION: ActivityCategory(
        name="Education",
        color="#4285F4",
        keywords=(
            "education",
            "educational",
            "learning",
            "learn",
            "school",
            "class",
            "classes",
            "workshop",
            "academic",
            "science",
            "stem",
            "math",
            "reading",
            "language",
            "coding",
            "robotic",
            "robotics",
            "museum",
            "history",
        ),
    ),
    ActivityType.ENTERTAINMENT: ActivityCategory(
        name="Entertainment",
        color="#FFB300",
        keywords=(
            "entertainment",
            "fun",
            "movie",
            "cinema",
            "theatre",
            "theater",
            "show",
            "performance",
            "amusement",
            "arcade",
            "game",
            "laser tag",
            "bowling",
        ),
    ),
}


def display_name(activity_type: ActivityType, registry: ActivityRegistry = ACTIVITY_CATEGORIES) -> str:
    """Return the display name of a category, falling back to its raw value."""
    category = registry.get(activity_type)
    return category.name if category else str(activity_type)
