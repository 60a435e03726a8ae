"""Short family-oriented place descriptions generated by an LLM."""

from __future__ import annotations

from langchain_core.prompts import ChatPromptTemplate

from app.core import llm_client
from app.core.config import get_settings
from app.core.logger import get_logger
from app.schemas.place import PlaceDetails

logger = get_logger(__name__)

SYSTEM_PROMPT = """You write concise, helpful descriptions for a map app showing children's activities in Athens, Greece.

Rules:
1. Write exactly one paragraph with no line breaks.
2. Keep it under 50 words.
3. Use a friendly, informative tone.
4. Focus on age-appropriateness, main activities, facilities and anything families should know.
5. Do not mention prices or pricing tiers.
6. Do not mention that the text was generated."""

USER_PROMPT = """Location information:
Name: {name}
Types: {types}
Rating: {rating} out of 5

Customer reviews:
{reviews}"""

_MAX_REVIEWS = 5


def fallback_description(name: str) -> str:
    return f"{name} is a great place for kids in Athens. Suitable for various age groups."


def _format_reviews(details: PlaceDetails) -> str:
    if not details.reviews:
        return "No reviews available."
    lines = []
    for review in details.reviews[:_MAX_REVIEWS]:
        rating = review.rating if review.rating is not None else "n/a"
        lines.append(f'- Rating: {rating}/5, Comment: "{review.text}"')
    return "\n".join(lines)


class DescriptionGenerator:
    """Produces a description for a place; never raises."""

    def __init__(self, temperature: float | None = None) -> None:
        self._temperature = temperature

    async def generate(self, details: PlaceDetails) -> str:
        """Return a generated description, or the fixed fallback on any failure."""
        settings = get_settings()
        temperature = self._temperature if self._temperature is not None else settings.DESCRIPTION_LLM_TEMPERATURE

        prompt = ChatPromptTemplate.from_messages([("system", SYSTEM_PROMPT), ("human", USER_PROMPT)])
        messages = prompt.format_messages(
            name=details.name,
            types=", ".join(details.types) or "No type information",
            rating=details.rating if details.rating is not None else "No rating available",
            reviews=_format_reviews(details),
        )

        try:
            response = await llm_client.ainvoke(
                messages,
                purpose="location_description",
                settings=settings,
                temperature=temperature,
            )
            generated = " ".join(str(response.content).split())
        except Exception as exc:
            logger.error("Description generation failed: place_id=%s error=%s", details.place_id, exc)
            return fallback_description(details.name)

        if not generated:
            logger.warning("Description generation returned empty text: place_id=%s", details.place_id)
            return fallback_description(details.name)
        return generated
