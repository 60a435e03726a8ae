"""Cached ChatOpenAI clients with timing logs."""

from __future__ import annotations

from functools import lru_cache
from time import perf_counter
from typing import Any

from langchain_openai import ChatOpenAI

from app.core.config import Settings, get_settings
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy

logger = get_logger(__name__)


class LLMNotConfiguredError(RuntimeError):
    """Raised when no OpenAI API key is configured."""


@lru_cache(maxsize=16)
def _get_chat_openai_client(
    model: str,
    temperature: float,
    timeout_seconds: int,
    api_key: str,
) -> ChatOpenAI:
    return ChatOpenAI(
        model=model,
        temperature=temperature,
        api_key=api_key,
        request_timeout=timeout_seconds,
    )


def clear_llm_client_cache() -> None:
    _get_chat_openai_client.cache_clear()


def _resolve_timeout_seconds(timeout_seconds: int | None, settings: Settings) -> int:
    if timeout_seconds is None:
        return get_timeout_policy(settings).llm_timeout_seconds
    return max(1, int(timeout_seconds))


async def ainvoke(
    payload: Any,
    *,
    purpose: str,
    settings: Settings | None = None,
    timeout_seconds: int | None = None,
    temperature: float = 0.0,
) -> Any:
    """Run one async chat completion and log its latency.

    Args:
        payload: Prompt value or message list accepted by ``ChatOpenAI``.
        purpose: Short label used in logs, e.g. ``"location_description"``.
        settings: Settings override, mainly for tests.
        timeout_seconds: Request timeout; defaults to the LLM timeout policy.
        temperature: Sampling temperature.

    Raises:
        LLMNotConfiguredError: ``OPENAI_API_KEY`` is empty.
    """
    resolved_settings = settings or get_settings()
    if not resolved_settings.OPENAI_API_KEY:
        raise LLMNotConfiguredError("OPENAI_API_KEY is not configured.")

    model = resolved_settings.LLM_MODEL_NAME.strip()
    resolved_timeout = _resolve_timeout_seconds(timeout_seconds, resolved_settings)
    client = _get_chat_openai_client(model, float(temperature), resolved_timeout, resolved_settings.OPENAI_API_KEY)

    started = perf_counter()
    try:
        response = await client.ainvoke(payload)
    except Exception as exc:
        logger.warning(
            "LLM call failed: purpose=%s model=%s latency_ms=%.1f",
            purpose,
            model,
            (perf_counter() - started) * 1000,
            exc_info=exc,
        )
        raise

    logger.info(
        "LLM call succeeded: purpose=%s model=%s latency_ms=%.1f",
        purpose,
        model,
        (perf_counter() - started) * 1000,
    )
    return response
