"""Readiness checks for the store and external APIs."""

from __future__ import annotations

import asyncio
import json
import socket
from pathlib import Path

from app.core.config import Settings, get_settings
from app.core.timeout_policy import TimeoutPolicy, get_timeout_policy

ReadinessCheck = dict[str, str | bool]


def _ok(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "ok", "ok": True, "required": required, "detail": detail}


def _fail(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "fail", "ok": False, "required": required, "detail": detail}


def _skip(detail: str, *, required: bool = False) -> ReadinessCheck:
    return {"status": "skip", "ok": True, "required": required, "detail": detail}


async def _check_tcp_connectivity(
    host: str,
    port: int,
    timeout_seconds: int,
    label: str,
    *,
    required: bool = True,
) -> ReadinessCheck:
    def _connect() -> None:
        with socket.create_connection((host, port), timeout=timeout_seconds):
            return None

    try:
        await asyncio.to_thread(_connect)
        return _ok(f"{label} reachable ({host}:{port})", required=required)
    except OSError as exc:
        return _fail(f"{label} unreachable ({host}:{port}): {exc}", required=required)


def _firestore_credentials_problem(settings: Settings) -> str | None:
    if settings.FIREBASE_SERVICE_ACCOUNT_CONTENT:
        try:
            json.loads(settings.FIREBASE_SERVICE_ACCOUNT_CONTENT)
        except ValueError as exc:
            return f"FIREBASE_SERVICE_ACCOUNT_CONTENT is not valid JSON: {exc}"
        return None

    path = settings.FIREBASE_SERVICE_ACCOUNT_PATH
    if path and not Path(path).is_file():
        return f"Firebase service account file not found: {path}"
    return None


async def _check_firestore_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    problem = _firestore_credentials_problem(settings)
    if problem:
        return _fail(problem)

    return await _check_tcp_connectivity(
        host="firestore.googleapis.com",
        port=443,
        timeout_seconds=timeout_policy.firestore_timeout_seconds,
        label="Firestore",
    )


async def _check_openai_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    # Descriptions fall back to a fixed sentence, so OpenAI is never required.
    if not settings.OPENAI_API_KEY:
        return _skip("OPENAI_API_KEY is not set; generated descriptions are disabled.")

    return await _check_tcp_connectivity(
        host="api.openai.com",
        port=443,
        timeout_seconds=timeout_policy.external_api_timeout_seconds,
        label="OpenAI API",
        required=False,
    )


async def _check_google_places_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    if not settings.GOOGLE_PLACES_API_KEY:
        return _skip("GOOGLE_PLACES_API_KEY is not set; place lookups are disabled.")

    return await _check_tcp_connectivity(
        host="places.googleapis.com",
        port=443,
        timeout_seconds=timeout_policy.external_api_timeout_seconds,
        label="Google Places API",
        required=False,
    )


async def collect_readiness_status() -> dict[str, object]:
    """Check the store and external API dependencies."""
    settings = get_settings()
    timeout_policy = get_timeout_policy(settings)

    firestore_check, openai_check, google_places_check = await asyncio.gather(
        _check_firestore_readiness(settings, timeout_policy),
        _check_openai_readiness(settings, timeout_policy),
        _check_google_places_readiness(settings, timeout_policy),
    )

    checks: dict[str, ReadinessCheck] = {
        "firestore": firestore_check,
        "openai": openai_check,
        "google_places": google_places_check,
    }
    required_checks_ok = all(bool(check["ok"]) for check in checks.values() if bool(check.get("required", True)))

    return {
        "status": "ready" if required_checks_ok else "not_ready",
        "checks": checks,
    }
