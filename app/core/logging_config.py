"""Logging setup aligned with the uvicorn default format."""

from __future__ import annotations

import copy
import logging.config
import os
from typing import Any

from uvicorn.config import LOGGING_CONFIG as UVICORN_LOGGING_CONFIG

_QUIET_LOGGERS = ("google.auth", "urllib3", "httpx")


def _resolve_log_level(level: str | None = None) -> str:
    """Resolve the log level from the argument or the LOG_LEVEL env var."""
    if level:
        return level.upper()
    return os.getenv("LOG_LEVEL", "INFO").upper()


def build_logging_config(level: str | None = None) -> dict[str, Any]:
    """Build a dictConfig that reuses the uvicorn formatters."""
    log_level = _resolve_log_level(level)
    config = copy.deepcopy(UVICORN_LOGGING_CONFIG)

    config["root"] = {"handlers": ["default"], "level": log_level}

    config["loggers"]["uvicorn"]["level"] = log_level
    config["loggers"]["uvicorn.error"]["level"] = log_level
    config["loggers"]["uvicorn.access"]["level"] = log_level

    # SDK transport loggers are chatty at INFO
    for name in _QUIET_LOGGERS:
        config["loggers"][name] = {"level": "WARNING"}

    return config


def configure_logging(level: str | None = None) -> None:
    """Apply the logging configuration through dictConfig."""
    logging.config.dictConfig(build_logging_config(level))
