"""Standardized logger module.

Every module obtains its logger here so log lines share one format and one
level source (the ``LOG_LEVEL`` environment variable).
"""

import logging
import os
import sys

_LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _env_level() -> int:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Return a logger wired to stdout with the project format.

    Args:
        name: Logger name, normally ``__name__``.

    Returns:
        The configured logger. Calling this twice for the same name does not
        attach a second handler.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        level = _env_level()
        logger.setLevel(level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)

    return logger
