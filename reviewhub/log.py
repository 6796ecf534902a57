"""
Logging setup for the ReviewHub client.

The library logs through loguru. Applications call setup_logging() once to
pick the level and output format; secrets are masked with redact() before
anything request-shaped is logged.
"""

import sys
from typing import Any

from loguru import logger


# Keys whose values must never reach a log sink
REDACTED_FIELDS = frozenset({
    "pin",
    "pin_code",
    "token",
    "access_token",
    "refresh_token",
    "authorization",
    "password",
})

REDACTED = "***"

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def redact(data: Any) -> Any:
    """
    Return a copy of data with sensitive values masked.

    Walks nested dicts and lists; keys are matched case-insensitively.
    """
    if isinstance(data, dict):
        return {
            key: REDACTED if str(key).lower() in REDACTED_FIELDS else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact(item) for item in data]
    return data


def setup_logging(level: str = "INFO", json: bool = False) -> None:
    """
    Configure the loguru sink.

    Args:
        level: Minimum level to emit
        json: Emit serialized JSON records instead of the colored format
    """
    logger.remove()
    if json:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=DEFAULT_FORMAT)
    logger.debug(f"Logging configured at {level}")
