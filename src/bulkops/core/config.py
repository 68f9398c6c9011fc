"""Environment-driven settings for bulkops."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from bulkops.core.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    ENV_PREFIX,
)

__all__ = ["Settings", "load_settings"]

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment.

    Attributes:
        max_concurrency: Default slice size for batch operations
        max_retries: Default per-item retries of recoverable errors
        log_level: structlog level name (DEBUG, INFO, ...)
        log_json: Render log lines as JSON instead of console output
    """

    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    max_retries: int = DEFAULT_MAX_RETRIES
    log_level: str = DEFAULT_LOG_LEVEL
    log_json: bool = False


def _int_setting(raw: str | None, default: int, minimum: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Resolve settings from ``BULKOPS_*`` environment variables.

    Invalid or out-of-range values fall back to the defaults.

    Args:
        environ: Optional mapping to read instead of ``os.environ``.

    Returns:
        Settings instance.
    """

    env = os.environ if environ is None else environ

    level = env.get(f"{ENV_PREFIX}LOG_LEVEL", "").strip().upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = DEFAULT_LOG_LEVEL

    return Settings(
        max_concurrency=_int_setting(
            env.get(f"{ENV_PREFIX}MAX_CONCURRENCY"), DEFAULT_MAX_CONCURRENCY, 1
        ),
        max_retries=_int_setting(
            env.get(f"{ENV_PREFIX}MAX_RETRIES"), DEFAULT_MAX_RETRIES, 0
        ),
        log_level=level,
        log_json=env.get(f"{ENV_PREFIX}LOG_JSON", "").lower() in _TRUTHY,
    )
