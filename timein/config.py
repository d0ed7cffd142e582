"""
Runtime settings, read from environment variables.

    TIMEIN_CACHE_PATH     - snapshot file (default: data/geotz_cache.json)
    TIMEIN_CACHE_SIZE     - max cached places (default: 100)
    TIMEIN_CACHE_TTL      - seconds a looked-up place stays cached, 0 = forever (default: 7 days)
    TIMEIN_FORMAT         - "plain" or "alfred" (default: plain)
    NOMINATIM_URL         - geocoder search endpoint
    NOMINATIM_USER_AGENT  - identifies us to Nominatim (default: timein/0.1)
    NOMINATIM_TIMEOUT     - seconds per geocoder request (default: 10)
    LOG_LEVEL             - logging level name (default: WARNING)
"""

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

from timein.adapters.memory_lru_cache import DEFAULT_CAPACITY, DEFAULT_TTL
from timein.adapters.nominatim_geocoder import DEFAULT_USER_AGENT, NOMINATIM_URL


@dataclass
class Settings:
    cache_path: str = "data/geotz_cache.json"
    cache_size: int = DEFAULT_CAPACITY
    cache_ttl: int = int(DEFAULT_TTL.total_seconds())
    output_format: str = "plain"
    nominatim_url: str = NOMINATIM_URL
    nominatim_user_agent: str = DEFAULT_USER_AGENT
    nominatim_timeout: float = 10.0
    log_level: str = "WARNING"

    @property
    def cache_lifetime(self) -> timedelta | None:
        """cache_ttl as a timedelta; None when entries never expire."""
        return timedelta(seconds=self.cache_ttl) if self.cache_ttl else None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        settings = cls(
            cache_path=env.get("TIMEIN_CACHE_PATH", cls.cache_path),
            cache_size=_int_env(env, "TIMEIN_CACHE_SIZE", cls.cache_size),
            cache_ttl=_int_env(env, "TIMEIN_CACHE_TTL", cls.cache_ttl),
            output_format=env.get("TIMEIN_FORMAT", cls.output_format),
            nominatim_url=env.get("NOMINATIM_URL", cls.nominatim_url),
            nominatim_user_agent=env.get("NOMINATIM_USER_AGENT", cls.nominatim_user_agent),
            nominatim_timeout=_float_env(env, "NOMINATIM_TIMEOUT", cls.nominatim_timeout),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
        )
        if settings.cache_size <= 0:
            raise ValueError(f"TIMEIN_CACHE_SIZE must be positive, got {settings.cache_size}")
        if settings.cache_ttl < 0:
            raise ValueError(f"TIMEIN_CACHE_TTL must not be negative, got {settings.cache_ttl}")
        if settings.nominatim_timeout <= 0:
            raise ValueError(f"NOMINATIM_TIMEOUT must be positive, got {settings.nominatim_timeout}")
        if not isinstance(logging.getLevelName(settings.log_level), int):
            raise ValueError(f"LOG_LEVEL {settings.log_level!r} is not a logging level")
        return settings


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"environment variable {name!r} must be an integer, got {raw!r}") from None


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"environment variable {name!r} must be a number, got {raw!r}") from None
