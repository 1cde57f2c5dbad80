from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)

VISUAL_CROSSING_URL = (
    "https://weather.visualcrossing.com/VisualCrossingWebServices/rest/services/timeline"
)


def _flag(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).lower() in ("true", "1", "yes")


class Settings:
    # --- Server ---
    HOST: str = os.getenv("WEATHERCACHE_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("WEATHERCACHE_PORT", "8080"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # --- Weather origin (Visual Crossing timeline API) ---
    WEATHER_API_KEY: str = os.getenv("WEATHER_API_KEY", "")
    WEATHER_API_URL: str = os.getenv("WEATHER_API_URL", VISUAL_CROSSING_URL).rstrip("/")
    WEATHER_UNIT_GROUP: str = os.getenv("WEATHER_UNIT_GROUP", "metric")
    WEATHER_CONTENT_TYPE: str = os.getenv("WEATHER_CONTENT_TYPE", "json")

    # --- Cache store ---
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "redis").lower()
    REDIS_ADDR: str = os.getenv("REDIS_ADDR", "localhost:6379")
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    CACHE_KEY_PREFIX: str = os.getenv("CACHE_KEY_PREFIX", "weather:")
    CACHE_TTL: int = int(os.getenv("CACHE_TTL", "86400"))
    SINGLE_FLIGHT: bool = _flag("SINGLE_FLIGHT")

    # --- Timeouts (seconds) ---
    ORIGIN_TIMEOUT: float = float(os.getenv("ORIGIN_TIMEOUT", "10"))
    STORE_TIMEOUT: float = float(os.getenv("STORE_TIMEOUT", "2"))
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "15"))

    _BACKENDS = ("redis", "memory")

    @classmethod
    def validate(cls) -> None:
        """Exit the process if required settings are missing or invalid."""
        fatal = False
        if not cls.WEATHER_API_KEY:
            log.error("WEATHER_API_KEY is not set: cannot reach the weather provider")
            fatal = True
        if cls.STORE_BACKEND not in cls._BACKENDS:
            log.error(
                "STORE_BACKEND=%s is not one of %s", cls.STORE_BACKEND, ", ".join(cls._BACKENDS)
            )
            fatal = True
        if cls.CACHE_TTL <= 0:
            log.error("CACHE_TTL must be a positive number of seconds, got %s", cls.CACHE_TTL)
            fatal = True
        if cls.STORE_BACKEND == "memory":
            log.warning("STORE_BACKEND=memory: cache is per-process and lost on restart")
        if fatal:
            sys.exit(1)

    @classmethod
    def redis_url(cls) -> str:
        """Return REDIS_URL, or build one from REDIS_ADDR/REDIS_PASSWORD/REDIS_DB."""
        if cls.REDIS_URL:
            return cls.REDIS_URL
        auth = f":{cls.REDIS_PASSWORD}@" if cls.REDIS_PASSWORD else ""
        return f"redis://{auth}{cls.REDIS_ADDR}/{cls.REDIS_DB}"


settings = Settings()
