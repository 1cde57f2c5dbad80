"""Error taxonomy and centralized FastAPI error handlers."""
from __future__ import annotations

import enum
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

log = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    INVALID_KEY = "invalid_key"
    TRANSPORT = "transport_error"
    UPSTREAM_STATUS = "upstream_status_error"
    DECODE = "decode_error"
    STORE_UNAVAILABLE = "store_unavailable"
    STORE_WRITE_FAILED = "store_write_failed"
    TIMEOUT = "timeout"


class WeatherCacheError(Exception):
    """Base exception with an error kind and HTTP status code."""

    kind: ErrorKind
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


# --- Origin side: hard failures, surfaced to the caller ---


class OriginError(WeatherCacheError):
    status_code = 502


class InvalidKeyError(OriginError):
    kind = ErrorKind.INVALID_KEY

    def __init__(self) -> None:
        super().__init__("Location must not be empty")


class TransportError(OriginError):
    kind = ErrorKind.TRANSPORT

    def __init__(self) -> None:
        super().__init__("Weather provider is unreachable")


class UpstreamStatusError(OriginError):
    kind = ErrorKind.UPSTREAM_STATUS

    def __init__(self, code: int):
        super().__init__(f"Weather provider returned status {code}")
        self.code = code


class DecodeError(OriginError):
    kind = ErrorKind.DECODE

    def __init__(self) -> None:
        super().__init__("Weather provider returned an unexpected payload")


# --- Store side: soft failures, absorbed by the resolver ---


class StoreError(WeatherCacheError):
    status_code = 503


class StoreUnavailableError(StoreError):
    kind = ErrorKind.STORE_UNAVAILABLE


class StoreWriteError(StoreError):
    kind = ErrorKind.STORE_WRITE_FAILED


class RequestTimeoutError(WeatherCacheError):
    kind = ErrorKind.TIMEOUT
    status_code = 504

    def __init__(self) -> None:
        super().__init__("Timed out resolving weather data")


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(WeatherCacheError)
    async def handle_weathercache_error(_request: Request, exc: WeatherCacheError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        log.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
