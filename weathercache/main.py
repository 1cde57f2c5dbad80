"""weather-cache: read-through Redis cache in front of a weather API."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from weathercache.cache import MemoryStore, RedisStore
from weathercache.config import Settings, settings
from weathercache.errors import StoreUnavailableError, register_error_handlers
from weathercache.routes import health
from weathercache.routes import weather as weather_routes
from weathercache.services.resolver import Resolver
from weathercache.services.weather import WeatherClient

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("weathercache")


def build_store():
    if settings.STORE_BACKEND == "memory":
        return MemoryStore()
    return RedisStore(
        Settings.redis_url(),
        prefix=settings.CACHE_KEY_PREFIX,
        timeout=settings.STORE_TIMEOUT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    Settings.validate()

    store = build_store()
    try:
        await store.connect()
    except StoreUnavailableError as e:
        log.error("Cache store unreachable at startup: %s", e)
        raise

    client = httpx.AsyncClient(timeout=httpx.Timeout(settings.ORIGIN_TIMEOUT))
    origin = WeatherClient(
        client,
        base_url=settings.WEATHER_API_URL,
        api_key=settings.WEATHER_API_KEY,
        unit_group=settings.WEATHER_UNIT_GROUP,
        content_type=settings.WEATHER_CONTENT_TYPE,
    )
    app.state.store = store
    app.state.http = client
    app.state.resolver = Resolver(
        store,
        origin,
        ttl=settings.CACHE_TTL,
        store_timeout=settings.STORE_TIMEOUT,
        single_flight=settings.SINGLE_FLIGHT,
    )

    log.info(
        "weather-cache started: %s store, ttl %ss, single-flight %s, port %s",
        settings.STORE_BACKEND,
        settings.CACHE_TTL,
        "on" if settings.SINGLE_FLIGHT else "off",
        settings.PORT,
    )
    yield

    await client.aclose()
    await store.close()
    log.info("weather-cache shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="weather-cache",
        version="0.1.0",
        lifespan=lifespan,
    )
    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(weather_routes.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "weathercache.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
