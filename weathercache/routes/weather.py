from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Request, Response

from weathercache.config import settings
from weathercache.errors import RequestTimeoutError
from weathercache.services.resolver import Provenance

router = APIRouter()

log = logging.getLogger(__name__)


@router.get("/weather/{location}")
async def get_weather(location: str, request: Request):
    resolver = request.app.state.resolver
    try:
        outcome = await asyncio.wait_for(
            resolver.resolve(location), timeout=settings.REQUEST_TIMEOUT
        )
    except asyncio.TimeoutError:
        log.warning("Resolving %r exceeded %ss", location, settings.REQUEST_TIMEOUT)
        raise RequestTimeoutError() from None

    if not outcome.ok:
        raise outcome.error

    if outcome.soft_errors:
        log.info(
            "Served %r from %s, degraded: %s",
            outcome.key,
            outcome.provenance.value,
            ", ".join(k.value for k in outcome.soft_errors),
        )
    return Response(
        content=outcome.payload,
        media_type="application/json",
        headers={"X-Cache": "HIT" if outcome.provenance is Provenance.CACHE else "MISS"},
    )
