from __future__ import annotations

import time

from fastapi import APIRouter, Request

router = APIRouter()

_start_time = time.time()
_VERSION = "0.1.0"


@router.get("/healthz")
async def healthz(request: Request):
    store_ok = await request.app.state.store.ping()
    return {
        "status": "ok" if store_ok else "degraded",
        "version": _VERSION,
        "uptime_seconds": round(time.time() - _start_time),
        "store": "ok" if store_ok else "unavailable",
        "resolver": request.app.state.resolver.stats(),
    }
