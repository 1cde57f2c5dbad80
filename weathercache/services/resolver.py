"""Cache-aside resolution: check the store, fetch from origin on miss, write back.

Store failures are soft: a store that cannot be read is treated as a miss,
and a failed write-back is logged and skipped. Origin failures are hard and
end up in the returned ``Outcome``.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Protocol

from weathercache.errors import ErrorKind, InvalidKeyError, OriginError, StoreError
from weathercache.keys import normalize_key
from weathercache.models import WeatherRecord

log = logging.getLogger(__name__)


class Store(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...


class Origin(Protocol):
    async def fetch(self, location: str) -> WeatherRecord: ...


class Provenance(str, enum.Enum):
    CACHE = "cache"
    ORIGIN = "origin"
    FAILED = "failed"


@dataclass
class Outcome:
    provenance: Provenance
    key: str
    payload: str | None = None
    error: OriginError | None = None
    soft_errors: list[ErrorKind] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.provenance is not Provenance.FAILED


class Resolver:
    def __init__(
        self,
        store: Store,
        origin: Origin,
        ttl: int = 24 * 60 * 60,
        store_timeout: float = 2.0,
        single_flight: bool = False,
    ) -> None:
        self._store = store
        self._origin = origin
        self._ttl = ttl
        self._store_timeout = store_timeout
        self._single_flight = single_flight
        self._inflight: dict[str, asyncio.Task] = {}
        self._stats = {
            "hits": 0,
            "misses": 0,
            "origin_failures": 0,
            "invalid_keys": 0,
            "store_errors": 0,
        }

    def stats(self) -> dict[str, int]:
        return dict(self._stats)

    async def resolve(self, raw_key: str) -> Outcome:
        key = normalize_key(raw_key)
        if not key:
            self._stats["invalid_keys"] += 1
            return Outcome(Provenance.FAILED, key, error=InvalidKeyError())

        soft_errors: list[ErrorKind] = []
        try:
            cached = await asyncio.wait_for(self._store.get(key), self._store_timeout)
        except (StoreError, asyncio.TimeoutError) as e:
            log.warning("Cache read failed for %r, falling back to origin: %s", key, _describe(e))
            self._stats["store_errors"] += 1
            soft_errors.append(ErrorKind.STORE_UNAVAILABLE)
            cached = None

        if cached is not None:
            self._stats["hits"] += 1
            log.debug("Cache hit for %r", key)
            return Outcome(Provenance.CACHE, key, payload=cached)

        self._stats["misses"] += 1
        log.info("Cache miss for %r", key)

        if not self._single_flight:
            outcome = await self._fetch_and_populate(key, raw_key)
        else:
            task = self._inflight.get(key)
            if task is None:
                task = asyncio.ensure_future(self._fetch_and_populate(key, raw_key))
                self._inflight[key] = task
                task.add_done_callback(lambda t, k=key: self._forget(k, t))
            else:
                log.debug("Joining in-flight fetch for %r", key)
            # shielded so one caller's cancellation does not cancel the others
            shared = await asyncio.shield(task)
            outcome = Outcome(
                shared.provenance,
                key,
                payload=shared.payload,
                error=shared.error,
                soft_errors=list(shared.soft_errors),
            )

        outcome.soft_errors[:0] = soft_errors
        return outcome

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _fetch_and_populate(self, key: str, raw_key: str) -> Outcome:
        try:
            record = await self._origin.fetch(raw_key)
        except OriginError as e:
            log.warning("Origin fetch failed for %r: %s", raw_key, e)
            return self._failed(key, e)

        payload = record.to_json()
        soft_errors: list[ErrorKind] = []
        try:
            await asyncio.wait_for(self._store.set(key, payload, self._ttl), self._store_timeout)
        except (StoreError, asyncio.TimeoutError) as e:
            log.warning("Cache write-back failed for %r, serving uncached: %s", key, _describe(e))
            self._stats["store_errors"] += 1
            soft_errors.append(ErrorKind.STORE_WRITE_FAILED)

        return Outcome(Provenance.ORIGIN, key, payload=payload, soft_errors=soft_errors)

    def _failed(self, key: str, error: OriginError) -> Outcome:
        self._stats["origin_failures"] += 1
        return Outcome(Provenance.FAILED, key, error=error)


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "timed out"
    return str(exc)
