import pytest
from unittest.mock import AsyncMock

from weathercache.cache import MemoryStore
from weathercache.models import WeatherRecord
from weathercache.services.resolver import Resolver


PARIS = {
    "latitude": 48.85,
    "longitude": 2.35,
    "resolvedAddress": "Paris, France",
}


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def paris_record():
    return WeatherRecord.model_validate(PARIS)


@pytest.fixture
def origin(paris_record):
    """Origin client stub that returns the Paris record."""
    fake = AsyncMock()
    fake.fetch.return_value = paris_record
    return fake


@pytest.fixture
def resolver(store, origin):
    return Resolver(store, origin, ttl=24 * 60 * 60, store_timeout=1.0)
