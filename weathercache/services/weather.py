"""Visual Crossing timeline API client (the cache origin)."""
from __future__ import annotations

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from weathercache.errors import (
    DecodeError,
    InvalidKeyError,
    TransportError,
    UpstreamStatusError,
)
from weathercache.keys import normalize_key
from weathercache.models import WeatherRecord

log = logging.getLogger(__name__)


class WeatherClient:
    """Fetch a single location's weather from the provider.

    Makes exactly one request per ``fetch`` call and never retries. Errors
    are classified so the resolver can tell an unreachable provider from
    one that answered with a bad status or an unexpected body. Messages
    never include the API key or the request URL.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        unit_group: str = "metric",
        content_type: str = "json",
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._unit_group = unit_group
        self._content_type = content_type

    async def fetch(self, location: str) -> WeatherRecord:
        if not normalize_key(location):
            raise InvalidKeyError()

        url = f"{self._base_url}/{quote(location, safe='')}"
        params = {
            "key": self._api_key,
            "contentType": self._content_type,
            "unitGroup": self._unit_group,
        }

        log.info("Fetching weather for %r", location)
        try:
            resp = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            # exception text can carry the request URL, which holds the key
            log.warning("Weather provider unreachable for %r: %s", location, type(e).__name__)
            raise TransportError() from None

        if not resp.is_success:
            log.warning("Weather provider returned %s for %r", resp.status_code, location)
            raise UpstreamStatusError(resp.status_code)

        try:
            record = WeatherRecord.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            log.warning("Undecodable weather payload for %r: %s", location, e)
            raise DecodeError() from None

        log.info("Fetched weather for %r (%s)", location, record.resolved_address)
        return record
