from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WeatherRecord(BaseModel):
    """Subset of the provider's timeline response that we serve and cache.

    Unknown top-level fields are dropped; the cache layer treats the
    serialized form as an opaque blob.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    latitude: float
    longitude: float
    resolved_address: str = Field(alias="resolvedAddress")
    address: str | None = None
    timezone: str | None = None
    description: str | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
