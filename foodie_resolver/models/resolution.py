from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domains import CanonicalValue, CuisineType, EstablishmentType, LocationType, MatchStrategy, ServiceType


class MatchResult(BaseModel):
    """Outcome of one matching tier for one input."""

    model_config = ConfigDict(frozen=True)

    canonical_value: Optional[CuisineType | EstablishmentType | ServiceType] = None
    strategy: MatchStrategy
    score: float = Field(default=0.0, ge=0.0, le=1.0)

    @property
    def matched(self) -> bool:
        return self.canonical_value is not None

    @classmethod
    def absent(cls, strategy: MatchStrategy) -> "MatchResult":
        return cls(canonical_value=None, strategy=strategy, score=0.0)

    @classmethod
    def hit(cls, value: CanonicalValue, strategy: MatchStrategy, score: float = 1.0) -> "MatchResult":
        return cls(canonical_value=value, strategy=strategy, score=score)


class Coordinates(BaseModel):
    lat: float
    lng: float


class LocationResolution(BaseModel):
    """Structured location produced by the geocoder."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    location: Optional[str] = None
    location_type: Optional[LocationType] = Field(default=None, alias="locationType")
    state: Optional[str] = None
    district: Optional[str] = None
    area: Optional[str] = None
    address: Optional[str] = None
    full_address: Optional[str] = Field(default=None, alias="fullAddress")
    coordinates: Optional[Coordinates] = None

    @property
    def is_valid(self) -> bool:
        # A resolution without a location or an address cannot be used for search.
        return bool(self.location or self.address)
