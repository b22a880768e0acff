"""
Response shapes of the external keyword/region/cuisine extractor.

The models accept both the snake_case field names and the camelCase keys
the LLM prompts ask for, and ignore anything else the model decides to add.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _clamp_confidence(value: Any) -> float:
    if value is None:
        return 0.0
    score = float(value)
    return max(0.0, min(1.0, score))


Confidence = Annotated[float, BeforeValidator(_clamp_confidence)]


class LocationTerms(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    address: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    area: Optional[str] = None


class RelevantTerms(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    cuisine_types: List[str] = Field(default_factory=list, alias="cuisineTypes")
    location: Optional[LocationTerms] = None
    establishments: List[str] = Field(default_factory=list)
    services: List[str] = Field(default_factory=list)


class KeywordExtraction(BaseModel):
    """Keywords pulled out of a free-form food query."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    cuisine: Optional[str] = None
    location: Optional[str] = None
    relevant_terms: Optional[RelevantTerms] = Field(default=None, alias="relevantTerms")
    message: Optional[str] = None

    def location_query(self) -> Optional[str]:
        """Best geocoding query the extraction offers: address, then city, then location."""
        terms = self.relevant_terms.location if self.relevant_terms else None
        for candidate in (
            terms.address if terms else None,
            terms.city if terms else None,
            self.location,
        ):
            if candidate and candidate.strip():
                return candidate.strip()
        return None


class RegionContext(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    state: Optional[str] = None
    country: Optional[str] = None
    location_type: Optional[str] = Field(default=None, alias="locationType")
    is_city: Optional[bool] = Field(default=None, alias="isCity")
    district: Optional[str] = None
    area: Optional[str] = None
    landmarks: List[str] = Field(default_factory=list)
    alternate_names: List[str] = Field(default_factory=list, alias="alternateNames")


class RegionIdentification(BaseModel):
    """Region the extractor believes a text refers to."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    location: Optional[str] = None
    confidence: Confidence = 0.0
    context: Optional[RegionContext] = None


class CuisineIdentification(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    cuisine_type: Optional[str] = Field(default=None, alias="cuisineType")
    dish_type: Optional[str] = Field(default=None, alias="dishType")
    confidence: Confidence = 0.0
