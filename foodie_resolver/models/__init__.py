from __future__ import annotations

from .extraction import (
    CuisineIdentification,
    KeywordExtraction,
    LocationTerms,
    RegionContext,
    RegionIdentification,
    RelevantTerms,
)
from .resolution import Coordinates, LocationResolution, MatchResult

__all__ = [
    "Coordinates",
    "CuisineIdentification",
    "KeywordExtraction",
    "LocationResolution",
    "LocationTerms",
    "MatchResult",
    "RegionContext",
    "RegionIdentification",
    "RelevantTerms",
]
