from __future__ import annotations

import logging
import uuid
from typing import Optional

from ..config import Settings, get_settings
from ..domains import CuisineType, Domain, EstablishmentType, ServiceType
from ..models import (
    CuisineIdentification,
    KeywordExtraction,
    LocationResolution,
    MatchResult,
    RegionIdentification,
)
from .cache import ResolutionCache, get_resolution_cache
from .classifiers import CuisineClassifier, VocabularyClassifier
from .contracts import Geocoder, KeywordExtractor
from .errors import ConfigurationError
from .langchain_extractor import LangchainExtractionClient
from .location_resolver import LocationResolver
from .metrics import ResolutionMetrics, get_metrics
from .nlu import FuzzyMatcher, SynonymIndex, SynonymMatcher, get_synonym_index
from .places_geocoder import PlacesGeocoder

logger = logging.getLogger(__name__)


def new_trace_id() -> str:
    return uuid.uuid4().hex[:12]


class UnconfiguredExtractor:
    """Stand-in used when no extractor credentials are configured; every call fails."""

    def __init__(self, reason: str) -> None:
        self._reason = reason

    async def extract_keywords(self, text: str) -> KeywordExtraction:
        raise ConfigurationError(self._reason, reason="extractor_not_configured")

    async def identify_region(self, text: str) -> RegionIdentification:
        raise ConfigurationError(self._reason, reason="extractor_not_configured")

    async def identify_cuisine_and_dish(self, text: str) -> CuisineIdentification:
        raise ConfigurationError(self._reason, reason="extractor_not_configured")


class UnconfiguredGeocoder:
    """Stand-in used when no geocoder credentials are configured; every call fails."""

    def __init__(self, reason: str) -> None:
        self._reason = reason

    async def search_location(self, query: str) -> Optional[LocationResolution]:
        raise ConfigurationError(self._reason, reason="geocoder_not_configured")


def build_default_extractor(settings: Settings) -> KeywordExtractor:
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; external cuisine/location extraction disabled")
        return UnconfiguredExtractor("OPENAI_API_KEY is required for keyword extraction")
    return LangchainExtractionClient(settings)


def build_default_geocoder(settings: Settings) -> Geocoder:
    if not settings.google_places_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY is not set; geocoding disabled")
        return UnconfiguredGeocoder("GOOGLE_PLACES_API_KEY is required for geocoding")
    return PlacesGeocoder(settings)


class ResolutionEngine:
    """
    Entry point for request handlers.

    Exposes the four query operations:
    - resolve_cuisine(text)          -> CuisineType | None
    - match_service_type(text)       -> ServiceType | None
    - match_establishment_type(text) -> EstablishmentType | None
    - resolve_location(text)         -> LocationResolution | None

    "No match" is always None. Only non-string input raises
    (InvalidInputError); external failures degrade to local matching.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        extractor: KeywordExtractor | None = None,
        geocoder: Geocoder | None = None,
        index: SynonymIndex | None = None,
        cache: ResolutionCache | None = None,
        metrics: ResolutionMetrics | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._metrics = metrics or get_metrics()
        self._cache = cache or get_resolution_cache()
        index = index or get_synonym_index()
        self._synonym_matcher = SynonymMatcher(index)
        self._fuzzy_matcher = FuzzyMatcher(index, min_score=self._settings.fuzzy_min_score)
        self._extractor = extractor or build_default_extractor(self._settings)
        self._geocoder = geocoder or build_default_geocoder(self._settings)

        self._service = VocabularyClassifier(
            Domain.SERVICE,
            synonym_matcher=self._synonym_matcher,
            fuzzy_matcher=self._fuzzy_matcher,
        )
        self._establishment = VocabularyClassifier(
            Domain.ESTABLISHMENT,
            synonym_matcher=self._synonym_matcher,
            fuzzy_matcher=self._fuzzy_matcher,
        )
        self._cuisine = CuisineClassifier(
            synonym_matcher=self._synonym_matcher,
            fuzzy_matcher=self._fuzzy_matcher,
            extractor=self._extractor,
            cache=self._cache.cuisine,
            settings=self._settings,
            metrics=self._metrics,
        )
        self._location = LocationResolver(
            extractor=self._extractor,
            geocoder=self._geocoder,
            cache=self._cache.location,
            settings=self._settings,
            metrics=self._metrics,
        )

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    @property
    def metrics(self) -> ResolutionMetrics:
        return self._metrics

    # =========================================================================
    # Closed vocabularies without external fallback
    # =========================================================================

    def classify(self, text: str, domain: Domain) -> MatchResult:
        """Local exact/synonym/fuzzy classification within any domain."""
        if domain is Domain.SERVICE:
            result = self._service.classify(text)
        elif domain is Domain.ESTABLISHMENT:
            result = self._establishment.classify(text)
        else:
            synonym = self._synonym_matcher.match(text, domain)
            result = synonym if synonym.matched else self._fuzzy_matcher.match(text, domain)
        self._record(domain.value, result)
        return result

    def match_service_type(self, text: str) -> Optional[ServiceType]:
        return self.classify(text, Domain.SERVICE).canonical_value

    def match_establishment_type(self, text: str) -> Optional[EstablishmentType]:
        return self.classify(text, Domain.ESTABLISHMENT).canonical_value

    # =========================================================================
    # Open-ended domains
    # =========================================================================

    async def classify_cuisine(
        self,
        text: str,
        *,
        timeout: float | None = None,
        trace_id: str | None = None,
    ) -> MatchResult:
        result = await self._cuisine.classify(text, timeout=timeout, trace_id=trace_id or new_trace_id())
        self._record(Domain.CUISINE.value, result)
        return result

    async def resolve_cuisine(
        self,
        text: str,
        *,
        timeout: float | None = None,
        trace_id: str | None = None,
    ) -> Optional[CuisineType]:
        result = await self.classify_cuisine(text, timeout=timeout, trace_id=trace_id)
        return result.canonical_value

    async def resolve_location(
        self,
        text: str,
        *,
        timeout: float | None = None,
        trace_id: str | None = None,
    ) -> Optional[LocationResolution]:
        resolution = await self._location.resolve(text, timeout=timeout, trace_id=trace_id or new_trace_id())
        self._metrics.record_resolution(entity="location", strategy="external" if resolution else None)
        return resolution

    def _record(self, entity: str, result: MatchResult) -> None:
        self._metrics.record_resolution(
            entity=entity,
            strategy=result.strategy.value if result.matched else None,
        )


# Singleton instance
_engine: ResolutionEngine | None = None


def get_resolution_engine() -> ResolutionEngine:
    """Return the process-wide engine, built from settings on first use."""
    global _engine
    if _engine is None:
        _engine = ResolutionEngine()
        logger.info("Resolution engine initialized (env=%s)", _engine._settings.env)
    return _engine


def reset_resolution_engine() -> None:
    """Drop the singleton (for tests)."""
    global _engine
    _engine = None
