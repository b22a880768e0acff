"""Shared pytest fixtures for all tests."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import pytest

from foodie_resolver.config import Settings
from foodie_resolver.models import (
    CuisineIdentification,
    KeywordExtraction,
    LocationResolution,
    RegionIdentification,
)
from foodie_resolver.services.cache import ResolutionCache, reset_resolution_cache
from foodie_resolver.services.engine import ResolutionEngine, reset_resolution_engine
from foodie_resolver.services.metrics import ResolutionMetrics
from foodie_resolver.services.nlu import (
    FuzzyMatcher,
    SynonymIndex,
    SynonymMatcher,
    build_synonym_index,
    reset_fuzzy_matcher,
    reset_synonym_index,
    reset_synonym_matcher,
)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExtractor:
    """In-memory KeywordExtractor with per-operation canned answers, errors and delays."""

    def __init__(
        self,
        *,
        keywords: KeywordExtraction | None = None,
        region: RegionIdentification | None = None,
        cuisine: CuisineIdentification | None = None,
        errors: Dict[str, Exception] | None = None,
        delays: Dict[str, float] | None = None,
    ) -> None:
        self.keywords = keywords or KeywordExtraction()
        self.region = region or RegionIdentification()
        self.cuisine = cuisine or CuisineIdentification()
        self.errors = errors or {}
        self.delays = delays or {}
        self.calls: List[tuple[str, str]] = []

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    async def _enter(self, operation: str, text: str) -> None:
        self.calls.append((operation, text))
        if operation in self.delays:
            await asyncio.sleep(self.delays[operation])
        if operation in self.errors:
            raise self.errors[operation]

    async def extract_keywords(self, text: str) -> KeywordExtraction:
        await self._enter("extract_keywords", text)
        return self.keywords

    async def identify_region(self, text: str) -> RegionIdentification:
        await self._enter("identify_region", text)
        return self.region

    async def identify_cuisine_and_dish(self, text: str) -> CuisineIdentification:
        await self._enter("identify_cuisine_and_dish", text)
        return self.cuisine


class FakeGeocoder:
    """In-memory Geocoder; answers by exact query, falling back to `default`."""

    def __init__(
        self,
        results: Dict[str, Optional[LocationResolution]] | None = None,
        *,
        default: LocationResolution | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.results = results or {}
        self.default = default
        self.error = error
        self.delay = delay
        self.queries: List[str] = []

    @property
    def call_count(self) -> int:
        return len(self.queries)

    async def search_location(self, query: str) -> Optional[LocationResolution]:
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.results.get(query, self.default)


def make_location(location: str = "Kuala Lumpur, Wilayah Persekutuan Kuala Lumpur", **kwargs) -> LocationResolution:
    return LocationResolution(
        location=location,
        state=kwargs.pop("state", "Wilayah Persekutuan Kuala Lumpur"),
        address=kwargs.pop("address", f"{location}, Malaysia"),
        **kwargs,
    )


@pytest.fixture(autouse=True)
def _reset_singletons():
    yield
    reset_synonym_index()
    reset_synonym_matcher()
    reset_fuzzy_matcher()
    reset_resolution_cache()
    reset_resolution_engine()


@pytest.fixture
def settings() -> Settings:
    """Default settings for tests: no credentials, default thresholds."""
    return Settings(
        openai_api_key="",
        google_places_api_key="",
        synonyms_overlay_path=None,
        external_call_timeout_seconds=1.0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def index() -> SynonymIndex:
    return build_synonym_index()


@pytest.fixture
def synonym_matcher(index: SynonymIndex) -> SynonymMatcher:
    return SynonymMatcher(index)


@pytest.fixture
def fuzzy_matcher(index: SynonymIndex) -> FuzzyMatcher:
    return FuzzyMatcher(index)


@pytest.fixture
def metrics() -> ResolutionMetrics:
    return ResolutionMetrics()


@pytest.fixture
def cache(settings: Settings, clock: FakeClock) -> ResolutionCache:
    return ResolutionCache(settings.cache_ttl_seconds, clock=clock)


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def engine(
    settings: Settings,
    extractor: FakeExtractor,
    geocoder: FakeGeocoder,
    index: SynonymIndex,
    cache: ResolutionCache,
    metrics: ResolutionMetrics,
) -> ResolutionEngine:
    return ResolutionEngine(
        settings,
        extractor=extractor,
        geocoder=geocoder,
        index=index,
        cache=cache,
        metrics=metrics,
    )
