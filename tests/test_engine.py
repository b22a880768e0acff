from __future__ import annotations

import asyncio
import logging

import pytest

from foodie_resolver import get_engine
from foodie_resolver.config import Settings, get_settings
from foodie_resolver.domains import CuisineType, Domain, EstablishmentType, MatchStrategy, ServiceType
from foodie_resolver.models import CuisineIdentification, KeywordExtraction
from foodie_resolver.services.cache import get_resolution_cache
from foodie_resolver.services.engine import (
    ResolutionEngine,
    UnconfiguredExtractor,
    UnconfiguredGeocoder,
    get_resolution_engine,
    reset_resolution_engine,
)
from foodie_resolver.services.errors import ConfigurationError, InvalidInputError
from foodie_resolver.services.metrics import ResolutionMetrics

from conftest import FakeExtractor, FakeGeocoder, make_location


class TestClosedVocabularies:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("outdoor seat", ServiceType.OUTDOOR_SEATING),
            ("tapau", ServiceType.TAKEOUT),
            ("DELIVERY", ServiceType.DELIVERY),
            ("drive thru", ServiceType.DRIVE_THRU),
            ("xyz", None),
        ],
    )
    def test_match_service_type(self, engine: ResolutionEngine, text, expected):
        assert engine.match_service_type(text) is expected

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("hawker stall", EstablishmentType.FOOD_COURT_STALL),
            ("warung", EstablishmentType.RESTAURANT),
            ("food trucks", EstablishmentType.FOOD_TRUCK),
            ("", None),
        ],
    )
    def test_match_establishment_type(self, engine: ResolutionEngine, text, expected):
        assert engine.match_establishment_type(text) is expected

    def test_local_matching_never_calls_external(self, engine: ResolutionEngine, extractor, geocoder):
        engine.match_service_type("bungkus")
        engine.match_establishment_type("cloud kitchen")
        engine.classify("japanese food", Domain.CUISINE)
        assert extractor.calls == []
        assert geocoder.call_count == 0

    def test_classify_cuisine_locally(self, engine: ResolutionEngine):
        result = engine.classify("japanese food", Domain.CUISINE)
        assert result.canonical_value is CuisineType.JAPANESE
        assert result.strategy is MatchStrategy.FUZZY

    def test_non_string_rejected(self, engine: ResolutionEngine):
        with pytest.raises(InvalidInputError):
            engine.match_service_type(None)


class TestCuisine:
    def test_resolve_cuisine_synonym(self, engine: ResolutionEngine):
        assert asyncio.run(engine.resolve_cuisine("dim sum")) is CuisineType.CHINESE

    def test_resolve_cuisine_external(self, engine: ResolutionEngine, extractor: FakeExtractor):
        extractor.cuisine = CuisineIdentification(cuisine_type="Middle Eastern", confidence=0.88)
        assert asyncio.run(engine.resolve_cuisine("falafel wrap")) is CuisineType.MIDDLE_EASTERN
        assert engine.cache.cuisine.get("falafelwrap") is CuisineType.MIDDLE_EASTERN

    def test_resolve_cuisine_absent(self, engine: ResolutionEngine):
        assert asyncio.run(engine.resolve_cuisine("xyz")) is None


class TestLocation:
    def test_resolve_location(self, engine: ResolutionEngine, extractor: FakeExtractor, geocoder: FakeGeocoder):
        resolution = make_location(district="Bangsar")
        extractor.keywords = KeywordExtraction(location="Bangsar")
        geocoder.default = resolution

        assert asyncio.run(engine.resolve_location("nasi lemak bangsar")) == resolution
        assert asyncio.run(engine.resolve_location("nasi lemak bangsar")) == resolution
        assert geocoder.call_count == 1

    def test_resolve_location_absent(self, engine: ResolutionEngine):
        assert asyncio.run(engine.resolve_location("nowhere at all")) is None


class TestMetrics:
    def test_strategies_recorded(self, engine: ResolutionEngine, metrics: ResolutionMetrics):
        engine.match_service_type("DINE_IN")
        engine.match_service_type("tapau")
        engine.match_service_type("xyz")
        asyncio.run(engine.resolve_cuisine("sushi"))

        snapshot = metrics.snapshot()
        assert snapshot.resolutions_total == 4
        assert snapshot.resolutions_by_strategy == {"exact": 1, "synonym": 2}
        assert snapshot.absent_results == 1
        assert snapshot.entities == {"service": 3, "cuisine": 1}

    def test_cache_hit_rate(self, metrics: ResolutionMetrics):
        metrics.record_cache_lookup(True)
        metrics.record_cache_lookup(False)
        metrics.record_cache_lookup(True)
        metrics.record_cache_lookup(True)
        assert metrics.snapshot().cache_hit_rate == pytest.approx(0.75)

    def test_external_latency(self, metrics: ResolutionMetrics):
        metrics.record_external_call("search_location", latency_ms=10.0)
        metrics.record_external_call("search_location", latency_ms=30.0)
        snapshot = metrics.snapshot()
        assert snapshot.external_calls == {"search_location": 2}
        assert snapshot.avg_external_latency_ms == pytest.approx(20.0)


class TestUnconfigured:
    def test_missing_credentials_degrade_to_local(self, settings: Settings, index, caplog):
        engine = ResolutionEngine(settings, index=index, metrics=ResolutionMetrics())

        with caplog.at_level(logging.WARNING):
            assert asyncio.run(engine.resolve_cuisine("omakase")) is None
            assert asyncio.run(engine.resolve_cuisine("sushi")) is CuisineType.JAPANESE
            assert asyncio.run(engine.resolve_location("bangsar")) is None

        assert "CONFIGURATION_ERROR" in caplog.text
        failures = engine.metrics.snapshot().external_failures
        assert failures["identify_cuisine_and_dish"] == 1
        assert failures["search_location"] == 1

    def test_stand_ins_raise(self):
        with pytest.raises(ConfigurationError):
            asyncio.run(UnconfiguredExtractor("no key").extract_keywords("bangsar"))
        with pytest.raises(ConfigurationError):
            asyncio.run(UnconfiguredGeocoder("no key").search_location("bangsar"))


class TestSingleton:
    def test_get_engine_is_cached(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "")
        monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "")
        get_settings.cache_clear()
        try:
            first = get_resolution_engine()
            assert get_engine() is first
            reset_resolution_engine()
            assert get_resolution_engine() is not first
        finally:
            get_settings.cache_clear()

    def test_engine_shares_process_cache(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "")
        monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "")
        get_settings.cache_clear()
        try:
            engine = get_resolution_engine()
            assert engine.cache is get_resolution_cache()
            reset_resolution_engine()
            # A rebuilt engine still sees earlier resolutions
            assert get_resolution_engine().cache is engine.cache
        finally:
            get_settings.cache_clear()

    def test_injected_cache_wins(self, settings: Settings, index, cache):
        engine = ResolutionEngine(settings, index=index, cache=cache, metrics=ResolutionMetrics())
        assert engine.cache is cache
        assert engine.cache is not get_resolution_cache()
