from __future__ import annotations

import asyncio

import pytest

from foodie_resolver.domains import CuisineType, Domain, EstablishmentType, MatchStrategy, ServiceType
from foodie_resolver.models import CuisineIdentification
from foodie_resolver.services.classifiers import CuisineClassifier, VocabularyClassifier
from foodie_resolver.services.errors import ExtractorError

from conftest import FakeExtractor


@pytest.fixture
def make_classifier(settings, synonym_matcher, fuzzy_matcher, cache, metrics):
    def factory(extractor: FakeExtractor) -> CuisineClassifier:
        return CuisineClassifier(
            synonym_matcher=synonym_matcher,
            fuzzy_matcher=fuzzy_matcher,
            extractor=extractor,
            cache=cache.cuisine,
            settings=settings,
            metrics=metrics,
        )

    return factory


def _identified(label: str | None, confidence: float) -> FakeExtractor:
    return FakeExtractor(cuisine=CuisineIdentification(cuisine_type=label, dish_type="main course", confidence=confidence))


class TestVocabularyClassifier:
    def test_service_synonym_then_fuzzy(self, synonym_matcher, fuzzy_matcher):
        classifier = VocabularyClassifier(Domain.SERVICE, synonym_matcher=synonym_matcher, fuzzy_matcher=fuzzy_matcher)

        assert classifier.classify("tapau").canonical_value is ServiceType.TAKEOUT
        fuzzy = classifier.classify("catering svc")
        assert fuzzy.canonical_value is ServiceType.CATERING
        assert fuzzy.strategy is MatchStrategy.FUZZY
        assert not classifier.classify("xyz").matched

    def test_establishment(self, synonym_matcher, fuzzy_matcher):
        classifier = VocabularyClassifier(
            Domain.ESTABLISHMENT, synonym_matcher=synonym_matcher, fuzzy_matcher=fuzzy_matcher
        )
        assert classifier.classify("Pasar Malam").canonical_value is EstablishmentType.POP_UP_STALL
        assert classifier.classify("restaurants").canonical_value is EstablishmentType.RESTAURANT


class TestCuisineClassifier:
    def test_synonym_hit_skips_external(self, make_classifier):
        extractor = _identified("Korean", 0.99)
        result = asyncio.run(make_classifier(extractor).classify("Nasi Lemak"))

        assert result.canonical_value is CuisineType.MALAYSIAN
        assert result.strategy is MatchStrategy.SYNONYM
        assert extractor.calls == []

    def test_exact_name(self, make_classifier):
        result = asyncio.run(make_classifier(FakeExtractor()).classify("VIETNAMESE"))
        assert result.canonical_value is CuisineType.VIETNAMESE
        assert result.strategy is MatchStrategy.EXACT

    def test_external_label_accepted_and_cached(self, make_classifier, cache, metrics):
        extractor = _identified("Japanese", 0.9)
        classifier = make_classifier(extractor)

        first = asyncio.run(classifier.classify("omakase"))
        second = asyncio.run(classifier.classify("Omakase!"))

        assert first.canonical_value is second.canonical_value is CuisineType.JAPANESE
        assert first.strategy is MatchStrategy.EXTERNAL
        assert first.score == pytest.approx(0.9)
        assert second.strategy is MatchStrategy.EXTERNAL
        assert extractor.count("identify_cuisine_and_dish") == 1
        assert cache.cuisine.get("omakase") is CuisineType.JAPANESE
        assert metrics.snapshot().cache_hits == 1

    def test_cached_label_expires_after_one_day(self, make_classifier, settings, clock):
        extractor = _identified("Japanese", 0.9)
        classifier = make_classifier(extractor)

        asyncio.run(classifier.classify("omakase"))
        clock.advance(settings.cache_ttl_seconds)
        at_ttl = asyncio.run(classifier.classify("omakase"))
        assert extractor.count("identify_cuisine_and_dish") == 1

        clock.advance(1)
        after_ttl = asyncio.run(classifier.classify("omakase"))

        assert at_ttl.canonical_value is after_ttl.canonical_value is CuisineType.JAPANESE
        assert extractor.count("identify_cuisine_and_dish") == 2

    def test_external_label_resolved_through_synonyms(self, make_classifier):
        extractor = _identified("Tom Yam", 0.8)
        result = asyncio.run(make_classifier(extractor).classify("kaeng som"))
        assert result.canonical_value is CuisineType.THAI

    def test_confidence_threshold_is_strict(self, make_classifier, cache):
        extractor = _identified("Japanese", 0.7)
        result = asyncio.run(make_classifier(extractor).classify("omakase"))

        assert not result.matched
        assert result.strategy is MatchStrategy.FUZZY
        assert cache.cuisine.size() == 0

    def test_label_outside_vocabulary_rejected(self, make_classifier, cache, metrics):
        extractor = _identified("Peruvian", 0.95)
        result = asyncio.run(make_classifier(extractor).classify("ceviche"))

        assert not result.matched
        assert cache.cuisine.size() == 0
        assert metrics.snapshot().rejected_external_labels == 1

    def test_label_needs_synonym_round_trip(self, make_classifier, cache):
        # "japanese food" would only match fuzzily, which is not enough for an external label
        extractor = _identified("japanese food", 0.95)
        result = asyncio.run(make_classifier(extractor).classify("omakase"))

        assert not result.matched
        assert cache.cuisine.size() == 0

    def test_fallback_fuzzy_uses_raw_input(self, make_classifier):
        extractor = _identified("Japanese", 0.95)
        extractor.errors["identify_cuisine_and_dish"] = ExtractorError("llm down")

        result = asyncio.run(make_classifier(extractor).classify("koreans"))

        assert result.canonical_value is CuisineType.KOREAN
        assert result.strategy is MatchStrategy.FUZZY

    def test_rejected_label_falls_back_on_raw_input(self, make_classifier, cache):
        extractor = _identified("Peruvian", 0.95)
        result = asyncio.run(make_classifier(extractor).classify("koreans"))

        assert result.canonical_value is CuisineType.KOREAN
        assert result.strategy is MatchStrategy.FUZZY
        assert cache.cuisine.size() == 0

    def test_timeout_falls_back(self, make_classifier, metrics):
        extractor = _identified("Japanese", 0.95)
        extractor.delays["identify_cuisine_and_dish"] = 1.0

        result = asyncio.run(make_classifier(extractor).classify("japanese cuisine", timeout=0.05))

        # "japanesecuisine" vs "japanese" scores 8/15
        assert result.canonical_value is CuisineType.JAPANESE
        assert result.strategy is MatchStrategy.FUZZY
        assert metrics.snapshot().external_timeouts == 1

    def test_empty_input(self, make_classifier):
        extractor = _identified("Japanese", 0.95)
        result = asyncio.run(make_classifier(extractor).classify("  ?? "))

        assert not result.matched
        assert extractor.calls == []
