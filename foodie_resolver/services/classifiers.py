"""
Domain classifiers built on the local matchers.

- VocabularyClassifier: exact/synonym then fuzzy. Used for service and
  establishment types, whose vocabularies are small and fully curated.
- CuisineClassifier: adds a cache and the external cuisine identifier
  between the local synonym lookup and the fuzzy fallback.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..domains import CuisineType, Domain, MatchStrategy
from ..models import MatchResult
from ..utils.logging import get_resolution_logger
from .cache import TTLCache
from .contracts import KeywordExtractor, guarded_call
from .metrics import ResolutionMetrics, get_metrics
from .nlu import FuzzyMatcher, SynonymMatcher, normalize

logger = logging.getLogger(__name__)


class VocabularyClassifier:
    """Local-only classifier for one closed vocabulary."""

    def __init__(
        self,
        domain: Domain,
        *,
        synonym_matcher: SynonymMatcher,
        fuzzy_matcher: FuzzyMatcher,
    ) -> None:
        self.domain = domain
        self._synonym_matcher = synonym_matcher
        self._fuzzy_matcher = fuzzy_matcher

    def classify(self, text: str) -> MatchResult:
        result = self._synonym_matcher.match(text, self.domain)
        if result.matched:
            return result
        return self._fuzzy_matcher.match(text, self.domain)


class CuisineClassifier:
    """
    Cuisine resolution with an external fallback.

    (a) exact/synonym hit -> returned at once, no cache or external call
    (b) cuisine cache
    (c) external identifier; its label is accepted only above the confidence
        bar AND when it resolves through the synonym matcher; accepted
        values are cached
    (d) otherwise fuzzy match on the raw input (not on the external label)
    """

    def __init__(
        self,
        *,
        synonym_matcher: SynonymMatcher,
        fuzzy_matcher: FuzzyMatcher,
        extractor: KeywordExtractor,
        cache: TTLCache[CuisineType],
        settings: Settings | None = None,
        metrics: ResolutionMetrics | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._synonym_matcher = synonym_matcher
        self._fuzzy_matcher = fuzzy_matcher
        self._extractor = extractor
        self._cache = cache
        self._metrics = metrics or get_metrics()
        self._min_confidence = self._settings.external_min_confidence

    async def classify(
        self,
        text: str,
        *,
        timeout: float | None = None,
        trace_id: str | None = None,
    ) -> MatchResult:
        local = self._synonym_matcher.match(text, Domain.CUISINE)
        if local.matched:
            return local

        key = normalize(text)
        if not key:
            return MatchResult.absent(local.strategy)

        log = get_resolution_logger(logger, trace_id=trace_id, entity=Domain.CUISINE.value, key=key)
        cached = self._cache.get(key)
        self._metrics.record_cache_lookup(cached is not None)
        if cached is not None:
            log.debug("cache hit value=%s", cached.value)
            return MatchResult.hit(cached, MatchStrategy.EXTERNAL)

        identification = await guarded_call(
            self._extractor.identify_cuisine_and_dish(text),
            operation="identify_cuisine_and_dish",
            timeout=timeout if timeout is not None else self._settings.external_call_timeout_seconds,
            log=log,
            metrics=self._metrics,
        )
        if identification is not None and identification.confidence > self._min_confidence:
            label = identification.cuisine_type or ""
            value = self._synonym_matcher.match_value(label, Domain.CUISINE) if label else None
            if isinstance(value, CuisineType):
                self._cache.put(key, value)
                log.info("external label=%r accepted as %s", label, value.value)
                return MatchResult.hit(value, MatchStrategy.EXTERNAL, score=identification.confidence)
            self._metrics.record_rejected_label()
            log.info("external label=%r does not resolve to a cuisine", label)

        # Falls back on the raw input, not on the external label.
        return self._fuzzy_matcher.match(text, Domain.CUISINE)


__all__ = ["CuisineClassifier", "VocabularyClassifier"]
