"""
FuzzyMatcher - substring-containment fallback for the closed vocabularies.

A canonical value qualifies when its normalized name contains the
normalized input or the other way round. The score is the length ratio
min(len)/max(len) of the two strings; the best candidate must score
strictly above the threshold (0.5 by default). On equal scores the value
enumerated first wins.

Only canonical names take part, synonyms are not scored.
"""

from __future__ import annotations

from typing import Optional, Tuple

from ...domains import CanonicalValue, Domain, MatchStrategy
from ...models import MatchResult
from .normalizer import normalize
from .synonyms import SynonymIndex, get_synonym_index

DEFAULT_MIN_SCORE = 0.5


def containment_score(a: str, b: str) -> float:
    """Length ratio of two normalized strings when one contains the other, else 0."""
    if not a or not b:
        return 0.0
    if a not in b and b not in a:
        return 0.0
    return min(len(a), len(b)) / max(len(a), len(b))


class FuzzyMatcher:
    def __init__(
        self,
        index: SynonymIndex | None = None,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> None:
        if not 0.0 <= min_score <= 1.0:
            raise ValueError(f"min_score must be between 0.0 and 1.0, got {min_score}")
        self._index = index or get_synonym_index()
        self._min_score = min_score

    @property
    def min_score(self) -> float:
        return self._min_score

    def best_candidate(self, text: str, domain: Domain) -> Tuple[Optional[CanonicalValue], float]:
        """Highest-scoring canonical value regardless of the threshold."""
        key = normalize(text)
        best: Optional[CanonicalValue] = None
        best_score = 0.0
        if not key:
            return best, best_score

        for value in self._index.values(domain):
            score = containment_score(key, normalize(value.value))
            if score > best_score:
                best, best_score = value, score
        return best, best_score

    def match(self, text: str, domain: Domain) -> MatchResult:
        value, score = self.best_candidate(text, domain)
        if value is None or score <= self._min_score:
            return MatchResult.absent(MatchStrategy.FUZZY)
        return MatchResult.hit(value, MatchStrategy.FUZZY, score=score)


# Singleton instance
_fuzzy_matcher: FuzzyMatcher | None = None


def get_fuzzy_matcher() -> FuzzyMatcher:
    global _fuzzy_matcher
    if _fuzzy_matcher is None:
        _fuzzy_matcher = FuzzyMatcher()
    return _fuzzy_matcher


def reset_fuzzy_matcher() -> None:
    global _fuzzy_matcher
    _fuzzy_matcher = None


def match_fuzzy(text: str, domain: Domain) -> MatchResult:
    """Containment-based fallback match for text within one domain."""
    return get_fuzzy_matcher().match(text, domain)
