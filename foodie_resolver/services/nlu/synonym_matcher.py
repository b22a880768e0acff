"""
SynonymMatcher - exact and synonym lookup against the closed vocabularies.

Order, first hit wins:
1. normalized input == normalized canonical name  -> EXACT
2. normalized input == a normalized synonym        -> SYNONYM

Purely local: never raises for a miss and never calls external services.
"""

from __future__ import annotations

from typing import Optional

from ...domains import CanonicalValue, Domain, MatchStrategy
from ...models import MatchResult
from .normalizer import normalize
from .synonyms import SynonymIndex, get_synonym_index


class SynonymMatcher:
    def __init__(self, index: SynonymIndex | None = None) -> None:
        self._index = index or get_synonym_index()

    @property
    def index(self) -> SynonymIndex:
        return self._index

    def match(self, text: str, domain: Domain) -> MatchResult:
        key = normalize(text)
        if not key:
            return MatchResult.absent(MatchStrategy.SYNONYM)

        exact = self._index.canonical_for_name(domain, key)
        if exact is not None:
            return MatchResult.hit(exact, MatchStrategy.EXACT)

        synonym = self._index.canonical_for_synonym(domain, key)
        if synonym is not None:
            return MatchResult.hit(synonym, MatchStrategy.SYNONYM)

        return MatchResult.absent(MatchStrategy.SYNONYM)

    def match_value(self, text: str, domain: Domain) -> Optional[CanonicalValue]:
        return self.match(text, domain).canonical_value


# Singleton instance
_synonym_matcher: SynonymMatcher | None = None


def get_synonym_matcher() -> SynonymMatcher:
    global _synonym_matcher
    if _synonym_matcher is None:
        _synonym_matcher = SynonymMatcher()
    return _synonym_matcher


def reset_synonym_matcher() -> None:
    global _synonym_matcher
    _synonym_matcher = None


def match_synonym(text: str, domain: Domain) -> MatchResult:
    """Exact-name or synonym match of text within one domain."""
    return get_synonym_matcher().match(text, domain)


def match_synonym_value(text: str, domain: Domain) -> Optional[CanonicalValue]:
    return get_synonym_matcher().match_value(text, domain)
