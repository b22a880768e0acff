"""
NLU module - local matching of free text against the closed vocabularies.

Components:
- normalize: canonical comparison form of a raw string
- SynonymIndex: immutable multilingual synonym tables per domain
- SynonymMatcher: exact-name and synonym lookup
- FuzzyMatcher: substring-containment fallback scoring
"""

from .normalizer import normalize
from .synonyms import SynonymIndex, build_synonym_index, get_synonym_index, reset_synonym_index
from .synonym_matcher import (
    SynonymMatcher,
    get_synonym_matcher,
    match_synonym,
    match_synonym_value,
    reset_synonym_matcher,
)
from .fuzzy_matcher import FuzzyMatcher, containment_score, get_fuzzy_matcher, match_fuzzy, reset_fuzzy_matcher

__all__ = [
    "normalize",
    "SynonymIndex",
    "build_synonym_index",
    "get_synonym_index",
    "reset_synonym_index",
    "SynonymMatcher",
    "get_synonym_matcher",
    "match_synonym",
    "match_synonym_value",
    "reset_synonym_matcher",
    "FuzzyMatcher",
    "containment_score",
    "get_fuzzy_matcher",
    "match_fuzzy",
    "reset_fuzzy_matcher",
]
