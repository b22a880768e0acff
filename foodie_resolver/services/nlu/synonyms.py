"""
SynonymIndex - curated multilingual synonyms for the closed vocabularies.

Tables are keyed by canonical enum value and list the colloquial, Malay,
Chinese-dialect and English variants users actually type ("tapau",
"makan sini", "kaki lima"). The index is built once per process and is
read-only afterwards; optional YAML overlays can extend it at startup.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from ...config import get_settings
from ...domains import (
    CanonicalValue,
    CuisineType,
    Domain,
    EstablishmentType,
    ServiceType,
)
from ..errors import ConfigurationError
from .normalizer import normalize

logger = logging.getLogger(__name__)

SynonymTable = Dict[CanonicalValue, List[str]]

# ============================================================================
# Synonym tables
# ============================================================================

SERVICE_TYPE_SYNONYMS: SynonymTable = {
    ServiceType.OUTDOOR_SEATING: [
        "outdoor seat",
        "outdoor seating",
        "outside seating",
        "outside seat",
        "alfresco",
        "alfresco dining",
        "open air",
        "open-air",
        "kaki lima",  # five-foot way dining
        "outdoor kopitiam",
    ],
    ServiceType.DINE_IN: [
        "dine in",
        "makan sini",  # eat here
        "makan dalam",  # eat inside
        "dining in",
        "eat in",
        "indoor dining",
        "indoor seating",
        "kopitiam",
    ],
    ServiceType.TAKEOUT: [
        "takeout",
        "take out",
        "take away",
        "takeaway",
        "to go",
        "tapau",
        "bungkus",  # wrap
        "dabao",
    ],
    ServiceType.DELIVERY: [
        "delivery",
        "food delivery",
        "home delivery",
        "deliver",
        "hantar",
        "antar",
        "grabfood",
        "foodpanda",
    ],
    ServiceType.DRIVE_THRU: [
        "drive thru",
        "drive through",
        "drive-thru",
        "drive-through",
        "pandu lalu",
    ],
    ServiceType.CATERING: [
        "catering",
        "cater",
        "event catering",
        "food catering",
        "katering",
        "kenduri",  # feast
        "majlis",  # function
    ],
    ServiceType.RESERVATION: [
        "reservation",
        "reserve",
        "book table",
        "booking",
        "tempah",
        "tempahan",
    ],
    ServiceType.ONLINE_ORDERING: [
        "online order",
        "online ordering",
        "web order",
        "app order",
        "mobile order",
        "order online",
        "pesan online",
    ],
    ServiceType.PRIVATE_DINING: [
        "private dining",
        "private room",
        "private area",
        "vip room",
        "bilik vip",
        "bilik khas",
    ],
    ServiceType.BUFFET: [
        "buffet",
        "all you can eat",
        "self service",
        "self-service",
        "hidang sendiri",
        "makan sepuas-puasnya",
    ],
}

ESTABLISHMENT_TYPE_SYNONYMS: SynonymTable = {
    EstablishmentType.RESTAURANT: [
        "restaurant",
        "eatery",
        "dining",
        "bistro",
        "cafe",
        "diner",
        "cafeteria",
        "restoran",
        "kedai makan",
        "warung",
        "kopitiam",
        "mamak",
        "nasi kandar",
        "char chan teng",
    ],
    EstablishmentType.FOOD_COURT_STALL: [
        "food court",
        "food court stall",
        "food stall",
        "hawker stall",
        "court stall",
        "medan selera",
        "pusat penjaja",  # hawker centre
        "gerai",
        "kedai",
        "pasar malam stall",
        "hawker center",
    ],
    EstablishmentType.FOOD_TRUCK: [
        "food truck",
        "food van",
        "mobile food",
        "truck food",
        "trak makanan",
        "kereta makanan",
        "van makanan",
    ],
    EstablishmentType.POP_UP_STALL: [
        "pop up",
        "pop-up",
        "popup",
        "temporary stall",
        "pop up stall",
        "gerai sementara",
        "kedai sementara",
        "pasar malam",
        "bazar ramadan",
    ],
    EstablishmentType.GHOST_KITCHEN: [
        "ghost kitchen",
        "cloud kitchen",
        "virtual kitchen",
        "dark kitchen",
        "dapur maya",
        "dapur awan",
        "dapur hantu",
    ],
}

CUISINE_TYPE_SYNONYMS: SynonymTable = {
    CuisineType.MALAYSIAN: [
        "malaysian",
        "malay",
        "melayu",
        "nasi lemak",
        "rendang",
        "satay",
        "roti canai",
        "nasi goreng",
        "char kuey teow",
    ],
    CuisineType.CHINESE: [
        "chinese",
        "cina",
        "dim sum",
        "yum cha",
        "wonton",
        "char siew",
        "siew yoke",
        "bak kut teh",
    ],
    CuisineType.INDIAN: [
        "indian",
        "india",
        "mamak",
        "nasi kandar",
        "roti",
        "thosai",
        "tandoori",
        "briyani",
    ],
    CuisineType.THAI: ["thai", "tomyam", "pad thai", "green curry", "siam"],
    CuisineType.JAPANESE: [
        "japanese",
        "jepun",
        "sushi",
        "ramen",
        "udon",
        "tempura",
        "donburi",
    ],
    CuisineType.KOREAN: [
        "korean",
        "korea",
        "kimchi",
        "bibimbap",
        "korean bbq",
        "korean fried chicken",
        "tteokbokki",
    ],
    CuisineType.WESTERN: [
        "western",
        "barat",
        "steak",
        "pasta",
        "burger",
        "fish and chips",
        "pizza",
    ],
    CuisineType.FUSION: [
        "fusion",
        "asian fusion",
        "modern asian",
        "contemporary asian",
        "fusion food",
    ],
    CuisineType.VIETNAMESE: ["vietnam", "pho", "banh mi", "bun cha"],
    CuisineType.MIDDLE_EASTERN: ["arab", "arabic", "lebanese", "turkish", "shawarma", "kebab", "nasi mandi"],
    CuisineType.SOUTH_INDIAN: ["banana leaf", "chettinad", "idli", "vadai"],
    CuisineType.DESSERT: ["desserts", "cendol", "ais kacang", "kuih", "ice cream"],
    CuisineType.BEVERAGES: ["drinks", "minuman", "teh tarik", "bubble tea", "boba", "juice"],
}

DEFAULT_TABLES: Dict[Domain, SynonymTable] = {
    Domain.SERVICE: SERVICE_TYPE_SYNONYMS,
    Domain.ESTABLISHMENT: ESTABLISHMENT_TYPE_SYNONYMS,
    Domain.CUISINE: CUISINE_TYPE_SYNONYMS,
}


# ============================================================================
# Index
# ============================================================================


class SynonymIndex:
    """
    Immutable lookup structure over the synonym tables.

    Per domain it keeps:
    - the canonical values in enumeration order (used by fuzzy matching),
    - normalized canonical name -> value,
    - normalized synonym -> value.

    Construction fails with ConfigurationError when a table references a
    value outside its domain, contains a non-string or empty synonym, or
    maps one normalized synonym to two different canonical values.
    """

    def __init__(self, tables: Mapping[Domain, SynonymTable]) -> None:
        values: Dict[Domain, Tuple[CanonicalValue, ...]] = {}
        names: Dict[Domain, Mapping[str, CanonicalValue]] = {}
        synonyms: Dict[Domain, Mapping[str, CanonicalValue]] = {}
        raw: Dict[Domain, Mapping[CanonicalValue, Tuple[str, ...]]] = {}

        for domain in Domain:
            enum_type = domain.enum_type
            members: Tuple[CanonicalValue, ...] = tuple(enum_type)
            values[domain] = members
            names[domain] = MappingProxyType({normalize(member.value): member for member in members})

            table = tables.get(domain) or {}
            by_key: Dict[str, CanonicalValue] = {}
            for canonical, synonym_list in table.items():
                if not isinstance(canonical, enum_type):
                    raise ConfigurationError(
                        f"{canonical!r} is not a {enum_type.__name__} value",
                        reason="unknown_canonical_value",
                        debug={"domain": domain.value},
                    )
                for synonym in synonym_list:
                    key = self._synonym_key(domain, canonical, synonym)
                    owner = by_key.get(key)
                    if owner is not None and owner != canonical:
                        raise ConfigurationError(
                            f"Synonym {synonym!r} maps to both {owner.value} and {canonical.value} "
                            f"in domain {domain.value}",
                            reason="ambiguous_synonym",
                            debug={"domain": domain.value, "synonym": synonym},
                        )
                    by_key[key] = canonical
            synonyms[domain] = MappingProxyType(by_key)
            raw[domain] = MappingProxyType(
                {canonical: tuple(synonym_list) for canonical, synonym_list in table.items()}
            )

        self._values = MappingProxyType(values)
        self._names = MappingProxyType(names)
        self._synonyms = MappingProxyType(synonyms)
        self._raw = MappingProxyType(raw)

    @staticmethod
    def _synonym_key(domain: Domain, canonical: CanonicalValue, synonym: Any) -> str:
        if not isinstance(synonym, str):
            raise ConfigurationError(
                f"Synonym for {canonical.value} must be a string, got {type(synonym).__name__}",
                reason="non_string_synonym",
                debug={"domain": domain.value},
            )
        key = normalize(synonym)
        if not key:
            raise ConfigurationError(
                f"Synonym {synonym!r} for {canonical.value} normalizes to an empty key",
                reason="empty_synonym",
                debug={"domain": domain.value},
            )
        return key

    def values(self, domain: Domain) -> Tuple[CanonicalValue, ...]:
        return self._values[domain]

    def canonical_for_name(self, domain: Domain, key: str) -> Optional[CanonicalValue]:
        """Look up a value by its normalized canonical name."""
        return self._names[domain].get(key)

    def canonical_for_synonym(self, domain: Domain, key: str) -> Optional[CanonicalValue]:
        """Look up a value by a normalized synonym."""
        return self._synonyms[domain].get(key)

    def synonyms_for(self, value: CanonicalValue, domain: Domain) -> Tuple[str, ...]:
        return self._raw[domain].get(value, ())

    def size(self, domain: Domain) -> int:
        """Number of distinct normalized synonyms registered in a domain."""
        return len(self._synonyms[domain])


# ============================================================================
# YAML overlays
# ============================================================================


def _coerce_canonical(domain: Domain, raw_value: Any) -> CanonicalValue:
    enum_type = domain.enum_type
    text = str(raw_value)
    try:
        return enum_type(text)
    except ValueError:
        pass
    try:
        return enum_type[text]
    except KeyError as exc:
        raise ConfigurationError(
            f"Unknown {enum_type.__name__} value in synonym overlay: {text!r}",
            reason="unknown_canonical_value",
            debug={"domain": domain.value},
        ) from exc


def load_overlay(path: Path) -> Dict[Domain, SynonymTable]:
    """
    Parse a YAML overlay of extra synonyms.

    Expected shape: {domain: {canonical value or member name: [synonym, ...]}}.
    """
    if not path.exists():
        raise ConfigurationError(f"Synonym overlay not found at {path}", reason="overlay_missing")

    try:
        with path.open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Synonym overlay {path} is not valid YAML: {exc}", reason="overlay_invalid") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Synonym overlay {path} must be a mapping", reason="overlay_invalid")

    overlay: Dict[Domain, SynonymTable] = {}
    for domain_name, entries in data.items():
        try:
            domain = Domain(str(domain_name).lower())
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown domain in synonym overlay: {domain_name!r}",
                reason="overlay_invalid",
            ) from exc
        if not isinstance(entries, dict):
            raise ConfigurationError(
                f"Overlay section {domain_name!r} must map values to synonym lists",
                reason="overlay_invalid",
            )
        table: SynonymTable = {}
        for raw_value, synonym_list in entries.items():
            if not isinstance(synonym_list, list):
                raise ConfigurationError(
                    f"Overlay synonyms for {raw_value!r} must be a list",
                    reason="overlay_invalid",
                )
            table[_coerce_canonical(domain, raw_value)] = list(synonym_list)
        overlay[domain] = table
    return overlay


def merge_tables(
    base: Mapping[Domain, SynonymTable],
    overlay: Mapping[Domain, SynonymTable],
) -> Dict[Domain, SynonymTable]:
    merged: Dict[Domain, SynonymTable] = {
        domain: {value: list(synonyms) for value, synonyms in table.items()}
        for domain, table in base.items()
    }
    for domain, table in overlay.items():
        target = merged.setdefault(domain, {})
        for value, synonyms in table.items():
            target.setdefault(value, []).extend(synonyms)
    return merged


def build_synonym_index(overlay_path: str | Path | None = None) -> SynonymIndex:
    """Build the index from the built-in tables plus an optional overlay file."""
    tables: Mapping[Domain, SynonymTable] = DEFAULT_TABLES
    if overlay_path:
        overlay = load_overlay(Path(overlay_path))
        tables = merge_tables(DEFAULT_TABLES, overlay)
        logger.info(
            "Synonym overlay loaded from %s (%s)",
            overlay_path,
            ", ".join(f"{domain.value}={len(table)}" for domain, table in overlay.items()) or "empty",
        )
    return SynonymIndex(tables)


# Singleton instance
_synonym_index: SynonymIndex | None = None


def get_synonym_index() -> SynonymIndex:
    """Return the process-wide SynonymIndex, built from settings on first use."""
    global _synonym_index
    if _synonym_index is None:
        _synonym_index = build_synonym_index(get_settings().synonyms_overlay_path)
    return _synonym_index


def reset_synonym_index() -> None:
    """Drop the singleton (for tests)."""
    global _synonym_index
    _synonym_index = None
