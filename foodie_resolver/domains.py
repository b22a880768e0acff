from __future__ import annotations

from enum import StrEnum
from typing import Type, Union


class CuisineType(StrEnum):
    """Cuisines a restaurant or dish can be tagged with."""

    MALAYSIAN = "Malaysian"
    CHINESE = "Chinese"
    JAPANESE = "Japanese"
    KOREAN = "Korean"
    THAI = "Thai"
    VIETNAMESE = "Vietnamese"
    WESTERN = "Western"
    FUSION = "Fusion"
    INDIAN = "Indian"
    MIDDLE_EASTERN = "Middle Eastern"
    SOUTH_INDIAN = "South Indian"
    DESSERT = "Dessert"
    BEVERAGES = "Beverages"
    OTHER = "Other"


class EstablishmentType(StrEnum):
    """Physical format of a food business."""

    RESTAURANT = "RESTAURANT"
    FOOD_COURT_STALL = "FOOD_COURT_STALL"
    FOOD_TRUCK = "FOOD_TRUCK"
    POP_UP_STALL = "POP_UP_STALL"
    GHOST_KITCHEN = "GHOST_KITCHEN"


class ServiceType(StrEnum):
    """Services offered by an establishment."""

    DINE_IN = "DINE_IN"
    TAKEOUT = "TAKEOUT"
    DELIVERY = "DELIVERY"
    DRIVE_THRU = "DRIVE_THRU"
    CATERING = "CATERING"
    RESERVATION = "RESERVATION"
    ONLINE_ORDERING = "ONLINE_ORDERING"
    PRIVATE_DINING = "PRIVATE_DINING"
    OUTDOOR_SEATING = "OUTDOOR_SEATING"
    BUFFET = "BUFFET"


CanonicalValue = Union[CuisineType, EstablishmentType, ServiceType]


class Domain(StrEnum):
    """Tag for each closed vocabulary the resolver understands."""

    CUISINE = "cuisine"
    ESTABLISHMENT = "establishment"
    SERVICE = "service"

    @property
    def enum_type(self) -> Type[StrEnum]:
        return DOMAIN_ENUMS[self]


class MatchStrategy(StrEnum):
    """Which pipeline tier produced a match."""

    EXACT = "exact"
    SYNONYM = "synonym"
    FUZZY = "fuzzy"
    EXTERNAL = "external"


class LocationType(StrEnum):
    MALL = "mall"
    CITY = "city"
    DISTRICT = "district"
    STREET = "street"
    LANDMARK = "landmark"
    AREA = "area"


DOMAIN_ENUMS: dict[Domain, Type[StrEnum]] = {
    Domain.CUISINE: CuisineType,
    Domain.ESTABLISHMENT: EstablishmentType,
    Domain.SERVICE: ServiceType,
}


def domain_of(value: CanonicalValue) -> Domain:
    """Return the domain a canonical value belongs to."""
    for domain, enum_type in DOMAIN_ENUMS.items():
        if isinstance(value, enum_type):
            return domain
    raise TypeError(f"Not a canonical value: {value!r}")


__all__ = [
    "CanonicalValue",
    "CuisineType",
    "DOMAIN_ENUMS",
    "Domain",
    "EstablishmentType",
    "LocationType",
    "MatchStrategy",
    "ServiceType",
    "domain_of",
]
