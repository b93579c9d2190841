"""Catalog domain models and normalization helpers."""

from .models import (
    PLACEHOLDER_PRICE,
    AvailabilitySnapshot,
    CabinAvailability,
    CabinCatalogEntry,
    CabinFacilities,
    EnrichedCabin,
    EnrichedShip,
    OperatorAvailability,
    ShipCatalogEntry,
    is_valid_price,
)
from .normalizer import (
    build_cabin_entries,
    build_cabin_entry,
    build_ship_entries,
    build_ship_entry,
)

__all__ = [
    "PLACEHOLDER_PRICE",
    "AvailabilitySnapshot",
    "CabinAvailability",
    "CabinCatalogEntry",
    "CabinFacilities",
    "EnrichedCabin",
    "EnrichedShip",
    "OperatorAvailability",
    "ShipCatalogEntry",
    "build_cabin_entries",
    "build_cabin_entry",
    "build_ship_entries",
    "build_ship_entry",
    "is_valid_price",
]
