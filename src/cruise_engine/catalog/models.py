"""Dataclasses for catalog entries, availability snapshots and enriched ships."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

# Upstream writes this value into the price column of cabins without a real price.
PLACEHOLDER_PRICE = 43243243

DEFAULT_TRIP_LENGTH_DAYS = 3

_LEADING_INT = re.compile(r"^\s*(\d+)")
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def is_valid_price(price: Optional[float]) -> bool:
    return price is not None and price > 0 and price != PLACEHOLDER_PRICE


def parse_trip_length(value: object, default: int = DEFAULT_TRIP_LENGTH_DAYS) -> int:
    """Parse the leading integer of a free-text trip length ("3", "4 days")."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    match = _LEADING_INT.match(str(value or ""))
    if not match or int(match.group(1)) <= 0:
        return default
    return int(match.group(1))


@dataclass(slots=True)
class ShipCatalogEntry:
    """Marketing metadata for a ship as published by the ship catalog."""

    name: str
    description: str = ""
    trip_length: str = ""
    trip_name: str = ""
    destinations: str = ""
    image_main: str = ""
    images: List[str] = field(default_factory=list)

    @property
    def slug(self) -> str:
        return slugify(self.name)

    @property
    def trip_length_days(self) -> int:
        return parse_trip_length(self.trip_length)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "trip": self.trip_length,
            "trip_name": self.trip_name,
            "destinations": self.destinations,
            "image_main": self.image_main,
            "images": list(self.images),
        }


@dataclass(slots=True)
class CabinFacilities:
    balcony: bool = False
    bathtub: bool = False
    seaview: bool = False
    large_bed: bool = False
    private_jacuzzi: bool = False
    display: str = ""

    def merge(self, other: "CabinFacilities") -> "CabinFacilities":
        """OR-merge two facility sets; a ship has a facility if any cabin does."""
        return CabinFacilities(
            balcony=self.balcony or other.balcony,
            bathtub=self.bathtub or other.bathtub,
            seaview=self.seaview or other.seaview,
            large_bed=self.large_bed or other.large_bed,
            private_jacuzzi=self.private_jacuzzi or other.private_jacuzzi,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "balcony": self.balcony,
            "bathtub": self.bathtub,
            "seaview": self.seaview,
            "large_bed": self.large_bed,
            "private_jacuzzi": self.private_jacuzzi,
            "cabin_display_facilities": self.display,
        }


@dataclass(slots=True)
class CabinCatalogEntry:
    """A cabin row from the cabin catalog; ``boat_name`` is free text."""

    cabin_id: str
    cabin_name: str
    boat_name: str
    cabin_name_api: str = ""
    description: str = ""
    total_capacity: int = 0
    price: float = 0
    facilities: CabinFacilities = field(default_factory=CabinFacilities)
    image_main: str = ""
    images: List[str] = field(default_factory=list)

    @property
    def has_valid_price(self) -> bool:
        return is_valid_price(self.price)

    @property
    def names(self) -> List[str]:
        return [name for name in (self.cabin_name, self.cabin_name_api) if name]

    def to_dict(self) -> dict[str, object]:
        return {
            "cabin_id": self.cabin_id,
            "cabin_name": self.cabin_name,
            "cabin_name_api": self.cabin_name_api,
            "boat_name": self.boat_name,
            "description": self.description,
            "total_capacity": self.total_capacity,
            "price": self.price,
            "facilities": self.facilities.to_dict(),
            "image_main": self.image_main,
            "images": list(self.images),
        }


@dataclass(slots=True)
class CabinAvailability:
    """Inventory reported for one cabin type of an operator."""

    name: str
    available_count: int
    available_dates: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "available": self.available_count,
            "available_dates": list(self.available_dates),
        }


@dataclass(slots=True)
class OperatorAvailability:
    """Availability aggregated over a query window for one operator."""

    operator_name: str
    total_available_cabins: int
    cabins: List[CabinAvailability] = field(default_factory=list)
    available_dates: List[str] = field(default_factory=list)

    def find_cabin(self, name: str) -> Optional[CabinAvailability]:
        for cabin in self.cabins:
            if cabin.name == name:
                return cabin
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "operator": self.operator_name,
            "total": self.total_available_cabins,
            "cabins": [cabin.to_dict() for cabin in self.cabins],
            "available_dates": list(self.available_dates),
        }


@dataclass(slots=True)
class AvailabilitySnapshot:
    """Per-operator availability plus the dates that produced it.

    ``browse_pool`` is only populated in browse mode and holds every sampled
    date on which at least one operator reported inventory.
    """

    operators: Dict[str, OperatorAvailability] = field(default_factory=dict)
    queried_dates: List[str] = field(default_factory=list)
    browse_pool: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.operators)

    def values(self) -> Iterable[OperatorAvailability]:
        return self.operators.values()

    @classmethod
    def empty(cls) -> "AvailabilitySnapshot":
        return cls()


@dataclass(slots=True)
class EnrichedCabin:
    """A catalog cabin tagged with the dates it was seen available."""

    cabin: CabinCatalogEntry
    available_dates: List[str] = field(default_factory=list)

    @property
    def cabin_id(self) -> str:
        return self.cabin.cabin_id

    @property
    def cabin_name(self) -> str:
        return self.cabin.cabin_name

    @property
    def price(self) -> float:
        return self.cabin.price

    @property
    def total_capacity(self) -> int:
        return self.cabin.total_capacity

    def to_dict(self) -> dict[str, object]:
        payload = self.cabin.to_dict()
        payload["available_dates"] = list(self.available_dates)
        return payload


@dataclass(slots=True)
class EnrichedShip:
    """Reconciled view of a ship; rebuilt for every search, never patched."""

    ship: ShipCatalogEntry
    cabins: List[EnrichedCabin] = field(default_factory=list)
    is_available: bool = False
    available_cabin_count: int = 0
    lowest_valid_price: float = 0
    highest_valid_price: float = 0
    total_capacity: int = 0
    facilities: CabinFacilities = field(default_factory=CabinFacilities)
    available_dates: List[str] = field(default_factory=list)
    is_synthetic: bool = False

    @property
    def name(self) -> str:
        return self.ship.name

    @property
    def slug(self) -> str:
        return self.ship.slug

    @property
    def trip_name(self) -> str:
        return self.ship.trip_name

    @property
    def destinations(self) -> str:
        return self.ship.destinations

    @property
    def trip_length_days(self) -> int:
        return self.ship.trip_length_days

    @property
    def cabin_count(self) -> int:
        return len(self.cabins)

    def to_dict(self) -> dict[str, object]:
        payload = self.ship.to_dict()
        payload.update(
            {
                "cabins": [cabin.to_dict() for cabin in self.cabins],
                "cabin_count": self.cabin_count,
                "is_available": self.is_available,
                "available_cabins": self.available_cabin_count,
                "start_from_price": self.lowest_valid_price,
                "highest_price": self.highest_valid_price,
                "total_capacity": self.total_capacity,
                "facilities": self.facilities.to_dict(),
                "available_dates": list(self.available_dates),
                "is_synthetic": self.is_synthetic,
            }
        )
        return payload

    @classmethod
    def from_iterable(cls, ships: Iterable["EnrichedShip"]) -> List[dict[str, object]]:
        return [ship.to_dict() for ship in ships]


def slugify(name: str) -> str:
    return _SLUG_SEPARATORS.sub("-", (name or "").lower())
