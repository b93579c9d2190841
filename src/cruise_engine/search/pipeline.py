"""Pure filtering and sorting of reconciled ships."""
from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, List, Optional, Sequence

from cruise_engine.catalog import EnrichedShip
from cruise_engine.destinations import DestinationCatalog

from .criteria import (
    SORT_NAME,
    SORT_PRICE_HIGH,
    SORT_PRICE_LOW,
    SearchCriteria,
)

logger = logging.getLogger(__name__)

ShipPredicate = Callable[[EnrichedShip], bool]


def _ascending_price(ship: EnrichedShip) -> float:
    # Ships without a price sort after every priced ship.
    return ship.lowest_valid_price or math.inf


def matches_query(ship: EnrichedShip, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    return any(
        needle in (value or "").lower()
        for value in (ship.name, ship.trip_name, ship.destinations)
    )


def matches_destinations(
    ship: EnrichedShip,
    destination_keys: Sequence[str],
    catalog: DestinationCatalog,
) -> bool:
    if not destination_keys:
        return True
    # Unknown destinations never exclude a ship.
    if not (ship.destinations or "").strip():
        return True
    ship_name = ship.name.lower()
    for key in destination_keys:
        destination = catalog.resolve(key)
        if destination.matches(ship.destinations) or key.lower() in ship_name:
            return True
    return False


def matches_duration(ship: EnrichedShip, duration: Optional[int]) -> bool:
    if not duration:
        return True
    return ship.trip_length_days == duration


def matches_guests(ship: EnrichedShip, guests: Optional[int]) -> bool:
    if not guests:
        return True
    if not ship.cabins:
        return True
    return any(cabin.total_capacity >= guests for cabin in ship.cabins)


def _predicates(criteria: SearchCriteria, catalog: DestinationCatalog) -> List[ShipPredicate]:
    predicates: List[ShipPredicate] = []
    if criteria.query.strip():
        predicates.append(lambda ship: matches_query(ship, criteria.query))
    if criteria.destinations:
        predicates.append(lambda ship: matches_destinations(ship, criteria.destinations, catalog))
    if criteria.duration:
        predicates.append(lambda ship: matches_duration(ship, criteria.duration))
    if criteria.guests:
        predicates.append(lambda ship: matches_guests(ship, criteria.guests))
    if criteria.has_date_range:
        predicates.append(lambda ship: ship.is_available)
    return predicates


def sort_ships(ships: Iterable[EnrichedShip], sort: str) -> List[EnrichedShip]:
    """Stable sort by one of the supported keys; unknown keys mean recommended."""
    if sort == SORT_PRICE_LOW:
        return sorted(ships, key=_ascending_price)
    if sort == SORT_PRICE_HIGH:
        return sorted(ships, key=lambda ship: -(ship.lowest_valid_price or 0))
    if sort == SORT_NAME:
        return sorted(ships, key=lambda ship: ship.name.casefold())
    return sorted(ships, key=lambda ship: (-ship.available_cabin_count, _ascending_price(ship)))


def filter_and_sort(
    ships: Sequence[EnrichedShip],
    criteria: SearchCriteria,
    *,
    catalog: Optional[DestinationCatalog] = None,
) -> List[EnrichedShip]:
    """Apply every active criterion (AND semantics) and sort the survivors."""
    predicates = _predicates(criteria, catalog or DestinationCatalog.default())
    kept = [ship for ship in ships if all(predicate(ship) for predicate in predicates)]
    logger.debug("Filtered %s ships down to %s", len(ships), len(kept))
    return sort_ships(kept, criteria.sort)


def total_available_cabins(ships: Iterable[EnrichedShip]) -> int:
    return sum(ship.available_cabin_count for ship in ships)


def collect_destinations(ships: Iterable[EnrichedShip]) -> List[str]:
    """Distinct destination names across ships, alphabetically."""
    destinations = set()
    for ship in ships:
        for part in (ship.destinations or "").split(","):
            part = part.strip()
            if part:
                destinations.add(part)
    return sorted(destinations)
