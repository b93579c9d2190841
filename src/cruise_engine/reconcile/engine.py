"""Join the ship catalog, the cabin catalog and operator availability.

The output is a freshly built list of :class:`EnrichedShip` for every call;
nothing here mutates its inputs, so a new search simply reconciles again from
the catalog and availability snapshots.
"""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, List, Mapping, Optional, Sequence

from cruise_engine.availability import filter_weekly_departures
from cruise_engine.catalog import (
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
from cruise_engine.catalog.normalizer import PLACEHOLDER_BOAT_IMAGE, PLACEHOLDER_CABIN_IMAGE
from cruise_engine.matching import boat_names_match, cabin_matches_any_name

logger = logging.getLogger(__name__)

SYNTHETIC_TRIP_LENGTH = "3"
SYNTHETIC_DESTINATIONS = "Komodo National Park, Labuan Bajo"

_WHITESPACE = re.compile(r"\s+")


def lowest_valid_price(cabins: Iterable[EnrichedCabin | CabinCatalogEntry]) -> float:
    """Smallest real cabin price, or 0 when no cabin carries one."""
    prices = [cabin.price for cabin in cabins if is_valid_price(cabin.price)]
    return min(prices) if prices else 0


def highest_valid_price(cabins: Iterable[EnrichedCabin | CabinCatalogEntry]) -> float:
    prices = [cabin.price for cabin in cabins if is_valid_price(cabin.price)]
    return max(prices) if prices else 0


def find_operator(snapshot: AvailabilitySnapshot, ship_name: str) -> Optional[OperatorAvailability]:
    for operator in snapshot.values():
        if boat_names_match(operator.operator_name, ship_name):
            return operator
    return None


def _match_reported_cabin(
    cabin: CabinCatalogEntry,
    operator: OperatorAvailability,
    *,
    require_inventory: bool,
) -> Optional[CabinAvailability]:
    for reported in operator.cabins:
        if require_inventory and reported.available_count <= 0:
            continue
        if cabin_matches_any_name(cabin.names, reported.name):
            return reported
    return None


def _targeted_cabins(
    ship_cabins: Sequence[CabinCatalogEntry],
    operator: OperatorAvailability,
) -> List[EnrichedCabin]:
    enriched: List[EnrichedCabin] = []
    for cabin in ship_cabins:
        reported = _match_reported_cabin(cabin, operator, require_inventory=True)
        if reported is None:
            continue
        enriched.append(EnrichedCabin(cabin=cabin, available_dates=list(reported.available_dates)))
    return enriched


def _browse_cabins(
    ship_cabins: Sequence[CabinCatalogEntry],
    operator: Optional[OperatorAvailability],
    browse_pool: Sequence[str],
) -> List[EnrichedCabin]:
    enriched: List[EnrichedCabin] = []
    ship_dates = list(operator.available_dates) if operator else []
    for cabin in ship_cabins:
        reported = (
            _match_reported_cabin(cabin, operator, require_inventory=False) if operator else None
        )
        if reported and reported.available_dates:
            dates = list(reported.available_dates)
        elif ship_dates:
            dates = list(ship_dates)
        else:
            dates = list(browse_pool)
        enriched.append(EnrichedCabin(cabin=cabin, available_dates=dates))
    return enriched


def _finish(
    ship: ShipCatalogEntry,
    cabins: List[EnrichedCabin],
    *,
    is_available: bool,
    available_cabin_count: int,
    available_dates: List[str],
    is_synthetic: bool = False,
) -> EnrichedShip:
    facilities = CabinFacilities()
    for cabin in cabins:
        facilities = facilities.merge(cabin.cabin.facilities)
    return EnrichedShip(
        ship=ship,
        cabins=cabins,
        is_available=is_available,
        available_cabin_count=available_cabin_count,
        lowest_valid_price=lowest_valid_price(cabins),
        highest_valid_price=highest_valid_price(cabins),
        total_capacity=sum(cabin.total_capacity for cabin in cabins),
        facilities=facilities,
        available_dates=available_dates,
        is_synthetic=is_synthetic,
    )


def enrich_ship(
    ship: ShipCatalogEntry,
    cabins: Sequence[CabinCatalogEntry],
    snapshot: AvailabilitySnapshot,
    *,
    date_range_active: bool,
) -> EnrichedShip:
    """Reconcile one catalog ship against the cabin catalog and availability."""
    ship_cabins = [cabin for cabin in cabins if boat_names_match(cabin.boat_name, ship.name)]
    operator = find_operator(snapshot, ship.name)

    is_available = bool(operator and operator.total_available_cabins > 0)
    available_count = operator.total_available_cabins if operator else 0
    ship_dates = list(operator.available_dates) if operator else []

    if date_range_active:
        if operator is None:
            enriched = [EnrichedCabin(cabin=cabin) for cabin in ship_cabins]
        else:
            enriched = _targeted_cabins(ship_cabins, operator)
            if enriched:
                available_count = len(enriched)
            elif operator.total_available_cabins > 0:
                # Inventory exists under cabin names the catalog does not know.
                logger.debug(
                    "Operator %s reports %s cabins but none matched the catalog cabins of %s",
                    operator.operator_name,
                    operator.total_available_cabins,
                    ship.name,
                )
                available_count = operator.total_available_cabins
            else:
                available_count = 0
    else:
        enriched = _browse_cabins(ship_cabins, operator, snapshot.browse_pool)

    return _finish(
        ship,
        enriched,
        is_available=is_available,
        available_cabin_count=available_count,
        available_dates=ship_dates,
    )


def _guess_facilities(cabin_name: str) -> CabinFacilities:
    lowered = cabin_name.lower()
    return CabinFacilities(
        balcony="balcony" in lowered,
        bathtub="bathtub" in lowered,
        seaview="ocean" in lowered or "view" in lowered,
        large_bed="queen" in lowered or "king" in lowered,
        private_jacuzzi=False,
    )


def build_synthetic_ship(operator: OperatorAvailability) -> EnrichedShip:
    """Build a ship purely from an operator's reported inventory."""
    ship = ShipCatalogEntry(
        name=operator.operator_name,
        description=f"Available operator with {operator.total_available_cabins} cabins available.",
        trip_length=SYNTHETIC_TRIP_LENGTH,
        trip_name="",
        destinations=SYNTHETIC_DESTINATIONS,
        image_main=PLACEHOLDER_BOAT_IMAGE,
        images=[],
    )
    cabins: List[EnrichedCabin] = []
    for index, reported in enumerate(operator.cabins):
        cabin_id = _WHITESPACE.sub("-", f"{operator.operator_name}-cabin-{index}").lower()
        cabin = CabinCatalogEntry(
            cabin_id=cabin_id,
            cabin_name=reported.name,
            cabin_name_api=reported.name,
            boat_name=operator.operator_name,
            description=f"{reported.available_count} cabins available",
            total_capacity=reported.available_count,
            price=0,
            facilities=_guess_facilities(reported.name),
            image_main=PLACEHOLDER_CABIN_IMAGE,
        )
        dates = reported.available_dates or operator.available_dates
        cabins.append(EnrichedCabin(cabin=cabin, available_dates=list(dates)))
    return _finish(
        ship,
        cabins,
        is_available=True,
        available_cabin_count=operator.total_available_cabins,
        available_dates=list(operator.available_dates),
        is_synthetic=True,
    )


def reconcile(
    ships: Sequence[ShipCatalogEntry],
    cabins: Sequence[CabinCatalogEntry],
    snapshot: Optional[AvailabilitySnapshot],
    *,
    date_range_active: bool,
) -> List[EnrichedShip]:
    """Produce the enriched ship list for one search cycle.

    Catalog ships come first in source order; ships synthesized from operators
    that matched no catalog ship follow in operator order.
    """
    snapshot = snapshot or AvailabilitySnapshot.empty()
    enriched = [
        enrich_ship(ship, cabins, snapshot, date_range_active=date_range_active) for ship in ships
    ]

    synthetic: List[EnrichedShip] = []
    for operator in snapshot.values():
        if operator.total_available_cabins <= 0:
            continue
        if any(boat_names_match(ship.name, operator.operator_name) for ship in ships):
            continue
        synthetic.append(build_synthetic_ship(operator))

    logger.info(
        "Reconciled %s catalog ships and %s synthetic ships (%s mode)",
        len(enriched),
        len(synthetic),
        "date range" if date_range_active else "browse",
    )
    return enriched + synthetic


def attach_cabin_images(
    ships: Sequence[EnrichedShip],
    images_by_cabin_id: Mapping[str, List[str]],
) -> List[EnrichedShip]:
    """Return a rebuilt ship list with cabin galleries filled in."""
    rebuilt: List[EnrichedShip] = []
    for ship in ships:
        cabins = [
            replace(cabin, cabin=replace(cabin.cabin, images=list(images_by_cabin_id[cabin.cabin_id])))
            if images_by_cabin_id.get(cabin.cabin_id)
            else cabin
            for cabin in ship.cabins
        ]
        rebuilt.append(replace(ship, cabins=cabins))
    return rebuilt


def cabin_departures(cabin: EnrichedCabin) -> List[str]:
    """Departure options for a cabin: its available dates thinned to one per week."""
    return filter_weekly_departures(cabin.available_dates)


def find_ship_by_slug(ships: Iterable[EnrichedShip], slug: str) -> Optional[EnrichedShip]:
    for ship in ships:
        if ship.slug == slug:
            return ship
    return None
