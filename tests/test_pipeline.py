from __future__ import annotations

from datetime import date

from cruise_engine.catalog import CabinCatalogEntry, EnrichedCabin, EnrichedShip, ShipCatalogEntry
from cruise_engine.destinations import DestinationCatalog
from cruise_engine.search import SearchCriteria, collect_destinations, filter_and_sort, sort_ships
from cruise_engine.search.pipeline import matches_destinations


def _ship(
    name: str,
    *,
    price: float = 0,
    available: int = 0,
    destinations: str = "",
    trip: str = "3",
    capacities: tuple[int, ...] = (),
    is_available: bool = False,
    trip_name: str = "",
) -> EnrichedShip:
    cabins = [
        EnrichedCabin(
            cabin=CabinCatalogEntry(
                cabin_id=f"{name}-{index}", cabin_name=f"Cabin {index}", boat_name=name, total_capacity=capacity
            )
        )
        for index, capacity in enumerate(capacities)
    ]
    return EnrichedShip(
        ship=ShipCatalogEntry(name=name, trip_length=trip, destinations=destinations, trip_name=trip_name),
        cabins=cabins,
        is_available=is_available,
        available_cabin_count=available,
        lowest_valid_price=price,
    )


def test_price_low_sinks_unpriced_ships():
    ships = [_ship("A", price=0), _ship("B", price=500), _ship("C", price=0), _ship("D", price=200)]

    ordered = sort_ships(ships, "price-low")

    assert [ship.lowest_valid_price for ship in ordered] == [200, 500, 0, 0]
    assert [ship.name for ship in ordered] == ["D", "B", "A", "C"]


def test_price_high_and_name_sorting():
    ships = [_ship("bravo", price=300), _ship("Alpha", price=0), _ship("charlie", price=900)]

    assert [ship.name for ship in sort_ships(ships, "price-high")] == ["charlie", "bravo", "Alpha"]
    assert [ship.name for ship in sort_ships(ships, "name")] == ["Alpha", "bravo", "charlie"]


def test_recommended_prefers_inventory_then_price():
    ships = [
        _ship("few", available=1, price=100),
        _ship("many-expensive", available=4, price=900),
        _ship("many-cheap", available=4, price=300),
        _ship("many-unpriced", available=4, price=0),
    ]

    ordered = sort_ships(ships, "recommended")

    assert [ship.name for ship in ordered] == ["many-cheap", "many-expensive", "many-unpriced", "few"]
    assert [ship.name for ship in sort_ships(ships, "bogus")] == [ship.name for ship in ordered]


def test_destination_filter_keeps_unknown_and_partial_matches():
    catalog = DestinationCatalog.default()
    unknown = _ship("Unknown", destinations="")
    komodo = _ship("Komodo Star", destinations="Labuan Bajo, Komodo")
    raja = _ship("Raja", destinations="Raja Ampat")

    selected = ["komodo-national-park"]
    assert matches_destinations(unknown, selected, catalog)
    assert matches_destinations(komodo, selected, catalog)
    assert not matches_destinations(raja, selected, catalog)

    criteria = SearchCriteria(destinations=selected)
    kept = filter_and_sort([raja, unknown, komodo], criteria, catalog=catalog)
    assert {ship.name for ship in kept} == {"Unknown", "Komodo Star"}


def test_filters_combine_with_and_semantics():
    ships = [
        _ship("Aurora", trip="3 days", capacities=(2, 4), is_available=True, available=2),
        _ship("Zen", trip="4", capacities=(4,), is_available=True, available=1),
        _ship("Lamborajo", trip="3", capacities=(2,), is_available=True, available=3),
        _ship("Ombak", trip="3", capacities=(4,), is_available=False),
    ]
    criteria = SearchCriteria(
        date_from=date(2026, 1, 10),
        date_to=date(2026, 1, 12),
        duration=3,
        guests=3,
    )

    kept = filter_and_sort(ships, criteria)

    assert [ship.name for ship in kept] == ["Aurora"]


def test_guest_filter_keeps_ships_without_cabin_data():
    ships = [_ship("Bare"), _ship("Small", capacities=(1,))]
    kept = filter_and_sort(ships, SearchCriteria(guests=2))
    assert [ship.name for ship in kept] == ["Bare"]


def test_free_text_query_matches_name_trip_or_destinations():
    ships = [
        _ship("Aurora", trip_name="Komodo Explorer"),
        _ship("Zen", destinations="Raja Ampat"),
        _ship("Ombak"),
    ]
    assert [ship.name for ship in filter_and_sort(ships, SearchCriteria(query="explorer"))] == ["Aurora"]
    assert [ship.name for ship in filter_and_sort(ships, SearchCriteria(query="RAJA"))] == ["Zen"]
    assert len(filter_and_sort(ships, SearchCriteria(query="  "))) == 3


def test_browse_mode_does_not_require_availability():
    ships = [_ship("Aurora", is_available=False)]
    assert len(filter_and_sort(ships, SearchCriteria())) == 1


def test_collect_destinations_dedupes_and_sorts():
    ships = [
        _ship("A", destinations="Labuan Bajo, Komodo National Park"),
        _ship("B", destinations="Komodo National Park,  Padar "),
        _ship("C"),
    ]
    assert collect_destinations(ships) == ["Komodo National Park", "Labuan Bajo", "Padar"]
