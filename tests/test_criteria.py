from __future__ import annotations

from datetime import date

from cruise_engine.destinations import DestinationCatalog
from cruise_engine.search import SearchCriteria
from cruise_engine.search.criteria import parse_positive_int


def test_from_query_reads_results_page_parameters():
    criteria = SearchCriteria.from_query(
        {
            "destinations": "komodo-national-park, labuan-bajo",
            "dateFrom": "2026-01-10",
            "dateTo": "2026-01-17",
            "duration": "4",
            "guests": "3",
            "q": " aurora ",
            "sort": "price-low",
        }
    )

    assert criteria.destinations == ["komodo-national-park", "labuan-bajo"]
    assert criteria.date_from == date(2026, 1, 10)
    assert criteria.date_to == date(2026, 1, 17)
    assert criteria.duration == 4
    assert criteria.guests == 3
    assert criteria.query == "aurora"
    assert criteria.sort == "price-low"
    assert criteria.has_date_range


def test_invalid_numbers_fall_back_to_defaults():
    criteria = SearchCriteria.from_query({"duration": "abc", "guests": "-2", "sort": "cheapest"})

    assert criteria.duration == 3
    assert criteria.guests == 2
    assert criteria.sort == "recommended"
    assert parse_positive_int("0", 7) == 7
    assert parse_positive_int(True, 7) == 7
    assert parse_positive_int(" 5 ", 7) == 5


def test_missing_parameters_leave_filters_unset():
    criteria = SearchCriteria.from_query({})

    assert criteria.destinations == []
    assert criteria.date_from is None
    assert criteria.duration is None
    assert criteria.guests is None
    assert criteria.effective_duration == 3
    assert criteria.effective_guests == 2
    assert not criteria.has_date_range


def test_end_date_derived_from_duration():
    criteria = SearchCriteria.from_query({"dateFrom": "2026-01-10", "duration": "4"})
    assert criteria.date_to == date(2026, 1, 13)


def test_end_date_without_start_is_dropped():
    criteria = SearchCriteria.from_query({"dateTo": "2026-01-17", "dateFrom": "garbage"})
    assert criteria.date_from is None
    assert criteria.date_to is None


def test_query_string_round_trip():
    query_string = "destinations=komodo-national-park,labuan-bajo&dateFrom=2026-01-10&dateTo=2026-01-17&duration=3&guests=2"

    criteria = SearchCriteria.from_query_string(query_string)

    assert criteria.to_query_string() == query_string
    assert SearchCriteria.from_query_string("?" + criteria.to_query_string()) == criteria


def test_destination_label_uses_display_names():
    catalog = DestinationCatalog.default()
    assert SearchCriteria().destination_label(catalog) == "All Destinations"
    criteria = SearchCriteria(destinations=["komodo-national-park", "gili"])
    assert criteria.destination_label(catalog) == "Komodo National Park, gili"
