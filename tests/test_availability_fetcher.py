from __future__ import annotations

from datetime import date

import pytest

from cruise_engine.availability import (
    AvailabilityFetcher,
    aggregate_availability,
    browse_sample_dates,
    dates_in_range,
    filter_weekly_departures,
)


def _day(day: str, operators: list[dict[str, object]]) -> dict[str, object]:
    return {"success": True, "data": {"date": day, "operators": operators}}


class StubSource:
    def __init__(self, days: dict[str, dict[str, object]], failing: set[str] | None = None) -> None:
        self.days = days
        self.failing = failing or set()
        self.requested: list[str] = []

    async def fetch_day(self, day: str) -> dict[str, object]:
        self.requested.append(day)
        if day in self.failing:
            raise RuntimeError(f"backend down for {day}")
        return self.days.get(day) or _day(day, [])


def test_dates_in_range_is_inclusive_and_tolerates_reversed_bounds():
    assert dates_in_range("2026-01-10", "2026-01-12") == ["2026-01-10", "2026-01-11", "2026-01-12"]
    assert dates_in_range("2026-01-12", "2026-01-10") == ["2026-01-10", "2026-01-11", "2026-01-12"]
    assert dates_in_range(date(2026, 1, 10)) == ["2026-01-10"]


def test_browse_sample_dates_covers_horizon_with_stride():
    samples = browse_sample_dates(date(2026, 1, 1), horizon_days=90, stride_days=7)
    assert len(samples) == 13
    assert samples[0] == "2026-01-01"
    assert samples[1] == "2026-01-08"
    assert samples[-1] == "2026-03-26"


def test_filter_weekly_departures_keeps_dates_a_week_apart():
    dates = ["2026-01-03", "2026-01-01", "2026-01-05", "2026-01-08", "2026-01-09", "2026-01-15"]
    assert filter_weekly_departures(dates) == ["2026-01-01", "2026-01-08", "2026-01-15"]
    assert filter_weekly_departures([]) == []


def test_aggregate_availability_sums_days_and_drops_empty_cabins():
    responses = [
        _day(
            "2026-01-11",
            [
                {
                    "operator": "MV Aurora",
                    "total": 2,
                    "cabins": [
                        {"name": "Deluxe", "available": 2},
                        {"name": "Suite", "available": 0},
                    ],
                }
            ],
        ),
        _day(
            "2026-01-10",
            [
                {"operator": "mv aurora", "total": 1, "cabins": [{"name": "Deluxe", "available": 1}]},
                {"operator": "Zen", "total": 0, "cabins": []},
            ],
        ),
        None,
    ]

    operators = aggregate_availability(responses)

    assert set(operators) == {"MV AURORA", "ZEN"}
    aurora = operators["MV AURORA"]
    assert aurora.total_available_cabins == 3
    assert aurora.available_dates == ["2026-01-10", "2026-01-11"]
    assert [cabin.name for cabin in aurora.cabins] == ["Deluxe"]
    assert aurora.cabins[0].available_count == 3
    assert aurora.cabins[0].available_dates == ["2026-01-10", "2026-01-11"]
    assert operators["ZEN"].total_available_cabins == 0
    assert operators["ZEN"].available_dates == []


def test_aggregate_availability_tolerates_malformed_cabin_lists():
    responses = [
        _day(
            "2026-01-10",
            [
                {"operator": "Good Boat", "total": 2, "cabins": [{"name": "Deluxe", "available": 2}]},
                {"operator": "Bad Boat", "total": 1, "cabins": 3},
                {"operator": "Odd Boat", "total": 1, "cabins": True},
            ],
        ),
        {"success": True, "data": {"date": "2026-01-11", "operators": 5}},
        {"success": True, "data": "offline"},
    ]

    operators = aggregate_availability(responses)

    assert set(operators) == {"GOOD BOAT", "BAD BOAT", "ODD BOAT"}
    assert [cabin.name for cabin in operators["GOOD BOAT"].cabins] == ["Deluxe"]
    assert operators["BAD BOAT"].total_available_cabins == 1
    assert operators["BAD BOAT"].available_dates == ["2026-01-10"]
    assert operators["BAD BOAT"].cabins == []
    assert operators["ODD BOAT"].cabins == []


@pytest.mark.asyncio
async def test_fetch_isolates_failed_days():
    source = StubSource(
        {
            "2026-01-10": _day("2026-01-10", [{"operator": "Aurora", "total": 3, "cabins": []}]),
            "2026-01-12": _day("2026-01-12", [{"operator": "Aurora", "total": 1, "cabins": []}]),
        },
        failing={"2026-01-11"},
    )
    fetcher = AvailabilityFetcher(source, batch_size=2)

    snapshot = await fetcher.fetch("2026-01-10", "2026-01-12")

    assert sorted(source.requested) == ["2026-01-10", "2026-01-11", "2026-01-12"]
    assert snapshot.queried_dates == ["2026-01-10", "2026-01-11", "2026-01-12"]
    assert snapshot.operators["AURORA"].total_available_cabins == 4
    assert snapshot.operators["AURORA"].available_dates == ["2026-01-10", "2026-01-12"]


@pytest.mark.asyncio
async def test_fetch_without_dates_returns_empty_snapshot():
    source = StubSource({})
    fetcher = AvailabilityFetcher(source)

    snapshot = await fetcher.fetch(None)
    assert len(snapshot) == 0
    assert source.requested == []

    snapshot = await fetcher.fetch("not-a-date")
    assert len(snapshot) == 0


@pytest.mark.asyncio
async def test_fetch_truncates_long_windows():
    source = StubSource({})
    fetcher = AvailabilityFetcher(source, max_range_days=5)

    snapshot = await fetcher.fetch("2026-01-01", "2026-02-01")

    assert len(source.requested) == 5
    assert snapshot.queried_dates[-1] == "2026-01-05"


@pytest.mark.asyncio
async def test_fetch_browse_builds_pool_from_sampled_inventory():
    source = StubSource(
        {
            "2026-01-08": _day("2026-01-08", [{"operator": "Aurora", "total": 2, "cabins": []}]),
            "2026-01-22": _day("2026-01-22", [{"operator": "Zen", "total": 1, "cabins": []}]),
        }
    )
    fetcher = AvailabilityFetcher(source, browse_horizon_days=28, browse_stride_days=7)

    snapshot = await fetcher.fetch_browse(today=date(2026, 1, 1))

    assert source.requested == ["2026-01-01", "2026-01-08", "2026-01-15", "2026-01-22"]
    assert snapshot.browse_pool == ["2026-01-08", "2026-01-22"]
    assert set(snapshot.operators) == {"AURORA", "ZEN"}


def test_fetcher_rejects_non_positive_batch_size():
    with pytest.raises(ValueError):
        AvailabilityFetcher(StubSource({}), batch_size=0)
