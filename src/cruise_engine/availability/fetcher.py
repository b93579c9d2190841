"""Availability fetching, browse-mode sampling and per-operator aggregation."""
from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Protocol, Sequence

from cruise_engine.catalog import AvailabilitySnapshot, CabinAvailability, OperatorAvailability
from cruise_engine.catalog.normalizer import parse_availability_day

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_BROWSE_HORIZON_DAYS = 90
DEFAULT_BROWSE_STRIDE_DAYS = 7
DEFAULT_MAX_RANGE_DAYS = 90
WEEKLY_DEPARTURE_GAP_DAYS = 7


class DayAvailabilitySource(Protocol):
    def fetch_day(self, day: str) -> Awaitable[Dict[str, Any]]:
        ...


def _as_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def dates_in_range(date_from: date | str, date_to: date | str | None = None) -> List[str]:
    """Every ISO date from ``date_from`` to ``date_to`` inclusive.

    A missing or identical end yields just the start date; a reversed range is
    swapped rather than rejected.
    """
    start = _as_date(date_from)
    if date_to in (None, ""):
        return [start.isoformat()]
    end = _as_date(date_to)
    if end < start:
        start, end = end, start
    return [(start + timedelta(days=offset)).isoformat() for offset in range((end - start).days + 1)]


def browse_sample_dates(
    today: Optional[date] = None,
    *,
    horizon_days: int = DEFAULT_BROWSE_HORIZON_DAYS,
    stride_days: int = DEFAULT_BROWSE_STRIDE_DAYS,
) -> List[str]:
    """One date per ``stride_days`` window across ``horizon_days`` from today."""
    if stride_days <= 0:
        raise ValueError("stride_days must be positive")
    start = today or date.today()
    return [
        (start + timedelta(days=offset)).isoformat()
        for offset in range(0, horizon_days, stride_days)
    ]


def filter_weekly_departures(dates: Iterable[str]) -> List[str]:
    """Thin a date list to departures at least a week apart, earliest first."""
    ordered = sorted(set(dates))
    if not ordered:
        return []
    result = [ordered[0]]
    last = date.fromisoformat(ordered[0])
    for value in ordered[1:]:
        current = date.fromisoformat(value)
        if (current - last).days >= WEEKLY_DEPARTURE_GAP_DAYS:
            result.append(value)
            last = current
    return result


def _to_count(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _merge_operator_day(
    existing: OperatorAvailability,
    operator: dict[str, Any],
    day: str,
) -> None:
    total = _to_count(operator.get("total"))
    existing.total_available_cabins += total
    if total > 0 and day and day not in existing.available_dates:
        existing.available_dates.append(day)
    cabins = operator.get("cabins")
    if not isinstance(cabins, list):
        cabins = []
    for cabin in cabins:
        if not isinstance(cabin, dict):
            continue
        available = _to_count(cabin.get("available"))
        if available <= 0:
            continue
        name = str(cabin.get("name") or "")
        tracked = existing.find_cabin(name)
        if tracked is None:
            existing.cabins.append(
                CabinAvailability(name=name, available_count=available, available_dates=[day] if day else [])
            )
            continue
        tracked.available_count += available
        if day and day not in tracked.available_dates:
            tracked.available_dates.append(day)


def aggregate_availability(responses: Iterable[Optional[dict[str, Any]]]) -> Dict[str, OperatorAvailability]:
    """Merge single-day responses into one record per operator.

    Operators are keyed by their upper-cased name. Totals and per-cabin counts
    are summed across days, cabins with no inventory are dropped, and a date is
    only recorded where the operator (or cabin) actually had inventory.
    """
    operators: Dict[str, OperatorAvailability] = {}
    for response in responses:
        if not response:
            continue
        day, entries = parse_availability_day(response)
        for entry in entries:
            name = str(entry.get("operator") or "").strip()
            if not name:
                continue
            key = name.upper()
            existing = operators.get(key)
            if existing is None:
                existing = operators[key] = OperatorAvailability(operator_name=name, total_available_cabins=0)
            _merge_operator_day(existing, entry, day)

    for operator in operators.values():
        operator.available_dates.sort()
        for cabin in operator.cabins:
            cabin.available_dates.sort()
    return operators


def _browse_pool(operators: Iterable[OperatorAvailability]) -> List[str]:
    pool: set[str] = set()
    for operator in operators:
        pool.update(operator.available_dates)
    return sorted(pool)


class AvailabilityFetcher:
    """Resolve availability for a date range or a set of sample dates.

    Day requests run concurrently in batches of ``batch_size``. A failed day is
    logged and skipped; it never cancels the other requests of its batch.
    """

    def __init__(
        self,
        source: DayAvailabilitySource,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        browse_horizon_days: int = DEFAULT_BROWSE_HORIZON_DAYS,
        browse_stride_days: int = DEFAULT_BROWSE_STRIDE_DAYS,
        max_range_days: int = DEFAULT_MAX_RANGE_DAYS,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._source = source
        self.batch_size = batch_size
        self.browse_horizon_days = browse_horizon_days
        self.browse_stride_days = browse_stride_days
        self.max_range_days = max_range_days

    @classmethod
    def from_settings(cls, source: DayAvailabilitySource, settings) -> "AvailabilityFetcher":
        return cls(
            source,
            batch_size=settings.availability_batch_size,
            browse_horizon_days=settings.browse_horizon_days,
            browse_stride_days=settings.browse_stride_days,
            max_range_days=settings.browse_horizon_days,
        )

    async def fetch(
        self,
        date_from: date | str | None,
        date_to: date | str | None = None,
        sample_dates: Optional[Sequence[str]] = None,
    ) -> AvailabilitySnapshot:
        """Fetch availability for a contiguous range or explicit sample dates."""
        try:
            if sample_dates:
                days = sorted({_as_date(day).isoformat() for day in sample_dates})
            elif date_from:
                days = dates_in_range(date_from, date_to)
            else:
                return AvailabilitySnapshot.empty()
        except (TypeError, ValueError):
            logger.warning("Invalid availability window %r..%r; continuing without availability", date_from, date_to)
            return AvailabilitySnapshot.empty()

        if len(days) > self.max_range_days:
            logger.warning(
                "Availability window of %s days truncated to %s days", len(days), self.max_range_days
            )
            days = days[: self.max_range_days]

        responses = await self._fetch_days(days)
        operators = aggregate_availability(responses)
        logger.info(
            "Availability for %s..%s: %s operators from %s/%s days",
            days[0],
            days[-1],
            len(operators),
            sum(1 for response in responses if response),
            len(days),
        )
        return AvailabilitySnapshot(operators=operators, queried_dates=days)

    async def fetch_targeted(self, date_from: date | str, date_to: date | str | None = None) -> AvailabilitySnapshot:
        return await self.fetch(date_from, date_to)

    async def fetch_browse(self, today: Optional[date] = None) -> AvailabilitySnapshot:
        """Sample one date per stride across the browse horizon."""
        samples = browse_sample_dates(
            today,
            horizon_days=self.browse_horizon_days,
            stride_days=self.browse_stride_days,
        )
        snapshot = await self.fetch(None, sample_dates=samples)
        snapshot.browse_pool = _browse_pool(snapshot.values())
        logger.info(
            "Browse mode sampled %s dates; %s dates in pool", len(samples), len(snapshot.browse_pool)
        )
        return snapshot

    async def _fetch_days(self, days: Sequence[str]) -> List[Optional[Dict[str, Any]]]:
        responses: List[Optional[Dict[str, Any]]] = []
        for start in range(0, len(days), self.batch_size):
            batch = days[start : start + self.batch_size]
            results = await asyncio.gather(
                *(self._source.fetch_day(day) for day in batch),
                return_exceptions=True,
            )
            for day, result in zip(batch, results):
                if isinstance(result, BaseException):
                    logger.warning("Availability for %s failed: %s", day, result)
                    responses.append(None)
                else:
                    responses.append(result)
        return responses
