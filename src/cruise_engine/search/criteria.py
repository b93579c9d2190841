"""Search criteria and their query-string representation."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional
from urllib.parse import parse_qsl, urlencode

from cruise_engine.destinations import DestinationCatalog

logger = logging.getLogger(__name__)

DEFAULT_DURATION_DAYS = 3
DEFAULT_GUESTS = 2

SORT_RECOMMENDED = "recommended"
SORT_PRICE_LOW = "price-low"
SORT_PRICE_HIGH = "price-high"
SORT_NAME = "name"
SORT_OPTIONS = (SORT_RECOMMENDED, SORT_PRICE_LOW, SORT_PRICE_HIGH, SORT_NAME)


def parse_positive_int(value: object, default: int) -> int:
    """Parse user input as a positive integer, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric value %r; using %s", value, default)
        return default
    return parsed if parsed > 0 else default


def parse_iso_date(value: object) -> Optional[date]:
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        logger.debug("Ignoring invalid date %r", value)
        return None


@dataclass
class SearchCriteria:
    """User-selected search filters.

    ``duration`` and ``guests`` are ``None`` until the user picks a value;
    invalid input falls back to the defaults instead of being rejected.
    """

    destinations: List[str] = field(default_factory=list)
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    duration: Optional[int] = None
    guests: Optional[int] = None
    query: str = ""
    sort: str = SORT_RECOMMENDED

    @property
    def has_date_range(self) -> bool:
        return self.date_from is not None

    @property
    def effective_duration(self) -> int:
        return self.duration or DEFAULT_DURATION_DAYS

    @property
    def effective_guests(self) -> int:
        return self.guests or DEFAULT_GUESTS

    def with_derived_end(self) -> "SearchCriteria":
        """Fill ``date_to`` from ``date_from`` and the trip length when it is missing."""
        if self.date_from is None or self.date_to is not None or not self.duration:
            return self
        return replace(self, date_to=self.date_from + timedelta(days=self.duration - 1))

    def destination_label(self, catalog: Optional[DestinationCatalog] = None) -> str:
        if not self.destinations:
            return "All Destinations"
        catalog = catalog or DestinationCatalog.default()
        return ", ".join(catalog.display_name(key) for key in self.destinations)

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> "SearchCriteria":
        """Read criteria from the results page query parameters."""
        destinations = [
            item.strip() for item in (params.get("destinations") or "").split(",") if item.strip()
        ]
        duration = (
            parse_positive_int(params["duration"], DEFAULT_DURATION_DAYS)
            if params.get("duration") not in (None, "")
            else None
        )
        guests = (
            parse_positive_int(params["guests"], DEFAULT_GUESTS)
            if params.get("guests") not in (None, "")
            else None
        )
        sort = (params.get("sort") or SORT_RECOMMENDED).strip()
        criteria = cls(
            destinations=destinations,
            date_from=parse_iso_date(params.get("dateFrom")),
            date_to=parse_iso_date(params.get("dateTo")),
            duration=duration,
            guests=guests,
            query=(params.get("q") or "").strip(),
            sort=sort if sort in SORT_OPTIONS else SORT_RECOMMENDED,
        )
        if criteria.date_from is None:
            criteria.date_to = None
        return criteria.with_derived_end()

    @classmethod
    def from_query_string(cls, query_string: str) -> "SearchCriteria":
        return cls.from_query(dict(parse_qsl(query_string.lstrip("?"), keep_blank_values=True)))

    def to_query(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.destinations:
            params["destinations"] = ",".join(self.destinations)
        if self.date_from:
            params["dateFrom"] = self.date_from.isoformat()
        if self.date_to:
            params["dateTo"] = self.date_to.isoformat()
        if self.duration:
            params["duration"] = str(self.duration)
        if self.guests:
            params["guests"] = str(self.guests)
        if self.query:
            params["q"] = self.query
        if self.sort and self.sort != SORT_RECOMMENDED:
            params["sort"] = self.sort
        return params

    def to_query_string(self) -> str:
        return urlencode(self.to_query(), safe=",")
