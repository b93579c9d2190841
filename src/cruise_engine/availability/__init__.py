"""Availability fetching and aggregation."""

from .fetcher import (
    AvailabilityFetcher,
    aggregate_availability,
    browse_sample_dates,
    dates_in_range,
    filter_weekly_departures,
)

__all__ = [
    "AvailabilityFetcher",
    "aggregate_availability",
    "browse_sample_dates",
    "dates_in_range",
    "filter_weekly_departures",
]
