"""Catalog/availability reconciliation."""

from .engine import (
    attach_cabin_images,
    build_synthetic_ship,
    cabin_departures,
    enrich_ship,
    find_ship_by_slug,
    lowest_valid_price,
    reconcile,
)

__all__ = [
    "attach_cabin_images",
    "build_synthetic_ship",
    "cabin_departures",
    "enrich_ship",
    "find_ship_by_slug",
    "lowest_valid_price",
    "reconcile",
]
