"""Itinerary line items and aggregate totals."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

DEFAULT_GUEST_COUNT = 2


def _now_ms() -> int:
    return int(time.time() * 1000)


def _as_number(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return 0


def _as_guests(value: Any) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return DEFAULT_GUEST_COUNT
    return parsed if parsed > 0 else DEFAULT_GUEST_COUNT


@dataclass(slots=True)
class ItineraryLineItem:
    """One reserved cabin on one departure date.

    Presence is decided by ``(cabin_name, ship_name, date)`` only; two items
    for the same triple with different prices are the same reservation.
    """

    cabin_name: str
    ship_name: str
    date: str
    price: float = 0
    guest_count: int = DEFAULT_GUEST_COUNT
    added_at_epoch_ms: int = field(default_factory=_now_ms)

    @property
    def identity(self) -> Tuple[str, str, str]:
        return (self.cabin_name, self.ship_name, self.date)

    def to_dict(self) -> dict[str, object]:
        return {
            "cabin": self.cabin_name,
            "ship": self.ship_name,
            "date": self.date,
            "price": self.price,
            "guests": self.guest_count,
            "addedAt": self.added_at_epoch_ms,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["ItineraryLineItem"]:
        """Rebuild an item from its stored form; entries missing the identity triple are skipped."""
        cabin = payload.get("cabin")
        ship = payload.get("ship")
        day = payload.get("date")
        if not (isinstance(cabin, str) and isinstance(ship, str) and isinstance(day, str)):
            return None
        added_at = payload.get("addedAt")
        if isinstance(added_at, bool) or not isinstance(added_at, (int, float)):
            added_at = _now_ms()
        return cls(
            cabin_name=cabin,
            ship_name=ship,
            date=day,
            price=_as_number(payload.get("price")),
            guest_count=_as_guests(payload.get("guests")),
            added_at_epoch_ms=int(added_at),
        )


@dataclass(slots=True, frozen=True)
class ItineraryTotals:
    cabin_count: int = 0
    guest_count: int = 0
    price_total: float = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "cabin_count": self.cabin_count,
            "guest_count": self.guest_count,
            "price_total": self.price_total,
        }
