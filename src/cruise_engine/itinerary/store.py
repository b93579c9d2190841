"""Durable itinerary backed by a single storage key."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional, Protocol, Sequence

from cruise_engine.catalog import EnrichedShip, is_valid_price

from .models import DEFAULT_GUEST_COUNT, ItineraryLineItem, ItineraryTotals

logger = logging.getLogger(__name__)

DEFAULT_ITINERARY_KEY = "komodocruises_itinerary"

ConfirmGuests = Callable[[str, str, str, int], Optional[int]]


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


def read_itinerary(storage: KeyValueStorage, key: str = DEFAULT_ITINERARY_KEY) -> Optional[List[ItineraryLineItem]]:
    """Return the stored list, or ``None`` when nothing usable is stored."""
    raw = storage.get_item(key)
    if raw is None:
        return None
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Discarding corrupt itinerary under %s: %s", key, exc)
        return None
    if not isinstance(payload, list):
        logger.warning("Discarding itinerary under %s: expected a list, got %s", key, type(payload).__name__)
        return None
    items: List[ItineraryLineItem] = []
    for entry in payload:
        item = ItineraryLineItem.from_dict(entry) if isinstance(entry, dict) else None
        if item is None:
            logger.debug("Skipping malformed itinerary entry %r", entry)
            continue
        items.append(item)
    return items


def write_itinerary(
    storage: KeyValueStorage,
    key: str,
    items: Sequence[ItineraryLineItem],
) -> None:
    storage.set_item(key, json.dumps([item.to_dict() for item in items], ensure_ascii=False))


def reserve_price(cabin: Any, ship: EnrichedShip) -> float:
    """Price recorded for a reservation: the cabin's own, else the ship's lowest."""
    price = getattr(cabin, "price", None)
    if is_valid_price(price):
        return price
    return ship.lowest_valid_price


class ItineraryStore:
    """Append/remove list of reservations, persisted after every change.

    Storage is the source of truth: :attr:`items` re-reads it, so two stores
    sharing a backend always agree and the last write wins.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_ITINERARY_KEY) -> None:
        self._storage = storage
        self._key = key

    @classmethod
    def from_settings(cls, storage: KeyValueStorage, settings) -> "ItineraryStore":
        return cls(storage, settings.itinerary_key)

    @property
    def key(self) -> str:
        return self._key

    @property
    def items(self) -> List[ItineraryLineItem]:
        return read_itinerary(self._storage, self._key) or []

    def load(self) -> List[ItineraryLineItem]:
        """Read the stored itinerary once at session start."""
        items = self.items
        logger.info("Loaded %s itinerary items from %s", len(items), self._key)
        return items

    def _save(self, items: Sequence[ItineraryLineItem]) -> None:
        write_itinerary(self._storage, self._key, items)

    def add(self, item: ItineraryLineItem) -> None:
        items = self.items
        items.append(item)
        self._save(items)
        logger.debug("Added %s / %s on %s", item.ship_name, item.cabin_name, item.date)

    def remove(self, index: int) -> Optional[ItineraryLineItem]:
        items = self.items
        if index < 0 or index >= len(items):
            logger.warning("Ignoring itinerary removal at index %s (size %s)", index, len(items))
            return None
        removed = items.pop(index)
        self._save(items)
        return removed

    def index_of(self, cabin_name: str, ship_name: str, date: str) -> int:
        identity = (cabin_name, ship_name, date)
        for index, item in enumerate(self.items):
            if item.identity == identity:
                return index
        return -1

    def is_present(self, cabin_name: str, ship_name: str, date: str) -> bool:
        return self.index_of(cabin_name, ship_name, date) >= 0

    def toggle(
        self,
        cabin_name: str,
        ship_name: str,
        date: str,
        *,
        price: float = 0,
        guest_count: int = DEFAULT_GUEST_COUNT,
        confirm: Optional[ConfirmGuests] = None,
    ) -> bool:
        """Remove the reservation if present, otherwise confirm guests and add it.

        Returns whether the reservation is present afterwards. ``confirm``
        returning ``None`` cancels the add.
        """
        index = self.index_of(cabin_name, ship_name, date)
        if index >= 0:
            self.remove(index)
            return False

        guests = guest_count
        if confirm is not None:
            confirmed = confirm(cabin_name, ship_name, date, guest_count)
            if confirmed is None:
                logger.debug("Reservation of %s / %s on %s cancelled", ship_name, cabin_name, date)
                return False
            guests = confirmed if confirmed > 0 else DEFAULT_GUEST_COUNT
        self.add(
            ItineraryLineItem(
                cabin_name=cabin_name,
                ship_name=ship_name,
                date=date,
                price=price if is_valid_price(price) else 0,
                guest_count=guests,
            )
        )
        return True

    def clear(self) -> None:
        self._storage.remove_item(self._key)
        logger.info("Cleared itinerary %s", self._key)

    def totals(self) -> ItineraryTotals:
        items = self.items
        return ItineraryTotals(
            cabin_count=len(items),
            guest_count=sum(item.guest_count for item in items),
            price_total=sum(item.price for item in items if is_valid_price(item.price)),
        )

    def __len__(self) -> int:
        return len(self.items)
