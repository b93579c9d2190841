"""Client-local reservation list."""

from .models import ItineraryLineItem, ItineraryTotals
from .store import ItineraryStore, read_itinerary, reserve_price, write_itinerary

__all__ = [
    "ItineraryLineItem",
    "ItineraryStore",
    "ItineraryTotals",
    "read_itinerary",
    "reserve_price",
    "write_itinerary",
]
