"""Utilities to transform raw backend payloads into catalog records."""
from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Tuple

from .models import (
    CabinCatalogEntry,
    CabinFacilities,
    ShipCatalogEntry,
)

_DRIVE_FILE_ID = re.compile(r"(?:file/d/|id=)([\w-]+)")

PLACEHOLDER_BOAT_IMAGE = "/placeholder-boat.svg"
PLACEHOLDER_CABIN_IMAGE = "/placeholder-cabin.jpg"


def convert_google_drive_url(url: Optional[str]) -> str:
    """Turn a Google Drive sharing link into a thumbnail URL."""
    if not url or "drive.google.com" not in url:
        return url or ""
    match = _DRIVE_FILE_ID.search(url)
    if match:
        return f"https://drive.google.com/thumbnail?id={match.group(1)}&sz=w800"
    return url


def is_valid_image_url(url: Optional[str]) -> bool:
    if not url:
        return False
    if "/folders/" in url or "/drive/folders" in url:
        return False
    return True


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _string_list(values: Any) -> List[str]:
    if not values:
        return []
    if isinstance(values, str):
        return [values]
    return [str(value) for value in values if value]


def build_ship_entry(ship: dict[str, Any]) -> ShipCatalogEntry:
    return ShipCatalogEntry(
        name=_to_text(ship.get("name")).strip(),
        description=_to_text(ship.get("description")),
        trip_length=_to_text(ship.get("trip")),
        trip_name=_to_text(ship.get("trip_name")),
        destinations=_to_text(ship.get("destinations")),
        image_main=convert_google_drive_url(ship.get("image_main")),
        images=[convert_google_drive_url(url) for url in _string_list(ship.get("images"))],
    )


def _build_facilities(facilities: Optional[dict[str, Any]]) -> CabinFacilities:
    facilities = facilities or {}
    return CabinFacilities(
        balcony=bool(facilities.get("balcony")),
        bathtub=bool(facilities.get("bathtub")),
        seaview=bool(facilities.get("seaview")),
        large_bed=bool(facilities.get("large_bed")),
        private_jacuzzi=bool(facilities.get("private_jacuzzi")),
        display=_to_text(facilities.get("cabin_display_facilities")),
    )


def build_cabin_entry(cabin: dict[str, Any]) -> CabinCatalogEntry:
    return CabinCatalogEntry(
        cabin_id=_to_text(cabin.get("cabin_id")),
        cabin_name=_to_text(cabin.get("cabin_name")).strip(),
        cabin_name_api=_to_text(cabin.get("cabin_name_api")).strip(),
        boat_name=_to_text(cabin.get("boat_name")).strip(),
        description=_to_text(cabin.get("description")),
        total_capacity=_to_int(cabin.get("total_capacity")),
        price=_to_float(cabin.get("price")),
        facilities=_build_facilities(cabin.get("facilities")),
        image_main=_to_text(cabin.get("image_main")),
        images=[url for url in _string_list(cabin.get("images")) if is_valid_image_url(url)],
    )


def build_ship_entries(entries: Iterable[dict[str, Any]]) -> List[ShipCatalogEntry]:
    ships: List[ShipCatalogEntry] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        ship = build_ship_entry(entry)
        if ship.name:
            ships.append(ship)
    return ships


def build_cabin_entries(entries: Iterable[dict[str, Any]]) -> List[CabinCatalogEntry]:
    return [build_cabin_entry(entry) for entry in entries if isinstance(entry, dict)]


def parse_availability_day(payload: dict[str, Any]) -> Tuple[str, List[dict[str, Any]]]:
    """Return ``(date, operators)`` from a single-day availability response."""
    data = payload.get("data")
    if not isinstance(data, dict):
        data = {}
    operators = data.get("operators")
    if not isinstance(operators, list):
        operators = []
    return _to_text(data.get("date")), [op for op in operators if isinstance(op, dict)]


def extract_images(detail: Optional[dict[str, Any]]) -> List[str]:
    """Gallery images from a cabin detail payload, minus Drive folder links."""
    if not detail:
        return []
    return [url for url in _string_list(detail.get("images")) if is_valid_image_url(url)]
