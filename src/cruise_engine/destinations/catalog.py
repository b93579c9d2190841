"""Destination catalog helpers."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

MIN_DESTINATION_PART_LENGTH = 3


@dataclass(frozen=True)
class Destination:
    """A selectable search destination (query-string id + display name)."""

    key: str
    name: str

    def matches(self, text: str) -> bool:
        """True when ``text`` (a comma-separated destinations field) refers to this destination.

        Either the id or display name appears in ``text``, or one of the
        comma-separated parts of ``text`` appears in the display name
        ("Komodo" matches "Komodo National Park").
        """
        lowered = (text or "").lower()
        if not lowered.strip():
            return False
        name = self.name.lower()
        key = self.key.lower()
        if key in lowered or name in lowered:
            return True
        spelled_key = key.replace("-", " ")
        for part in lowered.split(","):
            part = part.strip()
            if len(part) < MIN_DESTINATION_PART_LENGTH:
                continue
            if part in name or part in spelled_key:
                return True
        return False


DEFAULT_DESTINATIONS: tuple[Destination, ...] = (
    Destination(key="komodo-national-park", name="Komodo National Park"),
    Destination(key="labuan-bajo", name="Labuan Bajo"),
)


class DestinationCatalog:
    """Maps destination ids used in URLs to their display names."""

    def __init__(self, destinations: Mapping[str, Destination], *, source: Optional[Path] = None) -> None:
        self._destinations = destinations
        self._source = source

    @property
    def source(self) -> Optional[Path]:
        return self._source

    def get(self, key: str) -> Destination:
        try:
            return self._destinations[key]
        except KeyError as exc:
            known = ", ".join(sorted(self._destinations))
            raise KeyError(f"Destination '{key}' not found. Known keys: {known}") from exc

    def resolve(self, key: str) -> Destination:
        """Like :meth:`get` but unknown ids become ad-hoc destinations named after the id."""
        return self._destinations.get(key) or Destination(key=key, name=key)

    def display_name(self, key: str) -> str:
        return self.resolve(key).name

    def values(self) -> Iterable[Destination]:
        return self._destinations.values()

    @classmethod
    def default(cls) -> "DestinationCatalog":
        return cls({destination.key: destination for destination in DEFAULT_DESTINATIONS})

    @classmethod
    def load(cls, path: Path) -> "DestinationCatalog":
        if not path.exists():
            raise FileNotFoundError(f"Destination catalog not found at {path}")
        data = json.loads(path.read_text())
        destinations: dict[str, Destination] = {}
        for entry in data.get("destinations", []):
            destination = Destination(key=entry["key"], name=entry.get("name", entry["key"]))
            destinations[destination.key] = destination
        return cls(destinations, source=path)

    @classmethod
    def from_settings(cls, settings) -> "DestinationCatalog":
        if settings.destination_catalog_path:
            return cls.load(settings.destination_catalog_path)
        return cls.default()
