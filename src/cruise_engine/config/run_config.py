"""User-friendly run configuration loader for manual searches."""
from __future__ import annotations

import re
import tomllib
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional, TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:  # pragma: no cover
    from cruise_engine.config.settings import Settings
    from cruise_engine.search.criteria import SearchCriteria

_RELATIVE_DATE = re.compile(r"^(?P<count>\d+)\s*(?P<unit>[dDwWmM])$")


def _coerce_string_list(value: object) -> list[str]:
    if value in (None, "", ()):
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Iterable):
        result: list[str] = []
        for item in value:
            text = str(item).strip()
            if text:
                result.append(text)
        return result
    raise TypeError("Expected string or list of strings")


class SearchSection(BaseModel):
    """Search criteria decoded from the run config."""

    destinations: list[str] = Field(default_factory=list)
    date_from: Optional[str] = Field(
        default=None, description="ISO 8601 date or relative offset such as '+14d'"
    )
    date_to: Optional[str] = Field(default=None, description="Inclusive end of the date range")
    duration: Optional[int] = Field(default=None, ge=1)
    guests: Optional[int] = Field(default=None, ge=1)
    query: Optional[str] = None
    sort: Optional[str] = None

    @field_validator("destinations", mode="before")
    @classmethod
    def _coerce_destinations(cls, value: object) -> list[str]:
        return _coerce_string_list(value)


class ApiSection(BaseModel):
    """Backend and availability sampling overrides."""

    base_url: Optional[str] = None
    timeout_s: Optional[float] = Field(default=None, gt=0)
    batch_size: Optional[int] = Field(default=None, ge=1)
    browse_horizon_days: Optional[int] = Field(default=None, ge=1)
    browse_stride_days: Optional[int] = Field(default=None, ge=1)
    cabin_images: Optional[bool] = None


class StorageSection(BaseModel):
    """Local itinerary storage overrides."""

    path: Optional[str] = Field(default=None, description="Override the SQLite file path")
    key: Optional[str] = Field(default=None, description="Storage key holding the itinerary")
    journal_mode: Optional[str] = None
    busy_timeout_ms: Optional[int] = Field(default=None, ge=0)


class RunConfig(BaseModel):
    """Top-level configuration decoded from TOML."""

    profile: str = Field(default="default", description="Human label used for logging")
    title: Optional[str] = None
    log_level: Optional[str] = None
    search: SearchSection = Field(default_factory=SearchSection)
    api: ApiSection = Field(default_factory=ApiSection)
    storage: Optional[StorageSection] = None
    destination_catalog_path: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "RunConfig":
        """Load a config from a TOML file."""
        data = tomllib.loads(path.read_text())
        return cls.model_validate(data)

    # Public API -----------------------------------------------------------------

    def apply_to(self, settings: "Settings", *, base_dir: Optional[Path] = None) -> None:
        """Apply overrides to an existing Settings instance."""
        self._apply_api(settings)
        self._apply_storage(settings, base_dir)
        if self.log_level:
            settings.log_level = self.log_level
        if self.destination_catalog_path:
            settings.destination_catalog_path = _resolve_path(self.destination_catalog_path, base_dir)

    def criteria(self) -> "SearchCriteria":
        """Build search criteria from the ``[search]`` section.

        Trip length and guest count stay unset when the section omits them, so
        they do not filter the results.
        """
        from cruise_engine.search.criteria import SearchCriteria

        search = self.search
        date_from = parse_relative_date(search.date_from) if search.date_from else None
        date_to = parse_relative_date(search.date_to) if search.date_to else None
        criteria = SearchCriteria(
            destinations=list(search.destinations),
            date_from=date_from,
            date_to=date_to,
            duration=search.duration,
            guests=search.guests,
            query=search.query or "",
            sort=search.sort or "recommended",
        )
        return criteria.with_derived_end()

    # Internal helpers -----------------------------------------------------------

    def _apply_api(self, settings: "Settings") -> None:
        api = self.api
        if api.base_url:
            settings.api_base_url = api.base_url.rstrip("/")
        if api.timeout_s is not None:
            settings.request_timeout_s = api.timeout_s
        if api.batch_size is not None:
            settings.availability_batch_size = api.batch_size
        if api.browse_horizon_days is not None:
            settings.browse_horizon_days = api.browse_horizon_days
        if api.browse_stride_days is not None:
            settings.browse_stride_days = api.browse_stride_days
        if api.cabin_images is not None:
            settings.cabin_images_enabled = api.cabin_images

    def _apply_storage(self, settings: "Settings", base_dir: Optional[Path]) -> None:
        storage = self.storage
        if not storage:
            return
        if storage.path:
            settings.itinerary_storage_path = _resolve_path(storage.path, base_dir)
        if storage.key:
            settings.itinerary_key = storage.key
        if storage.journal_mode is not None:
            settings.storage_journal_mode = storage.journal_mode
        if storage.busy_timeout_ms is not None:
            settings.storage_busy_timeout_ms = storage.busy_timeout_ms


def _resolve_path(raw: str, base_dir: Optional[Path]) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute() and base_dir:
        return (base_dir / path).resolve()
    return path


def parse_relative_date(value: str, *, today: Optional[date] = None) -> date:
    """Parse ``YYYY-MM-DD``, ``today`` or offsets such as ``+14d``/``today+2w``."""
    today = today or date.today()
    text = value.strip()
    lowered = text.lower()
    if lowered == "today":
        return today
    if lowered.startswith("today+"):
        text = f"+{text.split('+', 1)[1]}"
        lowered = text.lower()
    if lowered.startswith("+"):
        match = _RELATIVE_DATE.match(lowered[1:])
        if not match:
            raise ValueError(
                f"Unsupported relative date '{value}'. Use forms like '+14d', '+2w', '+1m'."
            )
        count = int(match.group("count"))
        unit = match.group("unit").lower()
        if unit == "d":
            delta = timedelta(days=count)
        elif unit == "w":
            delta = timedelta(weeks=count)
        else:
            # Months are 30-day blocks.
            delta = timedelta(days=30 * count)
        return today + delta
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(
            f"Invalid date '{value}'. Provide ISO format (YYYY-MM-DD) or a relative offset."
        ) from exc


__all__ = ["RunConfig", "parse_relative_date"]
