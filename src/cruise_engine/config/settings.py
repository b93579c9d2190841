"""Runtime configuration for the availability engine.

Relies on pydantic-settings so that environment variables (prefixed with ``CRUISE_``)
can override defaults. See `.env.example` for common values.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

VALID_JOURNAL_MODES = frozenset({"delete", "truncate", "persist", "memory", "wal", "off"})


class Settings(BaseSettings):
    """Captures runtime configuration for catalog, availability and itinerary access."""

    api_base_url: str = Field(
        default="https://ac0c4wsgo0cg4sc8ksos04ko.49.13.148.202.sslip.io/api",
        description="Base URL of the cruise backend exposing /ships, /cabins and /availability",
    )
    request_timeout_s: float = Field(default=15.0, description="Per-request timeout in seconds")
    user_agent: str = Field(default="cruise-engine/0.1.0")

    availability_batch_size: int = Field(
        default=10, description="Day requests issued concurrently per availability batch"
    )
    browse_horizon_days: int = Field(
        default=90, description="Days ahead covered by browse-mode availability sampling"
    )
    browse_stride_days: int = Field(
        default=7, description="Days between two browse-mode sample dates"
    )
    cabin_images_enabled: bool = Field(
        default=False, description="Fetch per-cabin gallery images after reconciliation"
    )

    default_guests: int = Field(default=2, description="Guest count used when none is given")

    itinerary_storage_path: Path = Field(
        default=Path("data/storage/local.sqlite3"),
        description="SQLite file backing the local key/value storage",
    )
    itinerary_key: str = Field(default="komodocruises_itinerary")
    storage_busy_timeout_ms: int = Field(default=2000)
    storage_journal_mode: Optional[str] = Field(default="wal")

    destination_catalog_path: Optional[Path] = Field(
        default=None, description="Optional JSON file overriding the built-in destination list"
    )
    export_dir: Path = Field(default=Path("data/exports"))
    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))

    model_config = SettingsConfigDict(
        env_prefix="CRUISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    @field_validator("itinerary_storage_path", "export_dir", "log_dir", mode="before")
    def _expand_path(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        return Path(value).expanduser()

    @field_validator("destination_catalog_path", mode="before")
    def _expand_catalog_path(cls, value: str | Path | None) -> Optional[Path]:
        if value in (None, ""):
            return None
        return Path(value).expanduser()

    @field_validator("api_base_url")
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator(
        "availability_batch_size",
        "browse_horizon_days",
        "browse_stride_days",
        "default_guests",
    )
    def _validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be positive")
        return value

    @field_validator("storage_journal_mode", mode="before")
    def _normalize_journal_mode(cls, value: str | None) -> Optional[str]:
        if value in (None, ""):
            return None
        lowered = str(value).strip().lower()
        if lowered not in VALID_JOURNAL_MODES:
            raise ValueError(f"Unsupported journal mode '{value}'")
        return lowered

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.itinerary_storage_path.parent.mkdir(parents=True, exist_ok=True)
        self.export_dir.mkdir(parents=True, exist_ok=True)

    def client_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
