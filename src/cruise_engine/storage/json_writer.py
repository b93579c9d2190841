"""JSON snapshots of search results."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping, Optional

if TYPE_CHECKING:  # pragma: no cover
    from cruise_engine.search.session import SearchResult


def _utc_stamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class JsonStore:
    """Writes ``{generated_at, criteria, summary, items}`` documents under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(
        self,
        items: Iterable[Mapping[str, object]],
        *,
        filename: str,
        criteria: Optional[Mapping[str, str]] = None,
        summary: Optional[Mapping[str, object]] = None,
        subdir: str | None = None,
    ) -> Path:
        target_dir = self.root / subdir if subdir else self.root
        target_dir.mkdir(parents=True, exist_ok=True)
        document = {
            "generated_at": _utc_stamp(datetime.now(timezone.utc)),
            "criteria": dict(criteria or {}),
            "summary": dict(summary or {}),
            "items": [dict(item) for item in items],
        }
        path = target_dir / filename
        path.write_text(json.dumps(document, indent=2, ensure_ascii=False))
        return path

    def write_search(self, result: "SearchResult", *, when: Optional[datetime] = None) -> Path:
        """Export the visible ships of a search, named after its time and destinations."""
        moment = when or datetime.now()
        label = "-".join(result.criteria.destinations) or "all"
        return self.write(
            (ship.to_dict() for ship in result.ships),
            filename=f"search-{moment:%Y%m%d-%H%M%S}-{label}.json",
            criteria=result.criteria.to_query(),
            summary={
                "ships": len(result.ships),
                "total_available_cabins": result.total_available_cabins,
                "failed_sources": list(result.failed_sources),
            },
            subdir=moment.strftime("%Y-%m-%d"),
        )
