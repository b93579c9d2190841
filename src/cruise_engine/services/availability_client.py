"""Client for the per-day availability endpoint."""
from __future__ import annotations

from typing import Any, Dict

from .backend import BackendClient


class AvailabilityClient(BackendClient):
    """Availability is published one date at a time, keyed by operator."""

    async def fetch_day(self, day: str) -> Dict[str, Any]:
        payload = await self._get_envelope("/availability", params={"date": day})
        data = payload.get("data")
        if not isinstance(data, dict):
            data = payload["data"] = {}
        # Some responses omit the echo of the queried date.
        if not data.get("date"):
            data["date"] = day
        return payload

