"""Client for the ship and cabin catalog endpoints."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from cruise_engine.catalog import (
    CabinCatalogEntry,
    ShipCatalogEntry,
    build_cabin_entries,
    build_ship_entries,
)
from cruise_engine.catalog.normalizer import extract_images

from .backend import BackendClient, BackendResponseError

logger = logging.getLogger(__name__)


class CatalogClient(BackendClient):
    """Fetches the full ship and cabin catalogs; neither is date-scoped."""

    async def fetch_ship_catalog(self) -> List[ShipCatalogEntry]:
        payload = await self._get_envelope("/ships")
        ships = build_ship_entries(payload.get("data") or [])
        logger.info("Loaded %s ships from catalog", len(ships))
        return ships

    async def fetch_cabin_catalog(self) -> List[CabinCatalogEntry]:
        payload = await self._get_envelope("/cabins")
        cabins = build_cabin_entries(payload.get("data") or [])
        logger.info("Loaded %s cabins from catalog", len(cabins))
        return cabins

    async def fetch_cabin_page(self, page: int = 1, limit: int = 100) -> Dict[str, Any]:
        """Return one page of cabins together with the pagination block."""
        try:
            payload = await self._get_envelope("/cabins", params={"page": page, "limit": limit})
        except (httpx.HTTPError, BackendResponseError, ValueError):
            logger.warning("Cabin page %s could not be fetched", page, exc_info=True)
            return {
                "pagination": {"page": 1, "limit": limit, "total": 0, "totalPages": 1},
                "cabins": [],
            }
        return {
            "pagination": payload.get("pagination") or {},
            "cabins": build_cabin_entries(payload.get("data") or []),
        }

    async def fetch_cabin_details(self, cabin_id: str) -> Optional[Dict[str, Any]]:
        payload = await self._get_envelope(f"/cabins/{cabin_id}")
        data = payload.get("data")
        return data if isinstance(data, dict) else None

    async def fetch_cabin_image_details(self, cabin_id: str) -> Dict[str, List[str]]:
        """Gallery images for a cabin; any failure yields an empty gallery."""
        try:
            detail = await self.fetch_cabin_details(cabin_id)
        except (httpx.HTTPError, BackendResponseError, ValueError):
            logger.debug("Cabin detail lookup failed for %s", cabin_id, exc_info=True)
            return {"images": []}
        return {"images": extract_images(detail)}
