"""One search cycle: fetch sources concurrently, reconcile, filter and sort.

The three sources (ship catalog, cabin catalog, availability) are fetched
together and each failure degrades to an empty source. Every call to
:meth:`SearchSession.search` starts a new generation; results produced for an
older generation are discarded instead of being returned.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Protocol, Sequence

from cruise_engine.availability import AvailabilityFetcher
from cruise_engine.catalog import (
    AvailabilitySnapshot,
    CabinCatalogEntry,
    EnrichedShip,
    ShipCatalogEntry,
)
from cruise_engine.destinations import DestinationCatalog
from cruise_engine.reconcile import attach_cabin_images, find_ship_by_slug, reconcile
from cruise_engine.services import AvailabilityClient, CatalogClient

from .criteria import SearchCriteria
from .pipeline import filter_and_sort, total_available_cabins

logger = logging.getLogger(__name__)

SOURCE_SHIPS = "ships"
SOURCE_CABINS = "cabins"
SOURCE_AVAILABILITY = "availability"


class StaleSearchError(RuntimeError):
    """Raised when a search finishes after a newer search (or close) superseded it."""

    def __init__(self, generation: int, current: int) -> None:
        super().__init__(f"Search generation {generation} superseded by {current}")
        self.generation = generation
        self.current = current


class CatalogSource(Protocol):
    async def fetch_ship_catalog(self) -> List[ShipCatalogEntry]:
        ...

    async def fetch_cabin_catalog(self) -> List[CabinCatalogEntry]:
        ...

    async def fetch_cabin_image_details(self, cabin_id: str) -> Dict[str, List[str]]:
        ...


@dataclass(slots=True)
class SearchResult:
    criteria: SearchCriteria
    ships: List[EnrichedShip]
    all_ships: List[EnrichedShip]
    generation: int
    failed_sources: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.ships

    @property
    def total_available_cabins(self) -> int:
        return total_available_cabins(self.ships)

    def to_dict(self) -> dict[str, object]:
        return {
            "criteria": self.criteria.to_query(),
            "total_available_cabins": self.total_available_cabins,
            "failed_sources": list(self.failed_sources),
            "ships": EnrichedShip.from_iterable(self.ships),
        }


class SearchSession:
    """Owns the in-flight search for one page/session."""

    def __init__(
        self,
        catalog_client: CatalogSource,
        fetcher: AvailabilityFetcher,
        *,
        destinations: Optional[DestinationCatalog] = None,
        cabin_images: bool = False,
        owned_clients: Sequence[Any] = (),
    ) -> None:
        self._catalog_client = catalog_client
        self._fetcher = fetcher
        self._destinations = destinations or DestinationCatalog.default()
        self._cabin_images = cabin_images
        self._owned_clients = list(owned_clients)
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._closed = False
        self._last_result: Optional[SearchResult] = None

    @classmethod
    def from_settings(cls, settings, *, transport=None) -> "SearchSession":
        """Build a session whose HTTP clients are closed by :meth:`close`."""
        headers = settings.client_headers()
        catalog_client = CatalogClient(
            settings.api_base_url,
            timeout=settings.request_timeout_s,
            headers=headers,
            transport=transport,
        )
        availability_client = AvailabilityClient(
            settings.api_base_url,
            timeout=settings.request_timeout_s,
            headers=headers,
            transport=transport,
        )
        return cls(
            catalog_client,
            AvailabilityFetcher.from_settings(availability_client, settings),
            destinations=DestinationCatalog.from_settings(settings),
            cabin_images=settings.cabin_images_enabled,
            owned_clients=[catalog_client, availability_client],
        )

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_result(self) -> Optional[SearchResult]:
        return self._last_result

    async def search(self, criteria: SearchCriteria, *, today: Optional[date] = None) -> Optional[SearchResult]:
        """Run a search; ``None`` means the result was superseded and discarded."""
        if self._closed:
            raise RuntimeError("SearchSession is closed")
        self._generation += 1
        generation = self._generation
        previous = self._task
        if previous is not None and not previous.done():
            logger.debug("Cancelling search generation %s", generation - 1)
            previous.cancel()

        task = asyncio.ensure_future(self._run(criteria, generation, today))
        self._task = task
        try:
            result = await task
        except StaleSearchError as exc:
            logger.info("Discarding stale search result: %s", exc)
            return None
        except asyncio.CancelledError:
            if task.cancelled() and self._is_stale(generation):
                logger.info("Search generation %s abandoned", generation)
                return None
            raise
        self._last_result = result
        return result

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    def _check_current(self, generation: int) -> None:
        if self._is_stale(generation):
            raise StaleSearchError(generation, self._generation)

    async def _run(self, criteria: SearchCriteria, generation: int, today: Optional[date]) -> SearchResult:
        date_range_active = criteria.has_date_range
        if date_range_active:
            availability = self._fetcher.fetch_targeted(criteria.date_from, criteria.date_to)
        else:
            availability = self._fetcher.fetch_browse(today)

        ships_result, cabins_result, availability_result = await asyncio.gather(
            self._catalog_client.fetch_ship_catalog(),
            self._catalog_client.fetch_cabin_catalog(),
            availability,
            return_exceptions=True,
        )
        self._check_current(generation)

        failed: List[str] = []
        ships: List[ShipCatalogEntry] = self._source_or_default(SOURCE_SHIPS, ships_result, [], failed)
        cabins: List[CabinCatalogEntry] = self._source_or_default(SOURCE_CABINS, cabins_result, [], failed)
        snapshot: AvailabilitySnapshot = self._source_or_default(
            SOURCE_AVAILABILITY, availability_result, AvailabilitySnapshot.empty(), failed
        )

        all_ships = reconcile(ships, cabins, snapshot, date_range_active=date_range_active)
        visible = filter_and_sort(all_ships, criteria, catalog=self._destinations)

        if self._cabin_images and visible:
            visible = await self._with_cabin_images(visible)
            self._check_current(generation)

        logger.info(
            "Search generation %s: %s of %s ships shown%s",
            generation,
            len(visible),
            len(all_ships),
            f" (degraded: {', '.join(failed)})" if failed else "",
        )
        return SearchResult(
            criteria=criteria,
            ships=visible,
            all_ships=all_ships,
            generation=generation,
            failed_sources=failed,
        )

    @staticmethod
    def _source_or_default(name: str, result: Any, default: Any, failed: List[str]) -> Any:
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.warning("Fetching %s failed; continuing without it: %s", name, result)
            failed.append(name)
            return default
        return result

    async def _with_cabin_images(self, ships: List[EnrichedShip]) -> List[EnrichedShip]:
        cabin_ids = sorted(
            {cabin.cabin_id for ship in ships if not ship.is_synthetic for cabin in ship.cabins}
        )
        if not cabin_ids:
            return ships
        results = await asyncio.gather(
            *(self._catalog_client.fetch_cabin_image_details(cabin_id) for cabin_id in cabin_ids),
            return_exceptions=True,
        )
        images: Dict[str, List[str]] = {}
        for cabin_id, result in zip(cabin_ids, results):
            if isinstance(result, BaseException):
                logger.debug("Image lookup for cabin %s failed: %s", cabin_id, result)
                continue
            gallery = (result or {}).get("images") or []
            if gallery:
                images[cabin_id] = list(gallery)
        return attach_cabin_images(ships, images)

    def ship_detail(self, slug: str) -> Optional[EnrichedShip]:
        """Look up a ship from the latest completed search by its URL slug."""
        if self._last_result is None:
            return None
        return find_ship_by_slug(self._last_result.all_ships, slug)

    async def close(self) -> None:
        """Abandon in-flight work and release owned clients."""
        if self._closed:
            return
        self._closed = True
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        for client in self._owned_clients:
            await client.aclose()
        self._owned_clients.clear()

    async def __aenter__(self) -> "SearchSession":
        return self

    async def __aexit__(self, exc_type, exc, exc_tb) -> None:
        await self.close()
