from __future__ import annotations

import httpx
import pytest

from cruise_engine.services import AvailabilityClient, BackendResponseError, CatalogClient

BASE_URL = "https://cruise.test/api"

SHIPS = [
    {
        "name": "Aurora Liveaboard",
        "description": "Classic phinisi",
        "trip": "3 days",
        "trip_name": "Komodo Explorer",
        "destinations": "Komodo National Park, Labuan Bajo",
        "image_main": "https://drive.google.com/file/d/abc123/view",
        "images": ["https://img.example/1.jpg"],
    },
    {"name": "", "description": "unnamed rows are skipped"},
]

CABINS = [
    {
        "cabin_id": "c-1",
        "cabin_name": "Master Suite",
        "cabin_name_api": "MASTER",
        "boat_name": "Aurora Liveaboard",
        "total_capacity": "2",
        "price": 43243243,
        "facilities": {"balcony": 1, "seaview": True},
        "images": ["https://drive.google.com/drive/folders/xyz", "https://img.example/c1.jpg"],
    }
]


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/ships":
        return httpx.Response(200, json={"success": True, "data": SHIPS})
    if path == "/api/cabins" and request.url.params.get("page") == "2":
        return httpx.Response(500, text="boom")
    if path == "/api/cabins":
        return httpx.Response(
            200,
            json={"success": True, "data": CABINS, "pagination": {"page": 1, "totalPages": 1}},
        )
    if path == "/api/cabins/c-1":
        return httpx.Response(200, json={"success": True, "data": {"images": CABINS[0]["images"]}})
    if path == "/api/cabins/c-2":
        return httpx.Response(200, json={"success": False, "message": "not found"})
    if path == "/api/availability":
        day = request.url.params["date"]
        if day == "2026-01-11":
            return httpx.Response(503, text="unavailable")
        return httpx.Response(
            200,
            json={"success": True, "data": {"operators": [{"operator": "MV Aurora", "total": 1, "cabins": []}]}},
        )
    return httpx.Response(404)


@pytest.fixture
def transport() -> httpx.MockTransport:
    return httpx.MockTransport(_handler)


@pytest.mark.asyncio
async def test_fetch_catalogs_normalizes_rows(transport):
    async with CatalogClient(BASE_URL, transport=transport) as client:
        ships = await client.fetch_ship_catalog()
        cabins = await client.fetch_cabin_catalog()

    assert [ship.name for ship in ships] == ["Aurora Liveaboard"]
    assert ships[0].trip_length_days == 3
    assert ships[0].image_main == "https://drive.google.com/thumbnail?id=abc123&sz=w800"
    cabin = cabins[0]
    assert cabin.total_capacity == 2
    assert not cabin.has_valid_price
    assert cabin.names == ["Master Suite", "MASTER"]
    assert cabin.facilities.balcony and cabin.facilities.seaview
    assert cabin.images == ["https://img.example/c1.jpg"]


@pytest.mark.asyncio
async def test_cabin_page_falls_back_on_errors(transport):
    async with CatalogClient(BASE_URL, transport=transport) as client:
        first = await client.fetch_cabin_page(1, limit=50)
        broken = await client.fetch_cabin_page(2, limit=50)

    assert len(first["cabins"]) == 1
    assert first["pagination"]["totalPages"] == 1
    assert broken == {
        "pagination": {"page": 1, "limit": 50, "total": 0, "totalPages": 1},
        "cabins": [],
    }


@pytest.mark.asyncio
async def test_cabin_image_details_tolerate_failures(transport):
    async with CatalogClient(BASE_URL, transport=transport) as client:
        found = await client.fetch_cabin_image_details("c-1")
        missing = await client.fetch_cabin_image_details("c-2")
        with pytest.raises(BackendResponseError):
            await client.fetch_cabin_details("c-2")

    assert found == {"images": ["https://img.example/c1.jpg"]}
    assert missing == {"images": []}


@pytest.mark.asyncio
async def test_availability_day_fills_in_queried_date(transport):
    async with AvailabilityClient(BASE_URL, transport=transport) as client:
        payload = await client.fetch_day("2026-01-10")
        assert payload["data"]["date"] == "2026-01-10"
        with pytest.raises(httpx.HTTPStatusError):
            await client.fetch_day("2026-01-11")
