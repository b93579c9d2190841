from __future__ import annotations

import json

import pytest

from cruise_engine.config.settings import Settings
from cruise_engine.destinations import Destination, DestinationCatalog


def test_destination_matches_free_text_fields():
    komodo = Destination(key="komodo-national-park", name="Komodo National Park")

    assert komodo.matches("Komodo National Park, Labuan Bajo")
    assert komodo.matches("Labuan Bajo, Komodo")
    assert komodo.matches("komodo-national-park")
    assert not komodo.matches("Raja Ampat")
    assert not komodo.matches("")


def test_catalog_lookup_and_ad_hoc_resolution():
    catalog = DestinationCatalog.default()

    assert catalog.get("labuan-bajo").name == "Labuan Bajo"
    assert catalog.display_name("raja-ampat") == "raja-ampat"
    with pytest.raises(KeyError):
        catalog.get("raja-ampat")


def test_catalog_loads_from_settings(tmp_path):
    path = tmp_path / "destinations.json"
    path.write_text(json.dumps({"destinations": [{"key": "raja-ampat", "name": "Raja Ampat"}, {"key": "gili"}]}))

    catalog = DestinationCatalog.from_settings(Settings(destination_catalog_path=path))

    assert catalog.source == path
    assert [destination.name for destination in catalog.values()] == ["Raja Ampat", "gili"]
    assert DestinationCatalog.from_settings(Settings()).get("komodo-national-park")

    with pytest.raises(FileNotFoundError):
        DestinationCatalog.load(tmp_path / "missing.json")
