from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from slot_booking.application.exceptions import CatalogUnavailableError
from slot_booking.domain.entities.service_option import ServiceOption
from slot_booking.infrastructure.catalog.service_catalog_data import DEFAULT_SERVICES
from slot_booking.infrastructure.catalog.service_catalog_store import (
    HttpServiceCatalog,
    StaticServiceCatalog,
    parse_catalog,
)


def test_parse_catalog_keeps_first_duplicate():
    services = parse_catalog(
        [
            {"name": "Classic haircut", "duration": 30},
            {"name": "Beard trim", "duration": 30},
            {"name": " Classic haircut ", "duration": 45},
        ]
    )

    assert services == [ServiceOption("Classic haircut", 30), ServiceOption("Beard trim", 30)]


@pytest.mark.parametrize(
    "data",
    [
        {"name": "Classic haircut", "duration": 30},
        [{"name": "Classic haircut", "duration": 0}],
        [{"name": "", "duration": 30}],
        [{"duration": 30}],
    ],
)
def test_parse_catalog_rejects_bad_entries(data):
    with pytest.raises(CatalogUnavailableError):
        parse_catalog(data)


def test_static_catalog_defaults():
    services = asyncio.run(StaticServiceCatalog().load_services())

    assert services == DEFAULT_SERVICES
    assert len({s.name for s in services}) == len(services)


def test_static_catalog_reads_file(tmp_path):
    path = tmp_path / "services.json"
    path.write_text(json.dumps([{"name": "Kids haircut", "duration": 30}]), encoding="utf-8")

    services = asyncio.run(StaticServiceCatalog(path=str(path)).load_services())

    assert services == [ServiceOption("Kids haircut", 30)]


def test_static_catalog_unreadable_file(tmp_path):
    with pytest.raises(CatalogUnavailableError):
        asyncio.run(StaticServiceCatalog(path=str(tmp_path / "missing.json")).load_services())

    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")
    with pytest.raises(CatalogUnavailableError):
        asyncio.run(StaticServiceCatalog(path=str(broken)).load_services())


def test_http_catalog_fetches_list():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json=[{"name": "Beard trim", "duration": 30}])
    )

    services = asyncio.run(HttpServiceCatalog("https://catalog.test/services", transport=transport).load_services())

    assert services == [ServiceOption("Beard trim", 30)]


def test_http_catalog_failure():
    transport = httpx.MockTransport(lambda request: httpx.Response(500))

    with pytest.raises(CatalogUnavailableError):
        asyncio.run(HttpServiceCatalog("https://catalog.test/services", transport=transport).load_services())


def test_service_option_validation():
    with pytest.raises(ValueError):
        ServiceOption("", 30)
    with pytest.raises(ValueError):
        ServiceOption("Beard trim", 0)


def test_blank_service_name_is_rejected():
    with pytest.raises(CatalogUnavailableError):
        parse_catalog([{"name": "   ", "duration": 30}])
