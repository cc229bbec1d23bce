"""Fixtures wiring the in-memory Zabbix API into a transport."""

from __future__ import annotations

import httpx
import pytest
from fake_zabbix import API_URL, FakeZabbix

from src.zabbix.transport import ZabbixTransport


@pytest.fixture()
def fake() -> FakeZabbix:
    return FakeZabbix()


@pytest.fixture()
def http(fake: FakeZabbix) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake.handle))


@pytest.fixture()
async def zbx(http: httpx.AsyncClient) -> ZabbixTransport:
    transport = ZabbixTransport(API_URL, http=http)
    await transport.connect()
    yield transport  # type: ignore[misc]
    await transport.close()
    await http.aclose()
