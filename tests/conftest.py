from __future__ import annotations

import asyncio
import os
import sys
from types import SimpleNamespace

import aiohttp
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from relay_map_api.config_manager import RelayMapSettings  # noqa: E402
from relay_map_api.exceptions import GeoLookupError  # noqa: E402
from relay_map_api.models import GeoCoordinate  # noqa: E402


class DummyResponse:
    def __init__(self, payload, status=200, delay=0.0):
        self._payload = payload
        self.status = status
        self._delay = delay

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp_error(self.status)

    async def json(self):
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


def aiohttp_error(status):
    request_info = SimpleNamespace(real_url="http://upstream.test")
    return aiohttp.ClientResponseError(request_info=request_info, history=(), status=status, message="error")


class DummyClient:
    """Stand-in for aiohttp.ClientSession serving canned responses in order.

    An exception instance in ``responses`` is raised from ``get`` instead.
    The last response is repeated once the list is exhausted.
    """

    def __init__(self, *responses):
        self._responses = list(responses)
        self.requests = []
        self.closed = False

    def get(self, url, params=None):  # noqa: D401
        self.requests.append((url, params))
        item = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, DummyResponse):
            return item
        return DummyResponse(item)

    async def close(self) -> None:
        self.closed = True


class FakeResolver:
    """Resolve from a dict; IPs listed in ``broken`` raise GeoLookupError."""

    def __init__(self, table, broken=()):
        self._table = table
        self._broken = set(broken)
        self.calls = []

    def resolve(self, ip):
        self.calls.append(ip)
        if ip in self._broken:
            raise GeoLookupError(f"lookup failed for {ip}")
        pair = self._table.get(ip)
        if pair is None:
            return None
        return GeoCoordinate(latitude=pair[0], longitude=pair[1])


@pytest.fixture
def settings(tmp_path):
    return RelayMapSettings(
        onionoo_instance="onionoo.test:9090",
        victoria_metrics_address="vm.test:8428",
        geolite_db_path=tmp_path / "GeoLite2-City.mmdb",
        upstream_retries=2,
        upstream_retry_delay_seconds=0,
    )
