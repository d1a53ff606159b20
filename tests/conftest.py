"""
Shared fixtures: in-memory persistence, scripted geocoders and a session
wired the same way the app wires it.
"""

import asyncio
import os

import pytest
import requests

os.environ.setdefault("PINMAP_STORAGE_PROVIDER", "memory")

from pinmap.hydration import HydrationGuard
from pinmap.mapview import HeadlessMapView
from pinmap.services import MapConfig, MemoryKeyValueStore
from pinmap.session import PinMapSession
from pinmap.store import PinStore


class FakeGeocoder:
    """Returns a fixed address; optionally waits on `gate` before answering."""

    def __init__(self, address="Main St Cafe"):
        self.address = address
        self.calls = []
        self.gate = None

    async def resolve_address(self, lat, lng):
        self.calls.append((lat, lng))
        if self.gate is not None:
            await self.gate.wait()
        return self.address


class FakeResponse:
    def __init__(self, payload=None, status=200, body_error=None):
        self.payload = payload
        self.status_code = status
        self.body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.body_error is not None:
            raise self.body_error
        return self.payload


class FakeHttp:
    """Stands in for requests.Session; `outcome` is a FakeResponse or an exception."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.requests = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return PinStore(kv)


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def session(store, geocoder):
    cfg = MapConfig()
    return PinMapSession(
        guard=HydrationGuard(),
        store=store,
        geocoder=geocoder,
        map_view_factory=lambda: HeadlessMapView(cfg),
        map_cfg=cfg,
    )
