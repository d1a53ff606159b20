import json

import pytest
import requests

from conftest import FakeHttp, FakeResponse, run
from pinmap.models import ADDRESS_ERROR, ADDRESS_NOT_FOUND
from pinmap.services import GeocoderConfig, NominatimGeocoder


def _geocoder(outcome):
    http = FakeHttp(outcome)
    cfg = GeocoderConfig(base_url="https://geo.example/", timeout_s=3.0, user_agent="pinmap-tests")
    return NominatimGeocoder(cfg, session=http), http


def test_display_name_is_returned_verbatim():
    geo, http = _geocoder(FakeResponse({"display_name": "Main St Cafe, Springfield"}))
    assert run(geo.resolve_address(12.34, 56.78)) == "Main St Cafe, Springfield"
    req = http.requests[0]
    assert req["url"] == "https://geo.example/reverse"
    assert req["params"] == {"format": "json", "lat": 12.34, "lon": 56.78}
    assert req["timeout"] == 3.0
    assert req["headers"]["User-Agent"] == "pinmap-tests"


@pytest.mark.parametrize(
    "payload",
    [{}, {"error": "Unable to geocode"}, {"display_name": ""}, {"display_name": None}, {"display_name": 42}],
)
def test_missing_display_name_is_not_found(payload):
    geo, _ = _geocoder(FakeResponse(payload))
    assert run(geo.resolve_address(0.0, 0.0)) == ADDRESS_NOT_FOUND


@pytest.mark.parametrize(
    "outcome",
    [
        requests.ConnectionError("connection refused"),
        requests.Timeout("read timed out"),
        FakeResponse(status=503),
        FakeResponse(body_error=json.JSONDecodeError("Expecting value", "<html>", 0)),
        FakeResponse(["not", "an", "object"]),
        RuntimeError("unexpected"),
    ],
)
def test_failures_degrade_to_error_sentinel(outcome):
    geo, _ = _geocoder(outcome)
    result = run(geo.resolve_address(12.34, 56.78))
    assert isinstance(result, str)
    assert result == ADDRESS_ERROR


def test_each_lookup_opens_its_own_session(monkeypatch):
    opened = []

    class CountingSession(FakeHttp):
        def __init__(self):
            super().__init__(FakeResponse({"display_name": "Somewhere"}))
            self.closed = False
            opened.append(self)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self.closed = True

    monkeypatch.setattr(requests, "Session", CountingSession)
    geo = NominatimGeocoder(GeocoderConfig())
    assert run(geo.resolve_address(1.0, 2.0)) == "Somewhere"
    assert run(geo.resolve_address(3.0, 4.0)) == "Somewhere"
    assert len(opened) == 2
    assert all(s.closed for s in opened)
