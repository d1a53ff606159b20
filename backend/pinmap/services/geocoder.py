import asyncio
import logging
import time
from typing import Optional, Protocol

import requests
from opentelemetry import trace

from ..models import ADDRESS_ERROR, ADDRESS_NOT_FOUND
from ..observability import record_geocode_duration
from .config import GeocoderConfig

log = logging.getLogger("pinmap.geocoder")
tracer = trace.get_tracer(__name__)


class Geocoder(Protocol):
    async def resolve_address(self, lat: float, lng: float) -> str: ...


class NominatimGeocoder:
    """
    Reverse geocoding against a Nominatim-compatible endpoint.

    Best-effort enrichment: resolve_address always returns a display string,
    falling back to ADDRESS_NOT_FOUND / ADDRESS_ERROR instead of raising.
    """

    def __init__(self, cfg: GeocoderConfig, session: Optional[requests.Session] = None):
        # An injected session is shared by every worker thread and must
        # tolerate concurrent use; by default each lookup opens its own.
        self.cfg = cfg
        self.http = session
        self.headers = {"User-Agent": cfg.user_agent, "Accept": "application/json"}

    def _fetch(self, lat: float, lng: float) -> str:
        if self.http is not None:
            return self._get(self.http, lat, lng)
        # requests.Session is not thread-safe; lookups run in to_thread workers
        with requests.Session() as http:
            return self._get(http, lat, lng)

    def _get(self, http, lat: float, lng: float) -> str:
        resp = http.get(
            f"{self.cfg.base_url.rstrip('/')}/reverse",
            params={"format": "json", "lat": lat, "lon": lng},
            headers=self.headers,
            timeout=self.cfg.timeout_s,
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError(f"unexpected geocoder payload type {type(body).__name__}")
        name = body.get("display_name")
        if isinstance(name, str) and name:
            return name
        return ADDRESS_NOT_FOUND

    async def resolve_address(self, lat: float, lng: float) -> str:
        with tracer.start_as_current_span("geocoder.reverse") as span:
            span.set_attribute("geo.lat", lat)
            span.set_attribute("geo.lng", lng)
            started = time.perf_counter()
            try:
                address = await asyncio.to_thread(self._fetch, lat, lng)
                outcome = "not_found" if address == ADDRESS_NOT_FOUND else "ok"
            except Exception as e:
                # transport errors, HTTP status errors, bad JSON: all degrade to the sentinel
                log.warning("Reverse geocoding failed for (%s, %s): %r", lat, lng, e)
                span.record_exception(e)
                address = ADDRESS_ERROR
                outcome = "error"
            span.set_attribute("geocoder.outcome", outcome)
            record_geocode_duration((time.perf_counter() - started) * 1000, {"outcome": outcome})
            return address
