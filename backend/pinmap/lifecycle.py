import enum
import logging
from typing import List, Optional

from opentelemetry import trace

from .models import DraftPin, Pin, PinIdAllocator, wrap_lng
from .observability import record_pin_committed
from .services.geocoder import Geocoder
from .services.kv_base import PersistenceError
from .store import PinStore

log = logging.getLogger("pinmap.lifecycle")
tracer = trace.get_tracer(__name__)


class LifecycleState(str, enum.Enum):
    IDLE = "idle"
    DRAFTING = "drafting"
    COMMITTING = "committing"


class PinLifecycleController:
    """
    map click -> draft -> geocode -> commit.

    There is a single draft slot: a click replaces whatever is pending. A
    submitted draft stays in the slot while its geocode is in flight and is
    cleared on completion only if the slot still holds it, so a click made
    during the commit survives as a fresh draft.
    """

    def __init__(self, store: PinStore, geocoder: Geocoder, ids: Optional[PinIdAllocator] = None):
        self.store = store
        self.geocoder = geocoder
        self.ids = ids or PinIdAllocator()
        self.draft: Optional[DraftPin] = None
        self._in_flight: List[DraftPin] = []

    @property
    def state(self) -> LifecycleState:
        if self.draft is None:
            return LifecycleState.IDLE
        if self._is_in_flight(self.draft):
            return LifecycleState.COMMITTING
        return LifecycleState.DRAFTING

    def _is_in_flight(self, draft: DraftPin) -> bool:
        return any(d is draft for d in self._in_flight)

    def on_map_click(self, lat: float, lng: float) -> DraftPin:
        if self.draft is not None and not self._is_in_flight(self.draft):
            log.debug("Discarding unsubmitted draft at (%s, %s)", self.draft.lat, self.draft.lng)
        self.draft = DraftPin(lat=lat, lng=wrap_lng(lng), remarks="")
        return self.draft

    def set_remarks(self, remarks: str) -> Optional[DraftPin]:
        if self.draft is None or self._is_in_flight(self.draft):
            return None
        self.draft.remarks = remarks
        return self.draft

    async def submit(self) -> Optional[Pin]:
        draft = self.draft
        if draft is None or self._is_in_flight(draft):
            return None
        if not draft.has_valid_coordinates():
            log.info("Ignoring submit for draft without usable coordinates")
            return None

        self._in_flight.append(draft)
        try:
            with tracer.start_as_current_span("pin.commit") as span:
                address = await self.geocoder.resolve_address(draft.lat, draft.lng)
                pin = Pin(
                    id=self.ids.next_id(),
                    lat=draft.lat,
                    lng=draft.lng,
                    remarks=draft.remarks or "",
                    address=address,
                )
                span.set_attribute("pin.id", pin.id)
                persisted = True
                try:
                    self.store.add(pin)
                except PersistenceError:
                    persisted = False
                span.set_attribute("pin.persisted", persisted)
                record_pin_committed(persisted)
        finally:
            self._in_flight = [d for d in self._in_flight if d is not draft]
            if self.draft is draft:
                self.draft = None

        log.info("Committed pin %s (%d stored)", pin.id, len(self.store.pins))
        return pin
