import logging
from typing import Any, Callable, Dict, Optional

from .hydration import HydrationGuard
from .lifecycle import PinLifecycleController
from .mapview import HeadlessMapView, MapView
from .models import DraftPin, Pin
from .reconciler import MarkerReconciler
from .services.config import MapConfig
from .services.geocoder import Geocoder
from .store import PinStore

log = logging.getLogger("pinmap.session")

MapViewFactory = Callable[[], MapView]


class PinMapSession:
    """
    Owns one pin store, controller, reconciler and map-view.

    Nothing stateful happens until the hydration guard opens: the store is not
    read, no map-view exists and snapshot() returns a neutral placeholder.
    """

    def __init__(
        self,
        guard: HydrationGuard,
        store: PinStore,
        geocoder: Geocoder,
        map_view_factory: Optional[MapViewFactory] = None,
        map_cfg: Optional[MapConfig] = None,
    ):
        self.guard = guard
        self.store = store
        self.map_cfg = map_cfg or MapConfig()
        self.map_view_factory = map_view_factory or (lambda: HeadlessMapView(self.map_cfg))
        self.controller = PinLifecycleController(store, geocoder)
        self.reconciler = MarkerReconciler()
        self.map_view: Optional[MapView] = None
        guard.subscribe(self._init)

    @property
    def ready(self) -> bool:
        return self.guard.is_ready and self.map_view is not None

    def _init(self) -> None:
        pins = self.store.hydrate()
        self.controller.ids.seed(p.id for p in pins)

        self.map_view = self.map_view_factory()
        self.map_view.on_click(self.controller.on_map_click)
        self.reconciler.attach(self.map_view)
        self.reconciler.sync(self.store.pins)
        self.store.subscribe(self.reconciler.sync)
        log.info("Session initialised with %d pin(s)", len(pins))

    def dispose(self) -> None:
        if self.map_view is None:
            return
        self.store.unsubscribe(self.reconciler.sync)
        self.reconciler.detach()
        self.map_view.dispose()
        self.map_view = None
        log.info("Session disposed")

    # Events

    def click(self, lat: float, lng: float) -> Optional[DraftPin]:
        if not self.ready:
            return None
        self.map_view.click(lat, lng)
        return self.controller.draft

    def set_remarks(self, remarks: str) -> Optional[DraftPin]:
        if not self.ready:
            return None
        return self.controller.set_remarks(remarks)

    async def submit(self) -> Optional[Pin]:
        if not self.ready:
            return None
        return await self.controller.submit()

    def navigate_to_pin(self, pin_id: int) -> bool:
        if not self.ready:
            return False
        pin = self.store.get(pin_id)
        if pin is None:
            return False
        self.map_view.fly_to(pin.lat, pin.lng, self.map_cfg.fly_to_zoom)
        return True

    # Projection

    def snapshot(self) -> Dict[str, Any]:
        if not self.ready:
            return {"ready": False, "pins": [], "draft": None, "state": None, "markers": 0}
        draft = self.controller.draft
        return {
            "ready": True,
            "pins": [p.model_dump() for p in self.store.pins],
            "draft": draft.model_dump() if draft is not None else None,
            "state": self.controller.state.value,
            "markers": len(self.reconciler.markers),
        }
