import html
import logging
from typing import Dict, Optional, Sequence

from .mapview import MapView, MarkerHandle
from .models import Pin

log = logging.getLogger("pinmap.reconciler")


def popup_html(pin: Pin) -> str:
    return (
        f"<div><strong>{html.escape(pin.remarks)}</strong></div>"
        f"<div>{html.escape(pin.address)}</div>"
    )


class MarkerReconciler:
    """Keeps exactly one map marker per stored pin, indexed by pin id."""

    def __init__(self) -> None:
        self.map_view: Optional[MapView] = None
        self._rendered: Dict[int, MarkerHandle] = {}
        self._pins: Sequence[Pin] = ()

    def attach(self, map_view: MapView) -> None:
        if map_view is self.map_view:
            return
        # markers belong to the previous view; it is disposed by its owner
        self._rendered = {}
        self.map_view = map_view
        self.sync(self._pins)

    def detach(self) -> None:
        self.map_view = None
        self._rendered = {}

    def sync(self, pins: Sequence[Pin]) -> None:
        self._pins = list(pins)
        if self.map_view is None:
            return

        wanted = {p.id for p in self._pins}
        for pin_id in [i for i in self._rendered if i not in wanted]:
            self._rendered.pop(pin_id).remove()

        created = 0
        for pin in self._pins:
            if pin.id in self._rendered:
                continue
            self._rendered[pin.id] = self.map_view.create_marker(pin.lat, pin.lng, popup_html(pin))
            created += 1
        if created:
            log.debug("Rendered %d new marker(s); %d total", created, len(self._rendered))

    @property
    def markers(self) -> Dict[int, MarkerHandle]:
        return dict(self._rendered)
