import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from .services.config import MapConfig

log = logging.getLogger("pinmap.mapview")

ClickHandler = Callable[[float, float], None]


class MarkerHandle(Protocol):
    def remove(self) -> None: ...


class MapView(Protocol):
    def on_click(self, handler: ClickHandler) -> None: ...
    def click(self, lat: float, lng: float) -> None: ...
    def create_marker(self, lat: float, lng: float, popup: str) -> MarkerHandle: ...
    def fly_to(self, lat: float, lng: float, zoom: float) -> None: ...
    def dispose(self) -> None: ...


@dataclass
class Camera:
    lng: float
    lat: float
    zoom: float


@dataclass
class Marker:
    marker_id: int
    lat: float
    lng: float
    popup: str
    _view: Optional["HeadlessMapView"] = field(default=None, repr=False, compare=False)

    def remove(self) -> None:
        if self._view is not None:
            self._view._drop(self.marker_id)
            self._view = None


class HeadlessMapView:
    """
    In-process map-view: keeps the marker layer, camera and click subscribers.

    Rendering happens elsewhere (a browser pulls to_geojson()/camera); clicks
    coming back from that surface are delivered through click().
    """

    def __init__(self, cfg: MapConfig):
        self.cfg = cfg
        lng, lat = cfg.center
        self.camera = Camera(lng=lng, lat=lat, zoom=cfg.zoom)
        self._markers: Dict[int, Marker] = {}
        self._handlers: List[ClickHandler] = []
        self._ids = itertools.count(1)
        self.disposed = False

    def on_click(self, handler: ClickHandler) -> None:
        self._handlers.append(handler)

    def click(self, lat: float, lng: float) -> None:
        if self.disposed:
            return
        for handler in list(self._handlers):
            handler(lat, lng)

    def create_marker(self, lat: float, lng: float, popup: str) -> Marker:
        if self.disposed:
            raise RuntimeError("map view has been disposed")
        marker = Marker(marker_id=next(self._ids), lat=lat, lng=lng, popup=popup, _view=self)
        self._markers[marker.marker_id] = marker
        return marker

    def _drop(self, marker_id: int) -> None:
        self._markers.pop(marker_id, None)

    @property
    def markers(self) -> List[Marker]:
        return list(self._markers.values())

    def fly_to(self, lat: float, lng: float, zoom: float) -> None:
        self.camera = Camera(lng=lng, lat=lat, zoom=zoom)
        log.debug("fly_to lat=%s lng=%s zoom=%s", lat, lng, zoom)

    def dispose(self) -> None:
        self._markers.clear()
        self._handlers.clear()
        self.disposed = True

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "id": m.marker_id,
                    # GeoJSON order is [lon, lat]
                    "geometry": {"type": "Point", "coordinates": [m.lng, m.lat]},
                    "properties": {"popup": m.popup, "popup_offset": self.cfg.popup_offset},
                }
                for m in self._markers.values()
            ],
        }
