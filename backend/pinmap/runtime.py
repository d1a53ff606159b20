from __future__ import annotations

from .hydration import HydrationGuard
from .services import MapConfig, StorageConfig, get_geocoder, get_kv
from .session import PinMapSession
from .store import PinStore

_session: PinMapSession | None = None

def build_session(kv=None, geocoder=None, map_view_factory=None) -> PinMapSession:
    store = PinStore(kv if kv is not None else get_kv(), key=StorageConfig().key)
    return PinMapSession(
        guard=HydrationGuard(),
        store=store,
        geocoder=geocoder if geocoder is not None else get_geocoder(),
        map_view_factory=map_view_factory,
        map_cfg=MapConfig(),
    )

def get_session() -> PinMapSession:
    global _session
    if _session is None:
        _session = build_session()
    return _session

def set_session(session: PinMapSession | None) -> None:
    global _session
    _session = session
