import json
import logging
from typing import Callable, List, Sequence

from pydantic import ValidationError

from .models import Pin
from .services.kv_base import KeyValueStore, PersistenceError

log = logging.getLogger("pinmap.store")

PinsListener = Callable[[List[Pin]], None]


class PinStore:
    """
    Ordered pin sequence persisted as one JSON snapshot under a single key.

    load() is best-effort: absent, unreadable or corrupt state reads as empty so
    a bad snapshot never blocks startup. save() always writes the full sequence.
    """

    def __init__(self, kv: KeyValueStore, key: str = "pins"):
        self.kv = kv
        self.key = key
        self._pins: List[Pin] = []
        self._listeners: List[PinsListener] = []

    def load(self) -> List[Pin]:
        try:
            raw = self.kv.get(self.key)
        except Exception as e:
            log.warning("Pin storage unreadable, starting empty: %r", e)
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            return [Pin.model_validate(item) for item in data]
        except (ValueError, TypeError, ValidationError) as e:
            log.warning("Discarding corrupt pin snapshot under %r: %s", self.key, e)
            return []

    def save(self, pins: Sequence[Pin]) -> None:
        payload = json.dumps([p.model_dump() for p in pins])
        self.kv.set(self.key, payload)

    def append(self, pin: Pin, current: Sequence[Pin]) -> List[Pin]:
        updated = [*current, pin]
        self.save(updated)
        return updated

    # In-memory holder for the session lifetime

    def hydrate(self) -> List[Pin]:
        self._pins = self.load()
        log.info("Loaded %d pin(s) from %r", len(self._pins), self.key)
        self._notify()
        return self.pins

    @property
    def pins(self) -> List[Pin]:
        return list(self._pins)

    def get(self, pin_id: int) -> Pin | None:
        for p in self._pins:
            if p.id == pin_id:
                return p
        return None

    def subscribe(self, listener: PinsListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: PinsListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def add(self, pin: Pin) -> List[Pin]:
        """Append to the live sequence and persist it.

        On PersistenceError the pin stays in memory (and is picked up by the
        next successful save) and listeners are still notified; the error is
        re-raised for the caller to report.
        """
        try:
            self._pins = self.append(pin, self._pins)
        except PersistenceError:
            self._pins = [*self._pins, pin]
            log.exception("Pin %s kept in memory only; snapshot write failed", pin.id)
            self._notify()
            raise
        self._notify()
        return self.pins

    def _notify(self) -> None:
        snapshot = self.pins
        for listener in list(self._listeners):
            listener(snapshot)
