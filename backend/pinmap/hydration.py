import enum
import logging
from typing import Callable, List

log = logging.getLogger("pinmap.hydration")


class GateState(str, enum.Enum):
    NOT_READY = "not_ready"
    READY = "ready"


class HydrationGuard:
    """
    Two-state gate (NOT_READY -> READY) for environment-dependent initialisation.

    Dependents subscribe once instead of re-checking a flag; callbacks run in
    registration order when the host opens the gate, or immediately when they
    subscribe late.
    """

    def __init__(self) -> None:
        self.state = GateState.NOT_READY
        self._subscribers: List[Callable[[], None]] = []

    @property
    def is_ready(self) -> bool:
        return self.state is GateState.READY

    def subscribe(self, callback: Callable[[], None]) -> None:
        if self.is_ready:
            callback()
            return
        self._subscribers.append(callback)

    def open(self) -> None:
        if self.is_ready:
            return
        self.state = GateState.READY
        pending, self._subscribers = self._subscribers, []
        log.info("Hydration gate open; running %d subscriber(s)", len(pending))
        first_error = None
        for callback in pending:
            try:
                callback()
            except Exception as e:
                log.exception("Hydration subscriber %r failed", callback)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
