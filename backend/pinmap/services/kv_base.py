from typing import Optional, Protocol

class PersistenceError(RuntimeError):
    """A key-value backend could not write the pin snapshot."""

class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
