from typing import Dict, Optional

class MemoryKeyValueStore:
    """Process-local store. Nothing survives a restart; meant for dev and tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
