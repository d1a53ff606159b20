from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from .kv_base import PersistenceError

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")

class FileKeyValueStore:
    """
    One file per key under `directory`, written atomically:
      {directory}/{key}.json
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix="pins_", suffix=".json", dir=str(path.parent))
        except OSError as e:
            raise PersistenceError(f"cannot write {path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, str(path))
        except OSError as e:
            raise PersistenceError(f"cannot write {path}: {e}") from e
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
