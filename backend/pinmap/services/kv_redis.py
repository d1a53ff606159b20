import logging
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

from .config import StorageConfig
from .kv_base import PersistenceError

log = logging.getLogger("pinmap.services")

class RedisKeyValueStore:
    def __init__(self, cfg: StorageConfig, client: Optional[Redis] = None):
        self.cfg = cfg
        self.redis = client if client is not None else Redis.from_url(cfg.redis_url, decode_responses=True)
        log.info("Initialized RedisKeyValueStore for %s", cfg.redis_url)

    def _key(self, key: str) -> str:
        return f"{self.cfg.redis_prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        value = self.redis.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self.redis.set(self._key(key), value)
        except RedisError as e:
            raise PersistenceError(f"redis SET {self._key(key)} failed: {e}") from e
