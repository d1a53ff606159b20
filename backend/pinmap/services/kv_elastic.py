import logging
from datetime import datetime, timezone
from typing import Optional

from elasticsearch import ApiError, Elasticsearch, NotFoundError, TransportError

from .config import StorageConfig
from .kv_base import PersistenceError

log = logging.getLogger("pinmap.services")

class ElasticKeyValueStore:
    """Keys are document ids in a single index; the value lives in `value`."""

    def __init__(self, cfg: StorageConfig, client: Optional[Elasticsearch] = None):
        self.cfg = cfg
        if client is None:
            if not cfg.elastic_host or not cfg.elastic_api_key:
                raise RuntimeError("ELASTIC_SEARCH_HOST and ELASTIC_SEARCH_API_KEY are required")
            client = Elasticsearch(
                hosts=[cfg.elastic_host],
                api_key=cfg.elastic_api_key,
                request_timeout=30,
            )
            log.info("Initialized ElasticKeyValueStore for %s", cfg.elastic_host)
        self.es = client

    def get(self, key: str) -> Optional[str]:
        try:
            res = self.es.get(index=self.cfg.elastic_index, id=key)
        except NotFoundError:
            return None
        return res.get("_source", {}).get("value")

    def set(self, key: str, value: str) -> None:
        doc = {
            "@timestamp": datetime.now(timezone.utc).isoformat(),
            "value": value,
        }
        try:
            # get-by-id is realtime, but wait_for keeps searches consistent too
            self.es.index(index=self.cfg.elastic_index, id=key, document=doc, refresh="wait_for")
        except (ApiError, TransportError) as e:
            raise PersistenceError(f"Failed to index {key}: {e!r}") from e
