from .config import StorageConfig, GeocoderConfig, MapConfig
from .kv_base import KeyValueStore, PersistenceError
from .kv_memory import MemoryKeyValueStore
from .kv_file import FileKeyValueStore
from .geocoder import Geocoder, NominatimGeocoder

_kv_singleton: KeyValueStore | None = None
_geocoder_singleton: Geocoder | None = None

def get_kv() -> KeyValueStore:
    global _kv_singleton
    if _kv_singleton is None:
        sc = StorageConfig()
        if sc.provider == "memory":
            _kv_singleton = MemoryKeyValueStore()
        elif sc.provider == "file":
            _kv_singleton = FileKeyValueStore(sc.directory)
        elif sc.provider == "redis":
            from .kv_redis import RedisKeyValueStore
            _kv_singleton = RedisKeyValueStore(sc)
        elif sc.provider == "s3":
            from .kv_s3 import S3KeyValueStore
            _kv_singleton = S3KeyValueStore(sc)
        elif sc.provider == "elastic":
            from .kv_elastic import ElasticKeyValueStore
            _kv_singleton = ElasticKeyValueStore(sc)
        else:
            raise NotImplementedError(f"Unknown PINMAP_STORAGE_PROVIDER: {sc.provider}")
    return _kv_singleton

def get_geocoder() -> Geocoder:
    global _geocoder_singleton
    if _geocoder_singleton is None:
        _geocoder_singleton = NominatimGeocoder(GeocoderConfig())
    return _geocoder_singleton

def reset_services() -> None:
    global _kv_singleton, _geocoder_singleton
    _kv_singleton = None
    _geocoder_singleton = None

__all__ = [
    "StorageConfig", "GeocoderConfig", "MapConfig",
    "KeyValueStore", "PersistenceError", "MemoryKeyValueStore", "FileKeyValueStore",
    "Geocoder", "NominatimGeocoder",
    "get_kv", "get_geocoder", "reset_services",
]
