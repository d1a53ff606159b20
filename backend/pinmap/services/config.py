from dataclasses import dataclass, field
from typing import Tuple
import os

def _env(name: str, default: str):
    return field(default_factory=lambda: os.getenv(name, default))

def _env_float(name: str, default: float):
    return field(default_factory=lambda: float(os.getenv(name, str(default))))

@dataclass(frozen=True)
class StorageConfig:
    # Provider switch: memory | file | redis | s3 | elastic
    provider: str = _env("PINMAP_STORAGE_PROVIDER", "file")
    # Single fixed key holding the JSON pin sequence
    key: str = _env("PINMAP_STORAGE_KEY", "pins")

    # file
    directory: str = _env("PINMAP_STORAGE_DIR", ".pinmap")

    # redis
    redis_url: str = _env("REDIS_URL", "redis://redis:6379/0")
    redis_prefix: str = _env("PINMAP_REDIS_PREFIX", "pinmap:")

    # s3 / minio
    s3_endpoint: str = _env("S3_ENDPOINT", "http://minio:9000")
    s3_bucket: str = _env("S3_BUCKET", "pinmap-state")
    s3_region: str = _env("S3_REGION", "us-east-1")
    s3_access_key: str = _env("S3_ACCESS_KEY", "")
    s3_secret_key: str = _env("S3_SECRET_KEY", "")

    # elastic (only used when provider == "elastic")
    elastic_host: str = _env("ELASTIC_SEARCH_HOST", "http://localhost:9200")
    elastic_api_key: str = _env("ELASTIC_SEARCH_API_KEY", "")
    elastic_index: str = _env("PINMAP_STATE_INDEX", "pinmap-state")

@dataclass(frozen=True)
class GeocoderConfig:
    base_url: str = _env("PINMAP_GEOCODER_URL", "https://nominatim.openstreetmap.org")
    timeout_s: float = _env_float("PINMAP_GEOCODER_TIMEOUT", 10.0)
    # Nominatim's usage policy requires an identifying agent
    user_agent: str = _env("PINMAP_GEOCODER_USER_AGENT", "pinmap/0.1")

@dataclass(frozen=True)
class MapConfig:
    style_url: str = _env("PINMAP_MAP_STYLE", "https://demotiles.maplibre.org/style.json")
    center: Tuple[float, float] = (0.0, 0.0)  # (lng, lat)
    zoom: float = _env_float("PINMAP_MAP_ZOOM", 2.0)
    fly_to_zoom: float = _env_float("PINMAP_FLY_TO_ZOOM", 10.0)
    popup_offset: int = 25
