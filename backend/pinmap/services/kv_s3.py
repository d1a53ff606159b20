import logging
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from .config import StorageConfig
from .kv_base import PersistenceError

log = logging.getLogger("pinmap.services")

_MISSING_CODES = ("404", "NoSuchKey", "NoSuchBucket", "NotFound")

class S3KeyValueStore:
    """Each key is one JSON object in the bucket: s3://{bucket}/{key}.json"""

    def __init__(self, cfg: StorageConfig, client=None):
        self.cfg = cfg
        # path-style + v4 signing is friendly to MinIO and AWS
        self.s3 = client or boto3.client(
            "s3",
            endpoint_url=cfg.s3_endpoint,
            region_name=cfg.s3_region,
            aws_access_key_id=cfg.s3_access_key or None,
            aws_secret_access_key=cfg.s3_secret_key or None,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
        self._bucket_checked = False

    def _object_key(self, key: str) -> str:
        return f"{key}.json"

    def _ensure_bucket_exists(self) -> None:
        if self._bucket_checked:
            return
        try:
            self.s3.head_bucket(Bucket=self.cfg.s3_bucket)
            self._bucket_checked = True
            return
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code"))
            if code not in _MISSING_CODES:
                raise

        # MinIO accepts CreateBucket without LocationConstraint.
        try:
            if self.cfg.s3_region and self.cfg.s3_region.lower() != "us-east-1":
                self.s3.create_bucket(
                    Bucket=self.cfg.s3_bucket,
                    CreateBucketConfiguration={"LocationConstraint": self.cfg.s3_region},
                )
            else:
                self.s3.create_bucket(Bucket=self.cfg.s3_bucket)
        except ClientError as e:
            # Another writer may have created it first
            code = str(e.response.get("Error", {}).get("Code"))
            if code not in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
                raise
        log.info("Created bucket %s", self.cfg.s3_bucket)
        self._bucket_checked = True

    def get(self, key: str) -> Optional[str]:
        try:
            obj = self.s3.get_object(Bucket=self.cfg.s3_bucket, Key=self._object_key(key))
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code"))
            if code in _MISSING_CODES:
                return None
            raise
        return obj["Body"].read().decode("utf-8")

    def set(self, key: str, value: str) -> None:
        try:
            self._ensure_bucket_exists()
            self.s3.put_object(
                Bucket=self.cfg.s3_bucket,
                Key=self._object_key(key),
                Body=value.encode("utf-8"),
                ContentType="application/json",
            )
        except ClientError as e:
            msg = e.response.get("Error", {}).get("Message", str(e))
            raise PersistenceError(f"Failed to store {key}: {msg}") from e
        except BotoCoreError as e:
            # endpoint unreachable, missing credentials, timeouts
            raise PersistenceError(f"Failed to store {key}: {e}") from e
