from __future__ import annotations

import json
import logging
from io import BytesIO
from typing import Optional
from urllib.parse import quote

from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError

from .config import Settings
from .errors import StorageError

log = logging.getLogger("flipbook.object_store")


def public_read_policy(bucket: str) -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": ["*"]},
                    "Action": ["s3:GetObject"],
                    "Resource": [f"arn:aws:s3:::{bucket}/*"],
                }
            ],
        }
    )


class MinioBlobStore:
    """Stores uploaded PDFs in a publicly readable MinIO bucket."""

    def __init__(self, settings: Settings, client: Optional[Minio] = None):
        self.client = client or Minio(
            settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
        )
        self.bucket_name = settings.MINIO_BUCKET
        self.public_base_url = settings.blob_public_base_url

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{self.bucket_name}/{quote(key)}"

    def _ensure_bucket(self) -> None:
        if not self.client.bucket_exists(self.bucket_name):
            self.client.make_bucket(self.bucket_name)
            self.client.set_bucket_policy(self.bucket_name, public_read_policy(self.bucket_name))
            log.info("Created public bucket %s", self.bucket_name)

    def put(self, key: str, content: bytes, content_type: str) -> str:
        try:
            self._ensure_bucket()
            self.client.put_object(
                self.bucket_name,
                key,
                BytesIO(content),
                len(content),
                content_type=content_type,
            )
        except (MinioException, HTTPError) as exc:
            raise StorageError() from exc
        return self.public_url(key)

    def delete(self, key: str) -> None:
        try:
            self.client.remove_object(self.bucket_name, key)
        except (MinioException, HTTPError) as exc:
            raise StorageError() from exc
