"""Object storage for signed contracts and timestamp proofs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from webmarcas.core.config import Config, get_config
from webmarcas.core.exceptions import ServiceError, ValidationError

logger = logging.getLogger(__name__)


class ObjectStorage(Protocol):
    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path`` (overwriting) and return its public URL."""


def _clean_path(path: str) -> str:
    cleaned = path.strip().lstrip("/")
    if not cleaned or ".." in Path(cleaned).parts:
        raise ValidationError(f"Invalid storage path: {path!r}")
    return cleaned


class LocalObjectStorage:
    def __init__(self, root: str, public_url: str) -> None:
        self.root = Path(root)
        self.public_url = public_url.rstrip("/")

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        relative = _clean_path(path)
        target = self.root / relative
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.exception("storage.upload.failed", extra={"event": "storage.upload.failed", "path": relative})
            raise ServiceError(f"Failed to store {relative}.") from exc
        logger.info(
            "storage.upload.completed",
            extra={"event": "storage.upload.completed", "path": relative, "size": len(data), "backend": "local"},
        )
        return f"{self.public_url}/{quote(relative)}"


class S3ObjectStorage:
    def __init__(self, bucket: str, public_url: str | None = None, client: BaseClient | None = None, config: Config | None = None) -> None:
        cfg = config or get_config()
        self.bucket = bucket
        self.public_url = (public_url or "").rstrip("/")
        self.client = client or get_s3_client(cfg)

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        key = _clean_path(path)
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("storage.upload.failed", extra={"event": "storage.upload.failed", "path": key})
            raise ServiceError(f"Failed to store {key}.") from exc
        logger.info(
            "storage.upload.completed",
            extra={"event": "storage.upload.completed", "path": key, "size": len(data), "backend": "s3"},
        )
        if self.public_url:
            return f"{self.public_url}/{quote(key)}"
        return f"https://{self.bucket}.s3.amazonaws.com/{quote(key)}"


def get_s3_client(config: Config | None = None) -> BaseClient:
    cfg = config or get_config()
    endpoint = cfg.S3_ENDPOINT_URL.rstrip("/") if cfg.S3_ENDPOINT_URL else None
    return boto3.client("s3", region_name=cfg.S3_REGION or None, endpoint_url=endpoint)


def get_storage(config: Config | None = None) -> ObjectStorage:
    cfg = config or get_config()
    if cfg.STORAGE_BACKEND == "s3":
        return S3ObjectStorage(bucket=cfg.S3_BUCKET or "", public_url=cfg.STORAGE_PUBLIC_URL, config=cfg)
    return LocalObjectStorage(root=cfg.STORAGE_ROOT, public_url=cfg.STORAGE_PUBLIC_URL)
