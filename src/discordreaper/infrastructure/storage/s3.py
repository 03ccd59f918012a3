from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from discordreaper.application.ports.errors import StorageError
from discordreaper.infrastructure.storage.backends import S3Backend

class S3StorageSink:
    def __init__(self, cfg: S3Backend, client: Optional[Any] = None) -> None:
        self.cfg = cfg
        if client is None:
            s3_cfg = Config(s3={"addressing_style": "path"} if cfg.force_path_style else {})
            # boto3 clients are thread-safe once created
            client = boto3.client(
                "s3",
                endpoint_url=cfg.endpoint,
                aws_access_key_id=cfg.access_key,
                aws_secret_access_key=cfg.secret_key,
                region_name=cfg.region,
                use_ssl=cfg.use_ssl,
                config=s3_cfg,
            )
        self.client = client

    @property
    def name(self) -> str:
        return "S3"

    def object_key(self, filename: str) -> str:
        safe_name = filename.replace("/", "_")
        return f"{self.cfg.folder.strip('/')}/{safe_name}"

    def upload(self, data: bytes, filename: str) -> None:
        key = self.object_key(filename)
        try:
            resp = self.client.put_object(
                Bucket=self.cfg.bucket,
                Key=key,
                Body=data,
                ContentType="application/octet-stream",
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"failed to upload {filename} to s3://{self.cfg.bucket}/{key}: {e}") from e

        etag = resp.get("ETag")
        logger.debug(f"File uploaded to S3 at {self.cfg.bucket}/{key} (etag {etag})")
