"""S3-backed storage gateway."""

from __future__ import annotations

import asyncio
import re
from typing import Any, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from filedrop.config.settings import AwsConfig, IntakeConfiguration
from filedrop.engine.clock import Clock, utc_timestamp
from filedrop.engine.guard import basename
from filedrop.gateway.base import QUARANTINE_FOLDER, StorageGateway
from filedrop.utils.logging import get_logger

logger = get_logger("gateway.s3")

ERROR_TAG_KEY = "error-reason"

# S3 tag values: at most 256 characters from a restricted set
TAG_VALUE_LIMIT = 256
_TAG_VALUE_DISALLOWED = re.compile(r"[^\w +\-=.:/@]")


def create_s3_client(aws: Optional[AwsConfig] = None) -> Any:
    """Create a boto3 S3 client from AWS settings."""
    aws = aws or AwsConfig()
    return boto3.client(
        "s3",
        region_name=aws.region,
        endpoint_url=aws.endpoint_url,
    )


def error_tagging(reason: str) -> str:
    """Tagging query string carrying a failure reason."""
    value = _TAG_VALUE_DISALLOWED.sub("_", reason)[:TAG_VALUE_LIMIT]
    return f"{ERROR_TAG_KEY}={quote(value, safe='')}"


class S3StorageGateway(StorageGateway):
    """
    Storage gateway for one S3 bucket.

    Renames are a copy followed by a delete. The pair is not atomic: a crash
    between the two leaves both keys present, and S3 offers no way to undo
    a copy whose delete failed. Callers only learn success or failure.
    """

    def __init__(
        self,
        config: IntakeConfiguration,
        client: Any = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            config: Intake rules and bucket name
            client: boto3 S3 client (created from defaults if omitted)
            clock: Timestamp source for quarantine keys
        """
        self.config = config
        self.client = client or create_s3_client()
        self.clock = clock or utc_timestamp

    def get_configuration(self) -> IntakeConfiguration:
        return self.config

    def get_container_name(self) -> str:
        return self.config.name

    async def rename_object(self, key: str, new_key: str) -> bool:
        try:
            await asyncio.to_thread(self._copy_then_delete, key, new_key, {})
        except (BotoCoreError, ClientError) as e:
            logger.error("s3_rename_failed", key=key, new_key=new_key, error=str(e))
            return False

        logger.info("s3_object_renamed", key=key, new_key=new_key)
        return True

    async def move_to_quarantine(self, key: str, scope_path: str, reason: str) -> bool:
        error_key = f"{scope_path}/{QUARANTINE_FOLDER}/{self.clock()}-{basename(key)}"
        extra = {
            "TaggingDirective": "REPLACE",
            "Tagging": error_tagging(reason),
        }

        try:
            await asyncio.to_thread(self._copy_then_delete, key, error_key, extra)
        except (BotoCoreError, ClientError) as e:
            logger.error("s3_quarantine_failed", key=key, error_key=error_key, error=str(e))
            return False

        logger.info("s3_object_quarantined", key=key, error_key=error_key, reason=reason)
        return True

    def _copy_then_delete(self, key: str, new_key: str, extra: dict[str, str]) -> None:
        """Blocking copy to ``new_key`` followed by deletion of ``key``."""
        bucket = self.get_container_name()

        self.client.copy_object(
            Bucket=bucket,
            CopySource={"Bucket": bucket, "Key": key},
            Key=new_key,
            **extra,
        )
        self.client.delete_object(Bucket=bucket, Key=key)
