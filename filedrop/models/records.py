"""Notification records delivered by the storage service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from filedrop.utils.result import Err, EventError, Ok, Result


@dataclass(frozen=True)
class NotificationRecord:
    """
    One object-creation notification.

    Attributes:
        object_key: Key as delivered, possibly percent-encoded with '+' for space
        container_name: Bucket the object was created in
        event_name: Transport event name (e.g. "ObjectCreated:Put")
        size: Object size in bytes, when reported
        event_time: Transport timestamp, when reported
    """

    object_key: str
    container_name: str
    event_name: Optional[str] = None
    size: Optional[int] = None
    event_time: Optional[str] = None

    @classmethod
    def from_s3_record(
        cls,
        record: Any,
        index: int = 0,
    ) -> Result["NotificationRecord", EventError]:
        """
        Build a record from one entry of an S3 event's ``Records`` list.

        Args:
            record: Raw S3 event record
            index: Position in the batch, used for error reporting

        Returns:
            Result with the record or a parse error
        """
        if not isinstance(record, dict):
            return Err(EventError(index=index, message="Record is not an object"))

        s3 = record.get("s3")
        if not isinstance(s3, dict):
            return Err(EventError(index=index, message="Missing 's3' section"))

        bucket = s3.get("bucket") or {}
        obj = s3.get("object") or {}
        bucket_name = bucket.get("name") if isinstance(bucket, dict) else None
        key = obj.get("key") if isinstance(obj, dict) else None

        if not isinstance(bucket_name, str) or not bucket_name:
            return Err(EventError(index=index, message="Missing bucket name"))
        if not isinstance(key, str):
            return Err(EventError(index=index, message="Missing object key"))

        size = obj.get("size")
        return Ok(cls(
            object_key=key,
            container_name=bucket_name,
            event_name=record.get("eventName"),
            size=size if isinstance(size, int) else None,
            event_time=record.get("eventTime"),
        ))
