"""
tests/fakes.py

In-memory fakes for the StorageGateway and Notifier ports.

They need no AWS access and record every call so tests can assert on side
effects.
"""

from __future__ import annotations

from typing import Any, Optional

from filedrop.config.settings import IntakeConfiguration, PathRule
from filedrop.engine.guard import basename
from filedrop.gateway.base import QUARANTINE_FOLDER, Notifier, StorageGateway
from filedrop.models import NotificationRecord

FIXED_TIMESTAMP = "2026-02-22T10:30:00.000Z"
BUCKET = "test-bucket"
FULL_ARN = "arn:aws:lambda:us-east-2:123456789012:function:subscriber-full"
DELTA_ARN = "arn:aws:lambda:us-east-2:123456789012:function:subscriber-delta"


# =============================================================================
# FAKES
# =============================================================================


class InMemoryStorageGateway(StorageGateway):
    """Storage gateway backed by a dict of key -> body."""

    def __init__(
        self,
        config: IntakeConfiguration,
        objects: Optional[dict[str, bytes]] = None,
        quarantine_timestamp: str = "2026-02-22T10:31:00.000Z",
    ) -> None:
        self.config = config
        self.objects: dict[str, bytes] = dict(objects or {})
        self.tags: dict[str, dict[str, str]] = {}
        self.quarantine_timestamp = quarantine_timestamp

        self.rename_calls: list[tuple[str, str]] = []
        self.quarantine_calls: list[tuple[str, str, str]] = []

        self.rename_result: Optional[bool] = None
        self.quarantine_result: Optional[bool] = None
        self.rename_error: Optional[Exception] = None

    def get_configuration(self) -> IntakeConfiguration:
        return self.config

    def get_container_name(self) -> str:
        return self.config.name

    async def rename_object(self, key: str, new_key: str) -> bool:
        self.rename_calls.append((key, new_key))
        if self.rename_error is not None:
            raise self.rename_error
        if self.rename_result is not None:
            return self.rename_result
        if key in self.objects:
            self.objects[new_key] = self.objects.pop(key)
        return True

    async def move_to_quarantine(self, key: str, scope_path: str, reason: str) -> bool:
        self.quarantine_calls.append((key, scope_path, reason))
        if self.quarantine_result is not None:
            return self.quarantine_result
        error_key = f"{scope_path}/{QUARANTINE_FOLDER}/{self.quarantine_timestamp}-{basename(key)}"
        if key in self.objects:
            self.objects[error_key] = self.objects.pop(key)
        self.tags[error_key] = {"error-reason": reason}
        return True


class RecordingNotifier(Notifier):
    """Notifier that records dispatches and can be told to reject them."""

    def __init__(self, target: str, error: Optional[Exception] = None) -> None:
        self.target = target
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def notify(self, container_name: str, new_key: str) -> None:
        self.calls.append((container_name, new_key))
        if self.error is not None:
            raise self.error


class NotifierRegistry:
    """Notifier factory that keeps the notifiers it builds."""

    def __init__(self) -> None:
        self.notifiers: dict[str, RecordingNotifier] = {}
        self.errors: dict[str, Exception] = {}

    def __call__(self, target: str) -> Notifier:
        notifier = self.notifiers.get(target)
        if notifier is None:
            notifier = RecordingNotifier(target, error=self.errors.get(target))
            self.notifiers[target] = notifier
        return notifier

    def fail(self, target: str, error: Exception) -> None:
        self.errors[target] = error

    @property
    def calls(self) -> list[tuple[str, str, str]]:
        """All dispatches as (target, container, key)."""
        return [
            (target, container, key)
            for target, notifier in self.notifiers.items()
            for container, key in notifier.calls
        ]


# =============================================================================
# HELPERS
# =============================================================================


def make_s3_record(key: str, bucket: str = BUCKET, size: int = 1024) -> dict[str, Any]:
    """Raw S3 event record as delivered to the Lambda."""
    return {
        "eventVersion": "2.1",
        "eventSource": "aws:s3",
        "awsRegion": "us-east-2",
        "eventTime": "2026-02-22T10:00:00.000Z",
        "eventName": "ObjectCreated:Put",
        "s3": {
            "s3SchemaVersion": "1.0",
            "configurationId": "test-config",
            "bucket": {"name": bucket, "arn": f"arn:aws:s3:::{bucket}"},
            "object": {"key": key, "size": size, "eTag": "abc123", "sequencer": "123ABC"},
        },
    }


def make_record(key: str, bucket: str = BUCKET) -> NotificationRecord:
    return NotificationRecord(object_key=key, container_name=bucket)


def default_intake_config() -> IntakeConfiguration:
    """Two top-level intake paths, as deployed for the person feeds."""
    return IntakeConfiguration(
        name=BUCKET,
        rules=(
            PathRule(
                intake_path="person-full",
                normal_retention_days=7,
                error_retention_days=14,
                downstream_target=FULL_ARN,
            ),
            PathRule(
                intake_path="person-delta",
                normal_retention_days=3,
                downstream_target=DELTA_ARN,
            ),
        ),
    )
