"""Lambda-backed notifier for downstream subscribers."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from filedrop.config.settings import PROCESSOR_VERSION, AwsConfig
from filedrop.engine.clock import utc_timestamp
from filedrop.gateway.base import Notifier, NotifierFactory
from filedrop.utils.logging import get_logger

logger = get_logger("gateway.subscriber")

# Status returned by Lambda when an Event invocation is queued
ACCEPTED_STATUS = 202


class DispatchRejected(Exception):
    """Lambda did not accept the asynchronous invocation."""

    def __init__(self, function_arn: str, status: Any) -> None:
        self.function_arn = function_arn
        self.status = status
        super().__init__(f"Invocation of {function_arn} not accepted (status {status})")


def create_lambda_client(aws: Optional[AwsConfig] = None) -> Any:
    """Create a boto3 Lambda client from AWS settings."""
    aws = aws or AwsConfig()
    return boto3.client(
        "lambda",
        region_name=aws.region,
        endpoint_url=aws.endpoint_url,
    )


class LambdaNotifier(Notifier):
    """Invokes a subscriber Lambda asynchronously with the renamed object."""

    def __init__(
        self,
        function_arn: str,
        client: Any = None,
        processor_version: str = PROCESSOR_VERSION,
    ) -> None:
        self.function_arn = function_arn
        self.client = client or create_lambda_client()
        self.processor_version = processor_version

    def build_payload(self, container_name: str, key: str) -> dict:
        """Event payload delivered to the subscriber."""
        return {
            "s3_path": f"s3://{container_name}/{key}",
            "bucket": container_name,
            "key": key,
            "processing_metadata": {
                "processed_at": utc_timestamp(),
                "processor_version": self.processor_version,
            },
        }

    async def notify(self, container_name: str, new_key: str) -> None:
        payload = self.build_payload(container_name, new_key)
        logger.info("invoking_subscriber", function=self.function_arn, key=new_key)

        try:
            response = await asyncio.to_thread(
                self.client.invoke,
                FunctionName=self.function_arn,
                InvocationType="Event",
                Payload=json.dumps(payload).encode("utf-8"),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("subscriber_invoke_failed", function=self.function_arn, error=str(e))
            raise

        status = response.get("StatusCode")
        if status != ACCEPTED_STATUS:
            logger.error("subscriber_invoke_rejected", function=self.function_arn, status=status)
            raise DispatchRejected(self.function_arn, status)

        logger.info("subscriber_invoked", function=self.function_arn)


def lambda_notifier_factory(
    client: Any = None,
    processor_version: str = PROCESSOR_VERSION,
) -> NotifierFactory:
    """
    Notifier factory sharing one Lambda client across downstream targets.

    Args:
        client: boto3 Lambda client (created from defaults if omitted)
        processor_version: Version reported in payload metadata

    Returns:
        Callable mapping a function ARN to a LambdaNotifier
    """
    shared_client = client or create_lambda_client()

    def factory(function_arn: str) -> Notifier:
        return LambdaNotifier(
            function_arn,
            client=shared_client,
            processor_version=processor_version,
        )

    return factory
