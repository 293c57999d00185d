"""AWS Lambda entry point for S3 object-created events."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from filedrop.config.settings import FileDropConfig, load_config
from filedrop.dispatcher import dispatch_event
from filedrop.engine.processor import IntakeEngine
from filedrop.gateway.s3 import S3StorageGateway, create_s3_client
from filedrop.gateway.subscriber import create_lambda_client, lambda_notifier_factory
from filedrop.utils.logging import configure_logging, get_logger, set_request_context

logger = get_logger("handler")


class ConfigurationError(Exception):
    """The deployment configuration could not be loaded."""


@dataclass
class Runtime:
    """Objects built once per cold start."""

    config: FileDropConfig
    engine: IntakeEngine


def build_runtime(config: FileDropConfig) -> Runtime:
    """Wire the AWS adapters and the engine for a configuration."""
    gateway = S3StorageGateway(config.bucket, client=create_s3_client(config.aws))
    notifier_factory = lambda_notifier_factory(
        client=create_lambda_client(config.aws),
        processor_version=config.processor_version,
    )
    return Runtime(config=config, engine=IntakeEngine(gateway, notifier_factory))


@lru_cache(maxsize=1)
def get_runtime() -> Runtime:
    """Load configuration from the environment and build the runtime once."""
    result = load_config()
    if result.is_err():
        raise ConfigurationError(str(result.unwrap_err()))

    config = result.unwrap()
    configure_logging(level=config.logging.level, format_type=config.logging.format)
    logger.info(
        "runtime_initialized",
        bucket=config.bucket.name,
        rules=[rule.intake_path for rule in config.bucket.rules],
    )
    return build_runtime(config)


def handler(event: dict, context: Any = None) -> dict:
    """
    Process an S3 event.

    Args:
        event: S3 event with a ``Records`` list
        context: Lambda context (its aws_request_id is bound into logs)

    Returns:
        Batch report as a dictionary
    """
    set_request_context(getattr(context, "aws_request_id", "") or "")
    runtime = get_runtime()

    logger.info("event_received", records=len(event.get("Records", []) or []))

    report = asyncio.run(
        dispatch_event(runtime.engine, event, runtime.config.parallelism)
    )
    return report.to_dict()
