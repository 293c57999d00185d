"""Ports to external collaborators and their AWS adapters."""

from filedrop.gateway.base import (
    QUARANTINE_FOLDER,
    Notifier,
    NotifierFactory,
    StorageGateway,
)
from filedrop.gateway.s3 import S3StorageGateway, create_s3_client
from filedrop.gateway.subscriber import (
    DispatchRejected,
    LambdaNotifier,
    create_lambda_client,
    lambda_notifier_factory,
)

__all__ = [
    # Ports
    "StorageGateway",
    "Notifier",
    "NotifierFactory",
    "QUARANTINE_FOLDER",
    # Adapters
    "S3StorageGateway",
    "LambdaNotifier",
    "DispatchRejected",
    "create_s3_client",
    "create_lambda_client",
    "lambda_notifier_factory",
]
