"""Data models for filedrop."""

from filedrop.models.outcome import OutcomeAction, ProcessingOutcome
from filedrop.models.records import NotificationRecord

__all__ = [
    "NotificationRecord",
    "OutcomeAction",
    "ProcessingOutcome",
]
