"""Processing outcome returned for every notification record."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutcomeAction(str, Enum):
    """Terminal action taken for a notification record."""

    SKIPPED_NO_MATCH = "skipped-no-match"
    SKIPPED_ALREADY_PROCESSED = "skipped-already-processed"
    RENAMED = "renamed"
    ERROR_RENAME = "error-rename"
    ERROR_INVOKE = "error-invoke"

    def is_error(self) -> bool:
        """Check if this action is a failure."""
        return self in (OutcomeAction.ERROR_RENAME, OutcomeAction.ERROR_INVOKE)


@dataclass
class ProcessingOutcome:
    """
    The engine's entire externally observable product for one record.

    Attributes:
        success: False only for error-rename and error-invoke
        action: Terminal action taken
        original_key: Decoded key of the arriving object
        reason: Human-readable explanation, if any
        new_key: Key after the marker rename, once renamed
        downstream_notified: Whether the downstream dispatch was accepted
        moved_to_quarantine: Result of the quarantine move after a failed dispatch
    """

    success: bool
    action: OutcomeAction
    original_key: str
    reason: Optional[str] = None
    new_key: Optional[str] = None
    downstream_notified: Optional[bool] = None
    moved_to_quarantine: Optional[bool] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization, omitting unset fields."""
        data = {
            "success": self.success,
            "action": self.action.value,
            "original_key": self.original_key,
        }
        if self.reason is not None:
            data["reason"] = self.reason
        if self.new_key is not None:
            data["new_key"] = self.new_key
        if self.downstream_notified is not None:
            data["downstream_notified"] = self.downstream_notified
        if self.moved_to_quarantine is not None:
            data["moved_to_quarantine"] = self.moved_to_quarantine
        return data
