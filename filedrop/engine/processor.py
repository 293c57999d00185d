"""Intake engine: decides and executes the fate of one arriving object.

Each invocation runs

    RECEIVED -> DECODED -> MATCHED -> GUARDED -> TRANSITIONED -> RENAMED -> NOTIFIED
                   |          |          |             |             |
                   v          v          v             v             v
           SKIPPED_NO_MATCH   |     RENAME_FAILED  RENAME_FAILED  QUARANTINING -> QUARANTINED
           or RENAME_FAILED   v
                 SKIPPED_ALREADY_PROCESSED

DECODED ends in RENAME_FAILED when the gateway cannot supply its rules.
The rename produces a new creation notification for the renamed object.
That notification re-enters the engine and stops at the guard, because the
new filename carries the marker. The quarantine copy carries a marker too.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from filedrop.config.settings import IntakeConfiguration, PathRule
from filedrop.engine.clock import Clock, utc_timestamp
from filedrop.engine.guard import basename, is_marked
from filedrop.engine.keys import compute_new_key, decode_key, split_relative
from filedrop.engine.matching import match_rule
from filedrop.engine.states import IntakeState, InvocationState
from filedrop.gateway.base import NotifierFactory, StorageGateway
from filedrop.models import NotificationRecord, OutcomeAction, ProcessingOutcome
from filedrop.utils.logging import get_logger, set_object_key

logger = get_logger("engine.processor")

REASON_NO_MATCH = "File does not match any configured intake path"
REASON_ALREADY_PROCESSED = "File already has timestamp prefix indicating previous processing"
REASON_RENAME_FAILED = "Failed to rename object in storage"
REASON_CONFIG_UNAVAILABLE = "Cannot read intake configuration"


@dataclass(frozen=True)
class IntakePlan:
    """What the engine would do with a key, computed without side effects."""

    original_key: str
    action: OutcomeAction
    rule: Optional[PathRule] = None
    new_key: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "original_key": self.original_key,
            "action": self.action.value,
            "intake_path": self.rule.intake_path if self.rule else None,
            "downstream_target": self.rule.downstream_target if self.rule else None,
            "new_key": self.new_key,
            "reason": self.reason,
        }


def plan_key(config: IntakeConfiguration, raw_key: str, clock: Clock) -> IntakePlan:
    """
    Compute the decision for a key without touching storage.

    Args:
        config: Ordered intake rules
        raw_key: Key as it would arrive in a notification
        clock: Timestamp source, read only when a rename would happen

    Returns:
        IntakePlan; action is RENAMED when a rename would be attempted
    """
    key = decode_key(raw_key)

    rule = match_rule(config, key)
    if rule is None:
        return IntakePlan(key, OutcomeAction.SKIPPED_NO_MATCH, reason=REASON_NO_MATCH)

    if is_marked(basename(key)):
        return IntakePlan(
            key,
            OutcomeAction.SKIPPED_ALREADY_PROCESSED,
            rule=rule,
            reason=REASON_ALREADY_PROCESSED,
        )

    nested_path, filename = split_relative(rule.intake_path, key)
    try:
        new_key = compute_new_key(rule.intake_path, nested_path, filename, clock())
    except ValueError as e:
        return IntakePlan(key, OutcomeAction.ERROR_RENAME, rule=rule, reason=str(e))

    return IntakePlan(key, OutcomeAction.RENAMED, rule=rule, new_key=new_key)


class IntakeEngine:
    """
    Stateless decision engine for object-creation notifications.

    All durable state lives in object keys inside the storage gateway; the
    engine keeps nothing between invocations and never raises from process().
    """

    def __init__(
        self,
        gateway: StorageGateway,
        notifier_factory: NotifierFactory,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            gateway: Storage port used for renames and quarantine moves
            notifier_factory: Builds the notifier for a rule's downstream target
            clock: Timestamp source for markers (defaults to UTC now)
        """
        self.gateway = gateway
        self.notifier_factory = notifier_factory
        self.clock = clock or utc_timestamp

    def plan(self, raw_key: str) -> IntakePlan:
        """Compute the decision for a key without touching storage."""
        return plan_key(self.gateway.get_configuration(), raw_key, self.clock)

    async def process(self, record: NotificationRecord) -> ProcessingOutcome:
        """
        Process one notification record.

        Args:
            record: Notification for a newly created object

        Returns:
            ProcessingOutcome describing the single terminal action taken
        """
        run = InvocationState()

        key = decode_key(record.object_key)
        run.transition_to(IntakeState.DECODED)
        set_object_key(key)

        logger.info("processing_object", bucket=record.container_name, key=key)

        try:
            config = self.gateway.get_configuration()
        except Exception as e:
            run.transition_to(IntakeState.RENAME_FAILED)
            logger.error("configuration_unavailable", error=str(e), error_type=type(e).__name__)
            return ProcessingOutcome(
                success=False,
                action=OutcomeAction.ERROR_RENAME,
                original_key=key,
                reason=f"{REASON_CONFIG_UNAVAILABLE}: {e}",
            )

        rule = match_rule(config, key)
        if rule is None:
            run.transition_to(IntakeState.SKIPPED_NO_MATCH)
            logger.info("object_not_in_intake_path", key=key)
            return ProcessingOutcome(
                success=True,
                action=OutcomeAction.SKIPPED_NO_MATCH,
                original_key=key,
                reason=REASON_NO_MATCH,
            )

        run.transition_to(IntakeState.MATCHED)
        logger.debug("intake_path_matched", intake_path=rule.intake_path)

        filename = basename(key)
        if is_marked(filename):
            run.transition_to(IntakeState.SKIPPED_ALREADY_PROCESSED)
            logger.info("object_already_processed", filename=filename)
            return ProcessingOutcome(
                success=True,
                action=OutcomeAction.SKIPPED_ALREADY_PROCESSED,
                original_key=key,
                reason=REASON_ALREADY_PROCESSED,
            )

        run.transition_to(IntakeState.GUARDED)

        nested_path, filename = split_relative(rule.intake_path, key)
        try:
            new_key = compute_new_key(rule.intake_path, nested_path, filename, self.clock())
        except ValueError as e:
            run.transition_to(IntakeState.RENAME_FAILED)
            logger.error("marker_key_invalid", error=str(e))
            return ProcessingOutcome(
                success=False,
                action=OutcomeAction.ERROR_RENAME,
                original_key=key,
                reason=f"Cannot compute processed key: {e}",
            )

        run.transition_to(IntakeState.TRANSITIONED)
        logger.info("renaming_object", new_key=new_key)

        if not await self._rename(key, new_key):
            run.transition_to(IntakeState.RENAME_FAILED)
            logger.error("rename_failed", new_key=new_key)
            return ProcessingOutcome(
                success=False,
                action=OutcomeAction.ERROR_RENAME,
                original_key=key,
                reason=REASON_RENAME_FAILED,
            )

        run.transition_to(IntakeState.RENAMED)

        try:
            notifier = self.notifier_factory(rule.downstream_target)
            await notifier.notify(record.container_name, new_key)
        except Exception as e:
            run.transition_to(IntakeState.QUARANTINING)
            reason = f"Downstream notification failed: {e}"
            logger.error(
                "notify_failed",
                target=rule.downstream_target,
                new_key=new_key,
                error=str(e),
            )

            moved = await self._quarantine(new_key, rule.intake_path, reason)
            run.transition_to(IntakeState.QUARANTINED)

            return ProcessingOutcome(
                success=False,
                action=OutcomeAction.ERROR_INVOKE,
                original_key=key,
                reason=reason,
                new_key=new_key,
                downstream_notified=False,
                moved_to_quarantine=moved,
            )

        run.transition_to(IntakeState.NOTIFIED)
        logger.info(
            "object_processed",
            new_key=new_key,
            target=rule.downstream_target,
            states=run.path,
        )

        return ProcessingOutcome(
            success=True,
            action=OutcomeAction.RENAMED,
            original_key=key,
            new_key=new_key,
            downstream_notified=True,
        )

    async def _rename(self, key: str, new_key: str) -> bool:
        """Rename through the gateway, reading a raised error as failure."""
        try:
            return bool(await self.gateway.rename_object(key, new_key))
        except Exception as e:
            logger.error("rename_raised", error=str(e), error_type=type(e).__name__)
            return False

    async def _quarantine(self, key: str, scope_path: str, reason: str) -> bool:
        """Quarantine through the gateway, reading a raised error as failure."""
        try:
            moved = bool(await self.gateway.move_to_quarantine(key, scope_path, reason))
        except Exception as e:
            logger.error("quarantine_raised", error=str(e), error_type=type(e).__name__)
            return False

        if not moved:
            logger.error("quarantine_failed", key=key, scope_path=scope_path)
        return moved
