"""Batch dispatcher: runs the engine once per notification record."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from filedrop.engine.processor import IntakeEngine
from filedrop.models import NotificationRecord, OutcomeAction, ProcessingOutcome
from filedrop.utils.logging import get_logger, log_processing_result
from filedrop.utils.result import EventError

logger = get_logger("dispatcher")

DEFAULT_PARALLELISM = 4


@dataclass
class BatchReport:
    """Results of one dispatched batch."""

    outcomes: list[ProcessingOutcome] = field(default_factory=list)
    invalid_records: list[EventError] = field(default_factory=list)
    crashed: int = 0

    @property
    def failed(self) -> int:
        """Records that ended in an error outcome or crashed."""
        return self.crashed + sum(1 for o in self.outcomes if not o.success)

    def counts(self) -> dict[str, int]:
        """Number of outcomes per action."""
        counts = {action.value: 0 for action in OutcomeAction}
        for outcome in self.outcomes:
            counts[outcome.action.value] += 1
        return counts

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "processed": len(self.outcomes),
            "failed": self.failed,
            "crashed": self.crashed,
            "invalid_records": [str(e) for e in self.invalid_records],
            "actions": self.counts(),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


def parse_event(event: Any) -> tuple[list[NotificationRecord], list[EventError]]:
    """
    Extract notification records from an S3 event.

    Malformed records are returned as errors so the rest of the batch can
    still be processed.

    Args:
        event: S3 event with a ``Records`` list

    Returns:
        Tuple of (records, errors)
    """
    raw_records = event.get("Records") if isinstance(event, dict) else None
    if not isinstance(raw_records, list):
        return [], [EventError(index=-1, message="Event has no 'Records' list")]

    records: list[NotificationRecord] = []
    errors: list[EventError] = []

    for idx, raw in enumerate(raw_records):
        result = NotificationRecord.from_s3_record(raw, index=idx)
        if result.is_ok():
            records.append(result.unwrap())
        else:
            errors.append(result.unwrap_err())

    return records, errors


async def dispatch_records(
    engine: IntakeEngine,
    records: list[NotificationRecord],
    parallelism: int = DEFAULT_PARALLELISM,
) -> BatchReport:
    """
    Run the engine for every record with bounded concurrency.

    A record whose invocation raises is logged and counted; its siblings
    are unaffected.

    Args:
        engine: Intake engine
        records: Records to process
        parallelism: Maximum concurrent invocations

    Returns:
        BatchReport with outcomes in record order
    """
    semaphore = asyncio.Semaphore(max(1, parallelism))

    logger.info("batch_started", records=len(records), parallelism=parallelism)

    async def run_one(record: NotificationRecord) -> ProcessingOutcome:
        async with semaphore:
            return await engine.process(record)

    results = await asyncio.gather(
        *(run_one(record) for record in records),
        return_exceptions=True,
    )

    report = BatchReport()
    for record, result in zip(records, results):
        if isinstance(result, BaseException):
            report.crashed += 1
            logger.error(
                "record_failed",
                key=record.object_key,
                error=str(result),
                error_type=type(result).__name__,
            )
            continue

        log_processing_result(**result.to_dict())
        report.outcomes.append(result)

    logger.info(
        "batch_completed",
        processed=len(report.outcomes),
        failed=report.failed,
        crashed=report.crashed,
    )
    return report


async def dispatch_event(
    engine: IntakeEngine,
    event: Any,
    parallelism: int = DEFAULT_PARALLELISM,
) -> BatchReport:
    """Parse an S3 event and dispatch its records."""
    records, errors = parse_event(event)
    for error in errors:
        logger.warning("invalid_record", index=error.index, message=error.message)

    report = await dispatch_records(engine, records, parallelism)
    report.invalid_records.extend(errors)
    return report
