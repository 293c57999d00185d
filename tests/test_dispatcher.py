"""Tests for event parsing and batch dispatch."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from filedrop.dispatcher import BatchReport, dispatch_event, dispatch_records, parse_event
from filedrop.engine.processor import IntakeEngine
from filedrop.models import NotificationRecord, OutcomeAction, ProcessingOutcome
from tests.fakes import (
    BUCKET,
    FIXED_TIMESTAMP,
    FULL_ARN,
    InMemoryStorageGateway,
    NotifierRegistry,
    make_record,
    make_s3_record,
)


class TestNotificationRecord:
    """Tests for NotificationRecord.from_s3_record."""

    def test_full_record(self) -> None:
        result = NotificationRecord.from_s3_record(make_s3_record("person-full/data.json"))

        assert result.is_ok()
        record = result.unwrap()
        assert record.object_key == "person-full/data.json"
        assert record.container_name == BUCKET
        assert record.event_name == "ObjectCreated:Put"
        assert record.size == 1024
        assert record.event_time == "2026-02-22T10:00:00.000Z"

    def test_key_left_encoded(self) -> None:
        """Decoding belongs to the engine."""
        result = NotificationRecord.from_s3_record(make_s3_record("person-full/a+b.json"))
        assert result.unwrap().object_key == "person-full/a+b.json"

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("not a record", "Record is not an object"),
            ({}, "Missing 's3' section"),
            ({"s3": {"object": {"key": "k"}}}, "Missing bucket name"),
            ({"s3": {"bucket": {"name": "b"}}}, "Missing object key"),
            ({"s3": {"bucket": {"name": "b"}, "object": {"key": 7}}}, "Missing object key"),
        ],
    )
    def test_invalid_records(self, raw: object, message: str) -> None:
        result = NotificationRecord.from_s3_record(raw, index=3)

        assert result.is_err()
        error = result.unwrap_err()
        assert error.index == 3
        assert error.message == message
        assert str(error) == f"Record 3: {message}"


class TestParseEvent:
    """Tests for parse_event."""

    def test_valid_event(self) -> None:
        event = {"Records": [make_s3_record("a/1.json"), make_s3_record("b/2.json")]}

        records, errors = parse_event(event)

        assert [r.object_key for r in records] == ["a/1.json", "b/2.json"]
        assert errors == []

    def test_invalid_records_do_not_stop_the_batch(self) -> None:
        event = {"Records": [make_s3_record("a/1.json"), {"s3": {}}, make_s3_record("b/2.json")]}

        records, errors = parse_event(event)

        assert len(records) == 2
        assert len(errors) == 1
        assert errors[0].index == 1

    @pytest.mark.parametrize("event", [{}, {"Records": "x"}, [], None])
    def test_missing_records(self, event: object) -> None:
        records, errors = parse_event(event)

        assert records == []
        assert len(errors) == 1
        assert errors[0].index == -1


class TestDispatch:
    """Tests for dispatch_records and dispatch_event."""

    @pytest.mark.asyncio
    async def test_dispatch_event(
        self,
        engine: IntakeEngine,
        notifiers: NotifierRegistry,
    ) -> None:
        event = {
            "Records": [
                make_s3_record("person-full/data.json"),
                make_s3_record(f"person-full/{FIXED_TIMESTAMP}-old.json"),
                make_s3_record("elsewhere/data.json"),
                "garbage",
            ]
        }

        report = await dispatch_event(engine, event, parallelism=2)

        assert [o.action for o in report.outcomes] == [
            OutcomeAction.RENAMED,
            OutcomeAction.SKIPPED_ALREADY_PROCESSED,
            OutcomeAction.SKIPPED_NO_MATCH,
        ]
        assert report.failed == 0
        assert [str(e) for e in report.invalid_records] == ["Record 3: Record is not an object"]
        assert notifiers.calls == [(FULL_ARN, BUCKET, f"person-full/{FIXED_TIMESTAMP}-data.json")]

    @pytest.mark.asyncio
    async def test_crashing_record_is_isolated(self) -> None:
        ok = ProcessingOutcome(
            success=True,
            action=OutcomeAction.SKIPPED_NO_MATCH,
            original_key="x",
        )
        engine = AsyncMock(spec=IntakeEngine)
        engine.process.side_effect = [ok, RuntimeError("boom"), ok]

        report = await dispatch_records(
            engine,
            [make_record("x"), make_record("y"), make_record("z")],
            parallelism=1,
        )

        assert len(report.outcomes) == 2
        assert report.crashed == 1
        assert report.failed == 1

    @pytest.mark.asyncio
    async def test_failed_outcomes_counted(
        self,
        engine: IntakeEngine,
        gateway: InMemoryStorageGateway,
    ) -> None:
        gateway.rename_result = False

        report = await dispatch_records(engine, [make_record("person-full/a.json")])

        assert report.failed == 1
        assert report.counts()[OutcomeAction.ERROR_RENAME.value] == 1

    @pytest.mark.asyncio
    async def test_empty_batch(self, engine: IntakeEngine) -> None:
        report = await dispatch_records(engine, [])

        assert report.outcomes == []
        assert report.failed == 0


class TestBatchReport:
    """Tests for BatchReport."""

    def test_to_dict(self) -> None:
        report = BatchReport(
            outcomes=[
                ProcessingOutcome(
                    success=True,
                    action=OutcomeAction.RENAMED,
                    original_key="a/x",
                    new_key=f"a/{FIXED_TIMESTAMP}-x",
                    downstream_notified=True,
                ),
                ProcessingOutcome(
                    success=False,
                    action=OutcomeAction.ERROR_RENAME,
                    original_key="a/y",
                    reason="Failed to rename object in storage",
                ),
            ],
            crashed=1,
        )

        data = report.to_dict()

        assert data["processed"] == 2
        assert data["failed"] == 2
        assert data["crashed"] == 1
        assert data["actions"] == {
            "skipped-no-match": 0,
            "skipped-already-processed": 0,
            "renamed": 1,
            "error-rename": 1,
            "error-invoke": 0,
        }
        assert data["outcomes"][0] == {
            "success": True,
            "action": "renamed",
            "original_key": "a/x",
            "new_key": f"a/{FIXED_TIMESTAMP}-x",
            "downstream_notified": True,
        }
