"""
Usage Tracking Tests
====================
Tests for the usage recorder and the background usage worker.
"""

import json
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from gateway.config import settings
from gateway.jobs.usage_worker import UsageWorker
from gateway.models import AgentConfig, ModelUsageDaily, UsageLedgerEntry, WorkflowConfig
from gateway.models.gateway import RUN_STATUS_COMPLETED
from gateway.schemas.usage import UsageEvent
from gateway.services.limits import LimitService
from gateway.services.usage import UsageRecorder


@pytest.fixture
def usage_event() -> UsageEvent:
    """Usage of one successful call."""
    return UsageEvent(
        provider="gemini",
        model="google/gemini-2.5-flash",
        task_type="summary",
        prompt_tokens=120,
        completion_tokens=380,
        tokens_used=500,
        cost_usd=Decimal("0.00015"),
        agent_id="agent-1",
        run_id="run-1",
        workspace_id="ws-1",
    )


async def daily_rows(session_factory) -> list[ModelUsageDaily]:
    async with session_factory() as session:
        result = await session.execute(select(ModelUsageDaily))
        return list(result.scalars().all())


async def ledger_rows(session_factory) -> list[UsageLedgerEntry]:
    async with session_factory() as session:
        result = await session.execute(select(UsageLedgerEntry))
        return list(result.scalars().all())


class FailingSessionFactory:
    """Session factory whose sessions can never be opened."""

    def __init__(self, error: Exception):
        self.error = error
        self.attempts = 0

    def __call__(self):
        self.attempts += 1
        raise self.error


class TestUsageRecorder:
    """Tests for persisting usage."""

    async def test_record_creates_daily_row_and_ledger(self, session_factory, usage_event):
        """Test the first call of the day creates the aggregate row."""
        async with session_factory() as session:
            await UsageRecorder(session).record(usage_event)

        rows = await daily_rows(session_factory)
        assert len(rows) == 1
        row = rows[0]
        assert row.model_name == "google/gemini-2.5-flash"
        assert row.model_provider == "gemini"
        assert row.usage_date == usage_event.usage_date
        assert row.requests_count == 1
        assert row.tokens_input == 120
        assert row.tokens_output == 380
        assert row.total_cost == Decimal("0.00015")
        assert json.loads(row.metadata_json) == {"task_type": "summary"}

        ledger = await ledger_rows(session_factory)
        assert len(ledger) == 1
        assert ledger[0].status == RUN_STATUS_COMPLETED
        assert ledger[0].agent_id == "agent-1"
        assert ledger[0].run_id == "run-1"
        assert ledger[0].tokens_used == 500

    async def test_record_increments_existing_row(self, session_factory, usage_event):
        """Test repeated calls add to the same day's row."""
        async with session_factory() as session:
            recorder = UsageRecorder(session)
            await recorder.record(usage_event)
            await recorder.record(usage_event)

        rows = await daily_rows(session_factory)
        assert len(rows) == 1
        assert rows[0].requests_count == 2
        assert rows[0].tokens_input == 240
        assert rows[0].tokens_output == 760
        assert rows[0].total_cost == Decimal("0.0003")

    async def test_separate_rows_per_model(self, session_factory, usage_event):
        """Test aggregates are keyed by model and provider."""
        other = usage_event.model_copy(update={"model": "google/gemini-2.5-pro"})

        async with session_factory() as session:
            recorder = UsageRecorder(session)
            await recorder.record(usage_event)
            await recorder.record(other)

        rows = await daily_rows(session_factory)
        assert {r.model_name for r in rows} == {"google/gemini-2.5-flash", "google/gemini-2.5-pro"}

    async def test_no_ledger_without_context(self, session_factory, usage_event):
        """Test anonymous calls only touch the daily aggregate."""
        event = usage_event.model_copy(
            update={"workspace_id": None, "agent_id": None, "workflow_id": None}
        )

        async with session_factory() as session:
            await UsageRecorder(session).record(event)

        assert len(await daily_rows(session_factory)) == 1
        assert await ledger_rows(session_factory) == []

    async def test_ledger_written_for_agent_without_workspace(self, session_factory, usage_event):
        """Test an agent call without a workspace still leaves a run row."""
        event = usage_event.model_copy(update={"workspace_id": None})

        async with session_factory() as session:
            await UsageRecorder(session).record(event)

        ledger = await ledger_rows(session_factory)
        assert len(ledger) == 1
        assert ledger[0].agent_id == "agent-1"
        assert ledger[0].workspace_id is None

    async def test_agent_without_workspace_reaches_run_cap(self, session_factory, usage_event):
        """Test calls without a workspace count towards the agent's caps."""
        event = usage_event.model_copy(update={"workspace_id": None})

        async with session_factory() as session:
            session.add(AgentConfig(id="agent-1", daily_run_cap=1, daily_cost_cap_usd=Decimal("5")))
            await session.commit()

        async with session_factory() as session:
            recorder = UsageRecorder(session)
            await recorder.record(event)
            await recorder.record(event)

        async with session_factory() as session:
            status = await LimitService(session).check_agent_limits("agent-1")

        assert status.run_count == 2
        assert status.blocked is True
        assert status.reason == "Daily run limit reached (2/1)"

    async def test_workflow_without_workspace_reaches_run_cap(self, session_factory, usage_event):
        """Test workflow calls without a workspace count towards its cap."""
        event = usage_event.model_copy(
            update={"workspace_id": None, "agent_id": None, "workflow_id": "wf-1"}
        )

        async with session_factory() as session:
            session.add(WorkflowConfig(id="wf-1", daily_run_cap=1, enabled_for_ai=True))
            await session.commit()

        async with session_factory() as session:
            await UsageRecorder(session).record(event)

        async with session_factory() as session:
            status = await LimitService(session).check_workflow_limits("wf-1")

        assert status.run_count == 1
        assert status.blocked is True


class TestUsageWorker:
    """Tests for the background usage worker."""

    async def test_process_persists_event(self, session_factory, usage_event):
        """Test processing an event writes it to the database."""
        worker = UsageWorker(session_factory=session_factory)

        assert await worker.process(usage_event) is True
        assert len(await daily_rows(session_factory)) == 1

    async def test_retries_database_errors_then_gives_up(self, usage_event):
        """Test database errors are retried and then swallowed."""
        factory = FailingSessionFactory(OperationalError("INSERT", {}, Exception("database is locked")))
        worker = UsageWorker(session_factory=factory, retry_attempts=3, retry_wait_seconds=0)

        assert await worker.process(usage_event) is False
        assert factory.attempts == 3

    async def test_other_errors_not_retried(self, usage_event):
        """Test non-database errors fail on the first attempt."""
        factory = FailingSessionFactory(ValueError("bad event"))
        worker = UsageWorker(session_factory=factory, retry_attempts=3, retry_wait_seconds=0)

        assert await worker.process(usage_event) is False
        assert factory.attempts == 1

    async def test_submit_drops_when_queue_full(self, session_factory, usage_event):
        """Test submit never blocks and reports dropped events."""
        worker = UsageWorker(session_factory=session_factory, max_queue_size=1)

        assert worker.submit(usage_event) is True
        assert worker.submit(usage_event) is False
        assert worker.pending == 1

    async def test_explicit_zero_overrides_are_kept(self, session_factory, usage_event):
        """Test zero sizing and timeout are honoured instead of the configured defaults."""
        worker = UsageWorker(session_factory=session_factory, max_queue_size=0, drain_timeout=0)

        assert worker.drain_timeout == 0
        for _ in range(settings.usage_queue_size + 5):
            assert worker.submit(usage_event) is True
        assert worker.pending == settings.usage_queue_size + 5

    async def test_defaults_from_settings(self, session_factory):
        """Test omitted sizing falls back to the configured values."""
        worker = UsageWorker(session_factory=session_factory)

        assert worker.retry_attempts == settings.usage_retry_attempts
        assert worker.drain_timeout == settings.usage_drain_timeout_seconds

    async def test_background_processing_and_stop(self, session_factory, usage_event):
        """Test queued events are persisted before the worker stops."""
        worker = UsageWorker(session_factory=session_factory, drain_timeout=5.0)
        worker.start()

        for _ in range(3):
            assert worker.submit(usage_event) is True

        await worker.stop()

        assert worker.pending == 0
        rows = await daily_rows(session_factory)
        assert rows[0].requests_count == 3
        assert len(await ledger_rows(session_factory)) == 3

    async def test_stop_without_start(self, session_factory):
        """Test stopping an idle worker is a no-op."""
        worker = UsageWorker(session_factory=session_factory)
        await worker.stop()
        assert worker.pending == 0
