"""
Usage Service
=============
Persists token and cost usage of successful gateway calls.
"""

import json

import structlog
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.models.gateway import (
    RUN_STATUS_COMPLETED,
    ModelUsageDaily,
    UsageLedgerEntry,
)
from gateway.schemas.usage import UsageEvent

logger = structlog.get_logger()


class UsageRecorder:
    """Writes the daily model aggregate and the per-call ledger."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite_insert(ModelUsageDaily)
        return pg_insert(ModelUsageDaily)

    async def upsert_daily_usage(self, event: UsageEvent) -> None:
        """Increment the (model, provider, day) row, creating it on first use."""
        stmt = self._insert().values(
            model_name=event.model,
            model_provider=event.provider,
            usage_date=event.usage_date,
            requests_count=1,
            tokens_input=event.prompt_tokens,
            tokens_output=event.completion_tokens,
            total_cost=event.cost_usd,
            metadata_json=json.dumps({"task_type": event.task_type}),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["model_name", "model_provider", "usage_date"],
            set_={
                "requests_count": ModelUsageDaily.requests_count + 1,
                "tokens_input": ModelUsageDaily.tokens_input + event.prompt_tokens,
                "tokens_output": ModelUsageDaily.tokens_output + event.completion_tokens,
                "total_cost": ModelUsageDaily.total_cost + event.cost_usd,
            },
        )
        await self.session.execute(stmt)

    async def append_ledger_entry(self, event: UsageEvent) -> UsageLedgerEntry:
        entry = UsageLedgerEntry(
            workspace_id=event.workspace_id,
            agent_id=event.agent_id,
            workflow_id=event.workflow_id,
            run_id=event.run_id,
            provider=event.provider,
            model_used=event.model,
            tokens_used=event.tokens_used,
            cost_usd=event.cost_usd,
            status=RUN_STATUS_COMPLETED,
            usage_date=event.usage_date,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def record(self, event: UsageEvent) -> None:
        """
        Record one call's usage and commit.

        The ledger row is written when the call carried a workspace, agent or
        workflow, since admission control counts runs from the ledger.
        Errors propagate; callers on the request path go through the usage
        worker instead of calling this directly.
        """
        await self.upsert_daily_usage(event)
        if event.workspace_id or event.agent_id or event.workflow_id:
            await self.append_ledger_entry(event)
        await self.session.commit()

        logger.info(
            "Recorded usage",
            provider=event.provider,
            model=event.model,
            tokens=event.tokens_used,
            cost=float(event.cost_usd),
            workspace_id=event.workspace_id,
            agent_id=event.agent_id,
        )
