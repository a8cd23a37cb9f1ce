"""
Admission Control
=================
Daily run and cost caps for agents and workflows.
"""

from decimal import Decimal
from typing import Literal

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.core import metrics
from gateway.models.gateway import (
    RUN_STATUS_BLOCKED,
    AgentConfig,
    UsageLedgerEntry,
    WorkflowConfig,
)
from gateway.schemas.limits import AgentLimitStatus, DailyUsage, WorkflowLimitStatus
from gateway.schemas.usage import utc_today

logger = structlog.get_logger()

EntityKind = Literal["agent", "workflow"]

# Reported when the entity cannot be found, so callers always get numbers
FALLBACK_AGENT_RUN_CAP = 10
FALLBACK_AGENT_COST_CAP_USD = 1.0
FALLBACK_AGENT_COST_CEILING_USD = 0.10
FALLBACK_WORKFLOW_RUN_CAP = 10


def usage_pct(used: float, cap: float) -> float:
    if cap <= 0:
        return 100.0
    return round(used / cap * 100, 2)


def would_exceed_cost_ceiling(estimated_cost: float, cost_ceiling_usd: float | None) -> bool:
    """
    Single-call screen, independent of the daily cost cap.

    A missing or non-positive ceiling never blocks.
    """
    if cost_ceiling_usd is None or cost_ceiling_usd <= 0:
        return False
    return estimated_cost > cost_ceiling_usd


def estimate_cost(prompt: str, system_prompt: str | None, max_tokens: int, rate_per_1k: Decimal) -> float:
    """Worst-case cost of a call: rough prompt tokens (4 chars each) plus max_tokens."""
    text = (system_prompt or "") + prompt
    tokens = max(1, len(text) // 4) + max_tokens
    return float(Decimal(tokens) / Decimal("1000") * rate_per_1k)


class LimitService:
    """Computes limit snapshots and records refused runs."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _daily_usage(self, *conditions) -> DailyUsage:
        stmt = select(
            func.count(UsageLedgerEntry.id).label("run_count"),
            func.sum(UsageLedgerEntry.cost_usd).label("total_cost"),
            func.sum(UsageLedgerEntry.tokens_used).label("total_tokens"),
        ).where(
            UsageLedgerEntry.usage_date == utc_today(),
            UsageLedgerEntry.status != RUN_STATUS_BLOCKED,
            *conditions,
        )

        result = await self.session.execute(stmt)
        row = result.one()

        return DailyUsage(
            run_count=row.run_count or 0,
            total_cost=float(row.total_cost or 0),
            total_tokens=int(row.total_tokens or 0),
        )

    async def get_agent_daily_usage(
        self,
        agent_id: str,
        workspace_id: str | None = None,
    ) -> DailyUsage:
        conditions = [UsageLedgerEntry.agent_id == agent_id]
        if workspace_id:
            conditions.append(UsageLedgerEntry.workspace_id == workspace_id)
        return await self._daily_usage(*conditions)

    async def get_workflow_daily_usage(self, workflow_id: str) -> DailyUsage:
        return await self._daily_usage(UsageLedgerEntry.workflow_id == workflow_id)

    async def check_agent_limits(
        self,
        agent_id: str,
        workspace_id: str | None = None,
    ) -> AgentLimitStatus:
        """
        Compare an agent's usage today against its caps.

        The run cap message takes precedence over the cost cap message when
        both are reached.
        """
        agent = await self.session.get(AgentConfig, agent_id)

        if agent is None:
            logger.warning("Agent not found for limit check", agent_id=agent_id)
            return AgentLimitStatus(
                agent_id=agent_id,
                run_count=0,
                total_cost=0.0,
                total_tokens=0,
                daily_run_cap=FALLBACK_AGENT_RUN_CAP,
                daily_cost_cap_usd=FALLBACK_AGENT_COST_CAP_USD,
                cost_ceiling_usd=FALLBACK_AGENT_COST_CEILING_USD,
                run_limit_reached=False,
                cost_limit_reached=False,
                run_usage_pct=0.0,
                cost_usage_pct=0.0,
                blocked=True,
                reason="Agent not found",
            )

        usage = await self.get_agent_daily_usage(agent_id, workspace_id)
        run_cap = agent.daily_run_cap
        cost_cap = float(agent.daily_cost_cap_usd)

        run_limit_reached = usage.run_count >= run_cap
        cost_limit_reached = usage.total_cost >= cost_cap

        reason = None
        if run_limit_reached:
            reason = f"Daily run limit reached ({usage.run_count}/{run_cap})"
        elif cost_limit_reached:
            reason = f"Daily cost limit reached (${usage.total_cost:.2f}/${cost_cap:.2f})"

        return AgentLimitStatus(
            agent_id=agent_id,
            run_count=usage.run_count,
            total_cost=usage.total_cost,
            total_tokens=usage.total_tokens,
            daily_run_cap=run_cap,
            daily_cost_cap_usd=cost_cap,
            cost_ceiling_usd=float(agent.cost_ceiling_usd),
            run_limit_reached=run_limit_reached,
            cost_limit_reached=cost_limit_reached,
            run_usage_pct=usage_pct(usage.run_count, run_cap),
            cost_usage_pct=usage_pct(usage.total_cost, cost_cap),
            blocked=run_limit_reached or cost_limit_reached,
            reason=reason,
        )

    async def check_workflow_limits(self, workflow_id: str) -> WorkflowLimitStatus:
        """
        Compare a workflow's runs today against its cap.

        A workflow with AI disabled is blocked whatever its run count.
        """
        workflow = await self.session.get(WorkflowConfig, workflow_id)

        if workflow is None:
            logger.warning("Workflow not found for limit check", workflow_id=workflow_id)
            return WorkflowLimitStatus(
                workflow_id=workflow_id,
                run_count=0,
                total_cost=0.0,
                total_tokens=0,
                daily_run_cap=FALLBACK_WORKFLOW_RUN_CAP,
                enabled_for_ai=False,
                run_limit_reached=False,
                run_usage_pct=0.0,
                blocked=True,
                reason="Workflow not found",
            )

        usage = await self.get_workflow_daily_usage(workflow_id)
        run_cap = workflow.daily_run_cap
        run_limit_reached = usage.run_count >= run_cap

        reason = None
        if not workflow.enabled_for_ai:
            reason = "AI is disabled for this workflow"
        elif run_limit_reached:
            reason = f"Daily run limit reached ({usage.run_count}/{run_cap})"

        return WorkflowLimitStatus(
            workflow_id=workflow_id,
            run_count=usage.run_count,
            total_cost=usage.total_cost,
            total_tokens=usage.total_tokens,
            daily_run_cap=run_cap,
            enabled_for_ai=workflow.enabled_for_ai,
            run_limit_reached=run_limit_reached,
            run_usage_pct=usage_pct(usage.run_count, run_cap),
            blocked=run_limit_reached or not workflow.enabled_for_ai,
            reason=reason,
        )

    async def record_blocked_run(
        self,
        kind: EntityKind,
        entity_id: str,
        reason: str,
        user_id: str | None = None,
        workspace_id: str | None = None,
    ) -> UsageLedgerEntry:
        """Append a ``blocked_limit`` row to the run history."""
        if kind not in ("agent", "workflow"):
            raise ValueError(f"Unknown entity kind: {kind}")

        entry = UsageLedgerEntry(
            workspace_id=workspace_id,
            agent_id=entity_id if kind == "agent" else None,
            workflow_id=entity_id if kind == "workflow" else None,
            user_id=user_id,
            tokens_used=0,
            cost_usd=Decimal("0"),
            status=RUN_STATUS_BLOCKED,
            error_message=reason,
            usage_date=utc_today(),
        )
        self.session.add(entry)
        await self.session.flush()

        metrics.blocked_requests_total.labels(kind=kind).inc()
        logger.info("Recorded blocked run", kind=kind, entity_id=entity_id, reason=reason)
        return entry
