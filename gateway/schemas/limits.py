"""
Limit Schemas
=============
Per-day admission snapshots for agents and workflows.
"""

from pydantic import BaseModel


class DailyUsage(BaseModel):
    """Today's usage for one entity."""

    run_count: int = 0
    total_cost: float = 0.0
    total_tokens: int = 0


class AgentLimitStatus(BaseModel):
    agent_id: str
    run_count: int
    total_cost: float
    total_tokens: int
    daily_run_cap: int
    daily_cost_cap_usd: float
    cost_ceiling_usd: float
    run_limit_reached: bool
    cost_limit_reached: bool
    run_usage_pct: float
    cost_usage_pct: float
    blocked: bool
    reason: str | None = None


class WorkflowLimitStatus(BaseModel):
    workflow_id: str
    run_count: int
    total_cost: float
    total_tokens: int
    daily_run_cap: int
    enabled_for_ai: bool
    run_limit_reached: bool
    run_usage_pct: float
    blocked: bool
    reason: str | None = None
