"""
Usage Schemas
=============
Usage events handed from the gateway to the usage worker.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, Field


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class UsageEvent(BaseModel):
    """
    Token and cost usage of one successful provider call.

    ``usage_date`` is fixed when the event is created so that a queued event
    is attributed to the day the call happened.
    """

    provider: str
    model: str
    task_type: str
    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    tokens_used: int = Field(default=0, ge=0)
    cost_usd: Decimal = Decimal("0")
    agent_id: str | None = None
    run_id: str | None = None
    workspace_id: str | None = None
    workflow_id: str | None = None
    usage_date: date = Field(default_factory=utc_today)
