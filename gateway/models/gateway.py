"""
Gateway Models
==============
Entity limit configuration, daily usage aggregates and the per-call ledger.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    BigInteger,
    Date,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from gateway.models.base import Base, TimestampMixin

RUN_STATUS_COMPLETED = "completed"
RUN_STATUS_BLOCKED = "blocked_limit"


class AgentConfig(Base, TimestampMixin):
    """
    Per-agent budget configuration.
    Read by the admission gatekeeper on every gated request.
    """

    __tablename__ = "agents"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    workspace_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    daily_run_cap: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    daily_cost_cap_usd: Mapped[Decimal] = mapped_column(
        Numeric(20, 10),
        nullable=False,
        default=Decimal("10"),
    )
    cost_ceiling_usd: Mapped[Decimal] = mapped_column(
        Numeric(20, 10),
        nullable=False,
        default=Decimal("1"),
    )


class WorkflowConfig(Base, TimestampMixin):
    """Per-workflow run cap and AI switch."""

    __tablename__ = "workflows"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    daily_run_cap: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    enabled_for_ai: Mapped[bool] = mapped_column(nullable=False, default=True)


class ModelUsageDaily(Base, TimestampMixin):
    """
    Daily running totals per model and provider.
    Incremented in place by the usage recorder.
    """

    __tablename__ = "model_usage_daily"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    model_name: Mapped[str] = mapped_column(String(255), nullable=False)
    model_provider: Mapped[str] = mapped_column(String(50), nullable=False)
    usage_date: Mapped[date] = mapped_column(Date, nullable=False)

    requests_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tokens_input: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tokens_output: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_cost: Mapped[Decimal] = mapped_column(
        Numeric(20, 10),
        nullable=False,
        default=Decimal("0"),
    )

    # Task type of the request that created the row, as JSON
    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "model_name", "model_provider", "usage_date",
            name="uq_model_usage_daily"
        ),
        Index("idx_model_usage_date", "usage_date"),
    )


class UsageLedgerEntry(Base, TimestampMixin):
    """
    Append-only run history.

    One row per gateway call made with a workspace context, plus one row per
    request refused by admission control (status ``blocked_limit``).
    """

    __tablename__ = "usage_ledger"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    workspace_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    agent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    workflow_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    run_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    model_used: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tokens_used: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    cost_usd: Mapped[Decimal] = mapped_column(
        Numeric(20, 10),
        nullable=False,
        default=Decimal("0"),
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=RUN_STATUS_COMPLETED,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    usage_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        Index("idx_ledger_agent_date", "agent_id", "usage_date"),
        Index("idx_ledger_workflow_date", "workflow_id", "usage_date"),
        Index("idx_ledger_workspace", "workspace_id"),
    )
