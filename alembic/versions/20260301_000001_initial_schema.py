"""Initial schema

Revision ID: 20260301_000001
Revises:
Create Date: 2026-03-01 00:00:01

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    # Entity limit configuration
    op.create_table(
        "agents",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("workspace_id", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("daily_run_cap", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("daily_cost_cap_usd", sa.Numeric(20, 10), nullable=False, server_default="10"),
        sa.Column("cost_ceiling_usd", sa.Numeric(20, 10), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_agents_workspace_id", "agents", ["workspace_id"])

    op.create_table(
        "workflows",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("daily_run_cap", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("enabled_for_ai", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # Daily aggregate per model
    op.create_table(
        "model_usage_daily",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("model_name", sa.String(255), nullable=False),
        sa.Column("model_provider", sa.String(50), nullable=False),
        sa.Column("usage_date", sa.Date(), nullable=False),
        sa.Column("requests_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("tokens_input", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("tokens_output", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_cost", sa.Numeric(20, 10), nullable=False, server_default="0"),
        sa.Column("metadata_json", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "model_name", "model_provider", "usage_date", name="uq_model_usage_daily"
        ),
    )
    op.create_index("idx_model_usage_date", "model_usage_daily", ["usage_date"])

    # Per-call ledger and blocked-run history
    op.create_table(
        "usage_ledger",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("workspace_id", sa.String(255), nullable=True),
        sa.Column("agent_id", sa.String(255), nullable=True),
        sa.Column("workflow_id", sa.String(255), nullable=True),
        sa.Column("run_id", sa.String(255), nullable=True),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("provider", sa.String(50), nullable=True),
        sa.Column("model_used", sa.String(255), nullable=True),
        sa.Column("tokens_used", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("cost_usd", sa.Numeric(20, 10), nullable=False, server_default="0"),
        sa.Column("status", sa.String(50), nullable=False, server_default="completed"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("usage_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_ledger_agent_date", "usage_ledger", ["agent_id", "usage_date"])
    op.create_index("idx_ledger_workflow_date", "usage_ledger", ["workflow_id", "usage_date"])
    op.create_index("idx_ledger_workspace", "usage_ledger", ["workspace_id"])


def downgrade() -> None:
    op.drop_table("usage_ledger")
    op.drop_table("model_usage_daily")
    op.drop_table("workflows")
    op.drop_table("agents")
