"""
Database Models
===============
SQLAlchemy ORM models for the model gateway.
"""

from gateway.models.base import Base
from gateway.models.gateway import (
    AgentConfig,
    ModelUsageDaily,
    UsageLedgerEntry,
    WorkflowConfig,
)

__all__ = [
    "Base",
    "AgentConfig",
    "WorkflowConfig",
    "ModelUsageDaily",
    "UsageLedgerEntry",
]
