"""
Pydantic Schemas
================
Request/Response models for API validation.
"""

from gateway.schemas.gateway import (
    BlockedLimitResponse,
    CallParams,
    ErrorResponse,
    GatewayRequest,
    GatewayResponse,
    LimitUsage,
    ModelProvider,
    ModelTier,
    TaskType,
    TokenUsage,
)
from gateway.schemas.limits import AgentLimitStatus, DailyUsage, WorkflowLimitStatus
from gateway.schemas.usage import UsageEvent

__all__ = [
    "TaskType",
    "ModelProvider",
    "ModelTier",
    "GatewayRequest",
    "GatewayResponse",
    "CallParams",
    "TokenUsage",
    "LimitUsage",
    "BlockedLimitResponse",
    "ErrorResponse",
    "AgentLimitStatus",
    "WorkflowLimitStatus",
    "DailyUsage",
    "UsageEvent",
]
