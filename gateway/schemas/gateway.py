"""
Gateway Schemas
===============
Pydantic models for the routing request and the normalized response.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from gateway.config import settings


class TaskType(str, Enum):
    """Documented task types. Unknown values are routed to defaults."""

    # Research
    WEB_RESEARCH = "web_research"
    PROSPECT_INTELLIGENCE = "prospect_intelligence"
    COMPANY_RESEARCH = "company_research"
    MARKET_RESEARCH = "market_research"
    REAL_TIME_SEARCH = "real_time_search"
    COMPETITOR_ANALYSIS = "competitor_analysis"
    NEWS_SEARCH = "news_search"

    # Reasoning
    COMPLEX_REASONING = "complex_reasoning"
    TOOL_CALLING = "tool_calling"
    MULTI_STEP_WORKFLOW = "multi_step_workflow"
    DOCUMENT_ANALYSIS = "document_analysis"
    CODE_GENERATION = "code_generation"

    # Fast
    GENERAL_QA = "general_qa"
    SUMMARY = "summary"
    CLASSIFICATION = "classification"
    EXTRACTION = "extraction"
    TRANSLATION = "translation"

    # Content
    CONTENT_GENERATION = "content_generation"
    EMAIL_DRAFTING = "email_drafting"
    PROPOSAL_WRITING = "proposal_writing"


class ModelProvider(str, Enum):
    PERPLEXITY = "perplexity"
    GEMINI = "gemini"
    OPENAI = "openai"
    CLAUDE = "claude"


class ModelTier(str, Enum):
    NANO = "nano"
    FAST = "fast"
    PRO = "pro"
    PREMIUM = "premium"


class GatewayRequest(BaseModel):
    """
    Routing request submitted by a caller.

    ``task_type`` is a free string so that unknown task types degrade to the
    default route instead of failing validation.
    """

    task_type: str = Field(..., min_length=1, max_length=100)
    prompt: str = Field(..., min_length=1)
    system_prompt: str | None = None
    tools: list[dict[str, Any]] | None = None
    context: dict[str, Any] | None = Field(
        default=None,
        description="Caller metadata. Accepted for compatibility and never forwarded to providers.",
    )
    preferred_provider: ModelProvider | None = None
    fallback_providers: list[ModelProvider] = Field(
        default_factory=lambda: [ModelProvider(p) for p in settings.default_fallback_providers]
    )
    max_tokens: int = Field(default=settings.default_max_tokens, gt=0)
    temperature: float = Field(default=settings.default_temperature, ge=0, le=2)

    # Correlation identifiers
    agent_id: str | None = None
    run_id: str | None = None
    workspace_id: str | None = None
    workflow_id: str | None = None
    user_id: str | None = None


class CallParams(BaseModel):
    """Provider-facing subset of a request."""

    prompt: str
    system_prompt: str | None = None
    tools: list[dict[str, Any]] | None = None
    max_tokens: int = 4000
    temperature: float = 0.7

    @classmethod
    def from_request(cls, request: GatewayRequest) -> "CallParams":
        return cls(
            prompt=request.prompt,
            system_prompt=request.system_prompt,
            tools=request.tools,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class GatewayResponse(BaseModel):
    """Normalized completion returned to callers."""

    content: str
    citations: list[Any] | None = None
    tool_calls: list[dict[str, Any]] | None = None
    provider: ModelProvider
    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    cost_usd: float = 0.0


class LimitUsage(BaseModel):
    """Usage numbers attached to a 429 so callers can render a message."""

    runCount: int
    totalCost: float
    dailyRunCap: int
    dailyCostCapUsd: float | None = None


class BlockedLimitResponse(BaseModel):
    error: str = "blocked_limit"
    message: str
    usage: LimitUsage


class ErrorResponse(BaseModel):
    error: str
