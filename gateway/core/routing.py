"""
Task Router
===========
Maps a task type to a provider chain and, for the tiered provider, a model.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

import structlog
import yaml

from gateway.config import settings
from gateway.schemas.gateway import ModelProvider, ModelTier

logger = structlog.get_logger()

_RESEARCH_TASKS = (
    "web_research",
    "prospect_intelligence",
    "company_research",
    "market_research",
    "real_time_search",
    "competitor_analysis",
    "news_search",
)

DEFAULT_ROUTING: dict[str, Any] = {
    "default_provider": "gemini",
    "default_tier": "fast",
    "task_providers": {
        **{task: "perplexity" for task in _RESEARCH_TASKS},
        "complex_reasoning": "gemini",
        "tool_calling": "gemini",
        "multi_step_workflow": "gemini",
        "document_analysis": "gemini",
        "code_generation": "gemini",
        "general_qa": "gemini",
        "summary": "gemini",
        "classification": "gemini",
        "extraction": "gemini",
        "translation": "gemini",
        "content_generation": "gemini",
        "email_drafting": "gemini",
        "proposal_writing": "gemini",
    },
    "task_tiers": {
        "general_qa": "fast",
        "summary": "fast",
        "classification": "nano",
        "extraction": "nano",
        "translation": "fast",
        "complex_reasoning": "pro",
        "tool_calling": "pro",
        "multi_step_workflow": "pro",
        "document_analysis": "pro",
        "code_generation": "pro",
        "content_generation": "fast",
        "email_drafting": "fast",
        "proposal_writing": "pro",
        "web_research": "pro",
        "prospect_intelligence": "pro",
        "company_research": "pro",
        "market_research": "pro",
        "real_time_search": "pro",
        "competitor_analysis": "pro",
        "news_search": "fast",
    },
    "tier_models": {
        "nano": "google/gemini-2.5-flash-lite",
        "fast": "google/gemini-2.5-flash",
        "pro": "google/gemini-2.5-pro",
        "premium": "google/gemini-3-pro-preview",
    },
    "perplexity_model": "sonar",
    "openai": {
        "default_model": "gpt-5-mini",
        "complex_model": "gpt-5",
        "complex_tasks": ["complex_reasoning", "multi_step_workflow", "document_analysis"],
    },
}


@dataclass(frozen=True)
class RoutingTable:
    """Immutable routing policy."""

    task_providers: Mapping[str, ModelProvider]
    task_tiers: Mapping[str, ModelTier]
    tier_models: Mapping[ModelTier, str]
    default_provider: ModelProvider = ModelProvider.GEMINI
    default_tier: ModelTier = ModelTier.FAST
    perplexity_model: str = "sonar"
    openai_default_model: str = "gpt-5-mini"
    openai_complex_model: str = "gpt-5"
    openai_complex_tasks: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RoutingTable":
        openai = raw.get("openai", {})
        return cls(
            task_providers=MappingProxyType(
                {task: ModelProvider(p) for task, p in raw.get("task_providers", {}).items()}
            ),
            task_tiers=MappingProxyType(
                {task: ModelTier(t) for task, t in raw.get("task_tiers", {}).items()}
            ),
            tier_models=MappingProxyType(
                {ModelTier(t): m for t, m in raw.get("tier_models", {}).items()}
            ),
            default_provider=ModelProvider(raw.get("default_provider", "gemini")),
            default_tier=ModelTier(raw.get("default_tier", "fast")),
            perplexity_model=raw.get("perplexity_model", "sonar"),
            openai_default_model=openai.get("default_model", "gpt-5-mini"),
            openai_complex_model=openai.get("complex_model", "gpt-5"),
            openai_complex_tasks=frozenset(openai.get("complex_tasks", [])),
        )

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "RoutingTable":
        """Load routing policy from YAML, falling back to built-in defaults."""
        path = Path(config_path or settings.routing_config_path)

        if not path.exists():
            logger.warning("Routing config not found, using defaults", path=str(path))
            return cls.from_dict(DEFAULT_ROUTING)

        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
            table = cls.from_dict(raw)
            logger.info("Loaded routing configuration", path=str(path))
            return table
        except (OSError, yaml.YAMLError, ValueError) as e:
            logger.error("Failed to load routing config", path=str(path), error=str(e))
            return cls.from_dict(DEFAULT_ROUTING)


class TaskRouter:
    """Resolves provider chains and model tiers from a routing table."""

    def __init__(self, table: RoutingTable):
        self.table = table

    def primary_provider(self, task_type: str) -> ModelProvider:
        return self.table.task_providers.get(task_type, self.table.default_provider)

    def resolve(
        self,
        task_type: str,
        preferred_provider: ModelProvider | None = None,
        fallback_providers: Iterable[ModelProvider] = (),
    ) -> list[ModelProvider]:
        """
        Build the ordered provider chain for a task.

        The preferred provider, when given, is the head; otherwise the task's
        default provider. Fallbacks follow in caller order with duplicates
        (including the head) dropped.
        """
        head = preferred_provider or self.primary_provider(task_type)
        chain = [head]
        for provider in fallback_providers:
            if provider not in chain:
                chain.append(provider)
        return chain

    def resolve_tier(self, task_type: str) -> ModelTier:
        return self.table.task_tiers.get(task_type, self.table.default_tier)

    def tier_model(self, task_type: str) -> str:
        tier = self.resolve_tier(task_type)
        model = self.table.tier_models.get(tier)
        if model is None:
            model = self.table.tier_models[self.table.default_tier]
        return model

    def openai_model(self, task_type: str) -> str:
        if task_type in self.table.openai_complex_tasks:
            return self.table.openai_complex_model
        return self.table.openai_default_model

    def model_for(self, provider: ModelProvider, task_type: str) -> str | None:
        """Model a provider would use for a task, if it is known up front."""
        if provider == ModelProvider.GEMINI:
            return self.tier_model(task_type)
        if provider == ModelProvider.OPENAI:
            return self.openai_model(task_type)
        if provider == ModelProvider.PERPLEXITY:
            return self.table.perplexity_model
        return None


@lru_cache
def get_task_router() -> TaskRouter:
    """Get cached router built from the configured routing table."""
    return TaskRouter(RoutingTable.load())
