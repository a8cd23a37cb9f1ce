"""
Provider Adapters
=================
One adapter per external provider, selected through a registry.
"""

from typing import Mapping, Protocol

import httpx

from gateway.config import Settings, settings
from gateway.core.pricing import PricingEngine
from gateway.core.routing import TaskRouter
from gateway.providers.base import BaseProvider
from gateway.providers.claude import UnconfiguredProvider, claude_provider
from gateway.providers.gemini import GeminiProvider
from gateway.providers.openai import OpenAIProvider
from gateway.providers.perplexity import PerplexityProvider
from gateway.schemas.gateway import CallParams, GatewayResponse, ModelProvider


class Provider(Protocol):
    async def call(self, task_type: str, params: CallParams) -> GatewayResponse:
        ...


ProviderRegistry = Mapping[ModelProvider, Provider]


def build_provider_registry(
    client: httpx.AsyncClient,
    pricing: PricingEngine,
    router: TaskRouter,
    config: Settings = settings,
) -> dict[ModelProvider, Provider]:
    """Create every adapter, including the scaffolded ones."""
    return {
        ModelProvider.PERPLEXITY: PerplexityProvider(
            client,
            pricing,
            api_key=config.perplexity_api_key,
            url=config.perplexity_url,
            model=router.table.perplexity_model,
        ),
        ModelProvider.GEMINI: GeminiProvider(
            client,
            pricing,
            api_key=config.lovable_api_key,
            url=config.ai_gateway_url,
            router=router,
        ),
        ModelProvider.OPENAI: OpenAIProvider(
            client,
            pricing,
            api_key=config.openai_api_key,
            url=config.openai_url,
            router=router,
        ),
        ModelProvider.CLAUDE: claude_provider(),
    }


__all__ = [
    "BaseProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "PerplexityProvider",
    "Provider",
    "ProviderRegistry",
    "UnconfiguredProvider",
    "build_provider_registry",
    "claude_provider",
]
