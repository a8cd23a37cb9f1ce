"""
Provider Endpoints
==================
API endpoints for provider availability and pricing.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from gateway.api.dependencies import get_pricing, get_router
from gateway.config import settings
from gateway.core.pricing import PricingEngine
from gateway.core.routing import TaskRouter
from gateway.schemas.gateway import ModelProvider

router = APIRouter()


class ModelPricing(BaseModel):
    model: str
    cost_per_1k: float


class ProviderInfo(BaseModel):
    provider: ModelProvider
    configured: bool
    default_cost_per_1k: float
    models: list[ModelPricing]


def _provider_models(provider: ModelProvider, task_router: TaskRouter) -> list[str]:
    table = task_router.table
    if provider == ModelProvider.GEMINI:
        return list(dict.fromkeys(table.tier_models.values()))
    if provider == ModelProvider.OPENAI:
        return [table.openai_default_model, table.openai_complex_model]
    if provider == ModelProvider.PERPLEXITY:
        return [table.perplexity_model]
    return []


@router.get(
    "",
    response_model=list[ProviderInfo],
    summary="List providers",
    description="Providers known to the gateway, whether credentials are set, and model rates",
)
async def list_providers(
    task_router: Annotated[TaskRouter, Depends(get_router)],
    pricing: Annotated[PricingEngine, Depends(get_pricing)],
) -> list[ProviderInfo]:
    credentials = {
        ModelProvider.PERPLEXITY: settings.perplexity_api_key,
        ModelProvider.GEMINI: settings.lovable_api_key,
        ModelProvider.OPENAI: settings.openai_api_key,
        # Scaffolded: never dispatchable even with a key
        ModelProvider.CLAUDE: None,
    }

    return [
        ProviderInfo(
            provider=provider,
            configured=bool(credentials[provider]),
            default_cost_per_1k=float(pricing.get_rate(provider.value, "")),
            models=[
                ModelPricing(model=model, cost_per_1k=float(pricing.get_rate(provider.value, model)))
                for model in _provider_models(provider, task_router)
            ],
        )
        for provider in ModelProvider
    ]
