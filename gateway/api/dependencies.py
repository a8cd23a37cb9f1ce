"""
API Dependencies
================
FastAPI providers for the router, adapters, usage worker and services.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.config import settings
from gateway.core.pricing import PricingEngine, get_pricing_engine
from gateway.core.routing import TaskRouter, get_task_router
from gateway.database import get_session
from gateway.providers import ProviderRegistry
from gateway.services.dispatch import FallbackExecutor
from gateway.services.gateway import GatewayService, UsageSink
from gateway.services.limits import LimitService


def get_router() -> TaskRouter:
    return get_task_router()


def get_pricing() -> PricingEngine:
    return get_pricing_engine()


def get_providers(request: Request) -> ProviderRegistry:
    return request.app.state.providers


def get_usage_sink(request: Request) -> UsageSink:
    return request.app.state.usage_worker


def get_limit_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> LimitService:
    return LimitService(session)


def get_gateway_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    router: Annotated[TaskRouter, Depends(get_router)],
    providers: Annotated[ProviderRegistry, Depends(get_providers)],
    usage_sink: Annotated[UsageSink, Depends(get_usage_sink)],
    pricing: Annotated[PricingEngine, Depends(get_pricing)],
) -> GatewayService:
    return GatewayService(
        session=session,
        router=router,
        executor=FallbackExecutor(providers),
        usage_sink=usage_sink,
        pricing=pricing,
        enforce_cost_ceiling=settings.enforce_cost_ceiling,
    )
