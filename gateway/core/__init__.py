"""
Core Business Logic
====================
Routing policy, token pricing and the gateway error hierarchy.
"""

from gateway.core.errors import (
    AllProvidersFailed,
    ConfigurationError,
    GatewayError,
    LimitExceeded,
    ProviderError,
    ProviderUnavailable,
)
from gateway.core.pricing import PricingEngine, get_pricing_engine
from gateway.core.routing import RoutingTable, TaskRouter, get_task_router

__all__ = [
    "AllProvidersFailed",
    "ConfigurationError",
    "GatewayError",
    "LimitExceeded",
    "ProviderError",
    "ProviderUnavailable",
    "PricingEngine",
    "get_pricing_engine",
    "RoutingTable",
    "TaskRouter",
    "get_task_router",
]
