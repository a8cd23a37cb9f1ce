"""
API Router
==========
Main API router combining all endpoint modules.
"""

from fastapi import APIRouter

from gateway.api.endpoints import gateway, health, limits, providers

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(gateway.router, prefix="/gateway", tags=["Gateway"])
api_router.include_router(limits.router, tags=["Limits"])
api_router.include_router(providers.router, prefix="/providers", tags=["Providers"])
