"""
Model Gateway
=============
FastAPI application entry point.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from gateway import __version__
from gateway.api import api_router
from gateway.config import settings
from gateway.core.pricing import get_pricing_engine
from gateway.core.routing import get_task_router
from gateway.database import close_db, init_db
from gateway.jobs.usage_worker import UsageWorker
from gateway.providers import build_provider_registry

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Model Gateway", env=settings.app_env)
    await init_db()

    http_client = httpx.AsyncClient(timeout=settings.provider_timeout_seconds)
    app.state.providers = build_provider_registry(
        http_client,
        get_pricing_engine(),
        get_task_router(),
    )

    usage_worker = UsageWorker()
    usage_worker.start()
    app.state.usage_worker = usage_worker

    yield

    # Shutdown
    logger.info("Shutting down Model Gateway")
    await usage_worker.stop()
    await http_client.aclose()
    await close_db()
    logger.info("Database disconnected")


# Create FastAPI application
app = FastAPI(
    title="Model Gateway API",
    description="Task-routed, multi-provider AI gateway with daily budget admission control",
    version=__version__,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    lifespan=lifespan,
)

# Permissive CORS; browsers call the gateway directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# Mount Prometheus metrics endpoint
if settings.metrics_enabled:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

# Include API routes
app.include_router(api_router)


def run() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "gateway.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
