"""
Test Configuration
==================
Pytest fixtures for Model Gateway tests.
"""

from collections.abc import AsyncGenerator
from typing import Any, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gateway.api.dependencies import get_pricing, get_providers, get_router, get_usage_sink
from gateway.core.pricing import DEFAULT_PRICING, PricingEngine
from gateway.core.routing import DEFAULT_ROUTING, RoutingTable, TaskRouter
from gateway.database import get_session
from gateway.main import app
from gateway.models.base import Base
from gateway.schemas.gateway import (
    CallParams,
    GatewayResponse,
    ModelProvider,
    TokenUsage,
)
from gateway.schemas.usage import UsageEvent

# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeProvider:
    """Adapter double that records calls and returns or raises a fixed outcome."""

    def __init__(
        self,
        response: Optional[GatewayResponse] = None,
        error: Optional[Exception] = None,
    ):
        self.response = response
        self.error = error
        self.calls: list[tuple[str, CallParams]] = []

    async def call(self, task_type: str, params: CallParams) -> GatewayResponse:
        self.calls.append((task_type, params))
        if self.error is not None:
            raise self.error
        return self.response


class RecordingSink:
    """Usage sink that keeps submitted events in memory."""

    def __init__(self) -> None:
        self.events: list[UsageEvent] = []

    def submit(self, event: UsageEvent) -> bool:
        self.events.append(event)
        return True


def make_response(
    provider: ModelProvider,
    model: str,
    content: str = "ok",
    prompt_tokens: int = 10,
    completion_tokens: int = 20,
    cost_usd: float = 0.001,
) -> GatewayResponse:
    return GatewayResponse(
        content=content,
        provider=provider,
        model=model,
        usage=TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
        cost_usd=cost_usd,
    )


def chat_completion(
    content: str = "answer",
    prompt_tokens: int = 100,
    completion_tokens: int = 400,
    **extra: Any,
) -> dict[str, Any]:
    """Chat-completions response body as returned by the providers."""
    message: dict[str, Any] = {"role": "assistant", "content": content}
    if "tool_calls" in extra:
        message["tool_calls"] = extra.pop("tool_calls")
    return {
        "id": "cmpl-1",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": prompt_tokens, "completion_tokens": completion_tokens},
        **extra,
    }


@pytest.fixture
def routing_table() -> RoutingTable:
    return RoutingTable.from_dict(DEFAULT_ROUTING)


@pytest.fixture
def task_router(routing_table: RoutingTable) -> TaskRouter:
    return TaskRouter(routing_table)


@pytest.fixture
def pricing() -> PricingEngine:
    return PricingEngine(pricing_data=DEFAULT_PRICING)


@pytest.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_providers() -> dict[ModelProvider, FakeProvider]:
    """One succeeding fake per provider."""
    return {
        ModelProvider.PERPLEXITY: FakeProvider(make_response(ModelProvider.PERPLEXITY, "sonar")),
        ModelProvider.GEMINI: FakeProvider(
            make_response(ModelProvider.GEMINI, "google/gemini-2.5-flash")
        ),
        ModelProvider.OPENAI: FakeProvider(make_response(ModelProvider.OPENAI, "gpt-5-mini")),
        ModelProvider.CLAUDE: FakeProvider(make_response(ModelProvider.CLAUDE, "claude")),
    }


@pytest.fixture
def usage_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
async def client(
    test_session,
    fake_providers,
    usage_sink,
    task_router,
    pricing,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with session, provider and usage overrides."""

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_providers] = lambda: fake_providers
    app.dependency_overrides[get_usage_sink] = lambda: usage_sink
    app.dependency_overrides[get_router] = lambda: task_router
    app.dependency_overrides[get_pricing] = lambda: pricing

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def mock_http():
    """
    Build an httpx.AsyncClient backed by a handler.

    Each captured request is appended to the returned list.
    """

    def factory(handler) -> tuple[httpx.AsyncClient, list[httpx.Request]]:
        requests: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        return http_client, requests

    return factory
