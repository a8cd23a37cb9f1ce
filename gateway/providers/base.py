"""
Provider Adapter Base
=====================
Shared plumbing for chat-completions style providers.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
import structlog

from gateway.core.errors import ProviderError, ProviderUnavailable
from gateway.core.pricing import PricingEngine
from gateway.schemas.gateway import CallParams, GatewayResponse, ModelProvider, TokenUsage

logger = structlog.get_logger()

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."


class BaseProvider(ABC):
    """
    One external AI provider.

    Subclasses build the wire payload and pick the model; this class owns the
    credential check, the HTTP round trip and response normalization.
    """

    provider: ModelProvider
    label: str
    credential_name: str

    def __init__(
        self,
        client: httpx.AsyncClient,
        pricing: PricingEngine,
        api_key: Optional[str],
        url: str,
    ):
        self.client = client
        self.pricing = pricing
        self.api_key = api_key
        self.url = url

    @abstractmethod
    async def call(self, task_type: str, params: CallParams) -> GatewayResponse:
        """Send one request and return the normalized response."""

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ProviderUnavailable(
                self.provider.value,
                f"{self.credential_name} not configured",
            )
        return self.api_key

    def _messages(self, params: CallParams, default_system_prompt: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": params.system_prompt or default_system_prompt},
            {"role": "user", "content": params.prompt},
        ]

    async def _post(self, api_key: str, body: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.post(
            self.url,
            json=body,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

        if response.status_code < 200 or response.status_code >= 300:
            raise ProviderError(
                self.provider.value,
                response.status_code,
                response.text,
                label=self.label,
            )

        return response.json()

    def _normalize(
        self,
        data: dict[str, Any],
        model: str,
        include_citations: bool = False,
        include_tool_calls: bool = False,
    ) -> GatewayResponse:
        """Map a chat-completions body onto the gateway response."""
        choices = data.get("choices") or [{}]
        message = choices[0].get("message") or {}

        usage = data.get("usage") or {}
        prompt_tokens = usage.get("prompt_tokens") or 0
        completion_tokens = usage.get("completion_tokens") or 0
        total_tokens = prompt_tokens + completion_tokens

        cost = self.pricing.calculate_cost(self.provider.value, model, total_tokens)

        return GatewayResponse(
            content=message.get("content") or "",
            citations=(data.get("citations") or []) if include_citations else None,
            tool_calls=message.get("tool_calls") if include_tool_calls else None,
            provider=self.provider,
            model=model,
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=total_tokens,
            ),
            cost_usd=float(cost),
        )
