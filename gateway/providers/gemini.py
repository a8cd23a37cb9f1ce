"""
Gemini Adapter
==============
Reasoning provider reached through the AI gateway, with quality tiers.
"""

from typing import Any, Optional

import httpx

from gateway.core.pricing import PricingEngine
from gateway.core.routing import TaskRouter
from gateway.providers.base import DEFAULT_SYSTEM_PROMPT, BaseProvider
from gateway.schemas.gateway import CallParams, GatewayResponse, ModelProvider


class GeminiProvider(BaseProvider):
    provider = ModelProvider.GEMINI
    label = "Gemini"
    credential_name = "LOVABLE_API_KEY"

    def __init__(
        self,
        client: httpx.AsyncClient,
        pricing: PricingEngine,
        api_key: Optional[str],
        url: str,
        router: TaskRouter,
    ):
        super().__init__(client, pricing, api_key, url)
        self.router = router

    async def call(self, task_type: str, params: CallParams) -> GatewayResponse:
        api_key = self._require_api_key()

        # Tier is only looked up once this provider is actually invoked
        model = self.router.tier_model(task_type)

        body: dict[str, Any] = {
            "model": model,
            "messages": self._messages(params, DEFAULT_SYSTEM_PROMPT),
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
        }
        if params.tools:
            body["tools"] = params.tools

        data = await self._post(api_key, body)
        return self._normalize(data, model, include_tool_calls=True)
