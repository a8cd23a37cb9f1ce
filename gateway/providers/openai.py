"""
OpenAI Adapter
==============
Alternative reasoning provider; complex tasks get the larger model.
"""

from typing import Any, Optional

import httpx

from gateway.core.pricing import PricingEngine
from gateway.core.routing import TaskRouter
from gateway.providers.base import DEFAULT_SYSTEM_PROMPT, BaseProvider
from gateway.schemas.gateway import CallParams, GatewayResponse, ModelProvider


class OpenAIProvider(BaseProvider):
    provider = ModelProvider.OPENAI
    label = "OpenAI"
    credential_name = "OPENAI_API_KEY"

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
        model = self.router.openai_model(task_type)

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
