"""
Perplexity Adapter
==================
Search-grounded completions with citations.
"""

from typing import Optional

import httpx

from gateway.core.pricing import PricingEngine
from gateway.providers.base import BaseProvider
from gateway.schemas.gateway import CallParams, GatewayResponse, ModelProvider

RESEARCH_SYSTEM_PROMPT = (
    "You are a helpful research assistant. "
    "Provide accurate, up-to-date information with citations."
)


class PerplexityProvider(BaseProvider):
    provider = ModelProvider.PERPLEXITY
    label = "Perplexity"
    credential_name = "PERPLEXITY_API_KEY"

    def __init__(
        self,
        client: httpx.AsyncClient,
        pricing: PricingEngine,
        api_key: Optional[str],
        url: str,
        model: str = "sonar",
    ):
        super().__init__(client, pricing, api_key, url)
        self.model = model

    async def call(self, task_type: str, params: CallParams) -> GatewayResponse:
        api_key = self._require_api_key()

        data = await self._post(
            api_key,
            {
                "model": self.model,
                "messages": self._messages(params, RESEARCH_SYSTEM_PROMPT),
                "max_tokens": params.max_tokens,
                "temperature": params.temperature,
            },
        )
        return self._normalize(data, self.model, include_citations=True)
