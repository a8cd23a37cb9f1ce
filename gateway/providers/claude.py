"""
Claude Adapter
==============
Scaffolded provider: registered for dispatch but never configured.
"""

from gateway.core.errors import ProviderUnavailable
from gateway.schemas.gateway import CallParams, GatewayResponse, ModelProvider


class UnconfiguredProvider:
    """Provider that always fails with a distinguishable error."""

    def __init__(self, provider: ModelProvider, message: str):
        self.provider = provider
        self.message = message

    async def call(self, task_type: str, params: CallParams) -> GatewayResponse:
        raise ProviderUnavailable(self.provider.value, self.message)


def claude_provider() -> UnconfiguredProvider:
    return UnconfiguredProvider(
        ModelProvider.CLAUDE,
        "Claude integration not yet configured. Please provide ANTHROPIC_API_KEY.",
    )
