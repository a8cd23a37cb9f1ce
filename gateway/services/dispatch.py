"""
Fallback Executor
=================
Tries each provider of a chain in order until one answers.
"""

import time
from typing import Sequence

import structlog

from gateway.core import metrics
from gateway.core.errors import AllProvidersFailed, ProviderUnavailable
from gateway.providers import ProviderRegistry
from gateway.schemas.gateway import CallParams, GatewayResponse, ModelProvider

logger = structlog.get_logger()


class FallbackExecutor:
    """
    Sequential dispatcher over a provider chain.

    Each provider gets exactly one attempt. The first success is returned and
    the rest of the chain is never touched; if every attempt fails the last
    error is surfaced.
    """

    def __init__(self, providers: ProviderRegistry):
        self.providers = providers

    async def dispatch(
        self,
        chain: Sequence[ModelProvider],
        task_type: str,
        params: CallParams,
    ) -> GatewayResponse:
        last_error: Exception | None = None

        for provider in chain:
            logger.info("Trying provider", provider=provider.value, task_type=task_type)
            start_time = time.monotonic()

            try:
                adapter = self.providers.get(provider)
                if adapter is None:
                    raise ProviderUnavailable(provider.value, f"Unknown provider: {provider.value}")

                result = await adapter.call(task_type, params)
            except Exception as e:
                last_error = e
                metrics.provider_attempts_total.labels(provider=provider.value, outcome="failure").inc()
                logger.warning(
                    "Provider failed",
                    provider=provider.value,
                    task_type=task_type,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            metrics.provider_latency_seconds.labels(provider=provider.value).observe(
                time.monotonic() - start_time
            )
            metrics.provider_attempts_total.labels(provider=provider.value, outcome="success").inc()
            logger.info(
                "Provider succeeded",
                provider=provider.value,
                model=result.model,
                task_type=task_type,
            )
            return result

        raise AllProvidersFailed(last_error) from last_error
