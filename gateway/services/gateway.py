"""
Gateway Service
===============
Admission control, routing, fallback dispatch and usage hand-off for one request.
"""

from decimal import Decimal
from typing import Protocol

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.core.errors import LimitExceeded
from gateway.core.pricing import PricingEngine
from gateway.core.routing import TaskRouter
from gateway.schemas.gateway import CallParams, GatewayRequest, GatewayResponse, ModelProvider
from gateway.schemas.limits import AgentLimitStatus
from gateway.schemas.usage import UsageEvent
from gateway.services.dispatch import FallbackExecutor
from gateway.services.limits import LimitService, estimate_cost, would_exceed_cost_ceiling

logger = structlog.get_logger()


class UsageSink(Protocol):
    def submit(self, event: UsageEvent) -> bool:
        ...


class GatewayService:
    """
    Runs one gateway request end to end.

    Steps are strictly sequential. The admission transaction is committed
    before any provider is contacted, so no database connection is held
    while waiting on the network. The admission check and the later usage
    write are separate operations, so concurrent requests for the same agent
    can both pass the check before either is recorded.
    """

    def __init__(
        self,
        session: AsyncSession,
        router: TaskRouter,
        executor: FallbackExecutor,
        usage_sink: UsageSink,
        pricing: PricingEngine,
        enforce_cost_ceiling: bool = False,
    ):
        self.session = session
        self.limits = LimitService(session)
        self.router = router
        self.executor = executor
        self.usage_sink = usage_sink
        self.pricing = pricing
        self.enforce_cost_ceiling = enforce_cost_ceiling

    async def handle(self, request: GatewayRequest) -> GatewayResponse:
        agent_status = await self._admit(request)

        chain = self.router.resolve(
            request.task_type,
            request.preferred_provider,
            request.fallback_providers,
        )

        if agent_status is not None and self.enforce_cost_ceiling:
            await self._check_cost_ceiling(request, chain[0], agent_status)

        # Release the connection before the slow provider calls.
        await self.session.commit()

        result = await self.executor.dispatch(
            chain,
            request.task_type,
            CallParams.from_request(request),
        )

        self._track_usage(request, result)
        return result

    async def _admit(self, request: GatewayRequest) -> AgentLimitStatus | None:
        """Raise LimitExceeded if the agent or workflow is over budget."""
        agent_status = None

        if request.agent_id:
            agent_status = await self.limits.check_agent_limits(
                request.agent_id,
                request.workspace_id,
            )
            if agent_status.blocked:
                await self._block("agent", request.agent_id, agent_status.reason, request, agent_status)

        if request.workflow_id:
            workflow_status = await self.limits.check_workflow_limits(request.workflow_id)
            if workflow_status.blocked:
                await self._block("workflow", request.workflow_id, workflow_status.reason, request, workflow_status)

        return agent_status

    async def _check_cost_ceiling(
        self,
        request: GatewayRequest,
        head: ModelProvider,
        agent_status: AgentLimitStatus,
    ) -> None:
        model = self.router.model_for(head, request.task_type) or ""
        rate: Decimal = self.pricing.get_rate(head.value, model)
        estimated = estimate_cost(request.prompt, request.system_prompt, request.max_tokens, rate)

        if would_exceed_cost_ceiling(estimated, agent_status.cost_ceiling_usd):
            reason = (
                f"Estimated cost ${estimated:.4f} exceeds per-call ceiling "
                f"${agent_status.cost_ceiling_usd:.2f}"
            )
            await self._block("agent", agent_status.agent_id, reason, request, agent_status)

    async def _block(self, kind, entity_id, reason, request: GatewayRequest, status) -> None:
        reason = reason or "Limit exceeded"
        logger.info("Request blocked", kind=kind, entity_id=entity_id, reason=reason)
        await self.limits.record_blocked_run(
            kind,
            entity_id,
            reason,
            user_id=request.user_id,
            workspace_id=request.workspace_id,
        )
        raise LimitExceeded(kind, entity_id, reason, status)

    def _track_usage(self, request: GatewayRequest, result: GatewayResponse) -> None:
        event = UsageEvent(
            provider=result.provider.value,
            model=result.model,
            task_type=request.task_type,
            prompt_tokens=result.usage.prompt_tokens,
            completion_tokens=result.usage.completion_tokens,
            tokens_used=result.usage.total_tokens,
            cost_usd=Decimal(str(result.cost_usd)),
            agent_id=request.agent_id,
            run_id=request.run_id,
            workspace_id=request.workspace_id,
            workflow_id=request.workflow_id,
        )
        self.usage_sink.submit(event)
