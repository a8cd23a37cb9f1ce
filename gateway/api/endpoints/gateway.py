"""
Gateway Endpoint
================
Single entry point for routed AI requests.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from gateway.api.dependencies import get_gateway_service
from gateway.core.errors import AllProvidersFailed, LimitExceeded
from gateway.schemas.gateway import (
    BlockedLimitResponse,
    ErrorResponse,
    GatewayRequest,
    GatewayResponse,
    LimitUsage,
)
from gateway.schemas.limits import AgentLimitStatus
from gateway.services.gateway import GatewayService

router = APIRouter()
logger = structlog.get_logger()


def blocked_response(error: LimitExceeded) -> JSONResponse:
    """Build the 429 body from the refusing limit status."""
    limit_status = error.status
    cost_cap = (
        limit_status.daily_cost_cap_usd
        if isinstance(limit_status, AgentLimitStatus)
        else None
    )

    body = BlockedLimitResponse(
        message=error.reason,
        usage=LimitUsage(
            runCount=limit_status.run_count,
            totalCost=limit_status.total_cost,
            dailyRunCap=limit_status.daily_run_cap,
            dailyCostCapUsd=cost_cap,
        ),
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=body.model_dump(),
    )


@router.post(
    "",
    response_model=GatewayResponse,
    summary="Route an AI request",
    description="Admission check, provider routing with fallback, and usage tracking",
    responses={
        429: {"model": BlockedLimitResponse},
        500: {"model": ErrorResponse},
    },
)
async def route_request(
    payload: GatewayRequest,
    service: Annotated[GatewayService, Depends(get_gateway_service)],
) -> GatewayResponse | JSONResponse:
    """
    Route a request to the best provider for its task type.

    Returns:
    - 200 with the normalized completion
    - 429 when the agent or workflow is over its daily budget
    - 500 when every provider in the chain failed
    """
    try:
        return await service.handle(payload)
    except LimitExceeded as e:
        return blocked_response(e)
    except AllProvidersFailed as e:
        logger.error("All providers failed", task_type=payload.task_type, error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e)).model_dump(),
        )
    except Exception as e:
        logger.exception("Gateway request failed", task_type=payload.task_type)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e) or "Unknown error").model_dump(),
        )
