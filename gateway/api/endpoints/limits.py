"""
Limit Endpoints
===============
Read-only views of today's admission status for agents and workflows.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from gateway.api.dependencies import get_limit_service
from gateway.schemas.limits import AgentLimitStatus, WorkflowLimitStatus
from gateway.services.limits import LimitService

router = APIRouter()
logger = structlog.get_logger()


@router.get(
    "/agents/{agent_id}/limits",
    response_model=AgentLimitStatus,
    summary="Get agent limit status",
    description="Today's runs and cost for an agent compared against its caps",
)
async def get_agent_limits(
    agent_id: str,
    service: Annotated[LimitService, Depends(get_limit_service)],
    workspace_id: Annotated[str | None, Query(description="Restrict usage to a workspace")] = None,
) -> AgentLimitStatus:
    """
    Get the agent's limit snapshot for the current UTC day.

    Unknown agents are reported as blocked with fallback caps.
    """
    try:
        return await service.check_agent_limits(agent_id, workspace_id)
    except Exception as e:
        logger.error("Failed to check agent limits", agent_id=agent_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check agent limits",
        ) from e


@router.get(
    "/workflows/{workflow_id}/limits",
    response_model=WorkflowLimitStatus,
    summary="Get workflow limit status",
)
async def get_workflow_limits(
    workflow_id: str,
    service: Annotated[LimitService, Depends(get_limit_service)],
) -> WorkflowLimitStatus:
    try:
        return await service.check_workflow_limits(workflow_id)
    except Exception as e:
        logger.error("Failed to check workflow limits", workflow_id=workflow_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check workflow limits",
        ) from e
