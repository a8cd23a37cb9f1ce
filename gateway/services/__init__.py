"""
Business Services
=================
Admission control, fallback dispatch, usage recording and request orchestration.
"""

from gateway.services.dispatch import FallbackExecutor
from gateway.services.gateway import GatewayService
from gateway.services.limits import LimitService, estimate_cost, would_exceed_cost_ceiling
from gateway.services.usage import UsageRecorder

__all__ = [
    "FallbackExecutor",
    "GatewayService",
    "LimitService",
    "UsageRecorder",
    "estimate_cost",
    "would_exceed_cost_ceiling",
]
