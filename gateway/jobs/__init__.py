"""
Background Jobs
================
Off-request-path usage persistence.
"""

from gateway.jobs.usage_worker import UsageWorker

__all__ = ["UsageWorker"]
