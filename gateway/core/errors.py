"""
Gateway Errors
==============
Exception hierarchy shared by adapters, the executor and the API layer.
"""

from typing import Any


class GatewayError(Exception):
    """Base class for all gateway errors."""


class ConfigurationError(GatewayError):
    """A provider cannot be used because of missing configuration."""


class ProviderUnavailable(ConfigurationError):
    """Raised by an adapter whose credential is absent or which is scaffolded only."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


class ProviderError(GatewayError):
    """A provider answered with a non-2xx status."""

    def __init__(self, provider: str, status_code: int, body: str, label: str | None = None):
        super().__init__(f"{label or provider} API error: {status_code} - {body}")
        self.provider = provider
        self.status_code = status_code
        self.body = body


class LimitExceeded(GatewayError):
    """Admission control refused the request."""

    def __init__(self, kind: str, entity_id: str, reason: str, status: Any):
        super().__init__(reason)
        self.kind = kind
        self.entity_id = entity_id
        self.reason = reason
        self.status = status


class AllProvidersFailed(GatewayError):
    """Every provider in the chain failed; carries the last error."""

    def __init__(self, last_error: BaseException | None):
        super().__init__(str(last_error) if last_error else "All providers failed")
        self.last_error = last_error
