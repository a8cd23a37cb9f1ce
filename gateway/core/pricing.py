"""
Token Cost Engine
=================
Per-model cost-per-1K-token rates with per-provider default rates.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog
import yaml

from gateway.config import settings

logger = structlog.get_logger()

DEFAULT_PRICING: dict[str, Any] = {
    "models": {
        "sonar": 0.001,
        "sonar-pro": 0.003,
        "google/gemini-2.5-flash-lite": 0.0001,
        "google/gemini-2.5-flash": 0.0003,
        "google/gemini-2.5-pro": 0.003,
        "google/gemini-3-pro-preview": 0.006,
    },
    "defaults": {
        "perplexity": 0.001,
        "gemini": 0.0003,
        "openai": 0.003,
        "claude": 0.003,
    },
    "fallback_rate": 0.003,
}


class PricingEngine:
    """
    Token pricing engine.

    Rates are read once at construction, either from a mapping passed in by
    the caller or from the YAML file named in settings.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        pricing_data: Optional[Mapping[str, Any]] = None,
    ):
        self.config_path = config_path or settings.pricing_config_path
        if pricing_data is not None:
            self._pricing_data = dict(pricing_data)
        else:
            self._pricing_data = self._load_pricing()

    def _load_pricing(self) -> dict[str, Any]:
        """Load pricing configuration from YAML file."""
        config_file = Path(self.config_path)

        if not config_file.exists():
            logger.warning("Pricing config not found, using defaults", path=self.config_path)
            return DEFAULT_PRICING

        try:
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
            logger.info("Loaded pricing configuration", path=self.config_path)
            return data
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load pricing config", error=str(e))
            return DEFAULT_PRICING

    def get_rate(self, provider: str, model: str) -> Decimal:
        """
        Cost per 1K tokens for a model.

        Unknown models use the provider's default rate; unknown providers use
        the global fallback rate.
        """
        models = self._pricing_data.get("models", {})
        if model in models:
            return Decimal(str(models[model]))

        defaults = self._pricing_data.get("defaults", {})
        if provider in defaults:
            return Decimal(str(defaults[provider]))

        return Decimal(str(self._pricing_data.get("fallback_rate", DEFAULT_PRICING["fallback_rate"])))

    def calculate_cost(self, provider: str, model: str, total_tokens: int) -> Decimal:
        """
        Calculate cost in USD for a completed call.

        Args:
            provider: Provider that answered
            model: Model identifier actually used
            total_tokens: Prompt plus completion tokens

        Returns:
            ``(total_tokens / 1000) * rate``
        """
        rate = self.get_rate(provider, model)
        cost = (Decimal(total_tokens) / Decimal("1000")) * rate
        return cost.quantize(Decimal("0.0000000001"))

    def get_models(self) -> dict[str, Decimal]:
        return {
            model: Decimal(str(rate))
            for model, rate in sorted(self._pricing_data.get("models", {}).items())
        }


@lru_cache
def get_pricing_engine() -> PricingEngine:
    """Get cached pricing engine instance."""
    return PricingEngine()
