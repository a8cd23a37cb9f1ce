"""
Pricing Engine Tests
====================
Tests for the token cost calculation engine.
"""

from decimal import Decimal

import pytest

from gateway.core.pricing import DEFAULT_PRICING, PricingEngine
from gateway.services.limits import estimate_cost, would_exceed_cost_ceiling


class TestPricingEngine:
    """Tests for the pricing engine."""

    @pytest.fixture
    def engine(self) -> PricingEngine:
        """Create a pricing engine with default config."""
        return PricingEngine(pricing_data=DEFAULT_PRICING)

    def test_known_model_rate(self, engine: PricingEngine):
        """Test the per-model rate is used when the model is known."""
        assert engine.get_rate("gemini", "google/gemini-2.5-pro") == Decimal("0.003")
        assert engine.get_rate("perplexity", "sonar") == Decimal("0.001")

    def test_unknown_model_uses_provider_default(self, engine: PricingEngine):
        """Test that unknown models use the provider's default rate."""
        assert engine.get_rate("gemini", "google/unknown-model") == Decimal("0.0003")

    def test_unknown_provider_uses_fallback_rate(self, engine: PricingEngine):
        """Test that unknown providers use the global fallback rate."""
        assert engine.get_rate("mistral", "mistral-large") == Decimal("0.003")

    def test_cost_calculation(self, engine: PricingEngine):
        """Test cost is tokens / 1000 times the rate."""
        cost = engine.calculate_cost("perplexity", "sonar", total_tokens=500)

        assert isinstance(cost, Decimal)
        assert cost == Decimal("0.0005")

    def test_zero_tokens_zero_cost(self, engine: PricingEngine):
        """Test that zero tokens result in zero cost."""
        cost = engine.calculate_cost("gemini", "google/gemini-2.5-flash", total_tokens=0)
        assert cost == Decimal("0")

    def test_get_models(self, engine: PricingEngine):
        """Test listing configured model rates."""
        models = engine.get_models()

        assert "sonar" in models
        assert models["google/gemini-2.5-flash-lite"] == Decimal("0.0001")

    def test_load_from_yaml(self, tmp_path):
        """Test rates are read from a YAML file."""
        config = tmp_path / "pricing.yaml"
        config.write_text(
            "models:\n"
            "  sonar: 0.002\n"
            "defaults:\n"
            "  perplexity: 0.005\n"
            "fallback_rate: 0.01\n"
        )

        engine = PricingEngine(config_path=str(config))

        assert engine.get_rate("perplexity", "sonar") == Decimal("0.002")
        assert engine.get_rate("perplexity", "sonar-huge") == Decimal("0.005")
        assert engine.get_rate("openai", "gpt") == Decimal("0.01")

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test a missing pricing file falls back to built-in rates."""
        engine = PricingEngine(config_path=str(tmp_path / "missing.yaml"))
        assert engine.get_rate("perplexity", "sonar") == Decimal("0.001")


class TestCostCeiling:
    """Tests for the per-call cost screen."""

    def test_estimate_exceeding_ceiling(self):
        """Test an estimate above the ceiling is rejected."""
        assert would_exceed_cost_ceiling(0.25, 0.10) is True

    def test_estimate_at_ceiling_passes(self):
        """Test the comparison is strict."""
        assert would_exceed_cost_ceiling(0.10, 0.10) is False

    @pytest.mark.parametrize("ceiling", [None, 0, -1.0])
    def test_missing_ceiling_never_blocks(self, ceiling):
        """Test a missing or non-positive ceiling disables the screen."""
        assert would_exceed_cost_ceiling(100.0, ceiling) is False

    def test_estimate_cost(self):
        """Test the rough estimate counts prompt characters and max tokens."""
        # 400 chars -> 100 tokens, plus 900 max tokens = 1000 tokens
        estimated = estimate_cost("x" * 400, None, 900, Decimal("0.003"))
        assert estimated == pytest.approx(0.003)

    def test_estimate_cost_includes_system_prompt(self):
        """Test the system prompt counts towards the estimate."""
        without = estimate_cost("x" * 400, None, 100, Decimal("0.001"))
        with_system = estimate_cost("x" * 400, "y" * 400, 100, Decimal("0.001"))
        assert with_system > without
