"""Unit tests for cost estimation (appforge.cost)."""

from __future__ import annotations

import pytest

from appforge.cost import (
    BASE_COST,
    BASE_MONTHLY_COST,
    FEATURE_COSTS,
    FRAMEWORK_MULTIPLIERS,
    MONTHLY_FEATURE_INCREMENT,
    PLATFORM_MULTIPLIERS,
    estimate_cost,
)
from appforge.models import Platform


class TestEstimateCost:
    @pytest.mark.unit
    def test_flutter_database_analytics(self):
        estimate = estimate_cost("mobile", "flutter", ["database", "analytics"])
        expected = (
            BASE_COST * PLATFORM_MULTIPLIERS["mobile"] * FRAMEWORK_MULTIPLIERS["flutter"]
            + FEATURE_COSTS["database"]
            + FEATURE_COSTS["analytics"]
        )
        assert estimate.estimated_cost == round(expected * 100) == 14750
        assert estimate.monthly_hosting_cost == (BASE_MONTHLY_COST + MONTHLY_FEATURE_INCREMENT) * 100
        assert estimate.monthly_hosting_cost == 2500

    @pytest.mark.unit
    def test_base_only(self):
        estimate = estimate_cost("web", "react")
        assert estimate.estimated_cost == 5000
        assert estimate.monthly_hosting_cost == 1000
        assert estimate.breakdown.base_cost == 5000
        assert estimate.breakdown.platform_cost == 0
        assert estimate.breakdown.features == []

    @pytest.mark.unit
    def test_accepts_platform_enum(self):
        assert estimate_cost(Platform.DESKTOP, "tauri") == estimate_cost("desktop", "tauri")

    @pytest.mark.unit
    def test_realtime_and_database_both_add_monthly(self):
        estimate = estimate_cost("web", "nextjs", ["database", "realtime"])
        assert estimate.monthly_hosting_cost == 4000

    @pytest.mark.unit
    def test_discount_multiplier_gives_negative_platform_cost(self):
        estimate = estimate_cost("web", "svelte")
        assert estimate.estimated_cost == 4500
        assert estimate.breakdown.platform_cost == -500

    @pytest.mark.unit
    def test_unknown_values_are_neutral(self):
        estimate = estimate_cost("tv", "qt", ["telepathy"])
        assert estimate.estimated_cost == 5000
        assert estimate.monthly_hosting_cost == 1000

    @pytest.mark.unit
    def test_desktop_electron_all_features(self):
        features = ["authentication", "database", "payments", "realtime", "analytics", "api"]
        estimate = estimate_cost("desktop", "electron", features)
        # 50 * 1.3 * 1.2 = 78, plus 200 in feature costs
        assert estimate.estimated_cost == 27800
        assert estimate.monthly_hosting_cost == 4000

    @pytest.mark.unit
    def test_deterministic(self):
        first = estimate_cost("mobile", "react-native", ["payments"])
        second = estimate_cost("mobile", "react-native", ["payments"])
        assert first == second
        # 50 * 1.5 * 1.4 = 105, plus 50
        assert first.estimated_cost == 15500
