"""Cost estimation for generated projects.

A pure function over ``(platform, framework, features)``: a base cost scaled
by platform and framework multipliers plus additive per-feature costs. The
monthly hosting cost grows for persistence and realtime features. All
amounts are returned in cents.
"""

from __future__ import annotations

import math
from typing import Iterable

from pydantic import BaseModel, Field

BASE_COST = 50
BASE_MONTHLY_COST = 10
MONTHLY_FEATURE_INCREMENT = 15

PLATFORM_MULTIPLIERS: dict[str, float] = {
    "web": 1.0,
    "mobile": 1.5,
    "desktop": 1.3,
}

FRAMEWORK_MULTIPLIERS: dict[str, float] = {
    "react": 1.0,
    "nextjs": 1.2,
    "svelte": 0.9,
    "react-native": 1.4,
    "flutter": 1.3,
    "electron": 1.2,
    "tauri": 1.1,
}

FEATURE_COSTS: dict[str, int] = {
    "authentication": 25,
    "database": 30,
    "payments": 50,
    "realtime": 40,
    "analytics": 20,
    "api": 35,
}

MONTHLY_FEATURES = frozenset({"database", "realtime"})


class CostBreakdown(BaseModel):
    base_cost: int = Field(..., description="Unscaled base cost in cents")
    platform_cost: int = Field(..., description="Everything above the base, in cents")
    features: list[str] = Field(default_factory=list)


class CostEstimate(BaseModel):
    """One-time and recurring cost of a project, in cents."""
    estimated_cost: int
    monthly_hosting_cost: int
    breakdown: CostBreakdown


def _to_cents(amount: float) -> int:
    # half-up; round() rounds halves to even
    return math.floor(round(amount * 100, 6) + 0.5)


def estimate_cost(
    platform: str, framework: str, features: Iterable[str] = ()
) -> CostEstimate:
    """Estimate the one-time and monthly cost of a project.

    Unknown platforms and frameworks use a multiplier of 1; unknown features
    cost nothing.

    Example::

        >>> estimate_cost("mobile", "flutter", ["database", "analytics"]).estimated_cost
        14750
    """
    platform = getattr(platform, "value", platform)
    feature_list = list(features)

    cost = float(BASE_COST)
    cost *= PLATFORM_MULTIPLIERS.get(platform, 1.0)
    cost *= FRAMEWORK_MULTIPLIERS.get(framework, 1.0)

    monthly = float(BASE_MONTHLY_COST)
    for feature in feature_list:
        cost += FEATURE_COSTS.get(feature, 0)
        if feature in MONTHLY_FEATURES:
            monthly += MONTHLY_FEATURE_INCREMENT

    return CostEstimate(
        estimated_cost=_to_cents(cost),
        monthly_hosting_cost=_to_cents(monthly),
        breakdown=CostBreakdown(
            base_cost=BASE_COST * 100,
            platform_cost=_to_cents(cost - BASE_COST),
            features=feature_list,
        ),
    )
