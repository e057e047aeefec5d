"""
Allocation Analyst — Output Schema

Output contract for the allocation analysis.
Describes holdings, current/target tier allocation vectors, per-tier
deviations, rebalancing actions and the final AnalysisResult consumed
by the dashboard.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from allocation_agents.config.constants import (
    ACTIONABLE_DEVIATION_THRESHOLD,
    BALANCED_DEVIATION_THRESHOLD,
    PERCENT_SUM_TOLERANCE,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Tier(str, Enum):
    CORE = "CORE"
    SATELLITE = "SATELLITE"
    SPECULATIVE = "SPECULATIVE"
    STRATEGIC_RESERVE = "STRATEGIC_RESERVE"


class RiskProfile(str, Enum):
    CONSERVATIVE = "CONSERVATIVE"
    BALANCED = "BALANCED"
    AGGRESSIVE = "AGGRESSIVE"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Canonical display/iteration order
TIER_ORDER: tuple[Tier, ...] = (
    Tier.CORE,
    Tier.SATELLITE,
    Tier.SPECULATIVE,
    Tier.STRATEGIC_RESERVE,
)

TIER_LABELS: dict[Tier, str] = {
    Tier.CORE: "Core",
    Tier.SATELLITE: "Satellite",
    Tier.SPECULATIVE: "Speculative",
    Tier.STRATEGIC_RESERVE: "Strategic Reserve",
}

# Target allocation % by risk profile. Every row sums to exactly 100.
TARGET_ALLOCATIONS: dict[RiskProfile, dict[Tier, float]] = {
    RiskProfile.CONSERVATIVE: {
        Tier.CORE: 60.0,
        Tier.SATELLITE: 25.0,
        Tier.SPECULATIVE: 5.0,
        Tier.STRATEGIC_RESERVE: 10.0,
    },
    RiskProfile.BALANCED: {
        Tier.CORE: 40.0,
        Tier.SATELLITE: 35.0,
        Tier.SPECULATIVE: 15.0,
        Tier.STRATEGIC_RESERVE: 10.0,
    },
    RiskProfile.AGGRESSIVE: {
        Tier.CORE: 20.0,
        Tier.SATELLITE: 40.0,
        Tier.SPECULATIVE: 35.0,
        Tier.STRATEGIC_RESERVE: 5.0,
    },
}

VALID_ACTIONS = ("increase", "decrease")
VALID_PRIORITIES = ("HIGH", "MEDIUM", "LOW")
VALID_DEVIATION_STATUS = ("over", "under", "aligned")


def deviation_status(deviation: float) -> str:
    """over / under / aligned using the actionable band."""
    if deviation > ACTIONABLE_DEVIATION_THRESHOLD:
        return "over"
    if deviation < -ACTIONABLE_DEVIATION_THRESHOLD:
        return "under"
    return "aligned"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class Holding(BaseModel):
    """One asset balance as reported by the exchange sync."""

    symbol: str = Field(..., min_length=1, max_length=20)
    value_usd: float = Field(..., ge=0.0, allow_inf_nan=False)
    tier: Optional[Tier] = Field(
        None, description="Risk tier; classified from the symbol when omitted"
    )

    @field_validator("symbol")
    @classmethod
    def symbol_uppercase(cls, v: str) -> str:
        return v.strip().upper()


# ---------------------------------------------------------------------------
# Allocation vectors
# ---------------------------------------------------------------------------

class TierAllocation(BaseModel):
    """Share of one tier in an allocation vector."""

    percentage: float = Field(..., ge=0.0, le=100.0)
    value_usd: float = Field(..., ge=0.0)


class AllocationVector(BaseModel):
    """Tier -> allocation for either the current or the target portfolio."""

    allocations: Dict[Tier, TierAllocation] = Field(default_factory=dict)
    total_value_usd: float = Field(0.0, ge=0.0)
    is_empty: bool = Field(
        False, description="True when there is no value to distribute"
    )

    @model_validator(mode="after")
    def validate_percent_sum(self) -> "AllocationVector":
        """Non-empty vectors sum to 100; empty vectors are all zero."""
        total_pct = sum(a.percentage for a in self.allocations.values())
        if self.is_empty:
            if total_pct != 0.0:
                raise ValueError(
                    f"Empty allocation vector must be all 0%, got {total_pct:.6f}%"
                )
        elif self.allocations and abs(total_pct - 100.0) > PERCENT_SUM_TOLERANCE:
            raise ValueError(
                f"Allocation percentages sum to {total_pct:.6f}, expected 100"
            )
        return self

    def percentage(self, tier: Tier) -> float:
        """Percentage for a tier, 0.0 when the tier is absent."""
        alloc = self.allocations.get(tier)
        return alloc.percentage if alloc else 0.0

    def value(self, tier: Tier) -> float:
        alloc = self.allocations.get(tier)
        return alloc.value_usd if alloc else 0.0


# ---------------------------------------------------------------------------
# Deviations
# ---------------------------------------------------------------------------

class DeviationEntry(BaseModel):
    """Current vs target for one tier. Positive deviation = over-allocated."""

    tier: Tier
    current_percentage: float = Field(..., ge=0.0, le=100.0)
    target_percentage: float = Field(..., ge=0.0, le=100.0)
    deviation: float = Field(..., ge=-100.0, le=100.0)
    value_usd: float = Field(..., ge=0.0)
    status: Literal["over", "under", "aligned"]

    @model_validator(mode="after")
    def validate_deviation(self) -> "DeviationEntry":
        """deviation == current - target and status matches it."""
        expected = self.current_percentage - self.target_percentage
        if abs(self.deviation - expected) > PERCENT_SUM_TOLERANCE:
            raise ValueError(
                f"{self.tier.value}: deviation {self.deviation} != "
                f"current {self.current_percentage} - target {self.target_percentage}"
            )
        if self.status != deviation_status(self.deviation):
            raise ValueError(
                f"{self.tier.value}: status '{self.status}' inconsistent "
                f"with deviation {self.deviation:+.2f}"
            )
        return self


class DeviationReport(BaseModel):
    """Output of the deviation analyzer."""

    entries: List[DeviationEntry] = Field(default_factory=list)
    overall_deviation: float = Field(..., ge=0.0)
    is_well_balanced: bool


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class RebalancingAction(BaseModel):
    """A suggested increase/decrease for one tier."""

    action: Literal["increase", "decrease"]
    tier: Tier
    current: float = Field(..., ge=0.0, le=100.0)
    target: float = Field(..., ge=0.0, le=100.0)
    suggested_adjustment: float = Field(..., gt=0.0, description="Percentage points")
    priority: Literal["HIGH", "MEDIUM", "LOW"] = "LOW"
    trade_value_usd: Optional[float] = Field(
        None, ge=0.0, description="USD amount to buy/sell for this adjustment"
    )

    @model_validator(mode="after")
    def validate_direction(self) -> "RebalancingAction":
        """decrease only when over target, increase only when under."""
        if self.action == "decrease" and self.current <= self.target:
            raise ValueError(
                f"{self.tier.value}: decrease requires current > target "
                f"({self.current} vs {self.target})"
            )
        if self.action == "increase" and self.current >= self.target:
            raise ValueError(
                f"{self.tier.value}: increase requires current < target "
                f"({self.current} vs {self.target})"
            )
        return self


# ---------------------------------------------------------------------------
# Top-level result
# ---------------------------------------------------------------------------

class AnalysisResult(BaseModel):
    """Top-level output contract rendered by the dashboard."""

    risk_profile: RiskProfile
    current_allocation: List[DeviationEntry] = Field(default_factory=list)
    overall_deviation: float = Field(..., ge=0.0)
    is_well_balanced: bool
    recommendations: List[str] = Field(default_factory=list)
    rebalancing_actions: List[RebalancingAction] = Field(default_factory=list)
    total_value_usd: float = Field(0.0, ge=0.0)
    assets_held: int = Field(0, ge=0)

    @model_validator(mode="after")
    def validate_balance_verdict(self) -> "AnalysisResult":
        """A balanced verdict never exceeds the tolerance band."""
        if self.is_well_balanced and self.overall_deviation > BALANCED_DEVIATION_THRESHOLD:
            raise ValueError(
                f"is_well_balanced=True but overall_deviation "
                f"{self.overall_deviation:.2f} > {BALANCED_DEVIATION_THRESHOLD}"
            )
        return self

    @model_validator(mode="after")
    def validate_action_order(self) -> "AnalysisResult":
        """Actions are ordered most urgent first."""
        adjustments = [a.suggested_adjustment for a in self.rebalancing_actions]
        if adjustments != sorted(adjustments, reverse=True):
            raise ValueError(
                "rebalancing_actions must be sorted by suggested_adjustment descending"
            )
        return self
