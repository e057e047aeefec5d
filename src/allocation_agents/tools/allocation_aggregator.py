"""
Allocation Analyst Tool: Allocation Aggregator

Pure functions that turn a list of holdings into the current
AllocationVector (value and % of portfolio per tier).

No LLM, no file I/O.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from allocation_agents.schemas.allocation_output import (
    TIER_ORDER,
    AllocationVector,
    Holding,
    Tier,
    TierAllocation,
)
from allocation_agents.tools.tier_classifier import resolve_tier

logger = logging.getLogger(__name__)


def sum_tier_values(holdings: List[Holding]) -> Dict[Tier, float]:
    """USD value per tier for every tier that has at least one holding."""
    tier_values: dict[Tier, float] = {}
    for h in holdings:
        tier = resolve_tier(h)
        tier_values[tier] = tier_values.get(tier, 0.0) + h.value_usd
    return tier_values


def count_assets_held(holdings: List[Holding]) -> int:
    """Number of holdings with a positive balance."""
    return sum(1 for h in holdings if h.value_usd > 0)


def aggregate(holdings: List[Holding]) -> AllocationVector:
    """
    Build the current allocation vector.

    percentage = (tier_value / total) * 100 when total > 0, else 0 and the
    vector is flagged empty. Zero-value holdings keep their tier in the
    vector at 0%.
    """
    tier_values = sum_tier_values(holdings)
    total = sum(tier_values.values())

    allocations: dict[Tier, TierAllocation] = {}
    for tier in TIER_ORDER:
        if tier not in tier_values:
            continue
        value = tier_values[tier]
        pct = (value / total) * 100.0 if total > 0 else 0.0
        allocations[tier] = TierAllocation(percentage=pct, value_usd=value)

    return AllocationVector(
        allocations=allocations,
        total_value_usd=total,
        is_empty=total <= 0,
    )
