"""
Allocation Analyst Tool: Target Resolver

Maps a risk profile to its target tier allocation.
"""

from __future__ import annotations

import logging

from allocation_agents.exceptions import TargetTableError
from allocation_agents.schemas.allocation_output import (
    TARGET_ALLOCATIONS,
    TIER_ORDER,
    AllocationVector,
    RiskProfile,
    TierAllocation,
)

logger = logging.getLogger(__name__)


def resolve_targets(
    profile: RiskProfile,
    total_value_usd: float = 0.0,
) -> AllocationVector:
    """
    Target allocation vector for a risk profile.

    When total_value_usd is given, each tier's value_usd is the dollar
    amount it should hold at target; otherwise values are 0.
    """
    row = TARGET_ALLOCATIONS[RiskProfile(profile)]
    allocations = {
        tier: TierAllocation(
            percentage=row[tier],
            value_usd=row[tier] * total_value_usd / 100.0 if total_value_usd > 0 else 0.0,
        )
        for tier in TIER_ORDER
    }
    return AllocationVector(
        allocations=allocations,
        total_value_usd=max(total_value_usd, 0.0),
        is_empty=False,
    )


def validate_target_table(
    table: dict | None = None,
) -> None:
    """
    Check every profile row covers all tiers and sums to exactly 100.

    Raises:
        TargetTableError: on the first bad row.
    """
    table = TARGET_ALLOCATIONS if table is None else table
    for profile in RiskProfile:
        row = table.get(profile)
        if row is None:
            raise TargetTableError(f"No target allocation for {profile.value}")
        missing = [t.value for t in TIER_ORDER if t not in row]
        if missing:
            raise TargetTableError(f"{profile.value} targets missing tiers: {missing}")
        total = sum(row.values())
        if total != 100:
            raise TargetTableError(
                f"{profile.value} targets sum to {total}, expected 100"
            )
    logger.debug(f"Target table validated: {len(table)} profiles")
