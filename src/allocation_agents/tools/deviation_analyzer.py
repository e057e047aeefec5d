"""
Allocation Analyst Tool: Deviation Analyzer

Pure functions comparing the current allocation vector against the
target vector:
- per-tier signed deviation (current - target)
- overall deviation as mean absolute deviation
- balanced verdict against BALANCED_DEVIATION_THRESHOLD

Overall deviation is unweighted: "average percentage points off target".
"""

from __future__ import annotations

import logging
from typing import List

from allocation_agents.config.constants import BALANCED_DEVIATION_THRESHOLD
from allocation_agents.schemas.allocation_output import (
    TIER_ORDER,
    AllocationVector,
    DeviationEntry,
    DeviationReport,
    deviation_status,
)

logger = logging.getLogger(__name__)


def is_balanced(overall_deviation: float) -> bool:
    """True iff overall deviation is within the tolerance band (inclusive)."""
    return overall_deviation <= BALANCED_DEVIATION_THRESHOLD


def compute_overall_deviation(entries: List[DeviationEntry]) -> float:
    """Mean absolute deviation across entries; 0.0 for no entries."""
    if not entries:
        return 0.0
    return sum(abs(e.deviation) for e in entries) / len(entries)


def compute_deviation_entries(
    current: AllocationVector,
    target: AllocationVector,
) -> List[DeviationEntry]:
    """
    One entry per tier present in either vector, in canonical tier order.
    Tiers missing from a vector count as 0%.
    """
    tiers = set(current.allocations) | set(target.allocations)
    entries: list[DeviationEntry] = []
    for tier in TIER_ORDER:
        if tier not in tiers:
            continue
        cur = current.percentage(tier)
        tgt = target.percentage(tier)
        dev = cur - tgt
        entries.append(DeviationEntry(
            tier=tier,
            current_percentage=cur,
            target_percentage=tgt,
            deviation=dev,
            value_usd=current.value(tier),
            status=deviation_status(dev),
        ))
    return entries


def analyze_deviation(
    current: AllocationVector,
    target: AllocationVector,
) -> DeviationReport:
    """
    Compare current vs target allocation.

    An empty current vector (no value held) is never balanced, whatever
    the numeric deviation.
    """
    entries = compute_deviation_entries(current, target)
    overall = compute_overall_deviation(entries)
    balanced = is_balanced(overall) and not current.is_empty

    logger.debug(
        f"Deviation: {len(entries)} tiers, overall={overall:.2f}, "
        f"balanced={balanced}"
    )
    return DeviationReport(
        entries=entries,
        overall_deviation=overall,
        is_well_balanced=balanced,
    )
