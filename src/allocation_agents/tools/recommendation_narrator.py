"""
Allocation Analyst Tool: Recommendation Narrator

Deterministic advisories built from the numeric deviation findings.
Each rule is evaluated independently and contributes at most one message:

1. overall deviation > SIGNIFICANT_DEVIATION_THRESHOLD
2. |CORE deviation| > CORE_DEVIATION_WARNING (over/under wording)
3. SPECULATIVE share > SPECULATIVE_EXPOSURE_MAX
4. tiers with 0% held but a positive target

No LLM, no randomness.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from allocation_agents.config.constants import (
    CORE_DEVIATION_WARNING,
    SIGNIFICANT_DEVIATION_THRESHOLD,
    SPECULATIVE_EXPOSURE_MAX,
)
from allocation_agents.schemas.allocation_output import (
    TIER_LABELS,
    DeviationEntry,
    Tier,
)

logger = logging.getLogger(__name__)


def _find_entry(entries: List[DeviationEntry], tier: Tier) -> Optional[DeviationEntry]:
    for e in entries:
        if e.tier == tier:
            return e
    return None


def significant_deviation_message(overall_deviation: float) -> Optional[str]:
    if overall_deviation <= SIGNIFICANT_DEVIATION_THRESHOLD:
        return None
    return (
        f"Portfolio deviates significantly from its target allocation "
        f"(average {overall_deviation:.1f} percentage points off). "
        f"Consider rebalancing."
    )


def core_allocation_message(entries: List[DeviationEntry]) -> Optional[str]:
    core = _find_entry(entries, Tier.CORE)
    deviation = core.deviation if core else 0.0
    if abs(deviation) <= CORE_DEVIATION_WARNING:
        return None
    if deviation > 0:
        return (
            f"Core holdings are over-allocated by {abs(deviation):.1f} percentage "
            f"points; consider moving some value into other tiers."
        )
    return (
        f"Core holdings are under-allocated by {abs(deviation):.1f} percentage "
        f"points; consider strengthening large-cap positions."
    )


def speculative_exposure_message(entries: List[DeviationEntry]) -> Optional[str]:
    speculative = _find_entry(entries, Tier.SPECULATIVE)
    if speculative is None or speculative.current_percentage <= SPECULATIVE_EXPOSURE_MAX:
        return None
    return (
        f"High speculative exposure: {speculative.current_percentage:.1f}% of the "
        f"portfolio sits in speculative assets (above {SPECULATIVE_EXPOSURE_MAX:.0f}%)."
    )


def missing_tiers_message(entries: List[DeviationEntry]) -> Optional[str]:
    missing = [
        e.tier for e in entries
        if e.current_percentage == 0 and e.target_percentage > 0
    ]
    if not missing:
        return None
    names = ", ".join(f"{TIER_LABELS[t]} ({t.value})" for t in missing)
    return f"Missing allocation tiers: {names}. Diversify into these tiers to reach your target."


def narrate(
    entries: List[DeviationEntry],
    overall_deviation: float,
) -> List[str]:
    """Advisory messages in rule order; empty when nothing needs attention."""
    candidates = [
        significant_deviation_message(overall_deviation),
        core_allocation_message(entries),
        speculative_exposure_message(entries),
        missing_tiers_message(entries),
    ]
    messages = [m for m in candidates if m is not None]
    logger.debug(f"Narrator produced {len(messages)} recommendation(s)")
    return messages
