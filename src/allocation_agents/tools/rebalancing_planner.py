"""
Allocation Analyst Tool: Rebalancing Planner

Pure functions turning tier deviations into an ordered list of
increase/decrease actions. Only tiers outside the actionable band
(±ACTIONABLE_DEVIATION_THRESHOLD) get an action; the most urgent
correction comes first.

No LLM, no file I/O, no order placement.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from crewai.tools import BaseTool
from pydantic import BaseModel, Field, TypeAdapter

from allocation_agents.config.constants import (
    ACTIONABLE_DEVIATION_THRESHOLD,
    PRIORITY_HIGH_MIN,
    PRIORITY_MEDIUM_MIN,
)
from allocation_agents.schemas.allocation_output import (
    DeviationEntry,
    Holding,
    RebalancingAction,
    RiskProfile,
)

logger = logging.getLogger(__name__)


def action_priority(adjustment: float) -> str:
    """
    Urgency bucket for an adjustment (percentage points).

    > 20: HIGH, > 10: MEDIUM, otherwise LOW.
    """
    if adjustment > PRIORITY_HIGH_MIN:
        return "HIGH"
    if adjustment > PRIORITY_MEDIUM_MIN:
        return "MEDIUM"
    return "LOW"


def compute_trade_value(
    adjustment: float,
    total_value_usd: Optional[float],
) -> Optional[float]:
    """Dollar amount to move for an adjustment; None without a portfolio total."""
    if not total_value_usd or total_value_usd <= 0:
        return None
    return round(adjustment * total_value_usd / 100.0, 2)


def generate_actions(
    entries: List[DeviationEntry],
    total_value_usd: Optional[float] = None,
) -> List[RebalancingAction]:
    """
    Actions for every entry with |deviation| > the actionable threshold.

    deviation > +5 -> decrease by deviation
    deviation < -5 -> increase by |deviation|

    Sorted by |deviation| descending; ties keep input order.
    """
    actions: list[RebalancingAction] = []
    for e in entries:
        magnitude = abs(e.deviation)
        if magnitude <= ACTIONABLE_DEVIATION_THRESHOLD:
            continue
        actions.append(RebalancingAction(
            action="decrease" if e.deviation > 0 else "increase",
            tier=e.tier,
            current=e.current_percentage,
            target=e.target_percentage,
            suggested_adjustment=magnitude,
            priority=action_priority(magnitude),
            trade_value_usd=compute_trade_value(magnitude, total_value_usd),
        ))

    actions.sort(key=lambda a: -a.suggested_adjustment)

    if actions:
        logger.debug(
            "Rebalancing actions: "
            + ", ".join(f"{a.action} {a.tier.value} {a.suggested_adjustment:.1f}" for a in actions)
        )
    return actions


# ---------------------------------------------------------------------------
# CrewAI Tool Wrapper
# ---------------------------------------------------------------------------

class RebalancingPlannerInput(BaseModel):
    holdings_json: str = Field(..., description="JSON list of holdings (symbol, value_usd, optional tier)")
    risk_profile: str = Field(..., description="CONSERVATIVE, BALANCED or AGGRESSIVE")


class RebalancingPlannerTool(BaseTool):
    """Compute ordered rebalancing actions for a crypto portfolio."""

    name: str = "rebalancing_planner"
    description: str = (
        "Compare a portfolio's tier allocation with the target for a risk "
        "profile and return increase/decrease actions, most urgent first"
    )
    args_schema: type[BaseModel] = RebalancingPlannerInput

    def _run(self, holdings_json: str, risk_profile: str) -> str:
        from allocation_agents.tools.allocation_aggregator import aggregate
        from allocation_agents.tools.deviation_analyzer import analyze_deviation
        from allocation_agents.tools.target_resolver import resolve_targets

        holdings = TypeAdapter(List[Holding]).validate_json(holdings_json)
        current = aggregate(holdings)
        target = resolve_targets(RiskProfile(risk_profile.strip().upper()), current.total_value_usd)
        report = analyze_deviation(current, target)
        actions = generate_actions(report.entries, current.total_value_usd)
        return json.dumps([a.model_dump(mode="json") for a in actions], indent=2)
