"""
Allocation Analyst
Portfolio allocation deviation & rebalancing

Receives synced holdings and the user's risk profile.
Produces AnalysisResult with:
- Current vs target allocation per tier
- Overall deviation and balanced verdict
- Ordered rebalancing actions
- Advisory recommendations

This agent reviews allocations. It never places trades or fetches data.
"""

from __future__ import annotations

import logging
from typing import List

from crewai import Agent, Task

from allocation_agents.schemas.allocation_output import (
    AnalysisResult,
    Holding,
    RiskProfile,
)
from allocation_agents.tools.allocation_aggregator import aggregate, count_assets_held
from allocation_agents.tools.deviation_analyzer import analyze_deviation
from allocation_agents.tools.rebalancing_planner import RebalancingPlannerTool, generate_actions
from allocation_agents.tools.recommendation_narrator import narrate
from allocation_agents.tools.target_resolver import resolve_targets
from allocation_agents.tools.tier_classifier import TierClassifierTool

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CrewAI Agent Builder
# ---------------------------------------------------------------------------

def build_allocation_agent() -> Agent:
    """Create the Allocation Analyst Agent."""
    return Agent(
        role="Portfolio Allocation Analyst",
        goal=(
            "Compare a crypto portfolio's tier allocation with the target "
            "for the user's risk profile, judge whether it is balanced, and "
            "list the corrective actions in order of urgency."
        ),
        backstory=(
            "You are a disciplined allocation analyst. You classify assets "
            "into CORE, SATELLITE, SPECULATIVE and STRATEGIC_RESERVE tiers, "
            "measure how far each tier is from target, and recommend only "
            "material corrections. You never place trades."
        ),
        tools=[TierClassifierTool(), RebalancingPlannerTool()],
        verbose=True,
        allow_delegation=False,
        max_iter=10,
    )


def build_allocation_task(
    agent: Agent,
    holdings_json: str = "",
    risk_profile: str = "BALANCED",
) -> Task:
    """Create the Allocation Analysis task."""
    return Task(
        description=f"""Analyze portfolio allocation for a {risk_profile} risk profile.

STEPS:
1. Classify every holding into a risk tier (unknown symbols -> SATELLITE)
2. Compute current % per tier from USD values
3. Resolve target % per tier for the risk profile
4. Compute deviation = current - target per tier
5. Overall deviation = mean |deviation|; balanced when <= 10 points
6. Actions for tiers more than 5 points off, most urgent first

Holdings data:
{holdings_json}
""",
        expected_output=(
            "JSON with risk_profile, current_allocation, overall_deviation, "
            "is_well_balanced, recommendations, rebalancing_actions."
        ),
        agent=agent,
    )


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_allocation_pipeline(
    holdings: List[Holding],
    risk_profile: RiskProfile,
) -> AnalysisResult:
    """
    Run the deterministic allocation analysis without LLM.

    Args:
        holdings: Holdings from the exchange sync (not mutated)
        risk_profile: User's declared risk profile

    Returns:
        Validated AnalysisResult
    """
    risk_profile = RiskProfile(risk_profile)
    logger.info(
        f"[Allocation] Running analysis for {len(holdings)} holdings, "
        f"profile={risk_profile.value} ..."
    )

    # Step 1-2: classify + aggregate current allocation
    current = aggregate(holdings)

    # Step 3: target allocation
    target = resolve_targets(risk_profile, current.total_value_usd)

    # Step 4: deviations + verdict
    report = analyze_deviation(current, target)

    # Step 5: actions
    actions = generate_actions(report.entries, current.total_value_usd)

    # Step 6: advisories
    recommendations = narrate(report.entries, report.overall_deviation)

    result = AnalysisResult(
        risk_profile=risk_profile,
        current_allocation=report.entries,
        overall_deviation=report.overall_deviation,
        is_well_balanced=report.is_well_balanced,
        recommendations=recommendations,
        rebalancing_actions=actions,
        total_value_usd=current.total_value_usd,
        assets_held=count_assets_held(holdings),
    )

    logger.info(
        f"[Allocation] Done — overall deviation={result.overall_deviation:.1f}, "
        f"balanced={result.is_well_balanced}, {len(actions)} actions, "
        f"{len(recommendations)} recommendations"
    )
    return result
