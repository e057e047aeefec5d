"""
Rebalancing Planner — Tool & Behavioral Tests
Level 1: Pure function tests, no LLM, no file I/O.
"""

from __future__ import annotations

import json

import pytest

from allocation_agents.config.constants import ACTIONABLE_DEVIATION_THRESHOLD
from allocation_agents.schemas.allocation_output import (
    DeviationEntry,
    RiskProfile,
    Tier,
    deviation_status,
)
from allocation_agents.tools.allocation_aggregator import aggregate
from allocation_agents.tools.deviation_analyzer import analyze_deviation
from allocation_agents.tools.rebalancing_planner import (
    RebalancingPlannerTool,
    action_priority,
    compute_trade_value,
    generate_actions,
)
from allocation_agents.tools.target_resolver import resolve_targets

from tests.fixtures.conftest import SCENARIO_A_HOLDINGS, holdings_from


def _entry(tier: Tier, current: float, target: float) -> DeviationEntry:
    dev = current - target
    return DeviationEntry(
        tier=tier,
        current_percentage=current,
        target_percentage=target,
        deviation=dev,
        value_usd=0.0,
        status=deviation_status(dev),
    )


def _scenario_a_entries() -> list[DeviationEntry]:
    current = aggregate(holdings_from(SCENARIO_A_HOLDINGS))
    target = resolve_targets(RiskProfile.BALANCED)
    return analyze_deviation(current, target).entries


class TestGenerateActions:

    @pytest.mark.schema
    def test_scenario_a_order(self):
        actions = generate_actions(_scenario_a_entries())
        assert [a.tier for a in actions] == [
            Tier.SATELLITE, Tier.SPECULATIVE, Tier.CORE, Tier.STRATEGIC_RESERVE,
        ]

    @pytest.mark.schema
    def test_scenario_a_directions(self):
        actions = {a.tier: a for a in generate_actions(_scenario_a_entries())}
        assert actions[Tier.SATELLITE].action == "increase"
        assert actions[Tier.SATELLITE].suggested_adjustment == pytest.approx(35.0)
        assert actions[Tier.SPECULATIVE].action == "decrease"
        assert actions[Tier.SPECULATIVE].suggested_adjustment == pytest.approx(25.0)
        assert actions[Tier.CORE].action == "decrease"
        assert actions[Tier.STRATEGIC_RESERVE].action == "increase"
        assert actions[Tier.STRATEGIC_RESERVE].suggested_adjustment == pytest.approx(10.0)

    @pytest.mark.schema
    def test_current_and_target_carried(self):
        actions = {a.tier: a for a in generate_actions(_scenario_a_entries())}
        assert actions[Tier.CORE].current == pytest.approx(60.0)
        assert actions[Tier.CORE].target == pytest.approx(40.0)

    @pytest.mark.behavior
    def test_within_band_omitted(self):
        entries = [
            _entry(Tier.CORE, 45.0, 40.0),       # +5 exactly: no action
            _entry(Tier.SATELLITE, 30.0, 35.0),  # -5 exactly: no action
            _entry(Tier.SPECULATIVE, 15.0, 15.0),
            _entry(Tier.STRATEGIC_RESERVE, 10.0, 10.0),
        ]
        assert generate_actions(entries) == []

    @pytest.mark.behavior
    def test_just_outside_band_included(self):
        entries = [
            _entry(Tier.CORE, 45.5, 40.0),
            _entry(Tier.SATELLITE, 29.5, 35.0),
        ]
        actions = generate_actions(entries)
        assert len(actions) == 2

    @pytest.mark.behavior
    def test_never_returns_small_deviations_and_sorted(self):
        entries = [
            _entry(Tier.CORE, 52.0, 40.0),
            _entry(Tier.SATELLITE, 31.0, 35.0),
            _entry(Tier.SPECULATIVE, 7.0, 15.0),
            _entry(Tier.STRATEGIC_RESERVE, 10.0, 10.0),
        ]
        actions = generate_actions(entries)
        assert all(a.suggested_adjustment > ACTIONABLE_DEVIATION_THRESHOLD for a in actions)
        adjustments = [a.suggested_adjustment for a in actions]
        assert adjustments == sorted(adjustments, reverse=True)
        assert [a.tier for a in actions] == [Tier.CORE, Tier.SPECULATIVE]

    @pytest.mark.behavior
    def test_ties_keep_input_order(self):
        entries = [
            _entry(Tier.CORE, 50.0, 40.0),
            _entry(Tier.SATELLITE, 25.0, 35.0),
        ]
        actions = generate_actions(entries)
        assert [a.tier for a in actions] == [Tier.CORE, Tier.SATELLITE]

    @pytest.mark.schema
    def test_empty_entries(self):
        assert generate_actions([]) == []

    @pytest.mark.schema
    def test_trade_values_with_total(self):
        actions = {a.tier: a for a in generate_actions(_scenario_a_entries(), 10_000.0)}
        assert actions[Tier.SATELLITE].trade_value_usd == pytest.approx(3500.0)
        assert actions[Tier.CORE].trade_value_usd == pytest.approx(2000.0)

    @pytest.mark.schema
    def test_trade_values_absent_without_total(self):
        assert all(a.trade_value_usd is None for a in generate_actions(_scenario_a_entries()))

    @pytest.mark.schema
    def test_priorities(self):
        actions = {a.tier: a for a in generate_actions(_scenario_a_entries())}
        assert actions[Tier.SATELLITE].priority == "HIGH"
        assert actions[Tier.SPECULATIVE].priority == "HIGH"
        assert actions[Tier.CORE].priority == "MEDIUM"
        assert actions[Tier.STRATEGIC_RESERVE].priority == "LOW"


class TestHelpers:

    @pytest.mark.schema
    @pytest.mark.parametrize("adjustment,expected", [
        (35.0, "HIGH"), (20.01, "HIGH"), (20.0, "MEDIUM"), (10.01, "MEDIUM"),
        (10.0, "LOW"), (5.5, "LOW"),
    ])
    def test_action_priority(self, adjustment, expected):
        assert action_priority(adjustment) == expected

    @pytest.mark.schema
    def test_compute_trade_value(self):
        assert compute_trade_value(12.5, 8000.0) == 1000.0
        assert compute_trade_value(12.5, 0.0) is None
        assert compute_trade_value(12.5, None) is None


class TestRebalancingPlannerTool:

    @pytest.mark.schema
    def test_tool_has_correct_name(self):
        assert RebalancingPlannerTool().name == "rebalancing_planner"

    @pytest.mark.schema
    def test_tool_run_returns_ordered_json(self):
        holdings_json = json.dumps([
            {"symbol": "BTC", "value_usd": 6000.0, "tier": "CORE"},
            {"symbol": "DOGE", "value_usd": 4000.0},
        ])
        output = RebalancingPlannerTool()._run(holdings_json=holdings_json, risk_profile="balanced")
        data = json.loads(output)
        assert [a["tier"] for a in data] == [
            "SATELLITE", "SPECULATIVE", "CORE", "STRATEGIC_RESERVE",
        ]
        assert data[0]["action"] == "increase"
        assert data[0]["trade_value_usd"] == pytest.approx(3500.0)
