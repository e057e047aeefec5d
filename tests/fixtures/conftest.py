"""
Shared test fixtures for the allocation engine tests.
Provides sample holdings and helpers to build allocation vectors.
"""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from allocation_agents.schemas.allocation_output import (
    AllocationVector,
    Holding,
    Tier,
    TierAllocation,
)

FIXTURES_DIR = Path(__file__).parent


def make_holding(symbol: str, value_usd: float, tier: Tier | None = None) -> Holding:
    return Holding(symbol=symbol, value_usd=value_usd, tier=tier)


def make_vector(percentages: dict[Tier, float], total_value_usd: float = 10_000.0) -> AllocationVector:
    """Allocation vector from tier -> % (values derived from the total)."""
    return AllocationVector(
        allocations={
            tier: TierAllocation(percentage=pct, value_usd=pct * total_value_usd / 100.0)
            for tier, pct in percentages.items()
        },
        total_value_usd=total_value_usd,
        is_empty=False,
    )


def create_mock_csv(filepath: Path, rows: list[dict]) -> None:
    """Create a mock exchange holdings CSV."""
    pd.DataFrame(rows).to_csv(filepath, index=False)


def create_mock_json(filepath: Path, rows: list[dict]) -> None:
    filepath.write_text(json.dumps(rows), encoding="utf-8")


# Scenario A: concentrated large-cap + meme coin
SCENARIO_A_HOLDINGS = [
    {"symbol": "BTC", "value_usd": 6000.0, "tier": Tier.CORE},
    {"symbol": "DOGE", "value_usd": 4000.0, "tier": Tier.SPECULATIVE},
]

# Matches the BALANCED target exactly (40/35/15/10)
BALANCED_EXACT_HOLDINGS = [
    {"symbol": "BTC", "value_usd": 2500.0, "tier": Tier.CORE},
    {"symbol": "ETH", "value_usd": 1500.0, "tier": Tier.CORE},
    {"symbol": "SOL", "value_usd": 2000.0, "tier": Tier.SATELLITE},
    {"symbol": "LINK", "value_usd": 1500.0, "tier": Tier.SATELLITE},
    {"symbol": "PEPE", "value_usd": 1500.0, "tier": Tier.SPECULATIVE},
    {"symbol": "USDC", "value_usd": 1000.0, "tier": Tier.STRATEGIC_RESERVE},
]

# Realistic exchange export: mixed tiers, some untagged, one dust balance
MIXED_EXPORT_ROWS = [
    {"Asset": "BTC", "Value USD": "12,500.00", "Tier": "CORE"},
    {"Asset": "ETH", "Value USD": "7,500.00", "Tier": ""},
    {"Asset": "SOL", "Value USD": "3,000.00", "Tier": ""},
    {"Asset": "1000PEPE", "Value USD": "1,200.50", "Tier": ""},
    {"Asset": "USDT", "Value USD": "5,000", "Tier": "strategic reserve"},
    {"Asset": "XYZ", "Value USD": "0", "Tier": ""},
]


def holdings_from(rows: list[dict]) -> list[Holding]:
    return [Holding(**r) for r in rows]
