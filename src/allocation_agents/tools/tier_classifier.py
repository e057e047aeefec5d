"""
Allocation Analyst Tool: Tier Classifier
Assigns crypto assets to risk tiers using a static mapping plus
meme-coin marker matching. Unknown tickers fall back to SATELLITE.
Tiers: CORE, SATELLITE, SPECULATIVE, STRATEGIC_RESERVE.
"""

from __future__ import annotations

import logging

from crewai.tools import BaseTool
from pydantic import BaseModel, Field

from allocation_agents.schemas.allocation_output import Holding, Tier

logger = logging.getLogger(__name__)

DEFAULT_TIER: Tier = Tier.SATELLITE

# Static tier mapping for well-known tickers.
# CORE              = large-cap settlement assets
# STRATEGIC_RESERVE = stablecoins / cash equivalents
# SPECULATIVE       = explicitly listed high-risk tokens
KNOWN_TIERS: dict[str, Tier] = {
    # Large caps
    "BTC": Tier.CORE, "XBT": Tier.CORE, "WBTC": Tier.CORE,
    "ETH": Tier.CORE, "WETH": Tier.CORE, "STETH": Tier.CORE,
    # Stablecoins
    "USDT": Tier.STRATEGIC_RESERVE, "USDC": Tier.STRATEGIC_RESERVE,
    "DAI": Tier.STRATEGIC_RESERVE, "BUSD": Tier.STRATEGIC_RESERVE,
    "TUSD": Tier.STRATEGIC_RESERVE, "FDUSD": Tier.STRATEGIC_RESERVE,
    "PYUSD": Tier.STRATEGIC_RESERVE, "USDP": Tier.STRATEGIC_RESERVE,
    "USDE": Tier.STRATEGIC_RESERVE, "EUR": Tier.STRATEGIC_RESERVE,
    "USD": Tier.STRATEGIC_RESERVE, "EURC": Tier.STRATEGIC_RESERVE,
    # Established alts
    "SOL": Tier.SATELLITE, "BNB": Tier.SATELLITE, "XRP": Tier.SATELLITE,
    "ADA": Tier.SATELLITE, "AVAX": Tier.SATELLITE, "DOT": Tier.SATELLITE,
    "LINK": Tier.SATELLITE, "MATIC": Tier.SATELLITE, "ATOM": Tier.SATELLITE,
    "LTC": Tier.SATELLITE, "TRX": Tier.SATELLITE, "TON": Tier.SATELLITE,
}

# Substring markers: any ticker containing one of these is a meme coin
# (catches wrapped/leveraged variants such as 1000PEPE or SHIBDOGE).
MEME_COIN_MARKERS: tuple[str, ...] = (
    "DOGE", "SHIB", "PEPE", "FLOKI", "BONK", "WIF", "BOME",
)


def is_meme_coin(symbol: str) -> bool:
    sym = symbol.strip().upper()
    return any(marker in sym for marker in MEME_COIN_MARKERS)


def classify(symbol: str) -> Tier:
    """Classify one ticker. Exact mapping wins, then meme markers, then default."""
    sym = symbol.strip().upper()
    tier = KNOWN_TIERS.get(sym)
    if tier is not None:
        return tier
    if is_meme_coin(sym):
        return Tier.SPECULATIVE
    return DEFAULT_TIER


def resolve_tier(holding: Holding) -> Tier:
    """Explicit tier on the holding wins over classification."""
    return holding.tier if holding.tier is not None else classify(holding.symbol)


def classify_holdings(holdings: list[Holding]) -> dict[str, Tier]:
    """Map each holding's symbol to its resolved tier."""
    result: dict[str, Tier] = {}
    for h in holdings:
        result[h.symbol] = resolve_tier(h)
    unknown = [
        h.symbol for h in holdings
        if h.tier is None and h.symbol not in KNOWN_TIERS and not is_meme_coin(h.symbol)
    ]
    if unknown:
        logger.debug(f"Defaulted {len(unknown)} symbols to {DEFAULT_TIER.value}: {unknown[:10]}")
    return result


# --- CrewAI Tool wrapper ---

class ClassifyTierInput(BaseModel):
    symbols: list[str] = Field(..., description="List of crypto asset symbols to classify")


class TierClassifierTool(BaseTool):
    """Classify crypto assets into allocation risk tiers."""
    name: str = "classify_risk_tiers"
    description: str = (
        "Classify crypto asset symbols into risk tiers (CORE, SATELLITE, "
        "SPECULATIVE, STRATEGIC_RESERVE). Unknown symbols default to SATELLITE."
    )
    args_schema: type[BaseModel] = ClassifyTierInput

    def _run(self, symbols: list[str]) -> str:
        lines = [f"Classified {len(symbols)} symbols:"]
        for sym in sorted(symbols):
            lines.append(f"  {sym} -> {classify(sym).value}")
        return "\n".join(lines)
