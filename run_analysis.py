"""Run the Allocation Analysis on a holdings export and write output files.

Usage:
    python run_analysis.py holdings.csv                       # BALANCED profile
    python run_analysis.py holdings.json --profile AGGRESSIVE
    python run_analysis.py holdings.xlsx --output results
"""

import argparse
import logging
import os
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from dotenv import load_dotenv
load_dotenv()

import pandas as pd

from allocation_agents.agents.allocation_analyst import run_allocation_pipeline
from allocation_agents.config.constants import DEFAULT_OUTPUT_DIR, DEFAULT_RISK_PROFILE
from allocation_agents.exceptions import AllocationEngineException, OutputWriteError
from allocation_agents.schemas.allocation_output import (
    TIER_LABELS,
    AnalysisResult,
    RiskProfile,
)
from allocation_agents.tools.holdings_reader import read_holdings
from allocation_agents.tools.target_resolver import validate_target_table


# ---------------------------------------------------------------------------
# CLI Argument Parsing
# ---------------------------------------------------------------------------

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crypto portfolio allocation deviation & rebalancing analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  python run_analysis.py holdings.csv
  python run_analysis.py holdings.json --profile CONSERVATIVE
  python run_analysis.py holdings.xlsx --output results
""",
    )
    parser.add_argument("holdings", help="Holdings export (.csv, .xlsx, .json)")
    parser.add_argument(
        "--profile",
        default=os.environ.get("ALLOCATION_RISK_PROFILE", DEFAULT_RISK_PROFILE),
        type=str.upper,
        choices=[p.value for p in RiskProfile],
        help="Risk profile (default: $ALLOCATION_RISK_PROFILE or BALANCED)",
    )
    parser.add_argument(
        "--output",
        default=os.environ.get("ALLOCATION_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
        help="Output directory (default: $ALLOCATION_OUTPUT_DIR or output)",
    )
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Output writers
# ---------------------------------------------------------------------------

def _write_snapshot(result: AnalysisResult, out_path: Path) -> Path:
    """Save the AnalysisResult as JSON."""
    filepath = out_path / f"allocation_analysis_{date.today().isoformat()}.json"
    try:
        filepath.write_text(result.model_dump_json(indent=2), encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(f"Cannot write {filepath.name}: {e}") from e
    return filepath


def _write_analysis_excel(result: AnalysisResult, out_path: Path) -> Path:
    """Write the AnalysisResult to an Excel workbook."""
    filepath = out_path / f"allocation_analysis_{date.today().isoformat()}.xlsx"

    summary_rows = [
        {"Field": "Risk Profile", "Value": result.risk_profile.value},
        {"Field": "Total Value (USD)", "Value": round(result.total_value_usd, 2)},
        {"Field": "Assets Held", "Value": result.assets_held},
        {"Field": "Overall Deviation", "Value": round(result.overall_deviation, 2)},
        {"Field": "Well Balanced", "Value": "YES" if result.is_well_balanced else "NO"},
        {"Field": "Actions", "Value": len(result.rebalancing_actions)},
    ]
    df_summary = pd.DataFrame(summary_rows)

    df_alloc = pd.DataFrame([
        {
            "Tier": e.tier.value,
            "Label": TIER_LABELS[e.tier],
            "Current %": round(e.current_percentage, 2),
            "Target %": round(e.target_percentage, 2),
            "Deviation": round(e.deviation, 2),
            "Status": e.status,
            "Value (USD)": round(e.value_usd, 2),
        }
        for e in result.current_allocation
    ])

    df_actions = pd.DataFrame([
        {
            "Rank": i,
            "Action": a.action,
            "Tier": a.tier.value,
            "Current %": round(a.current, 2),
            "Target %": round(a.target, 2),
            "Adjustment": round(a.suggested_adjustment, 2),
            "Priority": a.priority,
            "Trade (USD)": a.trade_value_usd,
        }
        for i, a in enumerate(result.rebalancing_actions, 1)
    ])

    df_recs = pd.DataFrame({"Recommendation": result.recommendations})

    try:
        with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
            df_summary.to_excel(writer, sheet_name="Summary", index=False)
            df_alloc.to_excel(writer, sheet_name="Allocation", index=False)
            if not df_actions.empty:
                df_actions.to_excel(writer, sheet_name="Actions", index=False)
            if not df_recs.empty:
                df_recs.to_excel(writer, sheet_name="Recommendations", index=False)

            for ws in writer.sheets.values():
                for col in ws.columns:
                    max_len = max(len(str(c.value or "")) for c in col)
                    ws.column_dimensions[col[0].column_letter].width = min(max_len + 3, 80)
    except OSError as e:
        raise OutputWriteError(f"Cannot write {filepath.name}: {e}") from e

    return filepath


def main(holdings_path: str, profile: str = DEFAULT_RISK_PROFILE,
         output_dir: str = DEFAULT_OUTPUT_DIR) -> AnalysisResult:
    out_path = Path(output_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    validate_target_table()

    print(f"[Holdings] Reading '{holdings_path}' ...")
    loaded = read_holdings(holdings_path)
    print(f"[Holdings] Done — {len(loaded.holdings)} holdings, "
          f"{len(loaded.errors)} rows skipped")

    print(f"[Allocation] Running analysis ({profile}) ...")
    result = run_allocation_pipeline(loaded.holdings, RiskProfile(profile))
    verdict = "balanced" if result.is_well_balanced else "needs rebalancing"
    print(f"[Allocation] Done — {verdict}, overall deviation "
          f"{result.overall_deviation:.1f} pts, {len(result.rebalancing_actions)} actions")

    for a in result.rebalancing_actions:
        arrow = "↑" if a.action == "increase" else "↓"
        print(f"  {arrow} {a.tier.value}: {a.current:.1f}% -> {a.target:.1f}% "
              f"({a.suggested_adjustment:.1f} pts, {a.priority})")
    for rec in result.recommendations:
        print(f"  - {rec}")

    snapshot = _write_snapshot(result, out_path)
    print(f"[Allocation] Saved: {snapshot}")
    workbook = _write_analysis_excel(result, out_path)
    print(f"[Allocation] Saved: {workbook}")

    return result


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    args = parse_args()
    try:
        main(args.holdings, profile=args.profile, output_dir=args.output)
    except AllocationEngineException as e:
        print(f"\nERROR [{e.error_code}]: {e.message}")
        sys.exit(1)
