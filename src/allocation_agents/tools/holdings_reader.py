"""
Allocation Analyst Tool: Holdings Reader
Read exchange-sync holdings exports (CSV, Excel or JSON) into Holding
models. Column headers vary between exchanges, so aliases are resolved
case-insensitively. Rows without a usable tier are classified from the
symbol.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from allocation_agents.exceptions import (
    ErrorSeverity,
    HoldingValidationError,
    HoldingsReadError,
    ProcessingError,
)
from allocation_agents.schemas.allocation_output import Holding, Tier
from allocation_agents.tools.tier_classifier import classify

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: set[str] = {".csv", ".xlsx", ".xls", ".json"}

# Common column name mappings — exchange exports have inconsistent headers
COLUMN_ALIASES: dict[str, list[str]] = {
    "symbol": ["symbol", "Symbol", "Asset", "Coin", "Ticker", "Currency", "SYMBOL"],
    "value_usd": [
        "value_usd", "valueUSD", "Value USD", "USD Value", "usd_value",
        "Value (USD)", "Value", "Balance USD",
    ],
    "tier": ["tier", "Tier", "Risk Tier", "Bucket"],
}


@dataclass
class HoldingsLoadResult:
    holdings: List[Holding] = field(default_factory=list)
    errors: List[ProcessingError] = field(default_factory=list)
    source_file: str = ""


def _find_column(df: pd.DataFrame, target: str) -> Optional[str]:
    """Find a column in the DataFrame matching known aliases."""
    aliases = COLUMN_ALIASES.get(target, [target])
    for alias in aliases:
        if alias in df.columns:
            return alias
        for col in df.columns:
            if str(col).strip().lower() == alias.lower():
                return col
    return None


def _parse_value(val: Any) -> float:
    """Strip $ and thousands separators; raise for non-numeric input."""
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return 0.0
    if isinstance(val, str):
        cleaned = val.replace("$", "").replace(",", "").strip()
        if not cleaned:
            return 0.0
        return float(cleaned)
    return float(val)


def _parse_tier(val: Any, symbol: str) -> Tier:
    """Explicit tier when it names a known tier, otherwise classify the symbol."""
    if isinstance(val, str) and val.strip():
        key = val.strip().upper().replace(" ", "_")
        try:
            return Tier(key)
        except ValueError:
            logger.debug(f"{symbol}: unknown tier '{val}', classifying from symbol")
    return classify(symbol)


def _load_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("holdings", data.get("assets", []))
    return pd.DataFrame(data)


def frame_to_holdings(df: pd.DataFrame, file_name: str = "<frame>") -> HoldingsLoadResult:
    """Convert a DataFrame of holdings rows; bad rows are skipped and recorded."""
    result = HoldingsLoadResult(source_file=file_name)

    sym_col = _find_column(df, "symbol")
    val_col = _find_column(df, "value_usd")
    tier_col = _find_column(df, "tier")
    if sym_col is None or val_col is None:
        raise HoldingsReadError(
            f"{file_name}: missing required columns (symbol, value_usd); "
            f"found {list(df.columns)}"
        )

    for idx, row in df.iterrows():
        raw_symbol = row.get(sym_col)
        try:
            if raw_symbol is None or pd.isna(raw_symbol) or not str(raw_symbol).strip():
                raise HoldingValidationError(f"Row {idx}: empty symbol")
            symbol = str(raw_symbol).strip().upper()
            try:
                value = _parse_value(row.get(val_col))
            except (TypeError, ValueError) as e:
                raise HoldingValidationError(
                    f"Row {idx}: value '{row.get(val_col)}' is not numeric"
                ) from e
            tier = _parse_tier(row.get(tier_col) if tier_col else None, symbol)
            result.holdings.append(Holding(symbol=symbol, value_usd=value, tier=tier))
        except (HoldingValidationError, PydanticValidationError) as e:
            err = ProcessingError.from_exception(
                file_name=file_name,
                error_type="ROW_PARSE_ERROR",
                exception=e,
                severity=ErrorSeverity.WARNING,
                context={"row": int(idx) if pd.api.types.is_integer(idx) else str(idx)},
            )
            result.errors.append(err)
            logger.warning(f"Skipping holdings row: {err.message}")

    return result


def read_holdings(path: str | Path) -> HoldingsLoadResult:
    """
    Load holdings from a CSV, Excel or JSON export.

    Raises:
        HoldingsReadError: file missing, unsupported format or unreadable.
    """
    path = Path(path)
    if not path.exists():
        raise HoldingsReadError(f"Holdings file not found: {path}")
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise HoldingsReadError(
            f"Unsupported holdings format '{path.suffix}' "
            f"(expected one of {sorted(SUPPORTED_EXTENSIONS)})"
        )

    try:
        df = _load_frame(path)
    except (OSError, ValueError) as e:
        raise HoldingsReadError(f"Cannot read {path.name}: {e}") from e

    result = frame_to_holdings(df, path.name)
    logger.info(
        f"Loaded {len(result.holdings)} holdings from {path.name}"
        + (f" ({len(result.errors)} rows skipped)" if result.errors else "")
    )
    return result
