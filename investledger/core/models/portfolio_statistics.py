"""
Grouped statistics over ledger records.

Records are loaded into a pandas DataFrame and grouped by a key column;
each group reports its record count plus the sum of selected columns.
"""

from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd

from investledger.core.models.divestment import DivestmentRecord
from investledger.core.models.dividend import DividendRecord
from investledger.core.models.holding import Holding

GroupTable = dict[Any, dict[str, float | int]]

DIVESTMENT_TOTALS = {"totalAmount": "divested_amount"}
DIVIDEND_TOTALS = {
    "totalGross": "gross_amount",
    "totalNet": "net_amount",
    "totalTaxes": "taxes_withheld",
}
HOLDING_TOTALS = {"totalAmount": "amount", "totalCurrentValue": "current_value"}


def _native(value: Any) -> Any:
    """Convert numpy scalars produced by pandas into plain Python values."""
    return value.item() if hasattr(value, "item") else value


def _summarize(frame: pd.DataFrame, totals: Mapping[str, str]) -> dict[str, float | int]:
    summary: dict[str, float | int] = {"count": int(len(frame))}
    for output_name, column in totals.items():
        summary[output_name] = float(frame[column].sum()) if not frame.empty else 0.0
    return summary


def group_totals(frame: pd.DataFrame, key: str, totals: Mapping[str, str]) -> GroupTable:
    """Group rows by `key` and summarize each group.

    Args:
        frame: One row per record
        key: Column to group by
        totals: Output name -> column to sum

    Returns:
        Mapping from group key to `{count, <output names>...}`
    """
    if frame.empty:
        return {}
    return {
        _native(group_key): _summarize(group, totals)
        for group_key, group in frame.groupby(key, sort=True)
    }


def divestment_frame(records: Iterable[DivestmentRecord]) -> pd.DataFrame:
    """Build a DataFrame of divestment records."""
    rows = [
        {
            "holding_name": r.holding_name,
            "reason": r.reason,
            "year": r.year,
            "kind": r.kind.value,
            "divested_amount": r.divested_amount,
            "divested_cost": r.divested_cost,
            "net_gain": r.net_gain,
            "net_cash": r.net_cash,
        }
        for r in records
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "holding_name",
            "reason",
            "year",
            "kind",
            "divested_amount",
            "divested_cost",
            "net_gain",
            "net_cash",
        ],
    )


def dividend_frame(records: Iterable[DividendRecord]) -> pd.DataFrame:
    """Build a DataFrame of dividend records."""
    rows = [
        {
            "holding_name": r.holding_name,
            "year": r.year,
            "gross_amount": r.gross_amount,
            "taxes_withheld": r.taxes_withheld,
            "net_amount": r.net_amount,
        }
        for r in records
    ]
    return pd.DataFrame(
        rows, columns=["holding_name", "year", "gross_amount", "taxes_withheld", "net_amount"]
    )


def holding_frame(holdings: Iterable[Holding]) -> pd.DataFrame:
    """Build a DataFrame of live holdings."""
    rows = [
        {
            "category": h.category.value,
            "amount": h.amount,
            "current_value": h.current_value,
        }
        for h in holdings
    ]
    return pd.DataFrame(rows, columns=["category", "amount", "current_value"])


def divestment_stats(records: Iterable[DivestmentRecord]) -> dict[str, Any]:
    """Divestment statistics: totals plus by holding, reason and year."""
    frame = divestment_frame(records)
    return {
        "total": _summarize(frame, DIVESTMENT_TOTALS),
        "byHolding": group_totals(frame, "holding_name", DIVESTMENT_TOTALS),
        "byReason": group_totals(frame, "reason", DIVESTMENT_TOTALS),
        "byYear": group_totals(frame, "year", DIVESTMENT_TOTALS),
    }


def dividend_stats(records: Iterable[DividendRecord]) -> dict[str, Any]:
    """Dividend statistics: totals plus by holding and year."""
    frame = dividend_frame(records)
    return {
        "total": _summarize(frame, DIVIDEND_TOTALS),
        "byHolding": group_totals(frame, "holding_name", DIVIDEND_TOTALS),
        "byYear": group_totals(frame, "year", DIVIDEND_TOTALS),
    }


def category_stats(holdings: Iterable[Holding]) -> GroupTable:
    """Live holdings grouped by category."""
    return group_totals(holding_frame(holdings), "category", HOLDING_TOTALS)
