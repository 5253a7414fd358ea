"""
Portfolio aggregator.

This module derives portfolio-level figures from the current holdings,
divestments and dividends. Nothing is cached: every call recomputes from
storage so the figures are always exact.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from investledger.core.interfaces.storage import IPortfolioStore
from investledger.core.types.financial import (
    HUNDRED,
    ZERO,
    performance_percent,
    tax_on_gain,
    yield_percent,
)

from . import portfolio_statistics


@dataclass(frozen=True)
class PortfolioSummary:
    """Point-in-time summary of one user's portfolio."""

    total_invested: float
    current_portfolio_value: float
    unrealized_gain: float
    unrealized_gain_percent: float
    total_dividends_gross: float
    total_dividends_net: float
    total_cash_from_sales: float
    total_divested_cost: float
    realized_gains: float
    total_patrimony: float
    total_original_investment: float
    combined_gain: float
    overall_return_percent: float
    tax_on_unrealized_gains: float
    average_dividend_yield: float
    holding_count: int
    by_category: dict[str, dict[str, float | int]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert summary to dictionary."""
        return asdict(self)


class PortfolioAggregator:
    """Read-side derivations over one user's data set."""

    def __init__(self, store: IPortfolioStore, user_id: str) -> None:
        self.store = store
        self.user_id = user_id

    def summary(self) -> PortfolioSummary:
        """Compute the full portfolio summary."""
        holdings = self.store.list_holdings(self.user_id)
        divestments = self.store.list_divestments(self.user_id)
        dividends = self.store.list_dividends(self.user_id)

        total_invested = sum((h.amount for h in holdings), ZERO)
        current_value = sum((h.current_value for h in holdings), ZERO)
        dividends_gross = sum((d.gross_amount for d in dividends), ZERO)
        dividends_net = sum((d.net_amount for d in dividends), ZERO)
        cash_from_sales = sum((d.net_cash for d in divestments), ZERO)
        divested_cost = sum((d.divested_cost for d in divestments), ZERO)
        realized_gains = sum((d.net_gain for d in divestments), ZERO)

        unrealized_gain = current_value - total_invested
        original_investment = total_invested + divested_cost
        combined_gain = unrealized_gain + realized_gains + dividends_net
        overall_return = (
            combined_gain / original_investment * HUNDRED if original_investment > ZERO else ZERO
        )
        dividend_basis = sum((h.amount for h in holdings if h.pays_dividends), ZERO)

        return PortfolioSummary(
            total_invested=total_invested,
            current_portfolio_value=current_value,
            unrealized_gain=unrealized_gain,
            unrealized_gain_percent=performance_percent(total_invested, current_value),
            total_dividends_gross=dividends_gross,
            total_dividends_net=dividends_net,
            total_cash_from_sales=cash_from_sales,
            total_divested_cost=divested_cost,
            realized_gains=realized_gains,
            total_patrimony=current_value + cash_from_sales + dividends_net,
            total_original_investment=original_investment,
            combined_gain=combined_gain,
            overall_return_percent=overall_return,
            tax_on_unrealized_gains=tax_on_gain(unrealized_gain),
            average_dividend_yield=yield_percent(dividends_gross, dividend_basis),
            holding_count=len(holdings),
            by_category=portfolio_statistics.category_stats(holdings),
        )

    def average_dividend_yield(self) -> float:
        """Gross dividends over the cost basis of dividend-paying holdings, in percent."""
        holdings = self.store.list_holdings(self.user_id)
        dividends = self.store.list_dividends(self.user_id)
        basis = sum((h.amount for h in holdings if h.pays_dividends), ZERO)
        return yield_percent(sum((d.gross_amount for d in dividends), ZERO), basis)

    def divestment_stats(self) -> dict[str, Any]:
        """Divestment totals grouped by holding, reason and year."""
        return portfolio_statistics.divestment_stats(self.store.list_divestments(self.user_id))

    def dividend_stats(self) -> dict[str, Any]:
        """Dividend totals grouped by holding and year, plus average yield."""
        stats = portfolio_statistics.dividend_stats(self.store.list_dividends(self.user_id))
        stats["averageYield"] = self.average_dividend_yield()
        return stats

    def category_stats(self) -> dict[str, dict[str, float | int]]:
        """Live holdings grouped by category."""
        return portfolio_statistics.category_stats(self.store.list_holdings(self.user_id))
