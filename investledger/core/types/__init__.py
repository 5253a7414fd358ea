"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    HUNDRED,
    MONEY_DECIMALS,
    ONE,
    PERCENTAGE_DECIMALS,
    ZERO,
    DivestmentOutcome,
    derive_cost_basis,
    divestment_outcome,
    gain_loss,
    net_dividend,
    performance_percent,
    proportional_cost,
    round_money,
    round_percentage,
    safe_float_comparison,
    tax_on_gain,
    to_float,
    yield_percent,
)

__all__ = [
    # Result types
    "DivestmentOutcome",
    # Utility functions
    "to_float",
    "round_money",
    "round_percentage",
    "safe_float_comparison",
    "derive_cost_basis",
    "gain_loss",
    "performance_percent",
    "tax_on_gain",
    "proportional_cost",
    "divestment_outcome",
    "net_dividend",
    "yield_percent",
    # Constants
    "MONEY_DECIMALS",
    "PERCENTAGE_DECIMALS",
    "ZERO",
    "ONE",
    "HUNDRED",
]
