"""
Financial helpers for ledger calculations.

Every derived monetary figure (cost basis from performance, gain/loss,
performance percentage, tax, net dividend, divestment outcome) is computed
here and nowhere else, so all call sites agree.

Values are plain floats. Amounts are personal-portfolio sized, so float64
precision is ample; use the rounding helpers only for presentation and
`safe_float_comparison` when checking invariants.
"""

from dataclasses import dataclass

from investledger.core.constants import TAX_RATE

# Presentation precision (number of decimal places)
MONEY_DECIMALS = 2
PERCENTAGE_DECIMALS = 4

# Common financial values as float constants
ZERO = 0.0
ONE = 1.0
HUNDRED = 100.0

# Tolerance for invariant checks on money values
MONEY_TOLERANCE = 1e-6


@dataclass(frozen=True)
class DivestmentOutcome:
    """Financial result of liquidating part or all of a holding."""

    divested_amount: float
    divested_cost: float
    gross_gain: float
    tax: float
    net_gain: float
    net_cash: float


def to_float(value: str | int | float) -> float:
    """Convert various numeric types to float.

    Examples:
        >>> to_float(1260)
        1260.0
        >>> to_float('26.5')
        26.5
    """
    if isinstance(value, float):
        return value
    return float(value)


def round_money(value: float) -> float:
    """Round a monetary value to cents."""
    return round(value, MONEY_DECIMALS)


def round_percentage(percentage: float) -> float:
    """Round percentage to presentation precision."""
    return round(percentage, PERCENTAGE_DECIMALS)


def safe_float_comparison(a: float, b: float, tolerance: float = MONEY_TOLERANCE) -> bool:
    """Compare floats with tolerance for precision issues.

    Examples:
        >>> safe_float_comparison(0.1 + 0.2, 0.3)
        True
        >>> safe_float_comparison(1000.1, 1000.2)
        False
    """
    return abs(a - b) < tolerance


def derive_cost_basis(current_value: float, performance: float) -> float:
    """Derive the original cost basis from a current value and performance.

    Args:
        current_value: Latest known value of the position
        performance: Percentage change since purchase (26 means +26%)

    Returns:
        current_value / (1 + performance / 100)

    Raises:
        DivisionDegenerateError: If performance is -100 (zero divisor)
    """
    from investledger.core.exceptions.ledger import DivisionDegenerateError

    divisor = ONE + performance / HUNDRED
    if divisor == ZERO:
        raise DivisionDegenerateError(performance)
    return current_value / divisor


def gain_loss(cost_basis: float, current_value: float) -> float:
    """Unrealized gain (positive) or loss (negative) of a position."""
    return current_value - cost_basis


def performance_percent(cost_basis: float, current_value: float) -> float:
    """Percentage change of current value over cost basis, 0 for a zero basis."""
    if cost_basis == ZERO:
        return ZERO
    return gain_loss(cost_basis, current_value) / cost_basis * HUNDRED


def tax_on_gain(gain: float, tax_rate: float = TAX_RATE) -> float:
    """Tax owed on a gain. Losses and zero gains owe nothing."""
    if gain <= ZERO:
        return ZERO
    return gain * tax_rate


def proportional_cost(cost_basis: float, current_value: float, divested_amount: float) -> float:
    """Portion of the cost basis attributable to a slice of current value.

    Raises:
        ValueError: If current_value is not positive
    """
    if current_value <= ZERO:
        raise ValueError(f"Current value must be positive, got {current_value}")
    return cost_basis * (divested_amount / current_value)


def divestment_outcome(divested_amount: float, divested_cost: float) -> DivestmentOutcome:
    """Compute gain, tax, net gain and net cash of a divestment.

    Examples:
        >>> outcome = divestment_outcome(600.0, 400.0)
        >>> outcome.gross_gain, round_money(outcome.tax), round_money(outcome.net_cash)
        (200.0, 52.0, 548.0)
    """
    gross_gain = divested_amount - divested_cost
    tax = tax_on_gain(gross_gain)
    return DivestmentOutcome(
        divested_amount=divested_amount,
        divested_cost=divested_cost,
        gross_gain=gross_gain,
        tax=tax,
        net_gain=gross_gain - tax,
        net_cash=divested_amount - tax,
    )


def net_dividend(gross_amount: float, taxes_withheld: float) -> float:
    """Net amount of a dividend after withheld taxes."""
    return gross_amount - taxes_withheld


def yield_percent(total_gross: float, invested: float) -> float:
    """Dividend yield over an invested amount, 0 when nothing is invested."""
    if invested <= ZERO:
        return ZERO
    return total_gross / invested * HUNDRED
