"""
Unit tests for financial helpers.
Testing cost-basis derivation, tax, divestment outcomes and yields.
"""

import pytest

from investledger.core.constants import TAX_RATE
from investledger.core.exceptions.ledger import DivisionDegenerateError
from investledger.core.types.financial import (
    ZERO,
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


class TestFinancialTypeConversions:
    """Test suite for conversions and rounding."""

    def test_should_return_float_unchanged(self) -> None:
        """Test that float input is returned unchanged."""
        assert to_float(1260.0) == 1260.0

    def test_should_convert_int_and_string(self) -> None:
        """Test conversion of int and numeric string."""
        assert to_float(1260) == 1260.0
        assert to_float("26.5") == 26.5

    def test_should_round_money_and_percentage(self) -> None:
        """Test presentation rounding."""
        assert round_money(547.996) == 548.0
        assert round_percentage(6.666666666) == 6.6667

    def test_should_compare_with_tolerance(self) -> None:
        """Test tolerant float comparison."""
        assert safe_float_comparison(0.1 + 0.2, 0.3)
        assert not safe_float_comparison(1000.1, 1000.2)


class TestCostBasisDerivation:
    """Test suite for deriving a cost basis from performance."""

    def test_should_derive_cost_basis_from_gain(self) -> None:
        """Test 1260 at +26% was bought for 1000."""
        assert derive_cost_basis(1260.0, 26.0) == pytest.approx(1000.0)

    def test_should_derive_cost_basis_from_loss(self) -> None:
        """Test 800 at -20% was bought for 1000."""
        assert derive_cost_basis(800.0, -20.0) == pytest.approx(1000.0)

    def test_should_reject_total_loss_performance(self) -> None:
        """Test that -100% cannot be inverted."""
        with pytest.raises(DivisionDegenerateError) as exc_info:
            derive_cost_basis(500.0, -100.0)
        assert exc_info.value.performance == -100.0


class TestGainAndPerformance:
    """Test suite for unrealized figures."""

    def test_should_compute_gain_and_performance(self) -> None:
        """Test gain and percentage over the cost basis."""
        assert gain_loss(1000.0, 1500.0) == 500.0
        assert performance_percent(1000.0, 1500.0) == pytest.approx(50.0)

    def test_should_report_zero_performance_for_zero_basis(self) -> None:
        """Test that a zero cost basis does not divide by zero."""
        assert performance_percent(ZERO, 100.0) == ZERO


class TestTaxAndDivestmentOutcome:
    """Test suite for capital-gains tax on divestments."""

    def test_should_tax_gains_at_flat_rate(self) -> None:
        """Test the 26% rate on a positive gain."""
        assert TAX_RATE == 0.26
        assert tax_on_gain(200.0) == pytest.approx(52.0)

    @pytest.mark.parametrize("gain", [0.0, -0.01, -200.0])
    def test_should_not_tax_losses(self, gain: float) -> None:
        """Test that zero and negative gains owe nothing."""
        assert tax_on_gain(gain) == ZERO

    def test_should_compute_proportional_cost(self) -> None:
        """Test cost share of 600 out of 1500 with a 1000 basis."""
        assert proportional_cost(1000.0, 1500.0, 600.0) == pytest.approx(400.0)

    def test_should_reject_proportional_cost_without_value(self) -> None:
        """Test that a zero current value has no proportional share."""
        with pytest.raises(ValueError, match="Current value must be positive"):
            proportional_cost(1000.0, 0.0, 10.0)

    def test_should_compute_partial_divestment_outcome(self) -> None:
        """Test the worked example: sell 600 with 400 of cost."""
        outcome = divestment_outcome(600.0, 400.0)

        assert outcome.gross_gain == pytest.approx(200.0)
        assert outcome.tax == pytest.approx(52.0)
        assert outcome.net_gain == pytest.approx(148.0)
        assert outcome.net_cash == pytest.approx(548.0)

    def test_should_keep_cash_plus_tax_equal_to_amount(self) -> None:
        """Test that net cash and tax add up to the divested amount."""
        for amount, cost in [(600.0, 400.0), (800.0, 1000.0), (1234.56, 987.65)]:
            outcome = divestment_outcome(amount, cost)
            assert outcome.net_cash + outcome.tax == pytest.approx(amount)
            assert outcome.tax >= ZERO


class TestDividendFigures:
    """Test suite for dividend helpers."""

    def test_should_compute_net_dividend(self) -> None:
        """Test gross minus withheld taxes."""
        assert net_dividend(100.0, 26.0) == 74.0

    def test_should_compute_yield_in_percent(self) -> None:
        """Test yield over the invested amount."""
        assert yield_percent(100.0, 1000.0) == pytest.approx(10.0)

    def test_should_report_zero_yield_without_investment(self) -> None:
        """Test yield when nothing is invested."""
        assert yield_percent(100.0, 0.0) == ZERO
