"""
Unit tests for the Holding domain model.
"""

from datetime import date

import pytest

from investledger.core.enums import Category
from investledger.core.exceptions.ledger import ValidationError
from investledger.core.models.holding import Holding, ValueUpdate


def _holding(**overrides) -> Holding:
    fields = {
        "id": "h1",
        "user_id": "alice",
        "name": "World ETF",
        "category": Category.ETF_DIVIDEND,
        "amount": 1000.0,
        "current_value": 1500.0,
        "date": date(2024, 1, 15),
    }
    fields.update(overrides)
    return Holding(**fields)


class TestHoldingCreation:
    """Test suite for Holding construction."""

    def test_should_create_holding_with_defaults(self) -> None:
        """Test holding creation with optional fields left out."""
        holding = _holding()

        assert holding.quantity is None
        assert holding.notes == ""
        assert holding.updates == ()
        assert not holding.is_existing_investment
        assert holding.initial_performance is None

    def test_should_report_every_broken_invariant(self) -> None:
        """Test that negative figures are all reported together."""
        with pytest.raises(ValidationError) as exc_info:
            _holding(amount=-1.0, current_value=-2.0, quantity=0.0)
        assert len(exc_info.value.reasons) == 3

    def test_should_allow_zero_current_value(self) -> None:
        """Test that a worthless position is still a valid holding."""
        assert _holding(current_value=0.0).current_value == 0.0


class TestHoldingDerivedValues:
    """Test suite for gain and performance properties."""

    def test_should_compute_gain_and_performance(self) -> None:
        """Test derived unrealized figures."""
        holding = _holding()
        assert holding.gain_loss == 500.0
        assert holding.performance == pytest.approx(50.0)

    def test_should_report_dividend_eligibility_from_category(self) -> None:
        """Test pays_dividends follows the category."""
        assert _holding().pays_dividends
        assert not _holding(category=Category.BOND).pays_dividends


class TestHoldingHistory:
    """Test suite for revaluation history."""

    def test_should_append_history_entry_on_update(self) -> None:
        """Test with_update returns a new marked copy."""
        holding = _holding()

        updated = holding.with_update(1600.0, date(2024, 6, 1), "half-year mark")

        assert updated.current_value == 1600.0
        assert len(updated.updates) == 1
        assert updated.updates[0].note == "half-year mark"
        assert holding.current_value == 1500.0
        assert holding.updates == ()

    def test_should_reject_negative_history_value(self) -> None:
        """Test ValueUpdate validation."""
        with pytest.raises(ValidationError, match="non-negative"):
            ValueUpdate(date=date(2024, 1, 1), value=-1.0)


class TestHoldingSerialization:
    """Test suite for dictionary conversion."""

    def test_should_rebuild_holding_from_dict(self) -> None:
        """Test that to_dict output rebuilds an equal holding."""
        holding = _holding(quantity=10.0, notes="core position").with_update(
            1600.0, date(2024, 6, 1)
        )

        data = holding.to_dict()

        assert data["category"] == "etf-dividend"
        assert data["date"] == "2024-01-15"
        assert Holding.from_dict(data) == holding
