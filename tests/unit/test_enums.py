"""
Unit tests for enum types.
Testing category parsing and the divestment/entry mode flags.
"""

import pytest

from investledger.core.enums import Category, DivestmentKind, EntryMode


class TestCategoryEnum:
    """Tests for Category enum."""

    def test_should_have_canonical_values(self) -> None:
        """Test that Category enum carries the canonical codes."""
        assert Category.EQUITY_DIVIDEND.value == "equity-dividend"
        assert Category.ETF_DIVIDEND.value == "etf-dividend"
        assert Category.REIT.value == "reit"
        assert len(Category) == 7

    def test_should_convert_from_string_case_insensitive(self) -> None:
        """Test from_string with mixed case and underscores."""
        assert Category.from_string("ETF") == Category.ETF
        assert Category.from_string(" Etf_Dividend ") == Category.ETF_DIVIDEND
        assert Category.from_string("equity-dividend") == Category.EQUITY_DIVIDEND

    def test_should_accept_legacy_front_end_codes(self) -> None:
        """Test that the first front end's codes map onto canonical categories."""
        assert Category.from_string("azione-dividendi") == Category.EQUITY_DIVIDEND
        assert Category.from_string("obbligazione") == Category.BOND
        assert Category.from_string("fondo") == Category.FUND

    def test_should_raise_error_for_unknown_category(self) -> None:
        """Test that from_string rejects unknown categories."""
        with pytest.raises(ValueError, match="Unsupported category"):
            Category.from_string("crypto")

    def test_should_expose_dividend_paying_subset(self) -> None:
        """Test the dividend-paying subset."""
        assert Category.dividend_paying() == {
            Category.EQUITY_DIVIDEND,
            Category.ETF_DIVIDEND,
            Category.REIT,
        }
        assert Category.REIT.pays_dividends
        assert not Category.ETF.pays_dividends
        assert not Category.BOND.pays_dividends

    def test_should_have_labels_for_every_category(self) -> None:
        """Test that every category has a display label."""
        assert Category.ETF_DIVIDEND.label == "ETF (dividends)"
        assert all(category.label for category in Category)


class TestDivestmentKindEnum:
    """Tests for DivestmentKind enum."""

    def test_should_remove_holding_only_when_total(self) -> None:
        """Test removes_holding flag."""
        assert DivestmentKind.TOTAL.removes_holding
        assert not DivestmentKind.PARTIAL.removes_holding

    def test_should_parse_from_value(self) -> None:
        """Test building kinds from their string values."""
        assert DivestmentKind("partial") == DivestmentKind.PARTIAL
        with pytest.raises(ValueError):
            DivestmentKind("half")


class TestEntryModeEnum:
    """Tests for EntryMode enum."""

    def test_should_flag_derived_mode_as_existing_position(self) -> None:
        """Test is_existing_position flag."""
        assert EntryMode.DERIVED.is_existing_position
        assert not EntryMode.DIRECT.is_existing_position
