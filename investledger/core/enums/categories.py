"""
Holding category enumerations.

This module defines the canonical investment categories tracked by the ledger.
"""

from enum import StrEnum

# Codes used by the first release of the browser front end
_LEGACY_ALIASES = {
    "fondo": "fund",
    "azione": "equity",
    "azione-dividendi": "equity-dividend",
    "etf-dividendi": "etf-dividend",
    "obbligazione": "bond",
}


class Category(StrEnum):
    """
    Allowed investment categories.

    The dividend-paying subset (equity-dividend, etf-dividend, reit) is the
    only one eligible for dividend receipts.
    """

    FUND = "fund"
    EQUITY = "equity"
    EQUITY_DIVIDEND = "equity-dividend"
    ETF = "etf"
    ETF_DIVIDEND = "etf-dividend"
    BOND = "bond"
    REIT = "reit"

    @property
    def pays_dividends(self) -> bool:
        """Check if holdings of this category can receive dividends."""
        return self in (self.EQUITY_DIVIDEND, self.ETF_DIVIDEND, self.REIT)

    @property
    def label(self) -> str:
        """Human readable label."""
        labels = {
            self.FUND: "Fund",
            self.EQUITY: "Equity",
            self.EQUITY_DIVIDEND: "Equity (dividends)",
            self.ETF: "ETF",
            self.ETF_DIVIDEND: "ETF (dividends)",
            self.BOND: "Bond",
            self.REIT: "REIT",
        }
        return labels[self]

    @classmethod
    def dividend_paying(cls) -> frozenset["Category"]:
        """Get the dividend-paying subset."""
        return frozenset(category for category in cls if category.pays_dividends)

    @classmethod
    def from_string(cls, value: str) -> "Category":
        """
        Convert string to Category enum, with case-insensitive matching.

        Args:
            value: String representation of the category

        Returns:
            Corresponding Category enum value

        Raises:
            ValueError: If the category is not supported
        """
        normalized = value.strip().lower().replace("_", "-")
        normalized = _LEGACY_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"Unsupported category: {value}. "
                f"Supported categories: {', '.join([c.value for c in cls])}"
            ) from None
