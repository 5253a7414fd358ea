"""
Custom exception hierarchy for the investment ledger.

This module defines domain-specific exceptions for better error handling.
Every condition is recoverable by the caller.
"""

from collections.abc import Iterable


class LedgerException(Exception):
    """Base exception for all ledger-related errors."""

    pass


class ValidationError(LedgerException):
    """Raised when input validation fails.

    Carries every violated rule, not only the first one found.
    """

    def __init__(self, reasons: Iterable[str] | str):
        if isinstance(reasons, str):
            reasons = [reasons]
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons))


class NotFoundError(LedgerException):
    """Raised when trying to operate on a non-existent entity."""

    def __init__(self, entity_kind: str, entity_id: str):
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        super().__init__(f"{entity_kind} not found: {entity_id}")


class InvalidAmountError(LedgerException):
    """Raised when a monetary amount is outside what the holding allows."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid amount: {reason}")


class IneligibleHoldingError(LedgerException):
    """Raised when a dividend targets a holding of a non dividend-paying category."""

    def __init__(self, holding_id: str, category: str):
        self.holding_id = holding_id
        self.category = category
        super().__init__(f"Holding {holding_id} of category '{category}' cannot receive dividends")


class DivisionDegenerateError(LedgerException):
    """Raised when deriving a cost basis would divide by zero."""

    def __init__(self, performance: float):
        self.performance = performance
        super().__init__(f"Cannot derive cost basis from a performance of {performance}%")


class NoPendingQuoteError(LedgerException):
    """Raised when confirming a divestment without a matching pending quote."""

    def __init__(self, message: str = "No pending divestment quote to confirm"):
        super().__init__(message)


class StorageError(LedgerException):
    """Raised when the storage collaborator fails."""

    pass
