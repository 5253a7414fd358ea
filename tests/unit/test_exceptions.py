"""
Unit tests for custom exceptions.
Testing all exception classes and their attributes.
"""

import pytest

from investledger.core.exceptions.ledger import (
    DivisionDegenerateError,
    IneligibleHoldingError,
    InvalidAmountError,
    LedgerException,
    NoPendingQuoteError,
    NotFoundError,
    StorageError,
    ValidationError,
)


class TestLedgerException:
    """Tests for LedgerException base class."""

    def test_should_create_base_exception_with_message(self) -> None:
        """Test creating base exception with message."""
        exc = LedgerException("Test error message")
        assert str(exc) == "Test error message"
        assert isinstance(exc, Exception)

    @pytest.mark.parametrize(
        "exc",
        [
            ValidationError("bad"),
            NotFoundError("Holding", "h1"),
            InvalidAmountError("too much"),
            IneligibleHoldingError("h1", "etf"),
            DivisionDegenerateError(-100.0),
            NoPendingQuoteError(),
            StorageError("disk full"),
        ],
    )
    def test_should_derive_every_error_from_base(self, exc: LedgerException) -> None:
        """Test that callers can catch every ledger error through the base class."""
        assert isinstance(exc, LedgerException)


class TestValidationError:
    """Tests for ValidationError."""

    def test_should_wrap_single_reason(self) -> None:
        """Test creating validation error from one message."""
        exc = ValidationError("Name must be at least 2 characters")
        assert exc.reasons == ["Name must be at least 2 characters"]
        assert str(exc) == "Name must be at least 2 characters"

    def test_should_keep_every_reason(self) -> None:
        """Test creating validation error from several reasons."""
        exc = ValidationError(["first problem", "second problem"])
        assert exc.reasons == ["first problem", "second problem"]
        assert str(exc) == "first problem; second problem"


class TestPayloadErrors:
    """Tests for errors carrying structured payloads."""

    def test_should_describe_missing_entity(self) -> None:
        """Test NotFoundError attributes."""
        exc = NotFoundError("Dividend", "d42")
        assert exc.entity_kind == "Dividend"
        assert exc.entity_id == "d42"
        assert str(exc) == "Dividend not found: d42"

    def test_should_describe_invalid_amount(self) -> None:
        """Test InvalidAmountError attributes."""
        exc = InvalidAmountError("exceeds current value")
        assert exc.reason == "exceeds current value"
        assert "exceeds current value" in str(exc)

    def test_should_describe_ineligible_holding(self) -> None:
        """Test IneligibleHoldingError attributes."""
        exc = IneligibleHoldingError("h1", "bond")
        assert exc.holding_id == "h1"
        assert exc.category == "bond"
        assert "bond" in str(exc)

    def test_should_describe_degenerate_division(self) -> None:
        """Test DivisionDegenerateError attributes."""
        exc = DivisionDegenerateError(-100.0)
        assert exc.performance == -100.0
        assert "-100.0" in str(exc)

    def test_should_have_default_message_without_pending_quote(self) -> None:
        """Test NoPendingQuoteError default message."""
        assert str(NoPendingQuoteError()) == "No pending divestment quote to confirm"
