"""
Divestment calculator.

This module computes the outcome of liquidating all or part of a holding and
commits it through a quote-then-confirm protocol: the tax and cash outcome is
shown before the irreversible holding mutation happens.
"""

from datetime import date

from loguru import logger

from investledger.core.constants import DEFAULT_DIVESTMENT_REASON
from investledger.core.enums import DivestmentKind
from investledger.core.exceptions.ledger import (
    InvalidAmountError,
    NoPendingQuoteError,
    NotFoundError,
    ValidationError,
)
from investledger.core.interfaces.storage import IPortfolioStore
from investledger.core.models.divestment import DivestmentQuote, DivestmentRecord
from investledger.core.models.holding import Holding
from investledger.core.types.financial import (
    ZERO,
    DivestmentOutcome,
    divestment_outcome,
    proportional_cost,
    safe_float_comparison,
    to_float,
)
from investledger.core.utils.validation import is_number

from .ledger import HoldingLedger
from .portfolio_helpers import new_id


class DivestmentCalculator:
    """Divestment operations of one user.

    Holds at most one pending quote at a time; a new quote replaces the
    previous one.
    """

    def __init__(self, ledger: HoldingLedger, store: IPortfolioStore) -> None:
        """Initialize with the ledger whose holdings are divested.

        Args:
            ledger: Holding ledger of the user
            store: Portfolio storage receiving divestment records
        """
        self.ledger = ledger
        self.store = store
        self.user_id = ledger.user_id
        self._pending: DivestmentQuote | None = None

    @property
    def pending_quote(self) -> DivestmentQuote | None:
        """The quote awaiting confirmation, if any."""
        return self._pending

    @staticmethod
    def compute(
        holding: Holding, kind: DivestmentKind, divested_amount: float | None = None
    ) -> DivestmentOutcome:
        """Compute the outcome of divesting a holding without side effects.

        - TOTAL: the whole current value at the whole cost basis.
        - PARTIAL: `divested_amount` at the proportional share of the cost basis.

        Raises:
            InvalidAmountError: If a partial amount is missing, not positive or
                exceeds the current value
        """
        if kind == DivestmentKind.TOTAL:
            return divestment_outcome(holding.current_value, holding.amount)

        if divested_amount is None or not is_number(divested_amount):
            raise InvalidAmountError("a partial divestment needs a numeric amount")
        if divested_amount <= ZERO:
            raise InvalidAmountError(f"divested amount must be positive, got {divested_amount}")
        if divested_amount > holding.current_value:
            raise InvalidAmountError(
                f"divested amount {divested_amount:.2f} exceeds current value "
                f"{holding.current_value:.2f}"
            )
        divested_cost = proportional_cost(holding.amount, holding.current_value, divested_amount)
        return divestment_outcome(to_float(divested_amount), divested_cost)

    def quote(
        self,
        holding_id: str,
        kind: DivestmentKind | str,
        divested_amount: float | None = None,
        on: date | None = None,
        reason: str = DEFAULT_DIVESTMENT_REASON,
        notes: str = "",
    ) -> DivestmentQuote:
        """Quote a divestment and keep it as the pending quote.

        Raises:
            NotFoundError: If the holding is absent
            InvalidAmountError: If the partial amount is invalid
            ValidationError: If the kind is unknown
        """
        try:
            kind = DivestmentKind(kind)
        except ValueError:
            raise ValidationError(f"Unsupported divestment kind: {kind}") from None
        holding = self.ledger.get(holding_id)
        outcome = self.compute(holding, kind, divested_amount)

        quote = DivestmentQuote.from_outcome(
            quote_id=new_id(),
            holding_id=holding.id,
            holding_name=holding.name,
            kind=kind,
            on=on or date.today(),
            outcome=outcome,
            basis_amount=holding.amount,
            basis_current_value=holding.current_value,
            reason=(reason or "").strip() or DEFAULT_DIVESTMENT_REASON,
            notes=(notes or "").strip(),
        )
        self._pending = quote
        logger.debug(
            f"Quoted {kind.value} divestment of {holding_id}: amount={outcome.divested_amount:.2f} "
            f"tax={outcome.tax:.2f} net_cash={outcome.net_cash:.2f}"
        )
        return quote

    def discard(self, quote: DivestmentQuote | None = None) -> None:
        """Drop the pending quote. No other side effect."""
        if quote is not None and self._pending is not None:
            if quote.quote_id != self._pending.quote_id:
                return
        self._pending = None

    def _take_pending(self, quote: DivestmentQuote | None) -> DivestmentQuote:
        pending = self._pending
        if pending is None:
            raise NoPendingQuoteError()
        if quote is not None and quote.quote_id != pending.quote_id:
            raise NoPendingQuoteError(f"Quote {quote.quote_id} is not the pending quote")
        return pending

    def _revalidate(self, quote: DivestmentQuote) -> Holding:
        """Re-check the quoted holding right before mutating it."""
        try:
            holding = self.ledger.get(quote.holding_id)
        except NotFoundError:
            self._pending = None
            raise
        unchanged = safe_float_comparison(
            holding.amount, quote.basis_amount
        ) and safe_float_comparison(holding.current_value, quote.basis_current_value)
        if not unchanged:
            self._pending = None
            raise InvalidAmountError(
                "holding changed since the quote was computed, request a new quote"
            )
        return holding

    def confirm(self, quote: DivestmentQuote | None = None) -> DivestmentRecord:
        """Commit the pending quote.

        Creates the divestment record, then removes the holding (TOTAL) or
        reduces it (PARTIAL) inside one atomic store block. If the holding
        mutation fails the record is deleted again, so the operation applies
        fully or not at all.

        Raises:
            NoPendingQuoteError: If there is no pending quote or `quote` is not it
            NotFoundError: If the holding vanished since the quote
            InvalidAmountError: If the holding changed since the quote
        """
        pending = self._take_pending(quote)
        holding = self._revalidate(pending)

        record = DivestmentRecord.from_quote(pending, record_id=new_id(), user_id=self.user_id)
        with self.store.atomic(self.user_id):
            try:
                self.store.save_divestment(record)
                if pending.kind.removes_holding:
                    self.ledger.remove(holding.id)
                else:
                    self.ledger.apply_partial_divestment(
                        holding.id, pending.divested_amount, pending.divested_cost, pending.date
                    )
            except Exception:
                self.store.delete_divestment(self.user_id, record.id)
                logger.error(f"Rolled back divestment {record.id} after holding update failed")
                raise

        self._pending = None
        logger.info(
            f"Confirmed {record.kind.value} divestment {record.id} of {record.holding_name}: "
            f"net_cash={record.net_cash:.2f}"
        )
        return record

    def get(self, divestment_id: str) -> DivestmentRecord:
        """Get a divestment record.

        Raises:
            NotFoundError: If the record is absent
        """
        record = self.store.get_divestment(self.user_id, divestment_id)
        if record is None:
            raise NotFoundError("Divestment", divestment_id)
        return record

    def list_divestments(self, holding_id: str | None = None) -> list[DivestmentRecord]:
        """List divestment records, newest first."""
        records = self.store.list_divestments(self.user_id, holding_id)
        return sorted(records, key=lambda r: (r.date, r.created_at), reverse=True)

    def remove(self, divestment_id: str) -> DivestmentRecord:
        """Delete a divestment record. The originating holding is not restored.

        Raises:
            NotFoundError: If the record is absent
        """
        record = self.get(divestment_id)
        self.store.delete_divestment(self.user_id, divestment_id)
        logger.info(f"Deleted divestment {divestment_id} ({record.holding_name})")
        return record
