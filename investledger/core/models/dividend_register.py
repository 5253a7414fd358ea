"""
Dividend register.

Records dividend receipts against dividend-paying holdings. Receipts never
change the holding they reference.
"""

from collections.abc import Iterator
from datetime import date

from loguru import logger

from investledger.core.exceptions.ledger import IneligibleHoldingError, NotFoundError
from investledger.core.interfaces.storage import IPortfolioStore
from investledger.core.models.dividend import DividendRecord
from investledger.core.models.holding import Holding
from investledger.core.types.financial import to_float

from .ledger import HoldingLedger
from .portfolio_helpers import DividendValidator, new_id


class DividendRegister:
    """Dividend operations of one user."""

    def __init__(self, ledger: HoldingLedger, store: IPortfolioStore) -> None:
        self.ledger = ledger
        self.store = store
        self.user_id = ledger.user_id

    def record(
        self,
        holding_id: str,
        on: date,
        gross_amount: float,
        taxes_withheld: float = 0.0,
        notes: str = "",
    ) -> DividendRecord:
        """Record a dividend receipt.

        Raises:
            ValidationError: If the date or amounts are invalid
            NotFoundError: If the holding is absent
            IneligibleHoldingError: If the holding's category pays no dividends
        """
        DividendValidator.validate_amounts(on, gross_amount, taxes_withheld)
        holding = self.ledger.get(holding_id)
        if not holding.pays_dividends:
            raise IneligibleHoldingError(holding.id, holding.category.value)

        record = DividendRecord.create(
            record_id=new_id(),
            user_id=self.user_id,
            holding_id=holding.id,
            holding_name=holding.name,
            on=on,
            gross_amount=to_float(gross_amount),
            taxes_withheld=to_float(taxes_withheld),
            notes=(notes or "").strip(),
        )
        self.store.save_dividend(record)
        logger.info(
            f"Recorded dividend {record.id} for {holding.name}: gross={record.gross_amount:.2f} "
            f"net={record.net_amount:.2f}"
        )
        return record

    def get(self, dividend_id: str) -> DividendRecord:
        """Get a dividend record.

        Raises:
            NotFoundError: If the record is absent
        """
        record = self.store.get_dividend(self.user_id, dividend_id)
        if record is None:
            raise NotFoundError("Dividend", dividend_id)
        return record

    def remove(self, dividend_id: str) -> DividendRecord:
        """Delete a dividend record.

        Raises:
            NotFoundError: If the record is absent
        """
        record = self.get(dividend_id)
        self.store.delete_dividend(self.user_id, dividend_id)
        logger.info(f"Deleted dividend {dividend_id} ({record.holding_name})")
        return record

    def list_dividends(
        self,
        holding_id: str | None = None,
        year: int | None = None,
        holding_name: str | None = None,
    ) -> list[DividendRecord]:
        """List dividend records, newest first, with optional filters."""
        records = self.store.list_dividends(self.user_id, holding_id)
        if year is not None:
            records = [r for r in records if r.year == year]
        if holding_name is not None:
            records = [r for r in records if r.holding_name == holding_name]
        return sorted(records, key=lambda r: (r.date, r.created_at), reverse=True)

    def eligible_holdings(self) -> Iterator[Holding]:
        """Lazily yield holdings of a dividend-paying category.

        Each call starts a fresh pass over the current holdings.
        """
        return (h for h in self.ledger.list_holdings() if h.pays_dividends)
