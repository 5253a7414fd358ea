"""
Main portfolio service - orchestrates all ledger components.

This module provides the per-user PortfolioService by composing the focused
components: holding ledger, divestment calculator, dividend register and
aggregator, plus the registry handing out one service per user.
"""

import threading
from collections import OrderedDict
from collections.abc import Iterator, Mapping
from datetime import date
from typing import Any

from loguru import logger

from investledger.core.constants import DEFAULT_DIVESTMENT_REASON, MAX_OPEN_PORTFOLIOS
from investledger.core.enums import DivestmentKind
from investledger.core.interfaces.storage import IPortfolioStore
from investledger.core.models.divestment import DivestmentQuote, DivestmentRecord
from investledger.core.models.dividend import DividendRecord
from investledger.core.models.holding import Holding, HoldingDraft
from investledger.core.utils.decorators import log_operation

from .aggregator import PortfolioAggregator, PortfolioSummary
from .divestment_calculator import DivestmentCalculator
from .dividend_register import DividendRegister
from .ledger import HoldingLedger


class PortfolioService:
    """Portfolio of one user.

    Orchestrates portfolio operations by composing focused components:
    - HoldingLedger: holdings and their history
    - DivestmentCalculator: quote-then-confirm liquidations
    - DividendRegister: dividend receipts
    - PortfolioAggregator: summary figures and statistics

    Thread Safety:
        Mutating operations run under one re-entrant lock per user, so they
        apply in the order the lock is acquired. Reads take no lock.
    """

    def __init__(self, store: IPortfolioStore, user_id: str) -> None:
        """Initialize the service with injected storage."""
        self.store = store
        self.user_id = user_id
        self._lock = threading.RLock()

        self._ledger = HoldingLedger(store, user_id)
        self._divestments = DivestmentCalculator(self._ledger, store)
        self._dividends = DividendRegister(self._ledger, store)
        self._aggregator = PortfolioAggregator(store, user_id)

    def is_idle(self) -> bool:
        """True when no operation runs and no divestment quote is pending."""
        if self._divestments.pending_quote is not None:
            return False
        if not self._lock.acquire(blocking=False):
            return False
        self._lock.release()
        return True

    # Holdings
    @log_operation
    def create_holding(self, draft: HoldingDraft) -> Holding:
        """Create a holding (direct or derived entry)."""
        with self._lock:
            return self._ledger.create(draft)

    def list_holdings(self) -> list[Holding]:
        """List holdings, newest first."""
        return self._ledger.list_holdings()

    def get_holding(self, holding_id: str) -> Holding:
        """Get one holding."""
        return self._ledger.get(holding_id)

    @log_operation
    def revalue_holding(
        self, holding_id: str, new_value: float, on: date, note: str | None = None
    ) -> Holding:
        """Mark a holding at a new value."""
        with self._lock:
            return self._ledger.revalue(holding_id, new_value, on, note)

    @log_operation
    def update_holding(self, holding_id: str, changes: Mapping[str, Any]) -> Holding:
        """Edit a holding's descriptive fields."""
        with self._lock:
            return self._ledger.update(holding_id, changes)

    @log_operation
    def delete_holding(self, holding_id: str) -> dict[str, int]:
        """Delete a holding together with its dividend and divestment records.

        The holding goes first, then its dependents. If a deletion fails,
        everything removed so far is saved back before the error propagates.

        Returns:
            Number of deleted dependent records per kind
        """
        with self._lock:
            holding = self._ledger.get(holding_id)
            dividends = self.store.list_dividends(self.user_id, holding_id)
            divestments = self.store.list_divestments(self.user_id, holding_id)
            removed: list[DividendRecord | DivestmentRecord] = []
            with self.store.atomic(self.user_id):
                self._ledger.remove(holding_id)
                try:
                    for dividend in dividends:
                        self.store.delete_dividend(self.user_id, dividend.id)
                        removed.append(dividend)
                    for divestment in divestments:
                        self.store.delete_divestment(self.user_id, divestment.id)
                        removed.append(divestment)
                except Exception:
                    self._restore(holding, removed)
                    logger.error(f"Restored holding {holding_id} after cascaded deletion failed")
                    raise
            logger.info(
                f"Cascaded deletion of holding {holding_id}: "
                f"{len(dividends)} dividends, {len(divestments)} divestments"
            )
            return {"dividends": len(dividends), "divestments": len(divestments)}

    def _restore(self, holding: Holding, removed: list[DividendRecord | DivestmentRecord]) -> None:
        self.store.save_holding(holding)
        for record in removed:
            if isinstance(record, DividendRecord):
                self.store.save_dividend(record)
            else:
                self.store.save_divestment(record)

    # Divestments
    @log_operation
    def quote_divestment(
        self,
        holding_id: str,
        kind: DivestmentKind | str,
        divested_amount: float | None = None,
        on: date | None = None,
        reason: str = DEFAULT_DIVESTMENT_REASON,
        notes: str = "",
    ) -> DivestmentQuote:
        """Compute a divestment and hold it as the pending quote."""
        with self._lock:
            return self._divestments.quote(holding_id, kind, divested_amount, on, reason, notes)

    @property
    def pending_quote(self) -> DivestmentQuote | None:
        """The divestment quote awaiting confirmation."""
        return self._divestments.pending_quote

    @log_operation
    def confirm_divestment(self, quote: DivestmentQuote | None = None) -> DivestmentRecord:
        """Commit the pending divestment quote."""
        with self._lock:
            return self._divestments.confirm(quote)

    def discard_divestment(self, quote: DivestmentQuote | None = None) -> None:
        """Drop the pending divestment quote."""
        with self._lock:
            self._divestments.discard(quote)

    @log_operation
    def delete_divestment(self, divestment_id: str) -> DivestmentRecord:
        """Delete a divestment record."""
        with self._lock:
            return self._divestments.remove(divestment_id)

    def list_divestments(self, holding_id: str | None = None) -> list[DivestmentRecord]:
        """List divestments, newest first."""
        return self._divestments.list_divestments(holding_id)

    # Dividends
    @log_operation
    def record_dividend(
        self,
        holding_id: str,
        on: date,
        gross_amount: float,
        taxes_withheld: float = 0.0,
        notes: str = "",
    ) -> DividendRecord:
        """Record a dividend receipt."""
        with self._lock:
            return self._dividends.record(holding_id, on, gross_amount, taxes_withheld, notes)

    @log_operation
    def delete_dividend(self, dividend_id: str) -> DividendRecord:
        """Delete a dividend record."""
        with self._lock:
            return self._dividends.remove(dividend_id)

    def list_dividends(
        self,
        holding_id: str | None = None,
        year: int | None = None,
        holding_name: str | None = None,
    ) -> list[DividendRecord]:
        """List dividends, newest first."""
        return self._dividends.list_dividends(holding_id, year, holding_name)

    def eligible_holdings(self) -> Iterator[Holding]:
        """Lazily yield dividend-paying holdings."""
        return self._dividends.eligible_holdings()

    # Aggregates
    def portfolio_summary(self) -> PortfolioSummary:
        """Summary figures of the portfolio."""
        return self._aggregator.summary()

    def divestment_stats(self) -> dict[str, Any]:
        """Divestment statistics."""
        return self._aggregator.divestment_stats()

    def dividend_stats(self) -> dict[str, Any]:
        """Dividend statistics."""
        return self._aggregator.dividend_stats()

    def category_stats(self) -> dict[str, dict[str, float | int]]:
        """Holdings grouped by category."""
        return self._aggregator.category_stats()

    # Snapshots
    def export_snapshot(self) -> dict[str, Any]:
        """Serialize the user's data set."""
        from investledger.infrastructure.storage.snapshot import export_snapshot

        return export_snapshot(self.store, self.user_id)

    @log_operation
    def import_snapshot(self, payload: dict[str, Any]) -> dict[str, int]:
        """Replace the user's data set with a snapshot."""
        from investledger.infrastructure.storage.snapshot import import_snapshot

        with self._lock:
            self._divestments.discard()
            return import_snapshot(self.store, self.user_id, payload)


class PortfolioRegistry:
    """Hands out one PortfolioService per user over a shared store.

    At most `max_open` services are kept. Beyond that the least recently used
    ones are dropped, skipping any that hold a pending quote or are mid-operation.
    Their data stays in the store; a dropped service is rebuilt on next use.
    """

    def __init__(self, store: IPortfolioStore, max_open: int = MAX_OPEN_PORTFOLIOS) -> None:
        self.store = store
        self.max_open = max_open
        self._services: OrderedDict[str, PortfolioService] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._services)

    def for_user(self, user_id: str) -> PortfolioService:
        """Get the service of a user, creating it on first use."""
        with self._lock:
            service = self._services.get(user_id)
            if service is not None:
                self._services.move_to_end(user_id)
                return service
            service = PortfolioService(self.store, user_id)
            self._services[user_id] = service
            logger.debug(f"Opened portfolio service for user {user_id}")
            self._evict()
            return service

    def _evict(self) -> None:
        excess = len(self._services) - self.max_open
        if excess <= 0:
            return
        for user_id, service in list(self._services.items())[:-1]:
            if excess <= 0:
                break
            if service.is_idle():
                del self._services[user_id]
                excess -= 1
                logger.debug(f"Closed idle portfolio service for user {user_id}")
