"""
Storage interfaces for the ledger.

The storage collaborator keeps every record scoped by user and must provide
indexed lookup by id and by owning holding id, with atomic create, update and
delete of a single record.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from investledger.core.models.divestment import DivestmentRecord
from investledger.core.models.dividend import DividendRecord
from investledger.core.models.holding import Holding


class IPortfolioStore(ABC):
    """Abstract interface for per-user portfolio persistence."""

    # Holdings
    @abstractmethod
    def get_holding(self, user_id: str, holding_id: str) -> Holding | None:
        """Get one holding, or None if absent."""

    @abstractmethod
    def list_holdings(self, user_id: str) -> list[Holding]:
        """List every holding of a user."""

    @abstractmethod
    def save_holding(self, holding: Holding) -> None:
        """Create or replace a holding."""

    @abstractmethod
    def delete_holding(self, user_id: str, holding_id: str) -> bool:
        """Delete a holding. Returns False if it was absent."""

    # Divestments
    @abstractmethod
    def get_divestment(self, user_id: str, divestment_id: str) -> DivestmentRecord | None:
        """Get one divestment record, or None if absent."""

    @abstractmethod
    def list_divestments(
        self, user_id: str, holding_id: str | None = None
    ) -> list[DivestmentRecord]:
        """List divestment records, optionally for one holding."""

    @abstractmethod
    def save_divestment(self, record: DivestmentRecord) -> None:
        """Create a divestment record."""

    @abstractmethod
    def delete_divestment(self, user_id: str, divestment_id: str) -> bool:
        """Delete a divestment record. Returns False if it was absent."""

    # Dividends
    @abstractmethod
    def get_dividend(self, user_id: str, dividend_id: str) -> DividendRecord | None:
        """Get one dividend record, or None if absent."""

    @abstractmethod
    def list_dividends(self, user_id: str, holding_id: str | None = None) -> list[DividendRecord]:
        """List dividend records, optionally for one holding."""

    @abstractmethod
    def save_dividend(self, record: DividendRecord) -> None:
        """Create a dividend record."""

    @abstractmethod
    def delete_dividend(self, user_id: str, dividend_id: str) -> bool:
        """Delete a dividend record. Returns False if it was absent."""

    def clear_user(self, user_id: str) -> None:
        """Drop every record of a user."""
        for record in self.list_dividends(user_id):
            self.delete_dividend(user_id, record.id)
        for record in self.list_divestments(user_id):
            self.delete_divestment(user_id, record.id)
        for holding in self.list_holdings(user_id):
            self.delete_holding(user_id, holding.id)

    @contextmanager
    def atomic(self, user_id: str) -> Iterator[None]:
        """Group the writes of a block for one user.

        Stores that can undo writes apply the whole block or none of it.
        This default offers no rollback, so callers still compensate for
        their own partial writes.
        """
        yield
