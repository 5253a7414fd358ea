"""
In-memory portfolio store.

Keeps records in per-user dictionaries keyed by id, plus a secondary index
from holding id to dependent record ids. Suitable for tests, single-process
deployments and as the working set behind snapshot persistence.
"""

from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock

from loguru import logger

from investledger.core.interfaces.storage import IPortfolioStore
from investledger.core.models.divestment import DivestmentRecord
from investledger.core.models.dividend import DividendRecord
from investledger.core.models.holding import Holding


class _UserTables:
    """Record tables of one user."""

    def __init__(self) -> None:
        self.holdings: dict[str, Holding] = {}
        self.divestments: dict[str, DivestmentRecord] = {}
        self.dividends: dict[str, DividendRecord] = {}
        self.divestments_by_holding: defaultdict[str, set[str]] = defaultdict(set)
        self.dividends_by_holding: defaultdict[str, set[str]] = defaultdict(set)

    def is_empty(self) -> bool:
        return not (self.holdings or self.divestments or self.dividends)

    def copy(self) -> "_UserTables":
        """Copy the tables. Records are immutable, so a shallow copy suffices."""
        tables = _UserTables()
        tables.holdings = dict(self.holdings)
        tables.divestments = dict(self.divestments)
        tables.dividends = dict(self.dividends)
        for holding_id, ids in self.divestments_by_holding.items():
            tables.divestments_by_holding[holding_id] = set(ids)
        for holding_id, ids in self.dividends_by_holding.items():
            tables.dividends_by_holding[holding_id] = set(ids)
        return tables


_NO_TABLES = _UserTables()


class InMemoryPortfolioStore(IPortfolioStore):
    """Thread-safe dictionary-backed implementation of IPortfolioStore.

    Records are immutable dataclasses, so handing out stored instances is safe.
    Tables of a user exist only while the user owns records; reads never
    create them.
    """

    def __init__(self) -> None:
        self._tables: dict[str, _UserTables] = {}
        self._lock = RLock()

    def _read(self, user_id: str) -> _UserTables:
        return self._tables.get(user_id, _NO_TABLES)

    def _write(self, user_id: str) -> _UserTables:
        tables = self._tables.get(user_id)
        if tables is None:
            tables = self._tables[user_id] = _UserTables()
        return tables

    def _prune(self, user_id: str) -> None:
        tables = self._tables.get(user_id)
        if tables is not None and tables.is_empty():
            del self._tables[user_id]

    def _copy_tables(self, user_id: str) -> _UserTables | None:
        tables = self._tables.get(user_id)
        return tables.copy() if tables is not None else None

    def _restore_tables(self, user_id: str, tables: _UserTables | None) -> None:
        if tables is None:
            self._tables.pop(user_id, None)
        else:
            self._tables[user_id] = tables

    @contextmanager
    def atomic(self, user_id: str) -> Iterator[None]:
        """Apply every write of the block for `user_id`, or none of them."""
        with self._lock:
            before = self._copy_tables(user_id)
            try:
                yield
            except Exception:
                self._restore_tables(user_id, before)
                logger.warning(f"Rolled back writes for user {user_id}")
                raise

    # Holdings
    def get_holding(self, user_id: str, holding_id: str) -> Holding | None:
        with self._lock:
            return self._read(user_id).holdings.get(holding_id)

    def list_holdings(self, user_id: str) -> list[Holding]:
        with self._lock:
            return list(self._read(user_id).holdings.values())

    def save_holding(self, holding: Holding) -> None:
        with self._lock:
            self._write(holding.user_id).holdings[holding.id] = holding

    def delete_holding(self, user_id: str, holding_id: str) -> bool:
        with self._lock:
            tables = self._tables.get(user_id)
            if tables is None or tables.holdings.pop(holding_id, None) is None:
                return False
            self._prune(user_id)
            return True

    # Divestments
    def get_divestment(self, user_id: str, divestment_id: str) -> DivestmentRecord | None:
        with self._lock:
            return self._read(user_id).divestments.get(divestment_id)

    def list_divestments(
        self, user_id: str, holding_id: str | None = None
    ) -> list[DivestmentRecord]:
        with self._lock:
            tables = self._read(user_id)
            if holding_id is None:
                return list(tables.divestments.values())
            ids = tables.divestments_by_holding.get(holding_id, set())
            return [tables.divestments[record_id] for record_id in ids]

    def save_divestment(self, record: DivestmentRecord) -> None:
        with self._lock:
            tables = self._write(record.user_id)
            tables.divestments[record.id] = record
            tables.divestments_by_holding[record.holding_id].add(record.id)

    def delete_divestment(self, user_id: str, divestment_id: str) -> bool:
        with self._lock:
            tables = self._tables.get(user_id)
            record = tables.divestments.pop(divestment_id, None) if tables else None
            if record is None:
                return False
            ids = tables.divestments_by_holding[record.holding_id]
            ids.discard(divestment_id)
            if not ids:
                del tables.divestments_by_holding[record.holding_id]
            self._prune(user_id)
            return True

    # Dividends
    def get_dividend(self, user_id: str, dividend_id: str) -> DividendRecord | None:
        with self._lock:
            return self._read(user_id).dividends.get(dividend_id)

    def list_dividends(self, user_id: str, holding_id: str | None = None) -> list[DividendRecord]:
        with self._lock:
            tables = self._read(user_id)
            if holding_id is None:
                return list(tables.dividends.values())
            ids = tables.dividends_by_holding.get(holding_id, set())
            return [tables.dividends[record_id] for record_id in ids]

    def save_dividend(self, record: DividendRecord) -> None:
        with self._lock:
            tables = self._write(record.user_id)
            tables.dividends[record.id] = record
            tables.dividends_by_holding[record.holding_id].add(record.id)

    def delete_dividend(self, user_id: str, dividend_id: str) -> bool:
        with self._lock:
            tables = self._tables.get(user_id)
            record = tables.dividends.pop(dividend_id, None) if tables else None
            if record is None:
                return False
            ids = tables.dividends_by_holding[record.holding_id]
            ids.discard(dividend_id)
            if not ids:
                del tables.dividends_by_holding[record.holding_id]
            self._prune(user_id)
            return True

    def clear_user(self, user_id: str) -> None:
        with self._lock:
            self._tables.pop(user_id, None)
            logger.debug(f"Cleared portfolio data for user {user_id}")

    def user_ids(self) -> list[str]:
        """List users that own at least one record."""
        with self._lock:
            return list(self._tables)
