"""
JSON snapshots of a user's portfolio.

A snapshot is the document `{version, exportDate, investments, divestments,
dividends}`. Exports are complete; imports validate every record before
replacing the user's data set, so a bad document leaves the store untouched.
"""

import json
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from loguru import logger

from investledger.core.constants import MAX_USER_ID_LENGTH, SAFE_USER_ID, SNAPSHOT_VERSION
from investledger.core.exceptions.ledger import StorageError, ValidationError
from investledger.core.interfaces.storage import IPortfolioStore
from investledger.core.models.divestment import DivestmentRecord
from investledger.core.models.dividend import DividendRecord
from investledger.core.models.holding import Holding

from .memory_store import InMemoryPortfolioStore


def export_snapshot(store: IPortfolioStore, user_id: str) -> dict[str, Any]:
    """Serialize every record of a user."""
    return {
        "version": SNAPSHOT_VERSION,
        "exportDate": datetime.now(UTC).isoformat(),
        "investments": [h.to_dict() for h in store.list_holdings(user_id)],
        "divestments": [d.to_dict() for d in store.list_divestments(user_id)],
        "dividends": [d.to_dict() for d in store.list_dividends(user_id)],
    }


T = TypeVar("T")


def _parse_section(
    payload: dict[str, Any], section: str, parser: Any, user_id: str, reasons: list[str]
) -> list[T]:
    """Parse one snapshot section, collecting a reason per invalid entry."""
    entries = payload.get(section, [])
    if not isinstance(entries, list):
        reasons.append(f"{section} must be a list")
        return []
    parsed = []
    for index, entry in enumerate(entries):
        try:
            record = parser({**entry, "user_id": user_id})
        except ValidationError as e:
            reasons.extend(f"{section}[{index}]: {reason}" for reason in e.reasons)
        except (KeyError, TypeError, ValueError) as e:
            reasons.append(f"{section}[{index}]: {type(e).__name__}: {e}")
        else:
            parsed.append(record)
    return parsed


def parse_snapshot(
    payload: dict[str, Any], user_id: str
) -> tuple[list[Holding], list[DivestmentRecord], list[DividendRecord]]:
    """Validate a snapshot document and return its records owned by `user_id`.

    Raises:
        ValidationError: Listing every invalid entry
    """
    reasons: list[str] = []
    version = payload.get("version")
    if version != SNAPSHOT_VERSION:
        reasons.append(f"Unsupported snapshot version: {version}")

    holdings: list[Holding] = _parse_section(
        payload, "investments", Holding.from_dict, user_id, reasons
    )
    divestments: list[DivestmentRecord] = _parse_section(
        payload, "divestments", DivestmentRecord.from_dict, user_id, reasons
    )
    dividends: list[DividendRecord] = _parse_section(
        payload, "dividends", DividendRecord.from_dict, user_id, reasons
    )

    if reasons:
        raise ValidationError(reasons)
    return holdings, divestments, dividends


def import_snapshot(store: IPortfolioStore, user_id: str, payload: dict[str, Any]) -> dict[str, int]:
    """Replace a user's data set with the content of a snapshot.

    Returns:
        Number of imported records per section
    """
    holdings, divestments, dividends = parse_snapshot(payload, user_id)

    with store.atomic(user_id):
        store.clear_user(user_id)
        for holding in holdings:
            store.save_holding(holding)
        for divestment in divestments:
            store.save_divestment(divestment)
        for dividend in dividends:
            store.save_dividend(dividend)

    counts = {
        "investments": len(holdings),
        "divestments": len(divestments),
        "dividends": len(dividends),
    }
    logger.info(f"Imported snapshot for user {user_id}: {counts}")
    return counts


class SnapshotFileStore(InMemoryPortfolioStore):
    """In-memory store written through to one JSON snapshot file per user.

    Files live in `directory` as `<user_id>.json` and are loaded at startup.
    User ids are restricted to letters, digits, `_` and `-` so every file
    stays inside `directory`. Each write replaces the file atomically; when
    the file cannot be written the in-memory change is undone as well.
    """

    def __init__(self, directory: str | Path) -> None:
        super().__init__()
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._loading = False
        self._depth: dict[str, int] = {}
        self._load_all()

    def _path_for(self, user_id: str) -> Path:
        if not isinstance(user_id, str) or not SAFE_USER_ID.fullmatch(user_id):
            raise ValidationError(
                f"User id must be 1-{MAX_USER_ID_LENGTH} letters, digits, '_' or '-'"
            )
        root = self.directory.resolve()
        path = (root / f"{user_id}.json").resolve()
        if path.parent != root:
            raise ValidationError(f"User id {user_id!r} does not map into the snapshot directory")
        return path

    def _load_all(self) -> None:
        self._loading = True
        try:
            for path in sorted(self.directory.glob("*.json")):
                user_id = path.stem
                if not SAFE_USER_ID.fullmatch(user_id):
                    logger.warning(f"Skipping snapshot file with unsupported name: {path.name}")
                    continue
                try:
                    payload = json.loads(path.read_text(encoding="utf-8"))
                except (OSError, json.JSONDecodeError) as e:
                    raise StorageError(f"Cannot read snapshot {path.name}: {e}") from e
                import_snapshot(self, user_id, payload)
                logger.debug(f"Loaded snapshot file: {path.name}")
        finally:
            self._loading = False

    def _flush(self, user_id: str) -> None:
        payload = export_snapshot(self, user_id)
        target = self._path_for(user_id)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None:
                with suppress(OSError):
                    Path(tmp_name).unlink(missing_ok=True)
            logger.error(f"File system error writing {target.name}: {e}")
            raise StorageError(f"Cannot write snapshot {target.name}: {e}") from e

    @contextmanager
    def atomic(self, user_id: str) -> Iterator[None]:
        """Apply the writes of the block in memory and on disk, or neither.

        Nested blocks share the outermost one; the file is written once when
        it exits.
        """
        self._path_for(user_id)
        with self._lock:
            if self._depth.get(user_id):
                self._depth[user_id] += 1
                try:
                    yield
                finally:
                    self._depth[user_id] -= 1
                return

            before = self._copy_tables(user_id)
            self._depth[user_id] = 1
            try:
                yield
                if not self._loading:
                    self._flush(user_id)
            except Exception:
                self._restore_tables(user_id, before)
                logger.warning(f"Rolled back writes for user {user_id}")
                raise
            finally:
                del self._depth[user_id]

    def save_holding(self, holding: Holding) -> None:
        with self.atomic(holding.user_id):
            super().save_holding(holding)

    def delete_holding(self, user_id: str, holding_id: str) -> bool:
        with self._lock:
            if self.get_holding(user_id, holding_id) is None:
                return False
            with self.atomic(user_id):
                return super().delete_holding(user_id, holding_id)

    def save_divestment(self, record: DivestmentRecord) -> None:
        with self.atomic(record.user_id):
            super().save_divestment(record)

    def delete_divestment(self, user_id: str, divestment_id: str) -> bool:
        with self._lock:
            if self.get_divestment(user_id, divestment_id) is None:
                return False
            with self.atomic(user_id):
                return super().delete_divestment(user_id, divestment_id)

    def save_dividend(self, record: DividendRecord) -> None:
        with self.atomic(record.user_id):
            super().save_dividend(record)

    def delete_dividend(self, user_id: str, dividend_id: str) -> bool:
        with self._lock:
            if self.get_dividend(user_id, dividend_id) is None:
                return False
            with self.atomic(user_id):
                return super().delete_dividend(user_id, dividend_id)

    def clear_user(self, user_id: str) -> None:
        with self.atomic(user_id):
            super().clear_user(user_id)
