"""
Unit tests for the DivestmentCalculator.
Testing quote computation, the quote-then-confirm protocol and record removal.
"""

from datetime import date
from pathlib import Path

import pytest

from investledger.core.enums import DivestmentKind, EntryMode
from investledger.core.exceptions.ledger import (
    InvalidAmountError,
    NoPendingQuoteError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from investledger.core.models.divestment_calculator import DivestmentCalculator
from investledger.core.models.holding import Holding, HoldingDraft
from investledger.core.models.ledger import HoldingLedger
from investledger.infrastructure.storage import InMemoryPortfolioStore, SnapshotFileStore, snapshot


@pytest.fixture
def store() -> InMemoryPortfolioStore:
    """Create an empty store."""
    return InMemoryPortfolioStore()


@pytest.fixture
def ledger(store: InMemoryPortfolioStore) -> HoldingLedger:
    """Create a ledger for one user."""
    return HoldingLedger(store, "alice")


@pytest.fixture
def calculator(ledger: HoldingLedger, store: InMemoryPortfolioStore) -> DivestmentCalculator:
    """Create a calculator over the ledger."""
    return DivestmentCalculator(ledger, store)


@pytest.fixture
def holding(ledger: HoldingLedger) -> Holding:
    """Create a holding bought for 1000 and now worth 1500."""
    return ledger.create(
        HoldingDraft(
            name="World ETF",
            category="etf",
            date=date(2023, 3, 1),
            amount=1000.0,
            current_value=1500.0,
            quantity=10.0,
        )
    )


class TestCompute:
    """Test suite for the side-effect free computation."""

    def test_should_compute_total_divestment(self, holding: Holding) -> None:
        """Test that a total divestment sells everything at the full basis."""
        outcome = DivestmentCalculator.compute(holding, DivestmentKind.TOTAL)

        assert outcome.divested_amount == 1500.0
        assert outcome.divested_cost == 1000.0
        assert outcome.gross_gain == pytest.approx(500.0)
        assert outcome.tax == pytest.approx(130.0)
        assert outcome.net_cash == pytest.approx(1370.0)

    def test_should_compute_partial_divestment(self, holding: Holding) -> None:
        """Test the worked example: sell 600 of 1500 with 1000 basis."""
        outcome = DivestmentCalculator.compute(holding, DivestmentKind.PARTIAL, 600.0)

        assert outcome.divested_cost == pytest.approx(400.0)
        assert outcome.gross_gain == pytest.approx(200.0)
        assert outcome.tax == pytest.approx(52.0)
        assert outcome.net_gain == pytest.approx(148.0)
        assert outcome.net_cash == pytest.approx(548.0)

    def test_should_match_total_when_selling_whole_value(self, holding: Holding) -> None:
        """Test that a partial sale of the full value equals a total divestment."""
        partial = DivestmentCalculator.compute(holding, DivestmentKind.PARTIAL, 1500.0)
        total = DivestmentCalculator.compute(holding, DivestmentKind.TOTAL)

        assert partial.divested_cost == pytest.approx(total.divested_cost)
        assert partial.tax == pytest.approx(total.tax)
        assert partial.net_cash == pytest.approx(total.net_cash)

    @pytest.mark.parametrize("amount", [None, 0.0, -10.0, 1500.01])
    def test_should_reject_invalid_partial_amount(self, holding: Holding, amount) -> None:
        """Test that partial amounts must be in (0, current value]."""
        with pytest.raises(InvalidAmountError):
            DivestmentCalculator.compute(holding, DivestmentKind.PARTIAL, amount)

    def test_should_not_tax_a_loss(self, ledger: HoldingLedger) -> None:
        """Test that selling below cost owes no tax."""
        losing = ledger.create(
            HoldingDraft(
                name="Old Bond",
                category="bond",
                date=date(2020, 1, 1),
                amount=1000.0,
                current_value=800.0,
            )
        )

        outcome = DivestmentCalculator.compute(losing, DivestmentKind.TOTAL)

        assert outcome.gross_gain == pytest.approx(-200.0)
        assert outcome.tax == 0.0
        assert outcome.net_cash == pytest.approx(800.0)


class TestQuote:
    """Test suite for quoting."""

    def test_should_hold_quote_without_side_effects(
        self,
        calculator: DivestmentCalculator,
        holding: Holding,
        ledger: HoldingLedger,
        store: InMemoryPortfolioStore,
    ) -> None:
        """Test that quoting changes nothing but the pending quote."""
        quote = calculator.quote(holding.id, "partial", 600.0, date(2024, 5, 2), reason="rebalance")

        assert calculator.pending_quote == quote
        assert quote.kind == DivestmentKind.PARTIAL
        assert quote.reason == "rebalance"
        assert quote.date == date(2024, 5, 2)
        assert ledger.get(holding.id) == holding
        assert store.list_divestments("alice") == []

    def test_should_default_reason_and_date(
        self, calculator: DivestmentCalculator, holding: Holding
    ) -> None:
        """Test quote defaults."""
        quote = calculator.quote(holding.id, DivestmentKind.TOTAL, reason="  ")

        assert quote.reason == "unspecified"
        assert quote.date == date.today()

    def test_should_replace_previous_quote(
        self, calculator: DivestmentCalculator, holding: Holding
    ) -> None:
        """Test that only one quote is pending at a time."""
        calculator.quote(holding.id, DivestmentKind.TOTAL)
        second = calculator.quote(holding.id, DivestmentKind.PARTIAL, 100.0)
        assert calculator.pending_quote == second

    def test_should_raise_not_found_for_unknown_holding(
        self, calculator: DivestmentCalculator
    ) -> None:
        """Test quoting a missing holding."""
        with pytest.raises(NotFoundError):
            calculator.quote("missing", DivestmentKind.TOTAL)
        assert calculator.pending_quote is None

    def test_should_reject_unknown_kind(
        self, calculator: DivestmentCalculator, holding: Holding
    ) -> None:
        """Test that an unknown kind is a validation error."""
        with pytest.raises(ValidationError, match="Unsupported divestment kind: halve"):
            calculator.quote(holding.id, "halve")
        assert calculator.pending_quote is None


class TestConfirm:
    """Test suite for confirming quotes."""

    def test_should_reduce_holding_on_partial_confirm(
        self,
        calculator: DivestmentCalculator,
        holding: Holding,
        ledger: HoldingLedger,
    ) -> None:
        """Test that a partial confirm creates a record and shrinks the holding."""
        calculator.quote(holding.id, DivestmentKind.PARTIAL, 600.0, date(2024, 5, 2))

        record = calculator.confirm()

        assert record.user_id == "alice"
        assert record.holding_name == "World ETF"
        assert record.net_cash == pytest.approx(548.0)
        assert record.year == 2024
        remaining = ledger.get(holding.id)
        assert remaining.amount == pytest.approx(600.0)
        assert remaining.current_value == pytest.approx(900.0)
        assert remaining.quantity == pytest.approx(6.0)
        assert calculator.pending_quote is None

    def test_should_remove_holding_on_total_confirm(
        self,
        calculator: DivestmentCalculator,
        holding: Holding,
        ledger: HoldingLedger,
        store: InMemoryPortfolioStore,
    ) -> None:
        """Test that a total confirm deletes the holding but keeps the record."""
        calculator.quote(holding.id, DivestmentKind.TOTAL)

        record = calculator.confirm()

        with pytest.raises(NotFoundError):
            ledger.get(holding.id)
        assert store.get_divestment("alice", record.id) == record

    def test_should_keep_holding_at_zero_after_full_partial(
        self, calculator: DivestmentCalculator, holding: Holding, ledger: HoldingLedger
    ) -> None:
        """Test that a partial sale of everything leaves an empty holding."""
        calculator.quote(holding.id, DivestmentKind.PARTIAL, 1500.0)
        calculator.confirm()

        remaining = ledger.get(holding.id)
        assert remaining.current_value == pytest.approx(0.0)
        assert remaining.amount == pytest.approx(0.0)
        assert remaining.quantity is None

    def test_should_raise_without_pending_quote(self, calculator: DivestmentCalculator) -> None:
        """Test confirming with nothing pending."""
        with pytest.raises(NoPendingQuoteError):
            calculator.confirm()

    def test_should_raise_for_foreign_quote(
        self, calculator: DivestmentCalculator, holding: Holding
    ) -> None:
        """Test confirming a quote that is no longer pending."""
        stale = calculator.quote(holding.id, DivestmentKind.TOTAL)
        calculator.quote(holding.id, DivestmentKind.PARTIAL, 100.0)

        with pytest.raises(NoPendingQuoteError):
            calculator.confirm(stale)

    def test_should_raise_not_found_when_holding_deleted(
        self, calculator: DivestmentCalculator, holding: Holding, ledger: HoldingLedger
    ) -> None:
        """Test confirming after the holding disappeared."""
        calculator.quote(holding.id, DivestmentKind.TOTAL)
        ledger.remove(holding.id)

        with pytest.raises(NotFoundError):
            calculator.confirm()
        assert calculator.pending_quote is None

    def test_should_reject_quote_when_holding_changed(
        self,
        calculator: DivestmentCalculator,
        holding: Holding,
        ledger: HoldingLedger,
        store: InMemoryPortfolioStore,
    ) -> None:
        """Test that a revaluation between quote and confirm invalidates the quote."""
        calculator.quote(holding.id, DivestmentKind.PARTIAL, 600.0)
        ledger.revalue(holding.id, 500.0, date(2024, 6, 1))

        with pytest.raises(InvalidAmountError, match="holding changed"):
            calculator.confirm()
        assert store.list_divestments("alice") == []
        assert calculator.pending_quote is None

    def test_should_roll_back_record_when_holding_update_fails(
        self,
        calculator: DivestmentCalculator,
        holding: Holding,
        ledger: HoldingLedger,
        store: InMemoryPortfolioStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that confirm applies fully or not at all."""

        def broken(*args, **kwargs):
            raise StorageError("write failed")

        calculator.quote(holding.id, DivestmentKind.PARTIAL, 600.0)
        monkeypatch.setattr(ledger, "apply_partial_divestment", broken)

        with pytest.raises(StorageError):
            calculator.confirm()
        assert store.list_divestments("alice") == []
        assert ledger.get(holding.id) == holding

    def test_should_leave_nothing_when_record_save_fails(
        self,
        calculator: DivestmentCalculator,
        holding: Holding,
        ledger: HoldingLedger,
        store: InMemoryPortfolioStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that a failed record write leaves the holding untouched."""

        def broken(*args, **kwargs):
            raise StorageError("write failed")

        calculator.quote(holding.id, DivestmentKind.TOTAL)
        monkeypatch.setattr(store, "save_divestment", broken)

        with pytest.raises(StorageError):
            calculator.confirm()
        assert store.list_divestments("alice") == []
        assert ledger.get(holding.id) == holding

    @pytest.mark.parametrize("kind", [DivestmentKind.TOTAL, DivestmentKind.PARTIAL])
    def test_should_roll_back_when_snapshot_write_fails(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, kind: DivestmentKind
    ) -> None:
        """Test that an unwritable snapshot file undoes the whole confirm."""
        store = SnapshotFileStore(tmp_path)
        ledger = HoldingLedger(store, "alice")
        calculator = DivestmentCalculator(ledger, store)
        holding = ledger.create(
            HoldingDraft(
                name="World ETF",
                category="etf",
                date=date(2023, 3, 1),
                amount=1000.0,
                current_value=1500.0,
            )
        )
        calculator.quote(holding.id, kind, 600.0)

        def disk_full(*args, **kwargs):
            raise OSError("No space left on device")

        monkeypatch.setattr(snapshot.os, "replace", disk_full)

        with pytest.raises(StorageError, match="Cannot write snapshot"):
            calculator.confirm()
        monkeypatch.undo()

        assert store.list_divestments("alice") == []
        assert ledger.get(holding.id) == holding
        reloaded = SnapshotFileStore(tmp_path)
        assert reloaded.list_divestments("alice") == []
        assert reloaded.get_holding("alice", holding.id) == holding
        assert list(tmp_path.glob("*.tmp")) == []


class TestDiscard:
    """Test suite for discarding quotes."""

    def test_should_drop_pending_quote(
        self, calculator: DivestmentCalculator, holding: Holding, ledger: HoldingLedger
    ) -> None:
        """Test that discarding has no other side effect."""
        calculator.quote(holding.id, DivestmentKind.TOTAL)

        calculator.discard()

        assert calculator.pending_quote is None
        assert ledger.get(holding.id) == holding
        with pytest.raises(NoPendingQuoteError):
            calculator.confirm()

    def test_should_ignore_discard_of_other_quote(
        self, calculator: DivestmentCalculator, holding: Holding
    ) -> None:
        """Test that discarding a replaced quote keeps the current one."""
        old = calculator.quote(holding.id, DivestmentKind.TOTAL)
        current = calculator.quote(holding.id, DivestmentKind.PARTIAL, 100.0)

        calculator.discard(old)

        assert calculator.pending_quote == current


class TestRecords:
    """Test suite for divestment record reads and deletes."""

    def test_should_list_newest_first_and_filter_by_holding(
        self, calculator: DivestmentCalculator, holding: Holding
    ) -> None:
        """Test listing order and holding filter."""
        calculator.quote(holding.id, DivestmentKind.PARTIAL, 100.0, date(2024, 1, 10))
        older = calculator.confirm()
        calculator.quote(holding.id, DivestmentKind.PARTIAL, 100.0, date(2024, 3, 10))
        newer = calculator.confirm()

        assert [r.id for r in calculator.list_divestments()] == [newer.id, older.id]
        assert len(calculator.list_divestments(holding.id)) == 2
        assert calculator.list_divestments("other") == []

    def test_should_delete_record_without_restoring_holding(
        self, calculator: DivestmentCalculator, holding: Holding, ledger: HoldingLedger
    ) -> None:
        """Test that deleting a record leaves the reduced holding as is."""
        calculator.quote(holding.id, DivestmentKind.PARTIAL, 600.0)
        record = calculator.confirm()

        calculator.remove(record.id)

        with pytest.raises(NotFoundError):
            calculator.get(record.id)
        assert ledger.get(holding.id).current_value == pytest.approx(900.0)


class TestDerivedRoundTrip:
    """Test suite combining derived entry with a total divestment."""

    def test_should_tax_gain_implied_by_entered_performance(
        self, calculator: DivestmentCalculator, ledger: HoldingLedger
    ) -> None:
        """Test 1260 at +26% sold in full: gain 260, tax 67.60, cash 1192.40."""
        holding = ledger.create(
            HoldingDraft(
                name="Legacy Fund",
                category="fund",
                date=date(2019, 4, 1),
                mode=EntryMode.DERIVED,
                current_value=1260.0,
                performance=26.0,
            )
        )
        calculator.quote(holding.id, DivestmentKind.TOTAL)

        record = calculator.confirm()

        assert record.divested_cost == pytest.approx(1000.0)
        assert record.gross_gain == pytest.approx(260.0)
        assert record.tax == pytest.approx(67.6)
        assert record.net_cash == pytest.approx(1192.4)
