"""
Holding ledger.

This module owns the list of active holdings and their revaluation history,
following the Single Responsibility Principle for position state.
"""

from collections.abc import Mapping
from dataclasses import replace
from datetime import date
from typing import Any

from loguru import logger

from investledger.core.enums import EntryMode
from investledger.core.exceptions.ledger import InvalidAmountError, NotFoundError
from investledger.core.interfaces.storage import IPortfolioStore
from investledger.core.models.holding import Holding, HoldingDraft, ValueUpdate
from investledger.core.types.financial import ZERO, derive_cost_basis, to_float
from investledger.core.utils.validation import coerce_category, validate_date, validate_non_negative

from .portfolio_helpers import HistoryNotes, HoldingChangeSet, HoldingValidator, new_id


class HoldingLedger:
    """Holding ledger of one user.

    Every change produces a new immutable Holding that replaces the stored
    one, so derived fields cannot drift from their sources.
    """

    def __init__(self, store: IPortfolioStore, user_id: str) -> None:
        """Initialize with the storage collaborator.

        Args:
            store: Portfolio storage
            user_id: Owner of every holding handled by this ledger
        """
        self.store = store
        self.user_id = user_id

    def get(self, holding_id: str) -> Holding:
        """Get a holding by id.

        Raises:
            NotFoundError: If the holding is absent
        """
        holding = self.store.get_holding(self.user_id, holding_id)
        if holding is None:
            raise NotFoundError("Holding", holding_id)
        return holding

    def list_holdings(self) -> list[Holding]:
        """List holdings, newest first."""
        return sorted(
            self.store.list_holdings(self.user_id), key=lambda h: h.created_at, reverse=True
        )

    def create(self, draft: HoldingDraft) -> Holding:
        """Create a holding from a draft.

        - DIRECT: cost basis supplied, current value defaults to it.
        - DERIVED: cost basis = current_value / (1 + performance / 100); the
          holding is flagged as pre-existing and gets one synthetic history entry.

        Raises:
            ValidationError: Listing every violated rule
            DivisionDegenerateError: If performance is -100 in DERIVED mode
        """
        HoldingValidator.validate_draft(draft, len(self.store.list_holdings(self.user_id)))

        category = coerce_category(draft.category)
        quantity = to_float(draft.quantity) if draft.quantity is not None else None
        common = {
            "id": new_id(),
            "user_id": self.user_id,
            "name": draft.name.strip(),
            "category": category,
            "date": draft.date,
            "quantity": quantity,
            "notes": (draft.notes or "").strip(),
        }

        if draft.mode == EntryMode.DIRECT:
            amount = to_float(draft.amount)
            current_value = (
                to_float(draft.current_value) if draft.current_value is not None else amount
            )
            holding = Holding(amount=amount, current_value=current_value, **common)
        else:
            current_value = to_float(draft.current_value)
            performance = to_float(draft.performance)
            amount = derive_cost_basis(current_value, performance)
            initial_entry = ValueUpdate(
                date=date.today(),
                value=current_value,
                note=HistoryNotes.initial_value(performance),
            )
            holding = Holding(
                amount=amount,
                current_value=current_value,
                updates=(initial_entry,),
                is_existing_investment=draft.mode.is_existing_position,
                initial_performance=performance,
                **common,
            )

        self.store.save_holding(holding)
        logger.info(
            f"Created holding {holding.id} ({holding.name}, {holding.category.value}) "
            f"amount={holding.amount:.2f} current_value={holding.current_value:.2f}"
        )
        return holding

    def revalue(
        self, holding_id: str, new_value: float, on: date, note: str | None = None
    ) -> Holding:
        """Mark a holding at a new value and append a history entry.

        Raises:
            NotFoundError: If the holding is absent
            ValidationError: If the value is negative or the date missing
        """
        validate_non_negative(new_value, "new_value")
        validate_date(on)
        holding = self.get(holding_id)
        HoldingValidator.validate_history_capacity(holding)

        updated = holding.with_update(to_float(new_value), on, note)
        self.store.save_holding(updated)
        logger.debug(
            f"Revalued holding {holding_id}: {holding.current_value:.2f} -> {updated.current_value:.2f}"
        )
        return updated

    def update(self, holding_id: str, changes: Mapping[str, Any]) -> Holding:
        """Apply whitelisted descriptive changes to a holding.

        Raises:
            NotFoundError: If the holding is absent
            ValidationError: If a field is not editable or a value is invalid
        """
        holding = self.get(holding_id)
        normalized = HoldingChangeSet.build(changes)
        if not normalized:
            return holding
        updated = replace(holding, **normalized)
        self.store.save_holding(updated)
        logger.debug(f"Updated holding {holding_id}: {sorted(normalized)}")
        return updated

    def remove(self, holding_id: str) -> Holding:
        """Delete a holding and return it.

        Dependent dividend and divestment records are not touched here; the
        caller decides whether the deletion cascades.

        Raises:
            NotFoundError: If the holding is absent
        """
        holding = self.get(holding_id)
        self.store.delete_holding(self.user_id, holding_id)
        logger.info(f"Removed holding {holding_id} ({holding.name})")
        return holding

    def apply_partial_divestment(
        self,
        holding_id: str,
        divested_amount: float,
        divested_cost: float,
        on: date | None = None,
    ) -> Holding:
        """Reduce a holding after selling part of it.

        Cost basis and current value shrink by the divested figures, quantity
        scales by the sold fraction, and a history entry records the sale.

        Raises:
            NotFoundError: If the holding is absent
            InvalidAmountError: If the amount is not positive or exceeds current value
        """
        holding = self.get(holding_id)
        if divested_amount <= ZERO:
            raise InvalidAmountError(f"divested amount must be positive, got {divested_amount}")
        if divested_amount > holding.current_value:
            raise InvalidAmountError(
                f"divested amount {divested_amount:.2f} exceeds current value "
                f"{holding.current_value:.2f}"
            )
        HoldingValidator.validate_history_capacity(holding)

        sold_fraction = divested_amount / holding.current_value
        quantity = holding.quantity
        if quantity is not None:
            quantity = quantity * (1 - sold_fraction)
            if quantity <= ZERO:
                quantity = None

        new_value = holding.current_value - divested_amount
        reduced = replace(
            holding,
            amount=max(ZERO, holding.amount - divested_cost),
            quantity=quantity,
        )
        updated = reduced.with_update(
            new_value,
            on or date.today(),
            HistoryNotes.partial_divestment(divested_amount),
        )
        self.store.save_holding(updated)
        logger.info(
            f"Partially divested holding {holding_id}: -{divested_amount:.2f} value, "
            f"-{divested_cost:.2f} cost"
        )
        return updated
