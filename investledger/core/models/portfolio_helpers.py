"""Helper methods for the ledger components to reduce complexity."""

import uuid
from collections.abc import Mapping
from datetime import date
from typing import Any

from investledger.core.constants import (
    MAX_HISTORY_ENTRIES,
    MAX_HOLDINGS_PER_PORTFOLIO,
    MAX_PERFORMANCE_PERCENT,
    MIN_NAME_LENGTH,
)
from investledger.core.enums import Category, EntryMode
from investledger.core.exceptions.ledger import ValidationError
from investledger.core.models.holding import Holding, HoldingDraft
from investledger.core.types.financial import HUNDRED
from investledger.core.utils.validation import RuleCollector, coerce_category, is_number


def new_id() -> str:
    """Generate an opaque unique record id."""
    return uuid.uuid4().hex


class HoldingValidator:
    """Centralized validation helper for holding input.

    Every check reports into one RuleCollector so callers receive the full
    list of violated rules.
    """

    @staticmethod
    def _check_common(rules: RuleCollector, name: Any, category: Any, on: Any, quantity: Any) -> None:
        rules.require(
            isinstance(name, str) and len(name.strip()) >= MIN_NAME_LENGTH,
            f"Name must be at least {MIN_NAME_LENGTH} characters",
        )
        rules.require(
            coerce_category(category) is not None,
            f"Category must be one of: {', '.join(c.value for c in Category)}",
        )
        rules.require(isinstance(on, date), "Acquisition date is required")
        if quantity is not None:
            rules.require(is_number(quantity) and quantity > 0, "Quantity must be greater than zero")

    @staticmethod
    def validate_draft(draft: HoldingDraft, holding_count: int) -> None:
        """Validate a creation draft.

        Raises:
            ValidationError: Listing every violated rule
        """
        rules = RuleCollector()
        HoldingValidator._check_common(
            rules, draft.name, draft.category, draft.date, draft.quantity
        )
        rules.require(
            holding_count < MAX_HOLDINGS_PER_PORTFOLIO,
            f"Maximum holdings limit reached ({MAX_HOLDINGS_PER_PORTFOLIO})",
        )

        if draft.mode == EntryMode.DIRECT:
            rules.require(
                is_number(draft.amount) and draft.amount > 0,
                "Amount must be greater than zero",
            )
            if draft.current_value is not None:
                rules.require(
                    is_number(draft.current_value) and draft.current_value >= 0,
                    "Current value must not be negative",
                )
        else:
            rules.require(
                is_number(draft.current_value) and draft.current_value > 0,
                "Current value must be greater than zero",
            )
            if rules.require(is_number(draft.performance), "Performance percentage is required"):
                rules.require(
                    abs(draft.performance) <= MAX_PERFORMANCE_PERCENT,
                    f"Performance percentage must be within ±{MAX_PERFORMANCE_PERCENT:g}%",
                )
                rules.require(
                    draft.performance >= -HUNDRED,
                    "Performance percentage cannot be below -100%",
                )

        rules.raise_if_failed()

    @staticmethod
    def validate_history_capacity(holding: Holding) -> None:
        """Validate that one more history entry fits."""
        if len(holding.updates) >= MAX_HISTORY_ENTRIES:
            raise ValidationError(
                f"Maximum history entries reached ({MAX_HISTORY_ENTRIES}) for holding {holding.id}"
            )


class HoldingChangeSet:
    """Whitelist of holding fields a caller may edit directly.

    Values, cost basis and history only change through revaluation and
    divestment. Identity and ownership never change.
    """

    MUTABLE_FIELDS = frozenset({"name", "category", "notes", "date", "quantity"})

    @classmethod
    def build(cls, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Validate requested changes and return them normalized.

        Raises:
            ValidationError: Listing rejected fields and invalid values
        """
        rules = RuleCollector()
        for field_name in sorted(set(changes) - cls.MUTABLE_FIELDS):
            rules.reasons.append(f"Field '{field_name}' cannot be modified")

        normalized: dict[str, Any] = {}
        if "name" in changes:
            name = changes["name"]
            if rules.require(
                isinstance(name, str) and len(name.strip()) >= MIN_NAME_LENGTH,
                f"Name must be at least {MIN_NAME_LENGTH} characters",
            ):
                normalized["name"] = name.strip()
        if "category" in changes:
            category = coerce_category(changes["category"])
            if rules.require(
                category is not None,
                f"Category must be one of: {', '.join(c.value for c in Category)}",
            ):
                normalized["category"] = category
        if "date" in changes:
            if rules.require(isinstance(changes["date"], date), "Acquisition date is required"):
                normalized["date"] = changes["date"]
        if "quantity" in changes:
            quantity = changes["quantity"]
            if quantity is None or rules.require(
                is_number(quantity) and quantity > 0, "Quantity must be greater than zero"
            ):
                normalized["quantity"] = float(quantity) if quantity is not None else None
        if "notes" in changes:
            notes = changes["notes"]
            if rules.require(notes is None or isinstance(notes, str), "Notes must be text"):
                normalized["notes"] = (notes or "").strip()

        rules.raise_if_failed()
        return normalized


class DividendValidator:
    """Validates dividend amounts."""

    @staticmethod
    def validate_amounts(on: Any, gross_amount: Any, taxes_withheld: Any) -> None:
        """Validate date, gross amount and withheld taxes.

        Raises:
            ValidationError: Listing every violated rule
        """
        rules = RuleCollector()
        rules.require(isinstance(on, date), "Dividend date is required")
        gross_ok = rules.require(
            is_number(gross_amount) and gross_amount > 0, "Gross amount must be greater than zero"
        )
        taxes_ok = rules.require(
            is_number(taxes_withheld) and taxes_withheld >= 0, "Taxes withheld must not be negative"
        )
        if gross_ok and taxes_ok:
            rules.require(
                taxes_withheld < gross_amount,
                "Taxes withheld must be lower than the gross amount",
            )
        rules.raise_if_failed()


class HistoryNotes:
    """Builds the notes attached to synthetic history entries."""

    @staticmethod
    def initial_value(performance: float) -> str:
        """Note for the entry stamped on a derived-mode holding."""
        sign = "+" if performance > 0 else ""
        return f"Initial value entered ({sign}{performance:.2f}% since purchase)"

    @staticmethod
    def partial_divestment(divested_amount: float) -> str:
        """Note for the entry recording a partial divestment."""
        return f"Partial divestment: -{divested_amount:.2f}"
