"""
Holding domain models.

A holding is one active investment position: a cost basis, a current mark
and an append-only revaluation history.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Any

from investledger.core.enums import Category, EntryMode
from investledger.core.exceptions.ledger import ValidationError
from investledger.core.types.financial import ZERO, gain_loss, performance_percent


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class ValueUpdate:
    """One entry of a holding's revaluation history."""

    date: date
    value: float
    note: str | None = None
    recorded_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Validate history entry after initialization."""
        if self.value < ZERO:
            raise ValidationError(f"History value must be non-negative, got {self.value}")

    def to_dict(self) -> dict[str, Any]:
        """Convert history entry to dictionary."""
        return {
            "date": self.date.isoformat(),
            "value": self.value,
            "note": self.note,
            "recorded_at": self.recorded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValueUpdate":
        """Rebuild a history entry from `to_dict` output."""
        return cls(
            date=date.fromisoformat(data["date"]),
            value=float(data["value"]),
            note=data.get("note"),
            recorded_at=datetime.fromisoformat(data["recorded_at"]),
        )


@dataclass(frozen=True)
class Holding:
    """Represents an active investment position.

    Instances are immutable: the ledger produces a new instance for every
    change, so a fetched holding never drifts from its stored state.
    """

    id: str
    user_id: str
    name: str
    category: Category
    amount: float
    current_value: float
    date: date
    quantity: float | None = None
    notes: str = ""
    updates: tuple[ValueUpdate, ...] = ()
    is_existing_investment: bool = False
    initial_performance: float | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Validate holding invariants after initialization."""
        reasons = []
        if self.amount < ZERO:
            reasons.append(f"Cost basis must be non-negative, got {self.amount}")
        if self.current_value < ZERO:
            reasons.append(f"Current value must be non-negative, got {self.current_value}")
        if self.quantity is not None and self.quantity <= ZERO:
            reasons.append(f"Quantity must be positive when present, got {self.quantity}")
        if reasons:
            raise ValidationError(reasons)

    @property
    def gain_loss(self) -> float:
        """Unrealized gain or loss."""
        return gain_loss(self.amount, self.current_value)

    @property
    def performance(self) -> float:
        """Unrealized performance in percent of the cost basis."""
        return performance_percent(self.amount, self.current_value)

    @property
    def pays_dividends(self) -> bool:
        """Check if the holding's category is dividend-paying."""
        return self.category.pays_dividends

    def with_update(self, value: float, on: date, note: str | None = None) -> "Holding":
        """Return a copy marked at `value` with one more history entry."""
        entry = ValueUpdate(date=on, value=value, note=note)
        return replace(self, current_value=value, updates=(*self.updates, entry))

    def to_dict(self) -> dict[str, Any]:
        """Convert holding to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "category": self.category.value,
            "amount": self.amount,
            "current_value": self.current_value,
            "date": self.date.isoformat(),
            "quantity": self.quantity,
            "notes": self.notes,
            "updates": [update.to_dict() for update in self.updates],
            "is_existing_investment": self.is_existing_investment,
            "initial_performance": self.initial_performance,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Holding":
        """Rebuild a holding from `to_dict` output."""
        quantity = data.get("quantity")
        initial_performance = data.get("initial_performance")
        is_existing_investment = data.get("is_existing_investment", False)
        if not isinstance(is_existing_investment, bool):
            raise ValidationError(
                f"is_existing_investment must be a boolean, got {is_existing_investment!r}"
            )
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            name=data["name"],
            category=Category.from_string(data["category"]),
            amount=float(data["amount"]),
            current_value=float(data["current_value"]),
            date=date.fromisoformat(data["date"]),
            quantity=float(quantity) if quantity is not None else None,
            notes=data.get("notes") or "",
            updates=tuple(ValueUpdate.from_dict(u) for u in data.get("updates", [])),
            is_existing_investment=is_existing_investment,
            initial_performance=(
                float(initial_performance) if initial_performance is not None else None
            ),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class HoldingDraft:
    """Unvalidated input for creating a holding.

    DIRECT mode needs `amount` (current value defaults to it).
    DERIVED mode needs `current_value` and `performance`.
    """

    name: str
    category: Category | str
    date: date | None
    mode: EntryMode = EntryMode.DIRECT
    amount: float | None = None
    current_value: float | None = None
    performance: float | None = None
    quantity: float | None = None
    notes: str = ""
