"""
Dividend record model.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from investledger.core.exceptions.ledger import ValidationError
from investledger.core.types.financial import ZERO, net_dividend, safe_float_comparison


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class DividendRecord:
    """Represents a dividend receipt. Immutable once created."""

    id: str
    user_id: str
    holding_id: str
    holding_name: str
    date: date
    gross_amount: float
    taxes_withheld: float
    net_amount: float
    notes: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Validate dividend invariants after initialization."""
        reasons = []
        if self.taxes_withheld < ZERO:
            reasons.append(f"Taxes withheld must be non-negative, got {self.taxes_withheld}")
        if self.taxes_withheld >= self.gross_amount:
            reasons.append("Taxes withheld must be lower than the gross amount")
        if not safe_float_comparison(
            self.net_amount, net_dividend(self.gross_amount, self.taxes_withheld)
        ):
            reasons.append("Net amount must equal gross amount minus taxes withheld")
        if reasons:
            raise ValidationError(reasons)

    @property
    def year(self) -> int:
        """Calendar year of the receipt."""
        return self.date.year

    @classmethod
    def create(
        cls,
        record_id: str,
        user_id: str,
        holding_id: str,
        holding_name: str,
        on: date,
        gross_amount: float,
        taxes_withheld: float = 0.0,
        notes: str = "",
    ) -> "DividendRecord":
        """Factory method deriving the net amount from gross and withheld taxes."""
        return cls(
            id=record_id,
            user_id=user_id,
            holding_id=holding_id,
            holding_name=holding_name,
            date=on,
            gross_amount=gross_amount,
            taxes_withheld=taxes_withheld,
            net_amount=net_dividend(gross_amount, taxes_withheld),
            notes=notes,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "holding_id": self.holding_id,
            "holding_name": self.holding_name,
            "date": self.date.isoformat(),
            "gross_amount": self.gross_amount,
            "taxes_withheld": self.taxes_withheld,
            "net_amount": self.net_amount,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DividendRecord":
        """Rebuild a record from `to_dict` output."""
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            holding_id=str(data["holding_id"]),
            holding_name=data["holding_name"],
            date=date.fromisoformat(data["date"]),
            gross_amount=float(data["gross_amount"]),
            taxes_withheld=float(data.get("taxes_withheld", 0.0)),
            net_amount=float(data["net_amount"]),
            notes=data.get("notes") or "",
            created_at=datetime.fromisoformat(data["created_at"]),
        )
