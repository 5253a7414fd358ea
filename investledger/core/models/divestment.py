"""
Divestment quote and record models.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

from investledger.core.constants import DEFAULT_DIVESTMENT_REASON
from investledger.core.enums import DivestmentKind
from investledger.core.exceptions.ledger import ValidationError
from investledger.core.types.financial import (
    ZERO,
    DivestmentOutcome,
    safe_float_comparison,
    tax_on_gain,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class DivestmentQuote:
    """Computed but unpersisted divestment, pending user confirmation.

    `basis_amount` and `basis_current_value` snapshot the holding at quote
    time so confirmation can detect a holding that changed in between.
    """

    quote_id: str
    holding_id: str
    holding_name: str
    kind: DivestmentKind
    date: date
    divested_amount: float
    divested_cost: float
    gross_gain: float
    tax: float
    net_gain: float
    net_cash: float
    basis_amount: float
    basis_current_value: float
    reason: str = DEFAULT_DIVESTMENT_REASON
    notes: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_outcome(
        cls,
        quote_id: str,
        holding_id: str,
        holding_name: str,
        kind: DivestmentKind,
        on: date,
        outcome: DivestmentOutcome,
        basis_amount: float,
        basis_current_value: float,
        reason: str = DEFAULT_DIVESTMENT_REASON,
        notes: str = "",
    ) -> "DivestmentQuote":
        """Factory method to build a quote from a computed outcome."""
        return cls(
            quote_id=quote_id,
            holding_id=holding_id,
            holding_name=holding_name,
            kind=kind,
            date=on,
            divested_amount=outcome.divested_amount,
            divested_cost=outcome.divested_cost,
            gross_gain=outcome.gross_gain,
            tax=outcome.tax,
            net_gain=outcome.net_gain,
            net_cash=outcome.net_cash,
            basis_amount=basis_amount,
            basis_current_value=basis_current_value,
            reason=reason,
            notes=notes,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert quote to dictionary."""
        return {
            "quote_id": self.quote_id,
            "holding_id": self.holding_id,
            "holding_name": self.holding_name,
            "kind": self.kind.value,
            "date": self.date.isoformat(),
            "divested_amount": self.divested_amount,
            "divested_cost": self.divested_cost,
            "gross_gain": self.gross_gain,
            "tax": self.tax,
            "net_gain": self.net_gain,
            "net_cash": self.net_cash,
            "reason": self.reason,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class DivestmentRecord:
    """Represents a confirmed divestment. Immutable once created."""

    id: str
    user_id: str
    holding_id: str
    holding_name: str
    kind: DivestmentKind
    date: date
    divested_amount: float
    divested_cost: float
    gross_gain: float
    tax: float
    net_gain: float
    net_cash: float
    reason: str = DEFAULT_DIVESTMENT_REASON
    notes: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Validate the record's financial invariants."""
        reasons = []
        if self.divested_amount < ZERO:
            reasons.append(f"Divested amount must be non-negative, got {self.divested_amount}")
        if not safe_float_comparison(self.gross_gain, self.divested_amount - self.divested_cost):
            reasons.append("Gross gain must equal divested amount minus divested cost")
        if not safe_float_comparison(self.tax, tax_on_gain(self.gross_gain)):
            reasons.append("Tax must equal the tax rate applied to the positive gross gain")
        if not safe_float_comparison(self.net_gain, self.gross_gain - self.tax):
            reasons.append("Net gain must equal gross gain minus tax")
        if not safe_float_comparison(self.net_cash, self.divested_amount - self.tax):
            reasons.append("Net cash must equal divested amount minus tax")
        if reasons:
            raise ValidationError(reasons)

    @property
    def year(self) -> int:
        """Calendar year of the divestment."""
        return self.date.year

    @classmethod
    def from_quote(cls, quote: DivestmentQuote, record_id: str, user_id: str) -> "DivestmentRecord":
        """Factory method to create the record a confirmed quote stands for."""
        return cls(
            id=record_id,
            user_id=user_id,
            holding_id=quote.holding_id,
            holding_name=quote.holding_name,
            kind=quote.kind,
            date=quote.date,
            divested_amount=quote.divested_amount,
            divested_cost=quote.divested_cost,
            gross_gain=quote.gross_gain,
            tax=quote.tax,
            net_gain=quote.net_gain,
            net_cash=quote.net_cash,
            reason=quote.reason,
            notes=quote.notes,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "holding_id": self.holding_id,
            "holding_name": self.holding_name,
            "kind": self.kind.value,
            "date": self.date.isoformat(),
            "divested_amount": self.divested_amount,
            "divested_cost": self.divested_cost,
            "gross_gain": self.gross_gain,
            "tax": self.tax,
            "net_gain": self.net_gain,
            "net_cash": self.net_cash,
            "reason": self.reason,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DivestmentRecord":
        """Rebuild a record from `to_dict` output."""
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            holding_id=str(data["holding_id"]),
            holding_name=data["holding_name"],
            kind=DivestmentKind(data["kind"]),
            date=date.fromisoformat(data["date"]),
            divested_amount=float(data["divested_amount"]),
            divested_cost=float(data["divested_cost"]),
            gross_gain=float(data["gross_gain"]),
            tax=float(data["tax"]),
            net_gain=float(data["net_gain"]),
            net_cash=float(data["net_cash"]),
            reason=data.get("reason") or DEFAULT_DIVESTMENT_REASON,
            notes=data.get("notes") or "",
            created_at=datetime.fromisoformat(data["created_at"]),
        )
