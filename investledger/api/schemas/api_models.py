"""
Pydantic schemas for API request/response models.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from investledger.core.constants import DEFAULT_DIVESTMENT_REASON
from investledger.core.enums import Category, DivestmentKind, EntryMode


class HoldingCreateRequest(BaseModel):
    """Request model for holding creation.

    Business rules (name length, positive amounts, performance range) are
    checked by the ledger so every violation is reported together.
    """

    name: str
    category: str = Field(..., description="Holding category, e.g. etf-dividend")
    date: dt.date = Field(..., description="Acquisition date")
    mode: EntryMode = Field(default=EntryMode.DIRECT, description="direct or derived entry")
    amount: float | None = Field(default=None, description="Cost basis (direct mode)")
    current_value: float | None = Field(default=None, description="Current value")
    performance: float | None = Field(
        default=None, description="Percentage change since purchase (derived mode)"
    )
    quantity: float | None = None
    notes: str = ""


class HoldingUpdateRequest(BaseModel):
    """Request model for editing descriptive holding fields."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    category: str | None = None
    date: dt.date | None = None
    quantity: float | None = None
    notes: str | None = None


class RevalueRequest(BaseModel):
    """Request model for a holding revaluation."""

    value: float
    date: dt.date
    note: str | None = None


class ValueUpdateResponse(BaseModel):
    """One revaluation history entry."""

    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    value: float
    note: str | None
    recorded_at: dt.datetime


class HoldingResponse(BaseModel):
    """Response model for a holding."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    category: Category
    amount: float
    current_value: float
    date: dt.date
    quantity: float | None
    notes: str
    updates: list[ValueUpdateResponse]
    is_existing_investment: bool
    initial_performance: float | None
    gain_loss: float
    performance: float
    created_at: dt.datetime


class HoldingDeleteResponse(BaseModel):
    """Response model for a cascading holding deletion."""

    message: str
    deleted_dividends: int
    deleted_divestments: int


class DivestmentQuoteRequest(BaseModel):
    """Request model for a divestment quote."""

    holding_id: str
    kind: DivestmentKind
    amount: float | None = Field(default=None, description="Divested amount (partial only)")
    date: dt.date | None = None
    reason: str = DEFAULT_DIVESTMENT_REASON
    notes: str = ""


class DivestmentQuoteResponse(BaseModel):
    """Response model for a divestment quote."""

    model_config = ConfigDict(from_attributes=True)

    quote_id: str
    holding_id: str
    holding_name: str
    kind: DivestmentKind
    date: dt.date
    divested_amount: float
    divested_cost: float
    gross_gain: float
    tax: float
    net_gain: float
    net_cash: float
    reason: str
    notes: str


class DivestmentConfirmRequest(BaseModel):
    """Request model for confirming the pending quote."""

    quote_id: str | None = None


class DivestmentResponse(BaseModel):
    """Response model for a divestment record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    holding_id: str
    holding_name: str
    kind: DivestmentKind
    date: dt.date
    divested_amount: float
    divested_cost: float
    gross_gain: float
    tax: float
    net_gain: float
    net_cash: float
    reason: str
    notes: str
    created_at: dt.datetime


class DividendCreateRequest(BaseModel):
    """Request model for recording a dividend."""

    holding_id: str
    date: dt.date
    gross_amount: float
    taxes_withheld: float = 0.0
    notes: str = ""


class DividendResponse(BaseModel):
    """Response model for a dividend record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    holding_id: str
    holding_name: str
    date: dt.date
    gross_amount: float
    taxes_withheld: float
    net_amount: float
    notes: str
    created_at: dt.datetime


class PortfolioSummaryResponse(BaseModel):
    """Response model for the portfolio summary."""

    model_config = ConfigDict(from_attributes=True)

    total_invested: float
    current_portfolio_value: float
    unrealized_gain: float
    unrealized_gain_percent: float
    total_dividends_gross: float
    total_dividends_net: float
    total_cash_from_sales: float
    total_divested_cost: float
    realized_gains: float
    total_patrimony: float
    total_original_investment: float
    combined_gain: float
    overall_return_percent: float
    tax_on_unrealized_gains: float
    average_dividend_yield: float
    holding_count: int
    by_category: dict[str, dict[str, float | int]]


class MessageResponse(BaseModel):
    """Response model for plain confirmations."""

    message: str


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str
    message: str
    details: dict | None = None
