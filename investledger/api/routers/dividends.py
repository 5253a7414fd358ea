"""
Dividend API endpoints.
"""

from typing import Any

from fastapi import APIRouter, status

from investledger.api.dependencies import Portfolio
from investledger.api.schemas.api_models import (
    DividendCreateRequest,
    DividendResponse,
    HoldingResponse,
    MessageResponse,
)

router = APIRouter()


@router.get("/", response_model=list[DividendResponse])
async def list_dividends(
    portfolio: Portfolio, year: int | None = None, investment: str | None = None
):
    """List dividends, newest first, optionally filtered by year and holding name."""
    return portfolio.list_dividends(year=year, holding_name=investment)


@router.get("/stats")
async def get_dividend_stats(portfolio: Portfolio) -> dict[str, Any]:
    """Dividend totals by holding and year, plus the average yield."""
    return portfolio.dividend_stats()


@router.get("/eligible", response_model=list[HoldingResponse])
async def list_eligible_holdings(portfolio: Portfolio):
    """Holdings that can receive dividends."""
    return list(portfolio.eligible_holdings())


@router.get("/investment/{holding_id}", response_model=list[DividendResponse])
async def list_investment_dividends(holding_id: str, portfolio: Portfolio):
    """List dividends of one holding."""
    return portfolio.list_dividends(holding_id=holding_id)


@router.post("/", response_model=DividendResponse, status_code=status.HTTP_201_CREATED)
async def create_dividend(request: DividendCreateRequest, portfolio: Portfolio):
    """Record a dividend receipt."""
    return portfolio.record_dividend(
        request.holding_id,
        request.date,
        request.gross_amount,
        request.taxes_withheld,
        request.notes,
    )


@router.delete("/{dividend_id}", response_model=MessageResponse)
async def delete_dividend(dividend_id: str, portfolio: Portfolio):
    """Delete a dividend record."""
    portfolio.delete_dividend(dividend_id)
    return MessageResponse(message="Dividend deleted successfully")
