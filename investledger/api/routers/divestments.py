"""
Divestment API endpoints.
"""

from typing import Any

from fastapi import APIRouter, status

from investledger.api.dependencies import Portfolio
from investledger.api.schemas.api_models import (
    DivestmentConfirmRequest,
    DivestmentQuoteRequest,
    DivestmentQuoteResponse,
    DivestmentResponse,
    MessageResponse,
)
from investledger.core.exceptions.ledger import NoPendingQuoteError

router = APIRouter()


@router.get("/", response_model=list[DivestmentResponse])
async def list_divestments(portfolio: Portfolio):
    """List divestments, newest first."""
    return portfolio.list_divestments()


@router.get("/stats")
async def get_divestment_stats(portfolio: Portfolio) -> dict[str, Any]:
    """Divestment totals by holding, reason and year."""
    return portfolio.divestment_stats()


@router.get("/investment/{holding_id}", response_model=list[DivestmentResponse])
async def list_investment_divestments(holding_id: str, portfolio: Portfolio):
    """List divestments of one holding."""
    return portfolio.list_divestments(holding_id)


@router.post("/quote", response_model=DivestmentQuoteResponse)
async def quote_divestment(request: DivestmentQuoteRequest, portfolio: Portfolio):
    """Compute a divestment and keep it pending until confirmed."""
    return portfolio.quote_divestment(
        request.holding_id,
        request.kind,
        request.amount,
        request.date,
        request.reason,
        request.notes,
    )


@router.get("/quote", response_model=DivestmentQuoteResponse)
async def get_pending_quote(portfolio: Portfolio):
    """Get the pending divestment quote."""
    pending = portfolio.pending_quote
    if pending is None:
        raise NoPendingQuoteError()
    return pending


@router.delete("/quote", response_model=MessageResponse)
async def discard_quote(portfolio: Portfolio):
    """Discard the pending divestment quote."""
    portfolio.discard_divestment()
    return MessageResponse(message="Pending divestment discarded")


@router.post("/confirm", response_model=DivestmentResponse, status_code=status.HTTP_201_CREATED)
async def confirm_divestment(request: DivestmentConfirmRequest, portfolio: Portfolio):
    """Confirm the pending quote, creating the divestment record."""
    pending = portfolio.pending_quote
    if pending is not None and request.quote_id not in (None, pending.quote_id):
        raise NoPendingQuoteError(f"Quote {request.quote_id} is not the pending quote")
    return portfolio.confirm_divestment(pending)


@router.delete("/{divestment_id}", response_model=MessageResponse)
async def delete_divestment(divestment_id: str, portfolio: Portfolio):
    """Delete a divestment record. The holding is not restored."""
    portfolio.delete_divestment(divestment_id)
    return MessageResponse(message="Divestment deleted successfully")
