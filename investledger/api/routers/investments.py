"""
Investment (holding) API endpoints.
"""

from fastapi import APIRouter, status

from investledger.api.dependencies import Portfolio
from investledger.api.schemas.api_models import (
    HoldingCreateRequest,
    HoldingDeleteResponse,
    HoldingResponse,
    HoldingUpdateRequest,
    PortfolioSummaryResponse,
    RevalueRequest,
)
from investledger.core.models.holding import HoldingDraft

router = APIRouter()


@router.get("/", response_model=list[HoldingResponse])
async def list_investments(portfolio: Portfolio):
    """List holdings, newest first."""
    return portfolio.list_holdings()


@router.get("/stats/summary", response_model=PortfolioSummaryResponse)
async def get_portfolio_summary(portfolio: Portfolio):
    """Portfolio summary figures."""
    return portfolio.portfolio_summary()


@router.get("/stats/categories")
async def get_category_stats(portfolio: Portfolio) -> dict[str, dict[str, float | int]]:
    """Holdings grouped by category."""
    return portfolio.category_stats()


@router.get("/{holding_id}", response_model=HoldingResponse)
async def get_investment(holding_id: str, portfolio: Portfolio):
    """Get one holding."""
    return portfolio.get_holding(holding_id)


@router.post("/", response_model=HoldingResponse, status_code=status.HTTP_201_CREATED)
async def create_investment(request: HoldingCreateRequest, portfolio: Portfolio):
    """Create a holding."""
    draft = HoldingDraft(**request.model_dump())
    return portfolio.create_holding(draft)


@router.put("/{holding_id}", response_model=HoldingResponse)
async def update_investment(holding_id: str, request: HoldingUpdateRequest, portfolio: Portfolio):
    """Edit descriptive fields of a holding."""
    changes = request.model_dump(exclude_unset=True)
    changes.update(request.model_extra or {})
    return portfolio.update_holding(holding_id, changes)


@router.post("/{holding_id}/revalue", response_model=HoldingResponse)
async def revalue_investment(holding_id: str, request: RevalueRequest, portfolio: Portfolio):
    """Mark a holding at a new value."""
    return portfolio.revalue_holding(holding_id, request.value, request.date, request.note)


@router.delete("/{holding_id}", response_model=HoldingDeleteResponse)
async def delete_investment(holding_id: str, portfolio: Portfolio):
    """Delete a holding and its dividend and divestment records."""
    deleted = portfolio.delete_holding(holding_id)
    return HoldingDeleteResponse(
        message="Investment and related data deleted successfully",
        deleted_dividends=deleted["dividends"],
        deleted_divestments=deleted["divestments"],
    )
