"""
Data export/import API endpoints.
"""

from typing import Any

from fastapi import APIRouter

from investledger.api.dependencies import Portfolio

router = APIRouter()


@router.get("/export")
async def export_data(portfolio: Portfolio) -> dict[str, Any]:
    """Export the caller's data set as a JSON snapshot."""
    return portfolio.export_snapshot()


@router.post("/import")
async def import_data(payload: dict[str, Any], portfolio: Portfolio) -> dict[str, Any]:
    """Replace the caller's data set with a JSON snapshot."""
    counts = portfolio.import_snapshot(payload)
    return {"message": "Data imported successfully", "imported": counts}
