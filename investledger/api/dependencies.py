"""
Request dependencies shared by the routers.
"""

from typing import Annotated

from fastapi import Depends, Header, Request

from investledger.core.models.portfolio import PortfolioRegistry, PortfolioService


def get_registry(request: Request) -> PortfolioRegistry:
    """Registry installed on the application at startup."""
    return request.app.state.registry


def get_portfolio(
    registry: Annotated[PortfolioRegistry, Depends(get_registry)],
    x_user_id: Annotated[str, Header(min_length=1, description="Authenticated user id")],
) -> PortfolioService:
    """Portfolio of the calling user.

    Authentication happens upstream; the resolved user id arrives in the
    X-User-Id header.
    """
    return registry.for_user(x_user_id)


Portfolio = Annotated[PortfolioService, Depends(get_portfolio)]
