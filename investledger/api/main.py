"""
FastAPI main application for the investment ledger.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from investledger.api.schemas.api_models import ErrorResponse
from investledger.core.config import Settings, configure_logging, get_settings
from investledger.core.exceptions.ledger import (
    DivisionDegenerateError,
    IneligibleHoldingError,
    InvalidAmountError,
    LedgerException,
    NoPendingQuoteError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from investledger.core.interfaces.storage import IPortfolioStore
from investledger.core.models.portfolio import PortfolioRegistry
from investledger.infrastructure.storage import InMemoryPortfolioStore, SnapshotFileStore

from .routers import data, divestments, dividends, investments

_ERROR_STATUS: dict[type[LedgerException], int] = {
    ValidationError: 422,
    DivisionDegenerateError: 422,
    NotFoundError: 404,
    InvalidAmountError: 400,
    IneligibleHoldingError: 409,
    NoPendingQuoteError: 409,
    StorageError: 503,
}


def _error_details(exc: LedgerException) -> dict[str, Any] | None:
    match exc:
        case ValidationError():
            return {"reasons": exc.reasons}
        case NotFoundError():
            return {"entity": exc.entity_kind, "id": exc.entity_id}
        case IneligibleHoldingError():
            return {"holding_id": exc.holding_id, "category": exc.category}
        case DivisionDegenerateError():
            return {"performance": exc.performance}
        case _:
            return None


async def ledger_exception_handler(request: Request, exc: LedgerException) -> JSONResponse:
    """Translate ledger errors into structured HTTP responses."""
    status_code = _ERROR_STATUS.get(type(exc), 400)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    body = ErrorResponse(error=type(exc).__name__, message=str(exc), details=_error_details(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _build_store(settings: Settings) -> IPortfolioStore:
    if settings.SNAPSHOT_DIRECTORY:
        return SnapshotFileStore(settings.SNAPSHOT_DIRECTORY)
    return InMemoryPortfolioStore()


def create_app(settings: Settings | None = None, store: IPortfolioStore | None = None) -> FastAPI:
    """Build the application around a storage backend."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="API for tracking investments, divestments and dividends",
    )
    app.state.registry = PortfolioRegistry(store if store is not None else _build_store(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "Accept",
            "Origin",
            "X-Requested-With",
            "X-User-Id",
        ],
    )
    app.add_exception_handler(LedgerException, ledger_exception_handler)

    app.include_router(investments.router, prefix="/api/investments", tags=["investments"])
    app.include_router(divestments.router, prefix="/api/divestments", tags=["divestments"])
    app.include_router(dividends.router, prefix="/api/dividends", tags=["dividends"])
    app.include_router(data.router, prefix="/api", tags=["data"])

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning API information."""
        return {"message": settings.APP_NAME, "version": settings.APP_VERSION, "status": "running"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} ready")
    return app


app = create_app()
