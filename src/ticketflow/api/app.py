"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ticketflow.api.dependencies import (
    close_probe,
    close_store,
    init_probe,
    init_settings,
    init_store,
)
from ticketflow.api.models import ErrorResponse
from ticketflow.api.routes import board, tickets
from ticketflow.config import Settings, load_settings
from ticketflow.repos import RepositoryProbeError
from ticketflow.store import StoreError, TicketNotFoundError
from ticketflow.tickets import (
    IdentifierAllocationError,
    OperationCancelledError,
    PlaceholderError,
    TicketPreconditionError,
    TicketValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger("ticketflow.api")

# Client closed the request before the operation finished
HTTP_499_CLIENT_CLOSED_REQUEST = 499


def _error(status_code: int, message: str, placeholders: list[str] | None = None) -> JSONResponse:
    payload = ErrorResponse(error=message, detected_placeholders=placeholders)
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(by_alias=True, exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map engine exceptions onto HTTP statuses with the failure payload."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {details}")

    @app.exception_handler(PlaceholderError)
    async def placeholder_handler(_request: Request, exc: PlaceholderError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc), exc.placeholders)

    @app.exception_handler(TicketValidationError)
    async def validation_handler(_request: Request, exc: TicketValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(TicketNotFoundError)
    async def not_found_handler(_request: Request, exc: TicketNotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(TicketPreconditionError)
    async def precondition_handler(
        _request: Request, exc: TicketPreconditionError
    ) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(IdentifierAllocationError)
    async def allocation_handler(
        _request: Request, exc: IdentifierAllocationError
    ) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(OperationCancelledError)
    async def cancelled_handler(_request: Request, exc: OperationCancelledError) -> JSONResponse:
        return _error(HTTP_499_CLIENT_CLOSED_REQUEST, str(exc))

    @app.exception_handler(RepositoryProbeError)
    async def probe_error_handler(_request: Request, exc: RepositoryProbeError) -> JSONResponse:
        logger.error("Repository probe failed: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    @app.exception_handler(StoreError)
    async def store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store error: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings = app.state.settings or load_settings()
    init_settings(settings)
    store = init_store(settings)
    init_probe(settings, store)
    logger.info("ticketflow API started (probe=%s)", settings.probe)

    yield
    # Shutdown
    close_probe()
    close_store()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Runtime settings; loaded from ticketflow.yaml and the
            environment at startup when omitted.
    """
    app = FastAPI(
        title="ticketflow API",
        description="REST API for the ticket lifecycle and Kanban ordering engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    register_exception_handlers(app)

    app.include_router(tickets.router, prefix="/api/v1")
    app.include_router(board.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
