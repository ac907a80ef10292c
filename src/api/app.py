"""
FastAPI application factory.

* Builds (or receives) the ``NegotiationStore`` and attaches it to
  ``app.state``; routes reach it through ``get_store``.
* Starts / stops the background retention worker via lifespan events.
* Maps domain errors to HTTP status codes in one exception handler.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import accounts, admin, offers, rides
from src.api.schemas import ErrorResponse
from src.config import settings
from src.domain import errors
from src.domain.store import NegotiationStore
from src.infrastructure.ids import build_id_generator
from src.infrastructure.seed import seed_demo_accounts
from src.workers import sweeper as _sweeper

logging.basicConfig(level=settings.log_level)

ERROR_STATUS: dict[type, int] = {
    errors.NotFound: 404,
    errors.Forbidden: 403,
    errors.AccountBlocked: 403,
    errors.InvalidState: 409,
    errors.DuplicateIdentity: 409,
    errors.DuplicateOffer: 409,
    errors.RideAlreadyActive: 409,
    errors.NoAcceptedOffer: 409,
    errors.EmptyMessage: 422,
    errors.InvalidArgument: 422,
}


async def negotiation_error_handler(
    request: Request, exc: errors.NegotiationError
) -> JSONResponse:
    status = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400
    )
    body = ErrorResponse(detail=exc.message, kind=exc.kind, entity_id=exc.entity_id)
    return JSONResponse(status_code=status, content=body.model_dump())


def build_store() -> NegotiationStore:
    store = NegotiationStore(
        retention=timedelta(days=settings.retention_days),
        ids=build_id_generator(settings.id_strategy),
    )
    if settings.seed_demo_accounts:
        seed_demo_accounts(store)
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the retention worker on startup; stop on shutdown."""
    await _sweeper.start_sweep_loop(_sweeper.build_scheduler(app.state.store))
    yield
    await _sweeper.stop_sweep_loop()


def create_app(store: Optional[NegotiationStore] = None) -> FastAPI:
    app = FastAPI(
        title="Ride Negotiation API",
        description=(
            "Passengers post a ride at their own price, drivers bid, the "
            "passenger accepts and the driver confirms.  All state is held "
            "in memory by a single negotiation store."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else build_store()

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(errors.NegotiationError, negotiation_error_handler)

    # Routers
    app.include_router(accounts.router, prefix="/api/v1")
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(offers.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
