"""
Admin / observability endpoints
===============================

GET  /api/v1/admin/stats  -- account, active-ride and revenue totals
POST /api/v1/admin/sweep  -- run the retention sweep now
GET  /api/v1/admin/health -- simple health check
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_session, get_store
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import HealthResponse, StatsResponse, SweepResponse
from src.domain.entities import Session
from src.domain.store import NegotiationStore

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=StatsResponse, summary="Platform totals")
@limiter.limit(RATE_LIMIT)
async def get_stats(
    request: Request,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.stats(session)


@router.post("/sweep", response_model=SweepResponse, summary="Purge expired rides")
async def run_sweep(
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return SweepResponse(purged=store.sweep(session))


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
