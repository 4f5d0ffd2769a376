"""
routers/system — Health check.
"""
from __future__ import annotations
from fastapi import APIRouter, Depends, Request

from ...store import EpisodeStore
from ..deps import get_store
from ..schemas import HealthResponse

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health(request: Request, store: EpisodeStore = Depends(get_store)):
    scheduler = getattr(request.app.state, "scheduler", None)
    last = getattr(request.app.state, "last_refresh", None)
    return HealthResponse(
        status="ok",
        scheduler_running=scheduler.running if scheduler else False,
        episodes=len(store),
        last_refresh=last.finished_at if last else None,
    )
