"""
routers/episodes — Episode listing with type/search filters, and feed refresh.
"""
from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
import structlog

from ...config import Config
from ...models import Episode, EpisodeType
from ...pipelines.ingest import REFRESH_MODES, IngestResult, run_ingest
from ...store import EpisodeStore
from ..deps import get_config, get_store
from ..schemas import FeedResultResponse, RefreshResponse

log = structlog.get_logger()

router = APIRouter(prefix="/api/episodes", tags=["episodes"])


def _parse_type(value: str | None) -> EpisodeType | None:
    if not value or value == "all":
        return None
    try:
        return EpisodeType(value)
    except ValueError:
        raise HTTPException(400, f"Invalid type: {value}")


def _parse_refresh(value: str | None) -> bool:
    if value is None or value == "false":
        return False
    if value == "true":
        return True
    raise HTTPException(400, f"Invalid refresh value: {value} (expected true or false)")


def _refresh(request: Request, store: EpisodeStore, cfg: Config, mode: str) -> IngestResult:
    result = run_ingest(store, cfg.resolved_feeds(), mode=mode, fetch=request.app.state.fetch)
    request.app.state.last_refresh = result
    return result


@router.get("", response_model=list[Episode])
def list_episodes(
    request: Request,
    type: str | None = Query(None),
    search: str | None = Query(None),
    refresh: str | None = Query(None),
    store: EpisodeStore = Depends(get_store),
    cfg: Config = Depends(get_config),
):
    episode_type = _parse_type(type)

    if _parse_refresh(refresh):
        try:
            result = _refresh(request, store, cfg, cfg.refresh_mode)
            log.info("refresh_via_query", feeds=result.summary(), saved=result.saved)
        except Exception as e:
            # listing still works off whatever the store holds
            log.error("refresh_via_query_failed", error=str(e))

    try:
        return store.query(episode_type=episode_type, search=search or None)
    except Exception as e:
        log.error("list_episodes_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"message": "Failed to fetch episodes", "error": str(e)},
        )


@router.post("/refresh", response_model=RefreshResponse)
def refresh_episodes(
    request: Request,
    mode: str | None = Query(None),
    store: EpisodeStore = Depends(get_store),
    cfg: Config = Depends(get_config),
):
    mode = mode or cfg.refresh_mode
    if mode not in REFRESH_MODES:
        raise HTTPException(400, f"Invalid mode: {mode}")

    try:
        result = _refresh(request, store, cfg, mode)
    except Exception as e:
        log.error("refresh_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"message": "Failed to refresh episodes", "error": str(e)},
        )

    return RefreshResponse(
        message=result.message(),
        episodes=result.episodes,
        feeds=[
            FeedResultResponse(name=f.name, ok=f.ok, items=f.items, skipped=f.skipped, error=f.error)
            for f in result.feeds
        ],
    )
