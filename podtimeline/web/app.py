"""
app — FastAPI application factory with scheduler lifespan.
"""
from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Config, load_config
from ..fetcher import FetchResult, fetch_feed
from ..pipelines.ingest import IngestResult, run_ingest
from ..scheduler import create_scheduler
from ..store import EpisodeStore

log = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg: Config = app.state.config
    store: EpisodeStore = app.state.store

    if cfg.seed_sample_data:
        from ..seed import seed_sample_episodes
        seed_sample_episodes(store)

    if cfg.refresh_on_startup:
        try:
            app.state.last_refresh = run_ingest(
                store, cfg.resolved_feeds(), mode=cfg.refresh_mode, fetch=app.state.fetch
            )
        except Exception as e:
            log.error("startup_refresh_failed", error=str(e))

    scheduler = None
    if cfg.refresh_interval_minutes > 0:
        def _remember(result: IngestResult):
            app.state.last_refresh = result

        scheduler = create_scheduler(store, cfg, on_result=_remember, fetch=app.state.fetch)
        scheduler.start()
        app.state.scheduler = scheduler

    log.info("web_started", host=cfg.web_host, port=cfg.web_port,
             refresh_interval=cfg.refresh_interval_minutes)
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    log.info("web_stopped")


def create_app(
    cfg: Config | None = None,
    store: EpisodeStore | None = None,
    fetch: Callable[[str], FetchResult] | None = None,
) -> FastAPI:
    cfg = cfg or load_config()
    app = FastAPI(title="podtimeline", lifespan=lifespan)
    app.state.config = cfg
    app.state.store = store if store is not None else EpisodeStore()
    app.state.fetch = fetch or (
        lambda url: fetch_feed(url, timeout=cfg.fetch_timeout_seconds, user_agent=cfg.user_agent)
    )
    app.state.scheduler = None
    app.state.last_refresh = None

    from .routers import episodes, system
    app.include_router(episodes.router)
    app.include_router(system.router)

    # CORS on every response; OPTIONS never reaches the routers
    @app.middleware("http")
    async def _cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"message": message},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": "Invalid request", "error": str(exc)})

    # JSON error handler for anything the routes didn't catch
    @app.exception_handler(Exception)
    async def _api_error_handler(request: Request, exc: Exception):
        log.error("api_error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error", "error": str(exc)},
            headers=CORS_HEADERS,
        )

    return app
