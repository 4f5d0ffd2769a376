"""
scheduler — APScheduler-based periodic feed refresh.
"""
from __future__ import annotations
from typing import Callable

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import Config
from .fetcher import FetchResult
from .pipelines.ingest import IngestResult, run_ingest
from .store import EpisodeStore

log = structlog.get_logger()


def _refresh_job(
    store: EpisodeStore,
    cfg: Config,
    on_result: Callable[[IngestResult], None] | None,
    fetch: Callable[[str], FetchResult] | None = None,
):
    """Scheduled job: refresh the store from all feeds."""
    try:
        result = run_ingest(store, cfg.resolved_feeds(), mode=cfg.refresh_mode, fetch=fetch)
        log.info("refresh_cycle_done", feeds=result.summary(), saved=result.saved)
        if on_result:
            on_result(result)
    except Exception as e:
        log.error("refresh_cycle_error", error=str(e))


def create_scheduler(
    store: EpisodeStore,
    cfg: Config,
    on_result: Callable[[IngestResult], None] | None = None,
    fetch: Callable[[str], FetchResult] | None = None,
) -> BackgroundScheduler:
    """
    Build (but don't start) a background scheduler refreshing every
    cfg.refresh_interval_minutes. At most one refresh runs at a time.
    """
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        _refresh_job,
        trigger=IntervalTrigger(minutes=cfg.refresh_interval_minutes),
        args=(store, cfg, on_result, fetch),
        id="refresh_feeds",
        name="Refresh episode feeds",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler
