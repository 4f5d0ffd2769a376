"""
ingest — Feed → extract → dedupe → store.

Each feed is fetched, extracted and validated on its own; a failed feed
contributes zero items and is reported, never fatal. Items failing EpisodeIn
validation are logged and skipped before they reach the deduplicator. After
all feeds are processed the valid items are deduplicated by normalized title
and persisted, either by clearing the store and recreating everything
("replace") or by upserting each item ("upsert").
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

import structlog
from pydantic import ValidationError

from ..config import FeedSource
from ..dedupe import dedupe_episodes
from ..extractor import FeedItem, extract_items
from ..fetcher import FetchResult, fetch_feed
from ..models import Episode, EpisodeIn
from ..store import EpisodeStore

log = structlog.get_logger()

REFRESH_MODES = ("replace", "upsert")


@dataclass
class FeedResult:
    name: str
    ok: bool
    items: int = 0
    skipped: int = 0
    error: Optional[str] = None

    def describe(self) -> str:
        return f"{self.items} from {self.name}" if self.ok else f"{self.name} failed"


@dataclass
class IngestResult:
    mode: str
    feeds: list[FeedResult] = field(default_factory=list)
    deduplicated: int = 0
    skipped: int = 0
    episodes: list[Episode] = field(default_factory=list)
    finished_at: Optional[datetime] = None

    @property
    def saved(self) -> int:
        return len(self.episodes)

    def summary(self) -> str:
        return ", ".join(f.describe() for f in self.feeds)

    def message(self) -> str:
        return f"Successfully refreshed {self.saved} episodes ({self.summary()})"


def collect_feed(
    feed: FeedSource,
    fetch: Callable[[str], FetchResult],
) -> tuple[list[EpisodeIn], FeedResult]:
    """Fetch, extract and validate a single feed. Never raises."""
    log.info("feed_start", feed=feed.name)
    fetched = fetch(feed.url)
    if not fetched.ok:
        return [], FeedResult(name=feed.name, ok=False, error=fetched.error)
    try:
        items = extract_items(fetched.content, source=feed.source)
    except Exception as e:
        log.error("feed_extract_failed", feed=feed.name, error=str(e))
        return [], FeedResult(name=feed.name, ok=False, error=str(e))
    valid, skipped = _validate(items)
    return valid, FeedResult(name=feed.name, ok=True, items=len(valid), skipped=skipped)


def _validate(items: Iterable[FeedItem]) -> tuple[list[EpisodeIn], int]:
    valid: list[EpisodeIn] = []
    skipped = 0
    for item in items:
        try:
            valid.append(item.to_episode_in())
        except ValidationError as e:
            skipped += 1
            log.warning("item_validation_failed", title=item.title, link=item.link,
                        error=str(e))
    return valid, skipped


def persist(store: EpisodeStore, episodes: list[EpisodeIn], mode: str) -> list[Episode]:
    if mode not in REFRESH_MODES:
        raise ValueError(f"Invalid refresh mode: {mode}")
    if mode == "replace":
        store.clear_all()
        return [store.create(ep) for ep in episodes]
    return [store.upsert(ep) for ep in episodes]


def run_ingest(
    store: EpisodeStore,
    feeds: list[FeedSource],
    mode: str = "replace",
    fetch: Callable[[str], FetchResult] | None = None,
) -> IngestResult:
    """
    Refresh the store from every feed.

    Args:
        store: target store
        feeds: feed sources, processed in order
        mode: "replace" (clear_all + create) or "upsert"
        fetch: url -> FetchResult; defaults to fetch_feed

    Returns:
        IngestResult with per-feed outcomes and the persisted episodes
    """
    if mode not in REFRESH_MODES:
        raise ValueError(f"Invalid refresh mode: {mode}")
    fetch = fetch or fetch_feed
    result = IngestResult(mode=mode)

    all_items: list[EpisodeIn] = []
    for feed in feeds:
        items, feed_result = collect_feed(feed, fetch)
        all_items.extend(items)
        result.feeds.append(feed_result)
        result.skipped += feed_result.skipped

    unique = dedupe_episodes(all_items)
    result.deduplicated = len(all_items) - len(unique)
    result.episodes = persist(store, unique, mode)
    result.finished_at = datetime.now(timezone.utc)

    log.info(
        "ingest_done",
        mode=mode,
        feeds=result.summary(),
        saved=result.saved,
        deduplicated=result.deduplicated,
        skipped=result.skipped,
    )
    return result
