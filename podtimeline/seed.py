"""
seed — Sample episodes for a store started without feed access.

Idempotent: rows go through upsert, so seeding twice keeps two rows.
"""
from __future__ import annotations
from datetime import datetime, timezone

import structlog

from .models import EpisodeIn, EpisodeType
from .store import EpisodeStore

log = structlog.get_logger()

SAMPLE_EPISODES = [
    EpisodeIn(
        title="Test Episode 1",
        description="This is a test episode to verify the API is working",
        link="https://example.com/test-1",
        pub_date=datetime(2024, 1, 15, tzinfo=timezone.utc),
        episode_type=EpisodeType.PODCAST,
        episode_number="1",
        source="sample",
    ),
    EpisodeIn(
        title="Test Episode 2",
        description="Another test episode",
        link="https://example.com/test-2",
        pub_date=datetime(2024, 1, 10, tzinfo=timezone.utc),
        episode_type=EpisodeType.DRAFT,
        episode_number="2",
        source="sample",
    ),
]


def seed_sample_episodes(store: EpisodeStore) -> int:
    for ep in SAMPLE_EPISODES:
        store.upsert(ep)
    log.info("sample_episodes_seeded", count=len(SAMPLE_EPISODES))
    return len(SAMPLE_EPISODES)
