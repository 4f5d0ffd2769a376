"""
schemas — Pydantic response models for the API.

JSON uses camelCase (pubDate, episodeType, ...) to match the timeline UI;
episodes are serialized straight from models.Episode.
"""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..models import Episode


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FeedResultResponse(_CamelModel):
    name: str
    ok: bool
    items: int
    skipped: int = 0
    error: str | None = None


class RefreshResponse(_CamelModel):
    message: str
    episodes: list[Episode]
    feeds: list[FeedResultResponse]


class HealthResponse(_CamelModel):
    status: str
    scheduler_running: bool
    episodes: int
    last_refresh: datetime | None = None


class MessageResponse(BaseModel):
    message: str
    error: str | None = None
