"""
models — Episode and User records.

EpisodeIn is the validated insert payload checked at the ingestion boundary;
Episode is what the store hands back (id + created_at added).
"""
from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class EpisodeType(str, Enum):
    PODCAST = "podcast"
    DRAFT = "draft"
    WATCHALONG = "watchalong"
    SAUSAGE_TALK = "sausage-talk"
    BLINDSIDE = "blindside"
    BONUS = "bonus"


class EpisodeIn(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    title: str = Field(min_length=1)
    link: str = Field(min_length=1)
    pub_date: datetime
    episode_type: EpisodeType
    source: str = Field(min_length=1)
    description: Optional[str] = None
    episode_number: Optional[str] = None
    duration: Optional[str] = None
    enclosure_url: Optional[str] = None
    is_explicit: bool = False

    @field_validator("description", "episode_number", "duration", "enclosure_url", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("pub_date")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        # naive timestamps are taken as UTC so ordering never mixes naive/aware
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Episode(EpisodeIn):
    id: str
    created_at: datetime


class UserIn(BaseModel):
    username: str = Field(min_length=1)
    password: str


class User(UserIn):
    id: str
