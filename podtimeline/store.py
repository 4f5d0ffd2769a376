"""
store — In-memory episode and user store.

Single process, single writer assumed: no locking. Two overlapping refreshes
can interleave clear_all()/create() and lose or duplicate rows. The app owns
one instance (app.state.store) and hands it to request handlers; nothing here
is a module-level singleton.
"""
from __future__ import annotations
import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog

from .dedupe import normalize_title
from .models import Episode, EpisodeIn, EpisodeType, User, UserIn

log = structlog.get_logger()


class DuplicateUsernameError(ValueError):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


def _newest_first(episodes) -> list[Episode]:
    return sorted(episodes, key=lambda e: e.pub_date, reverse=True)


class EpisodeStore:
    """Upsert-capable episode collection keyed by generated id."""

    def __init__(self):
        self._episodes: dict[str, Episode] = {}
        self._users: dict[str, User] = {}

    def __len__(self) -> int:
        return len(self._episodes)

    # --- Users ---

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return user
        return None

    def create_user(self, data: UserIn) -> User:
        if self.get_user_by_username(data.username):
            raise DuplicateUsernameError(f"Username already taken: {data.username}")
        user = User(id=_new_id(), **data.model_dump())
        self._users[user.id] = user
        return user

    # --- Episodes ---

    def get(self, episode_id: str) -> Optional[Episode]:
        return self._episodes.get(episode_id)

    def get_all(self) -> list[Episode]:
        return _newest_first(self._episodes.values())

    def get_by_type(self, episode_type: EpisodeType | str) -> list[Episode]:
        t = EpisodeType(episode_type)
        return _newest_first(e for e in self._episodes.values() if e.episode_type == t)

    def search(self, q: str) -> list[Episode]:
        """Case-insensitive substring match on title or description."""
        term = q.lower()
        return _newest_first(
            e for e in self._episodes.values()
            if term in e.title.lower()
            or (e.description and term in e.description.lower())
        )

    def query(self, episode_type: EpisodeType | str | None = None,
              search: str | None = None) -> list[Episode]:
        """Type filter AND text search; either may be omitted."""
        episodes = self.search(search) if search else self.get_all()
        if episode_type is not None:
            t = EpisodeType(episode_type)
            episodes = [e for e in episodes if e.episode_type == t]
        return episodes

    def create(self, data: EpisodeIn) -> Episode:
        episode_id = _new_id()
        while episode_id in self._episodes:
            episode_id = _new_id()
        ep = Episode(
            id=episode_id,
            created_at=datetime.now(timezone.utc),
            **data.model_dump(),
        )
        self._episodes[ep.id] = ep
        log.debug("episode_created", episode_id=ep.id, title=ep.title)
        return ep

    def _find_match(self, data: EpisodeIn) -> Optional[Episode]:
        key = normalize_title(data.title)
        for ep in self._episodes.values():
            if ep.episode_type == data.episode_type and normalize_title(ep.title) == key:
                return ep
        return None

    def upsert(self, data: EpisodeIn) -> Episode:
        """
        Insert, or update the episode with the same normalized title + type.

        Non-null incoming values replace stored ones; null incoming values keep
        what was stored. id and created_at never change.
        """
        existing = self._find_match(data)
        if existing is None:
            return self.create(data)

        merged = existing.model_dump()
        for name, value in data.model_dump().items():
            if value is not None:
                merged[name] = value
        ep = Episode(**merged)
        self._episodes[ep.id] = ep
        log.debug("episode_updated", episode_id=ep.id, title=ep.title)
        return ep

    def clear_all(self) -> None:
        """Drop every episode. Meant to precede a full re-ingestion."""
        n = len(self._episodes)
        self._episodes.clear()
        log.info("episodes_cleared", count=n)
