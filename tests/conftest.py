"""Shared fixtures: sample feed documents and a fresh store."""

from datetime import datetime, timezone

import pytest

from podtimeline.config import FeedSource
from podtimeline.fetcher import FetchResult
from podtimeline.models import EpisodeIn, EpisodeType
from podtimeline.store import EpisodeStore

RSS_HEAD = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">\n'
    "<channel><title>Feed</title>\n"
)
RSS_TAIL = "</channel></rss>\n"


def make_feed(*items: str) -> str:
    return RSS_HEAD + "\n".join(items) + RSS_TAIL


def make_item(
    title: str | None = "Episode",
    link: str | None = "https://example.com/ep",
    pub_date: str | None = "Mon, 01 Jan 2024 12:00:00 GMT",
    description: str | None = None,
    cdata: bool = False,
    extra: str = "",
) -> str:
    parts = ["<item>"]
    if title is not None:
        parts.append(f"<title><![CDATA[{title}]]></title>" if cdata else f"<title>{title}</title>")
    if link is not None:
        parts.append(f"<link>{link}</link>")
    if pub_date is not None:
        parts.append(f"<pubDate>{pub_date}</pubDate>")
    if description is not None:
        parts.append(
            f"<description><![CDATA[{description}]]></description>"
            if cdata
            else f"<description>{description}</description>"
        )
    parts.append(extra)
    parts.append("</item>")
    return "".join(parts)


def episode_in(
    title: str = "Episode",
    link: str = "https://example.com/ep",
    pub_date: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc),
    episode_type: EpisodeType = EpisodeType.BONUS,
    **kwargs,
) -> EpisodeIn:
    kwargs.setdefault("source", "test")
    return EpisodeIn(title=title, link=link, pub_date=pub_date, episode_type=episode_type, **kwargs)


class FakeFetcher:
    """url -> FetchResult from a fixed mapping; unknown URLs fail."""

    def __init__(self, documents: dict[str, str]):
        self.documents = documents
        self.calls: list[str] = []

    def __call__(self, url: str) -> FetchResult:
        self.calls.append(url)
        if url not in self.documents:
            return FetchResult(url=url, ok=False, status_code=503, error="HTTP 503")
        return FetchResult(url=url, ok=True, content=self.documents[url].encode("utf-8"), status_code=200)


@pytest.fixture
def store() -> EpisodeStore:
    return EpisodeStore()


@pytest.fixture
def feeds() -> list[FeedSource]:
    return [
        FeedSource(name="patreon", url="https://feeds.test/a", source="regulation"),
        FeedSource(name="megaphone", url="https://feeds.test/b", source="fface"),
    ]
