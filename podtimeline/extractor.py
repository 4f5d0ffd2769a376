"""
extractor — Split an RSS document into per-episode records.

Parsed with BeautifulSoup's XML builder (lxml) rather than regexes over raw
text, so CDATA vs plain text, whitespace and attribute order don't matter.

Per item:
  title, link, pubDate     required; item dropped if any is missing/blank
  pubDate                  must parse to a timestamp, else item dropped
  description              optional, may span lines
  itunes:duration          optional
  itunes:explicit          "true"/"yes" → True, anything else False
  itunes:episode           optional; falls back to a trailing "[42]" in the title
  enclosure@url            optional

A failure inside one item is logged and skipped; the rest still come through.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional

import structlog
from bs4 import BeautifulSoup, Tag
from dateutil import parser as date_parser, tz

from .categorize import bracket_number, categorize_episode
from .models import EpisodeIn, EpisodeType

log = structlog.get_logger()

_EXPLICIT_TRUE = {"true", "yes", "explicit"}

# RFC 822 named zones dateutil does not know on its own
_RFC822_ZONES = {
    name: tz.tzoffset(name, hours * 3600)
    for name, hours in (
        ("EST", -5), ("EDT", -4),
        ("CST", -6), ("CDT", -5),
        ("MST", -7), ("MDT", -6),
        ("PST", -8), ("PDT", -7),
    )
}


@dataclass
class FeedItem:
    """One extracted feed entry, before schema validation."""
    title: str
    link: str
    pub_date: datetime
    episode_type: EpisodeType
    description: Optional[str] = None
    episode_number: Optional[str] = None
    duration: Optional[str] = None
    enclosure_url: Optional[str] = None
    is_explicit: bool = False
    source: Optional[str] = None

    def to_episode_in(self, source: str | None = None) -> EpisodeIn:
        """Validate into the store's insert type (raises pydantic.ValidationError)."""
        return EpisodeIn(
            title=self.title,
            link=self.link,
            pub_date=self.pub_date,
            episode_type=self.episode_type,
            source=source or self.source or "",
            description=self.description,
            episode_number=self.episode_number,
            duration=self.duration,
            enclosure_url=self.enclosure_url,
            is_explicit=self.is_explicit,
        )


def _child(item: Tag, name: str, prefix: str | None = None) -> Tag | None:
    """Direct child by local name + namespace prefix ("itunes", or None for plain RSS)."""
    qualified = f"{prefix}:{name}" if prefix else name
    for el in item.find_all(True, recursive=False):
        if prefix is None:
            if el.name == name and not el.prefix:
                return el
        elif el.name == qualified or (el.name == name and el.prefix == prefix):
            return el
    return None


def _text(item: Tag, name: str, prefix: str | None = None) -> str | None:
    el = _child(item, name, prefix)
    if el is None:
        return None
    text = el.get_text().strip()
    return text or None


def parse_pub_date(value: str) -> datetime | None:
    """RFC 822 / ISO dates → aware datetime; None if unparseable."""
    try:
        dt = date_parser.parse(value, tzinfos=_RFC822_ZONES)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def iter_item_blocks(document: str | bytes) -> list[Tag]:
    """All <item> elements in the document; empty list if none or unparseable."""
    if isinstance(document, str):
        markup, encoding = document.encode("utf-8"), "utf-8"
    else:
        markup, encoding = document, None
    if not markup.strip():
        return []
    soup = BeautifulSoup(markup, "xml", from_encoding=encoding)
    return soup.find_all("item")


def parse_item(item: Tag, source: str | None = None) -> FeedItem | None:
    """Extract one <item>; None if a required field is missing or the date is bad."""
    title = _text(item, "title")
    link = _text(item, "link")
    pub_date_str = _text(item, "pubDate")
    if not (title and link and pub_date_str):
        log.debug("item_missing_required", title=title, link=link, pub_date=pub_date_str)
        return None

    pub_date = parse_pub_date(pub_date_str)
    if pub_date is None:
        log.warning("item_bad_pubdate", title=title, pub_date=pub_date_str)
        return None

    explicit = _text(item, "explicit", "itunes")
    episode_number = _text(item, "episode", "itunes") or bracket_number(title)

    enclosure_url = None
    enclosure = _child(item, "enclosure")
    if enclosure is not None:
        enclosure_url = (enclosure.get("url") or "").strip() or None

    return FeedItem(
        title=title,
        link=link,
        pub_date=pub_date,
        episode_type=categorize_episode(title),
        description=_text(item, "description"),
        episode_number=episode_number,
        duration=_text(item, "duration", "itunes"),
        enclosure_url=enclosure_url,
        is_explicit=(explicit or "").lower() in _EXPLICIT_TRUE,
        source=source,
    )


def iter_feed_items(document: str | bytes, source: str | None = None) -> Iterator[FeedItem]:
    for idx, block in enumerate(iter_item_blocks(document)):
        try:
            item = parse_item(block, source=source)
        except Exception as e:
            log.warning("item_parse_failed", index=idx, source=source, error=str(e))
            continue
        if item is not None:
            yield item


def extract_items(document: str | bytes, source: str | None = None) -> list[FeedItem]:
    items = list(iter_feed_items(document, source=source))
    log.info("items_extracted", source=source, count=len(items))
    return items
