"""
dedupe — Cross-feed deduplication of extracted episodes.

Entries are folded left to right and keyed by normalized title (lowercase +
trim). On a collision the entry with the strictly longer description
replaces the stored one; ties keep the first-seen entry. Near-identical
titles ("Show [12]" vs "Show  [12]") stay separate.
"""
from __future__ import annotations
from typing import Callable, Iterable, TypeVar

import structlog

log = structlog.get_logger()

T = TypeVar("T")


def normalize_title(title: str | None) -> str:
    return (title or "").strip().lower()


def title_key(entry) -> str:
    return normalize_title(getattr(entry, "title", None))


def link_key(entry) -> str:
    return (getattr(entry, "link", None) or "").strip()


def _description_len(entry) -> int:
    return len(getattr(entry, "description", None) or "")


def dedupe_episodes(entries: Iterable[T], key: Callable[[T], str] = title_key) -> list[T]:
    """
    Collapse entries sharing a key, keeping the richest variant.

    Args:
        entries: items with .title / .link / .description, in feed-fetch order
        key: dedup key function (title_key by default, link_key for link-keyed callers)

    Returns:
        one entry per distinct key, in first-seen key order
    """
    best: dict[str, T] = {}
    total = 0
    replaced = 0

    for entry in entries:
        total += 1
        k = key(entry)
        current = best.get(k)
        if current is None:
            best[k] = entry
            continue
        if _description_len(entry) > _description_len(current):
            best[k] = entry
            replaced += 1
            log.debug("dedupe_replace", key=k)
        else:
            log.debug("dedupe_skip", key=k)

    unique = list(best.values())
    log.info(
        "dedupe_result",
        total=total,
        unique=len(unique),
        duplicates=total - len(unique),
        replaced=replaced,
    )
    return unique
