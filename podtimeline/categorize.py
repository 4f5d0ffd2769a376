"""
categorize — Title → episode label.

Rules run in order, first match wins. The bracket check runs before the
keyword checks, so "Draft Night [12]" is a podcast, not a draft.
"""
from __future__ import annotations
import re

from .models import EpisodeType

# Numbered main-feed episodes end with "[<digits>]"
BRACKET_NUMBER_RE = re.compile(r"\[(\d+)\]\s*$")

_KEYWORD_RULES: tuple[tuple[str, EpisodeType], ...] = (
    ("draft", EpisodeType.DRAFT),
    ("watchalong", EpisodeType.WATCHALONG),
    ("sausage talk", EpisodeType.SAUSAGE_TALK),
    ("blindside", EpisodeType.BLINDSIDE),
)


def categorize_episode(title: str) -> EpisodeType:
    if BRACKET_NUMBER_RE.search(title):
        return EpisodeType.PODCAST
    lowered = title.lower()
    for keyword, label in _KEYWORD_RULES:
        if keyword in lowered:
            return label
    return EpisodeType.BONUS


def bracket_number(title: str) -> str | None:
    """Return the number from a trailing "[42]" suffix, or None."""
    m = BRACKET_NUMBER_RE.search(title)
    return m.group(1) if m else None
