"""
fetcher — HTTP GET for feed documents.

fetch_feed() never raises: network errors, timeouts and non-2xx responses
come back as FetchResult(ok=False, ...) so the caller can treat the feed as
empty and carry on with the others.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import requests
import structlog

log = structlog.get_logger()

DEFAULT_USER_AGENT = "podtimeline/0.1 (+https://github.com/podtimeline)"


class FeedFetchError(Exception):
    def __init__(self, url: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


@dataclass
class FetchResult:
    url: str
    ok: bool
    content: bytes = b""
    status_code: Optional[int] = None
    error: Optional[str] = None


def _get(session: requests.Session, url: str, timeout: float, user_agent: str) -> requests.Response:
    try:
        resp = session.get(
            url,
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/rss+xml, application/xml, text/xml, */*"},
        )
    except requests.RequestException as e:
        raise FeedFetchError(url, str(e)) from e
    if not 200 <= resp.status_code < 300:
        raise FeedFetchError(url, f"HTTP {resp.status_code}", status_code=resp.status_code)
    return resp


def fetch_feed(
    url: str,
    timeout: float = 30.0,
    user_agent: str = DEFAULT_USER_AGENT,
    session: requests.Session | None = None,
) -> FetchResult:
    """GET a feed URL and return its raw body, or a failed FetchResult."""
    s = session or requests.Session()
    try:
        resp = _get(s, url, timeout, user_agent)
    except FeedFetchError as e:
        log.error("feed_fetch_failed", url=_redact(url), status=e.status_code, error=str(e))
        return FetchResult(url=url, ok=False, status_code=e.status_code, error=str(e))
    finally:
        if session is None:
            s.close()

    log.info("feed_fetched", url=_redact(url), status=resp.status_code, bytes=len(resp.content))
    return FetchResult(url=url, ok=True, content=resp.content, status_code=resp.status_code)


def _redact(url: str) -> str:
    # auth tokens live in the query string; keep them out of the logs
    return url.split("?", 1)[0]
