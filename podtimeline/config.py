"""
config — Loads config.yaml with env var overrides.

Precedence: env vars > config.yaml > defaults
"""
from __future__ import annotations
import os
from pathlib import Path
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse
import yaml


@dataclass
class FeedSource:
    name: str    # feed label used in logs / refresh summaries
    url: str
    source: str  # tag stored on every episode from this feed


def _default_feeds() -> list[FeedSource]:
    return [
        FeedSource(
            name="patreon",
            url="https://www.patreon.com/rss/TheRegulationPod?show=868416",
            source="regulation",
        ),
        FeedSource(
            name="megaphone",
            url="https://feeds.megaphone.fm/fface",
            source="fface",
        ),
    ]


@dataclass
class Config:
    # Feeds, fetched in this order
    feeds: list[FeedSource] = field(default_factory=_default_feeds)
    patreon_auth: str = ""  # appended as ?auth= to the patreon feed URL

    # Fetching
    fetch_timeout_seconds: float = 30.0
    user_agent: str = "podtimeline/0.1"

    # Refresh behaviour
    refresh_mode: str = "replace"  # "replace" (clear + create) or "upsert"
    refresh_interval_minutes: int = 0  # 0 = no background refresh
    refresh_on_startup: bool = False
    seed_sample_data: bool = False

    # Web server
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    log_level: str = "INFO"

    def resolved_feeds(self) -> list[FeedSource]:
        """Feeds with the patreon auth token applied."""
        out = []
        for f in self.feeds:
            url = f.url
            if self.patreon_auth and "patreon.com" in url:
                url = _with_query_param(url, "auth", self.patreon_auth)
            out.append(FeedSource(name=f.name, url=url, source=f.source))
        return out


def _with_query_param(url: str, key: str, value: str) -> str:
    p = urlparse(url)
    params = [(k, v) for k, v in parse_qsl(p.query) if k != key]
    params.insert(0, (key, value))
    return urlunparse(p._replace(query=urlencode(params)))


def _parse_bool(val) -> bool:
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _coerce(current, value):
    if isinstance(current, bool):
        return _parse_bool(value)
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value


def load_config(config_path: str | Path | None = None) -> Config:
    """Load config from YAML file, then override with env vars."""
    cfg = Config()

    # 1. Load from YAML if available
    if config_path is None:
        config_path = os.environ.get("PODTIMELINE_CONFIG", "config.yaml")
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        for key, value in data.items():
            key_norm = key.replace("-", "_")
            if value is None or not hasattr(cfg, key_norm):
                continue
            if key_norm == "feeds":
                cfg.feeds = [FeedSource(**item) for item in value]
            else:
                setattr(cfg, key_norm, _coerce(getattr(cfg, key_norm), value))

    # 2. Override with env vars (PODTIMELINE_ prefix)
    env_map = {
        "PODTIMELINE_PATREON_AUTH": "patreon_auth",
        "PODTIMELINE_FETCH_TIMEOUT": "fetch_timeout_seconds",
        "PODTIMELINE_USER_AGENT": "user_agent",
        "PODTIMELINE_REFRESH_MODE": "refresh_mode",
        "PODTIMELINE_REFRESH_INTERVAL": "refresh_interval_minutes",
        "PODTIMELINE_REFRESH_ON_STARTUP": "refresh_on_startup",
        "PODTIMELINE_SEED_SAMPLE_DATA": "seed_sample_data",
        "PODTIMELINE_WEB_HOST": "web_host",
        "PODTIMELINE_WEB_PORT": "web_port",
        "PODTIMELINE_LOG_LEVEL": "log_level",
    }
    for env_key, attr in env_map.items():
        val = os.environ.get(env_key)
        if val is not None:
            setattr(cfg, attr, _coerce(getattr(cfg, attr), val))

    if cfg.refresh_mode not in ("replace", "upsert"):
        raise ValueError(f"Invalid refresh_mode: {cfg.refresh_mode}")

    return cfg
