"""
deps — FastAPI dependencies (store, config).
"""
from __future__ import annotations
from fastapi import Request

from ..config import Config
from ..store import EpisodeStore


def get_store(request: Request) -> EpisodeStore:
    """The app-owned store created in create_app()."""
    return request.app.state.store


def get_config(request: Request) -> Config:
    return request.app.state.config
