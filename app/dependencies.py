"""
FastAPI dependencies that hand out the per-process store and sync service
"""

from fastapi import Request

from app.services.episode_store import EpisodeStore
from app.services.playlist_sync import PlaylistSyncService


def get_store(request: Request) -> EpisodeStore:
    return request.app.state.store


def get_sync_service(request: Request) -> PlaylistSyncService:
    return PlaylistSyncService(
        request.app.state.store,
        client_factory=request.app.state.client_factory,
    )
