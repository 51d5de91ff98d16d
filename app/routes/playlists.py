"""
API routes for loading and refreshing Mixcloud playlists
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_store, get_sync_service
from app.middleware.auth import verify_api_key
from app.models.playlist import (
    LoadPlaylistRequest,
    LoadPlaylistResponse,
    Playlist,
    RefreshPlaylistRequest,
    RefreshPlaylistResponse,
)
from app.services.episode_store import EpisodeStore
from app.services.playlist_sync import PlaylistSyncService, build_discovered_cloudcast
from core.config import Config
from core.errors import ValidationError

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_source_url(source_url):
    if not source_url or not source_url.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Mixcloud URL is required"
        )
    return source_url.strip()


@router.get("/playlists", response_model=List[Playlist])
async def list_playlists(store: EpisodeStore = Depends(get_store)):
    """List tracked playlists"""
    return await store.list_playlists()


@router.post(
    "/playlists/load",
    response_model=LoadPlaylistResponse,
    dependencies=[Depends(verify_api_key)],
)
async def load_playlist(
    body: LoadPlaylistRequest,
    service: PlaylistSyncService = Depends(get_sync_service),
):
    """
    Load a playlist from Mixcloud into the store

    Args:
        body: Request with sourceUrl (mixcloudUrl is accepted too)

    Returns:
        The playlist record plus new/total episode counts
    """
    source_url = _require_source_url(body.source_url)

    try:
        summary = await service.load_playlist(source_url)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Load playlist error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to load playlist from Mixcloud", "error": str(e)}
        )

    return LoadPlaylistResponse(
        playlist=summary.playlist,
        new_episodes=summary.new_episode_count,
        total_episodes=summary.total_episode_count,
    )


@router.post(
    "/playlists/refresh",
    response_model=RefreshPlaylistResponse,
    dependencies=[Depends(verify_api_key)],
)
async def refresh_playlist(
    body: RefreshPlaylistRequest,
    service: PlaylistSyncService = Depends(get_sync_service),
):
    """
    Check a playlist for new episodes

    Args:
        body: Request with sourceUrl and optional simulateNewEpisode

    Returns:
        New/total episode counts
    """
    source_url = _require_source_url(body.source_url)

    injected = None
    if body.simulate_new_episode:
        if Config.demo_hooks_enabled():
            injected = [build_discovered_cloudcast()]
        else:
            logger.warning("simulateNewEpisode ignored: ENABLE_DEMO_HOOKS is not set")

    try:
        summary = await service.refresh_playlist(source_url, injected=injected)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Refresh playlist error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to refresh playlist", "error": str(e)}
        )

    return RefreshPlaylistResponse(
        new_episodes=summary.new_episode_count,
        total_episodes=summary.total_episode_count,
    )
