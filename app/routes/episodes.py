"""
API routes for episodes
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from app.dependencies import get_store, get_sync_service
from app.middleware.auth import verify_api_key
from app.models.episode import Episode, MarkViewedRequest, MessageResponse
from app.services.episode_store import EpisodeStore
from app.services.playlist_sync import PlaylistSyncService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/episodes", response_model=List[Episode])
async def list_episodes(store: EpisodeStore = Depends(get_store)):
    """
    List all episodes, most recently published first

    Returns:
        List of episodes
    """
    try:
        return await store.list_episodes()
    except Exception as e:
        logger.error(f"Error listing episodes: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch episodes"
        )


@router.patch(
    "/episodes/mark-viewed",
    response_model=MessageResponse,
    dependencies=[Depends(verify_api_key)],
)
async def mark_episodes_viewed(
    payload: Any = Body(None),
    service: PlaylistSyncService = Depends(get_sync_service),
):
    """
    Clear the new flag on a set of episodes

    Args:
        payload: JSON body with an episodeIds array; unknown ids are ignored

    Returns:
        Acknowledgement message
    """
    try:
        body = MarkViewedRequest.model_validate(payload)
    except PydanticValidationError:
        body = None

    if body is None or body.episode_ids is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Episode IDs array is required"
        )

    try:
        await service.mark_viewed(body.episode_ids)
        return MessageResponse(message="Episodes marked as viewed")
    except Exception as e:
        logger.error(f"Error marking episodes as viewed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to mark episodes as viewed"
        )


@router.get("/episodes/{episode_id}", response_model=Episode)
async def get_episode(episode_id: int, store: EpisodeStore = Depends(get_store)):
    """
    Get a single episode

    Args:
        episode_id: Local episode id

    Returns:
        The episode
    """
    episode = await store.get_episode(episode_id)
    if episode is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Episode not found"
        )
    return episode
