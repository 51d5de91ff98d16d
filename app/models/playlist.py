"""
Pydantic models for playlists and playlist sync requests/responses
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.models.episode import CamelModel, as_utc


class PlaylistCreate(CamelModel):
    """Fields accepted when inserting a playlist"""
    mixcloud_url: str = Field(..., min_length=1, description="Playlist source URL")
    name: str = Field(..., min_length=1)
    last_updated: Optional[datetime] = None
    episode_count: int = Field(0, ge=0)

    @field_validator('last_updated')
    @classmethod
    def _last_updated_utc(cls, value):
        return as_utc(value)


class Playlist(PlaylistCreate):
    """Stored playlist"""
    id: int
    last_updated: datetime


class SyncSummary(BaseModel):
    """Result of loading a playlist"""
    playlist: Playlist
    new_episode_count: int
    total_episode_count: int


class RefreshSummary(BaseModel):
    """Result of refreshing a playlist"""
    new_episode_count: int
    total_episode_count: int


class LoadPlaylistRequest(CamelModel):
    """Request body for POST /api/playlists/load"""
    source_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices('sourceUrl', 'mixcloudUrl', 'source_url'),
    )


class RefreshPlaylistRequest(LoadPlaylistRequest):
    """Request body for POST /api/playlists/refresh"""
    simulate_new_episode: bool = False


class LoadPlaylistResponse(CamelModel):
    """Response model for POST /api/playlists/load"""
    playlist: Playlist
    new_episodes: int
    total_episodes: int


class RefreshPlaylistResponse(CamelModel):
    """Response model for POST /api/playlists/refresh"""
    new_episodes: int
    total_episodes: int
