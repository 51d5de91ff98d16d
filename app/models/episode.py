"""
Pydantic models for episodes and shared model helpers
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from core.url_normalizer import MixcloudURL


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, populated by either name"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Naive timestamps are read as UTC so ordering never mixes aware and naive values
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class EpisodeCreate(CamelModel):
    """Fields accepted when inserting an episode"""
    mixcloud_id: str = Field(..., min_length=1, description="Upstream cloudcast key")
    title: str = Field(..., min_length=1)
    artist: str = "Unknown Artist"
    duration: int = Field(0, ge=0, description="Duration in seconds")
    artwork_url: Optional[str] = None
    mixcloud_url: str = Field(..., min_length=1)
    published_at: Optional[datetime] = None
    is_new: bool = False

    @field_validator('published_at')
    @classmethod
    def _published_at_utc(cls, value):
        return as_utc(value)


class Episode(EpisodeCreate):
    """Stored episode"""
    id: int
    published_at: datetime

    @computed_field(alias="embedUrl")
    @property
    def embed_url(self) -> Optional[str]:
        """Mixcloud widget iframe URL for this episode"""
        return MixcloudURL.widget_embed_url(self.mixcloud_url)


class MarkViewedRequest(CamelModel):
    """Request body for PATCH /api/episodes/mark-viewed"""
    episode_ids: Optional[List[int]] = None


class MessageResponse(BaseModel):
    message: str
