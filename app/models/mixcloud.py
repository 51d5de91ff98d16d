"""
Pydantic models for Mixcloud API payloads

Only the fields the sync uses are declared; anything else in the upstream
JSON is ignored.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.duration import normalize_duration
from core.url_normalizer import MixcloudURL


class MixcloudModel(BaseModel):
    model_config = ConfigDict(extra='ignore')


class MixcloudUser(MixcloudModel):
    name: Optional[str] = None
    username: Optional[str] = None


class MixcloudPictures(MixcloudModel):
    large: Optional[str] = None
    medium: Optional[str] = None
    small: Optional[str] = None

    def best(self) -> Optional[str]:
        """Largest available artwork URL"""
        return self.large or self.medium or self.small


class MixcloudCloudcast(MixcloudModel):
    """One entry of a playlist's cloudcast listing"""
    key: str = Field(..., min_length=1)
    name: Optional[str] = None
    url: Optional[str] = None
    user: MixcloudUser = Field(default_factory=MixcloudUser)
    pictures: MixcloudPictures = Field(default_factory=MixcloudPictures)
    audio_length: Optional[Union[int, float, str]] = None
    created_time: Optional[datetime] = None

    @field_validator('user', 'pictures', mode='before')
    @classmethod
    def _none_to_empty(cls, value):
        return {} if value is None else value

    @field_validator('audio_length', mode='before')
    @classmethod
    def _drop_unusable_length(cls, value):
        if isinstance(value, (int, float, str)) and not isinstance(value, bool):
            return value
        return None

    @field_validator('created_time', mode='wrap')
    @classmethod
    def _lenient_created_time(cls, value, handler):
        # An unparseable timestamp falls back to the store's default
        try:
            return handler(value)
        except ValidationError:
            return None

    @property
    def duration_seconds(self) -> int:
        return normalize_duration(self.audio_length)

    @property
    def episode_url(self) -> str:
        return self.url or MixcloudURL.episode_url_from_key(self.key)

    def to_episode_fields(self, is_new: bool = True) -> Dict[str, Any]:
        """
        Map the cloudcast onto EpisodeCreate fields

        Args:
            is_new: Value for the episode's new flag

        Returns:
            Dictionary accepted by EpisodeStore.create_episode()
        """
        return {
            'mixcloud_id': self.key,
            'title': self.name or 'Untitled',
            'artist': self.user.name or 'Unknown Artist',
            'duration': self.duration_seconds,
            'artwork_url': self.pictures.best(),
            'mixcloud_url': self.episode_url,
            'published_at': self.created_time,
            'is_new': is_new,
        }


class MixcloudPlaylist(MixcloudModel):
    """Playlist metadata resource"""
    name: Optional[str] = None
