"""
In-memory episode and playlist store

State lives for the process lifetime only. Records handed to callers are
copies; only the store's own update methods change stored state.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.models.episode import Episode, EpisodeCreate, utc_now
from app.models.playlist import Playlist, PlaylistCreate
from core.errors import ValidationError
from core.url_normalizer import MixcloudURL


class EpisodeStore:
    """Keyed in-memory collection of episodes and playlists"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._episodes: Dict[int, Episode] = {}
        self._playlists: Dict[int, Playlist] = {}
        self._next_episode_id = 1
        self._next_playlist_id = 1

    # Episodes

    async def list_episodes(self) -> List[Episode]:
        """All episodes, most recently published first"""
        with self._lock:
            episodes = [episode.model_copy(deep=True) for episode in self._episodes.values()]
        # sorted() is stable, so ties keep insertion order
        return sorted(episodes, key=lambda episode: episode.published_at, reverse=True)

    async def get_episode(self, episode_id: int) -> Optional[Episode]:
        with self._lock:
            episode = self._episodes.get(episode_id)
            return episode.model_copy(deep=True) if episode else None

    async def find_episode_by_mixcloud_id(self, mixcloud_id: str) -> Optional[Episode]:
        with self._lock:
            episode = self._find_episode_by_mixcloud_id(mixcloud_id)
            return episode.model_copy(deep=True) if episode else None

    async def create_episode(self, fields: Union[EpisodeCreate, Mapping[str, Any]]) -> Episode:
        """
        Insert a new episode

        Args:
            fields: EpisodeCreate or a mapping of its fields

        Returns:
            The stored episode with its assigned id

        Raises:
            ValidationError: If fields are invalid or the mixcloud_id already exists
        """
        data = self._validate(EpisodeCreate, fields)

        with self._lock:
            if self._find_episode_by_mixcloud_id(data.mixcloud_id):
                raise ValidationError(f"Episode already exists: {data.mixcloud_id}")

            values = data.model_dump()
            values['id'] = self._next_episode_id
            values['published_at'] = data.published_at or utc_now()
            episode = Episode(**values)

            self._next_episode_id += 1
            self._episodes[episode.id] = episode
            return episode.model_copy(deep=True)

    async def update_episode(self, episode_id: int, changes: Mapping[str, Any]) -> Optional[Episode]:
        """
        Shallow-merge changes into an existing episode

        Returns:
            The updated episode, or None if no episode has that id

        Raises:
            ValidationError: If the merged record is invalid
        """
        with self._lock:
            existing = self._episodes.get(episode_id)
            if existing is None:
                return None

            merged = {**existing.model_dump(exclude={'embed_url'}), **changes, 'id': episode_id}
            updated = self._validate(Episode, merged)

            if updated.mixcloud_id != existing.mixcloud_id:
                other = self._find_episode_by_mixcloud_id(updated.mixcloud_id)
                if other is not None and other.id != episode_id:
                    raise ValidationError(f"Episode already exists: {updated.mixcloud_id}")

            self._episodes[episode_id] = updated
            return updated.model_copy(deep=True)

    async def set_episodes_new_flag(self, episode_ids: Iterable[int], is_new: bool) -> None:
        """Set is_new on every listed episode; unknown ids are ignored"""
        with self._lock:
            for episode_id in episode_ids:
                episode = self._episodes.get(episode_id)
                if episode is not None:
                    episode.is_new = is_new

    # Playlists

    async def list_playlists(self) -> List[Playlist]:
        with self._lock:
            return [playlist.model_copy(deep=True) for playlist in self._playlists.values()]

    async def get_playlist(self, playlist_id: int) -> Optional[Playlist]:
        with self._lock:
            playlist = self._playlists.get(playlist_id)
            return playlist.model_copy(deep=True) if playlist else None

    async def find_playlist_by_url(self, mixcloud_url: str) -> Optional[Playlist]:
        with self._lock:
            playlist = self._find_playlist_by_url(mixcloud_url)
            return playlist.model_copy(deep=True) if playlist else None

    async def create_playlist(self, fields: Union[PlaylistCreate, Mapping[str, Any]]) -> Playlist:
        """
        Insert a new playlist

        Raises:
            ValidationError: If fields are invalid or the URL is already tracked
        """
        data = self._validate(PlaylistCreate, fields)

        with self._lock:
            if self._find_playlist_by_url(data.mixcloud_url):
                raise ValidationError(f"Playlist already exists: {data.mixcloud_url}")

            values = data.model_dump()
            values['id'] = self._next_playlist_id
            values['last_updated'] = data.last_updated or utc_now()
            playlist = Playlist(**values)

            self._next_playlist_id += 1
            self._playlists[playlist.id] = playlist
            return playlist.model_copy(deep=True)

    async def update_playlist(self, playlist_id: int, changes: Mapping[str, Any]) -> Optional[Playlist]:
        """
        Shallow-merge changes into an existing playlist

        Returns:
            The updated playlist, or None if no playlist has that id
        """
        with self._lock:
            existing = self._playlists.get(playlist_id)
            if existing is None:
                return None

            merged = {**existing.model_dump(), **changes, 'id': playlist_id}
            updated = self._validate(Playlist, merged)

            if not MixcloudURL.are_same_playlist(updated.mixcloud_url, existing.mixcloud_url):
                other = self._find_playlist_by_url(updated.mixcloud_url)
                if other is not None and other.id != playlist_id:
                    raise ValidationError(f"Playlist already exists: {updated.mixcloud_url}")

            self._playlists[playlist_id] = updated
            return updated.model_copy(deep=True)

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return {'episodes': len(self._episodes), 'playlists': len(self._playlists)}

    # Internal helpers (caller holds the lock)

    def _find_episode_by_mixcloud_id(self, mixcloud_id: str) -> Optional[Episode]:
        for episode in self._episodes.values():
            if episode.mixcloud_id == mixcloud_id:
                return episode
        return None

    def _find_playlist_by_url(self, mixcloud_url: str) -> Optional[Playlist]:
        # Scheme, host prefix, query and trailing slash do not distinguish playlists
        wanted = MixcloudURL.normalize_url(mixcloud_url)
        for playlist in self._playlists.values():
            if MixcloudURL.normalize_url(playlist.mixcloud_url) == wanted:
                return playlist
        return None

    @staticmethod
    def _validate(model, fields):
        if isinstance(fields, model):
            return fields.model_copy(deep=True)
        try:
            if isinstance(fields, BaseModel):
                fields = fields.model_dump()
            return model.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {model.__name__}: {e}") from e
