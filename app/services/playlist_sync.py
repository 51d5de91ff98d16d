"""
Playlist sync service - loads Mixcloud playlists into the episode store
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set

from pydantic import ValidationError as PydanticValidationError

from app.models.episode import Episode, utc_now
from app.models.mixcloud import MixcloudCloudcast, MixcloudPlaylist
from app.models.playlist import RefreshSummary, SyncSummary
from app.services.episode_store import EpisodeStore
from core.config import Config
from core.mixcloud_client import MixcloudClient


def build_discovered_cloudcast(now: Optional[datetime] = None) -> MixcloudCloudcast:
    """
    Build a synthetic cloudcast that is guaranteed not to be in the store yet

    Used by the refresh demo hook to exercise the "new episode discovered"
    path when nothing changed upstream.

    Args:
        now: Creation time for the synthetic entry (defaults to current UTC time)

    Returns:
        A cloudcast keyed by its creation timestamp
    """
    now = now or utc_now()
    slug = f"discovered-{now.strftime('%Y%m%d%H%M%S%f')}"
    return MixcloudCloudcast(
        key=f"/demo/{slug}/",
        name=f"Discovered Episode {now.strftime('%Y-%m-%d %H:%M:%S')}",
        url=f"{Config.MIXCLOUD_WEB_BASE}/demo/{slug}/",
        user={'name': 'Demo', 'username': 'demo'},
        audio_length='58:30',
        created_time=now,
    )


class _Reconciliation:
    """Running tallies for one sync/refresh pass"""

    def __init__(self):
        self.created: List[Episode] = []
        self.created_ids: Set[int] = set()
        self.seen_ids: List[int] = []
        self.accumulated = 0
        self.processed = 0


class PlaylistSyncService:
    """Reconciles Mixcloud playlist listings with the episode store"""

    def __init__(
        self,
        store: EpisodeStore,
        client_factory: Callable[[], MixcloudClient] = MixcloudClient.from_env,
        max_episodes: int = Config.MAX_PLAYLIST_EPISODES,
    ):
        self.logger = logging.getLogger(__name__)
        self.store = store
        self.client_factory = client_factory
        self.max_episodes = max_episodes

    async def load_playlist(self, playlist_url: str) -> SyncSummary:
        """
        Fetch a playlist from Mixcloud and reconcile its episodes with the store

        Args:
            playlist_url: Mixcloud playlist page URL

        Returns:
            SyncSummary with the playlist record and episode counts

        Raises:
            ConfigurationError: If Mixcloud credentials are missing
            ValidationError: If the URL is not a Mixcloud URL
            UpstreamFetchError: If the playlist or its first page cannot be fetched
        """
        self.logger.info(f"Loading playlist: {playlist_url}")
        client = self.client_factory()

        playlist_data = await asyncio.to_thread(client.get_playlist, playlist_url)
        try:
            metadata = MixcloudPlaylist.model_validate(playlist_data)
        except PydanticValidationError as e:
            self.logger.warning(f"Unexpected playlist metadata shape, using defaults: {e.errors()}")
            metadata = MixcloudPlaylist()

        pages = client.iter_cloudcast_pages(playlist_url)
        first_page = await asyncio.to_thread(next, pages, None)

        playlist = await self.store.find_playlist_by_url(playlist_url)
        if playlist is None:
            playlist = await self.store.create_playlist({
                'mixcloud_url': playlist_url,
                'name': metadata.name or Config.DEFAULT_PLAYLIST_NAME,
                'last_updated': utc_now(),
                'episode_count': 0,
            })
            self.logger.info(f"Tracking new playlist: {playlist.name} (id={playlist.id})")

        tally = _Reconciliation()
        await self._reconcile_pages(first_page, pages, tally)
        await self._finish(tally)

        updated = await self.store.update_playlist(playlist.id, {
            'last_updated': utc_now(),
            'episode_count': tally.processed,
        })

        self.logger.info(
            f"✓ Loaded playlist {playlist.name}: "
            f"{len(tally.created)} new, {tally.processed} total"
        )

        return SyncSummary(
            playlist=updated or playlist,
            new_episode_count=len(tally.created),
            total_episode_count=tally.processed,
        )

    async def refresh_playlist(
        self,
        playlist_url: str,
        injected: Optional[Iterable[MixcloudCloudcast]] = None,
    ) -> RefreshSummary:
        """
        Re-fetch a playlist's cloudcasts and report whether new episodes appeared

        Args:
            playlist_url: Mixcloud playlist page URL
            injected: Cloudcasts to prepend to the upstream listing before reconciling

        Returns:
            RefreshSummary with episode counts

        Raises:
            ConfigurationError: If Mixcloud credentials are missing
            ValidationError: If the URL is not a Mixcloud URL
            UpstreamFetchError: If the first page cannot be fetched
        """
        self.logger.info(f"Refreshing playlist: {playlist_url}")
        client = self.client_factory()

        pages = client.iter_cloudcast_pages(playlist_url)
        first_page = await asyncio.to_thread(next, pages, None)

        tally = _Reconciliation()
        if injected:
            extra = [cloudcast.model_dump() for cloudcast in injected]
            self.logger.info(f"Injecting {len(extra)} synthetic episode(s)")
            first_page = extra + (first_page or [])

        await self._reconcile_pages(first_page, pages, tally)
        await self._finish(tally)

        playlist = await self.store.find_playlist_by_url(playlist_url)
        if playlist is not None:
            await self.store.update_playlist(playlist.id, {
                'last_updated': utc_now(),
                'episode_count': tally.processed,
            })

        self.logger.info(f"Refresh complete: {len(tally.created)} new, {tally.processed} total")

        return RefreshSummary(
            new_episode_count=len(tally.created),
            total_episode_count=tally.processed,
        )

    async def mark_viewed(self, episode_ids: Iterable[int]) -> None:
        """Clear the new flag on the given episodes; unknown ids are ignored"""
        episode_ids = list(episode_ids)
        await self.store.set_episodes_new_flag(episode_ids, False)
        self.logger.info(f"Marked {len(episode_ids)} episode(s) as viewed")

    async def _reconcile_pages(
        self,
        first_page: Optional[List[Dict]],
        pages: Iterator[List[Dict]],
        tally: _Reconciliation,
    ) -> None:
        """Reconcile page by page until the listing ends or the cap is reached"""
        page = first_page
        while page is not None:
            await self._reconcile_entries(page[:self.max_episodes - tally.accumulated], tally)

            if tally.accumulated >= self.max_episodes:
                self.logger.warning(f"Reached safety limit of {self.max_episodes} episodes")
                pages.close()
                return

            self.logger.info(f"Total accumulated so far: {tally.accumulated}")
            page = await asyncio.to_thread(next, pages, None)

    async def _reconcile_entries(self, entries: List[Dict], tally: _Reconciliation) -> None:
        for raw in entries:
            tally.accumulated += 1
            try:
                cloudcast = MixcloudCloudcast.model_validate(raw)
            except PydanticValidationError as e:
                self.logger.warning(f"Skipping malformed cloudcast entry: {e.errors()}")
                continue

            tally.processed += 1
            existing = await self.store.find_episode_by_mixcloud_id(cloudcast.key)
            if existing is not None:
                # A key repeated within one listing keeps the flag it got earlier in this pass
                if existing.id not in tally.created_ids:
                    tally.seen_ids.append(existing.id)
                continue

            episode = await self.store.create_episode(cloudcast.to_episode_fields(is_new=True))
            self.logger.info(f"New episode found: {episode.title}")
            tally.created.append(episode)
            tally.created_ids.add(episode.id)

    async def _finish(self, tally: _Reconciliation) -> None:
        if tally.seen_ids:
            await self.store.set_episodes_new_flag(tally.seen_ids, False)
