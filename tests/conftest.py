"""
Shared pytest fixtures for the playlist sync tests

This file contains fixtures that are available to all test files.
"""

import os
import tempfile
from typing import Dict, List, Optional

import pytest

# app.main configures file logging on import; keep it out of the repo
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='playlist-sync-logs-'))

from core.errors import UpstreamFetchError  # noqa: E402


PLAYLIST_URL = 'https://www.mixcloud.com/TotalRockOfficial/playlists/industrial/'


def make_cloudcast(index: int, **overrides) -> Dict:
    """Build a raw Mixcloud cloudcast entry"""
    entry = {
        'key': f'/TotalRockOfficial/industrial-show-e{index}/',
        'name': f'The Industrial Show e{index}',
        'url': f'https://www.mixcloud.com/TotalRockOfficial/industrial-show-e{index}/',
        'user': {'name': 'TotalRock Official', 'username': 'TotalRockOfficial'},
        'pictures': {'large': f'https://thumbnailer.mixcloud.com/e{index}-large.jpg'},
        'audio_length': '58:30',
        'created_time': f'2024-01-{index % 28 + 1:02d}T20:00:00Z',
    }
    entry.update(overrides)
    return entry


class FakeMixcloudClient:
    """
    Stand-in for MixcloudClient that serves canned pages

    Args:
        pages: Cloudcast entries per page
        playlist: Playlist metadata returned by get_playlist()
        fail_at_page: Index of a page that raises UpstreamFetchError (0 = first)
    """

    def __init__(self, pages: List[List[Dict]], playlist: Optional[Dict] = None,
                 fail_at_page: Optional[int] = None, playlist_error: Optional[Exception] = None):
        self.pages = pages
        self.playlist = playlist if playlist is not None else {'name': 'Industrial Show'}
        self.fail_at_page = fail_at_page
        self.playlist_error = playlist_error
        self.pages_fetched = 0

    def get_playlist(self, playlist_url: str) -> Dict:
        if self.playlist_error:
            raise self.playlist_error
        return self.playlist

    def iter_cloudcast_pages(self, playlist_url: str):
        for index, page in enumerate(self.pages):
            if index == self.fail_at_page:
                if index == 0:
                    raise UpstreamFetchError('Mixcloud API error: 503 Service Unavailable', status_code=503)
                return
            self.pages_fetched += 1
            yield list(page)


@pytest.fixture
def playlist_url() -> str:
    return PLAYLIST_URL


@pytest.fixture
def three_cloudcasts() -> List[Dict]:
    """Three cloudcasts with distinct keys"""
    return [make_cloudcast(i) for i in (1, 2, 3)]


@pytest.fixture
def fake_client_factory():
    """Returns a helper that builds a client factory around FakeMixcloudClient"""
    def build(pages, **kwargs):
        client = FakeMixcloudClient(pages, **kwargs)
        return client, (lambda: client)
    return build


@pytest.fixture
def cloudcast_factory():
    """Returns make_cloudcast(index, **overrides)"""
    return make_cloudcast
