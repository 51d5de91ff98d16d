"""
Exception types for playlist sync operations
"""

from typing import Optional


class PlaylistSyncError(Exception):
    """Base class for all playlist sync failures"""


class ConfigurationError(PlaylistSyncError):
    """Required configuration (e.g. Mixcloud credentials) is missing"""


class UpstreamFetchError(PlaylistSyncError):
    """The Mixcloud API returned a non-success status or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ValidationError(PlaylistSyncError, ValueError):
    """Malformed input rejected before any store mutation"""
