"""
Configuration management for the Mixcloud playlist sync backend
"""

import os
from pathlib import Path
from typing import Dict, List, Tuple

from core.errors import ConfigurationError


class Config:
    """Centralized configuration constants and environment management"""

    # Mixcloud endpoints
    MIXCLOUD_API_BASE = 'https://api.mixcloud.com'
    MIXCLOUD_WEB_BASE = 'https://www.mixcloud.com'
    MIXCLOUD_WIDGET_BASE = 'https://www.mixcloud.com/widget/iframe/'
    MIXCLOUD_HOSTS = ('mixcloud.com', 'www.mixcloud.com', 'm.mixcloud.com', 'api.mixcloud.com')

    DEFAULT_PLAYLIST_NAME = 'Mixcloud Playlist'

    # Pagination
    MIXCLOUD_PAGE_SIZE = 20
    MAX_PLAYLIST_EPISODES = 1000

    # HTTP timeouts (seconds)
    DEFAULT_TIMEOUT = 30

    APP_NAME = 'mixcloud_playlist_sync'
    APP_VERSION = '1.0.0'

    @staticmethod
    def get_mixcloud_credentials() -> Tuple[str, str]:
        """
        Read Mixcloud API credentials from the environment

        Returns:
            (client_id, client_secret)

        Raises:
            ConfigurationError: If either credential is missing
        """
        client_id = os.getenv('MIXCLOUD_CLIENT_ID', '').strip()
        client_secret = os.getenv('MIXCLOUD_CLIENT_SECRET', '').strip()

        if not client_id or not client_secret:
            raise ConfigurationError(
                "Mixcloud API credentials not found. "
                "Please provide MIXCLOUD_CLIENT_ID and MIXCLOUD_CLIENT_SECRET."
            )

        return client_id, client_secret

    @staticmethod
    def mixcloud_configured() -> bool:
        """Whether both Mixcloud credentials are present and non-blank"""
        try:
            Config.get_mixcloud_credentials()
        except ConfigurationError:
            return False
        return True

    @staticmethod
    def demo_hooks_enabled() -> bool:
        """Whether refresh requests may inject a synthetic episode"""
        return os.getenv('ENABLE_DEMO_HOOKS', '').strip().lower() in ('1', 'true', 'yes', 'on')

    @staticmethod
    def get_api_key() -> str:
        return os.getenv('API_KEY', '').strip()

    @staticmethod
    def get_cors_origins() -> List[str]:
        return os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://localhost:5000').split(',')

    @staticmethod
    def get_log_dir() -> Path:
        log_dir = os.getenv('LOG_DIR')
        if log_dir:
            return Path(log_dir)
        return Path(__file__).resolve().parent.parent / 'logs'

    @staticmethod
    def get_default_headers() -> Dict[str, str]:
        """Get default HTTP headers for Mixcloud API requests"""
        return {
            'User-Agent': os.getenv('USER_AGENT', f'MixcloudPlaylistSync/{Config.APP_VERSION}'),
            'Accept': 'application/json',
        }
