"""
Mixcloud URL utilities

Maps playlist page URLs (www.mixcloud.com/<user>/playlists/<slug>/) onto
the equivalent API resource paths, and builds widget embed URLs for
episode playback.
"""

from urllib.parse import urlencode, urlparse, urlunparse, parse_qsl, quote
from typing import Optional

from core.config import Config
from core.errors import ValidationError


class MixcloudURL:
    """Normalizes and converts Mixcloud URLs"""

    @staticmethod
    def normalize_url(url: str) -> str:
        """
        Normalize a Mixcloud URL to a canonical form for comparison

        Rules:
        1. Lowercase scheme and domain, force https
        2. Remove www./m./api. prefixes
        3. Drop query and fragment
        4. Always end the path with a single trailing slash

        Args:
            url: URL to normalize

        Returns:
            Normalized URL string
        """
        if not url:
            return ""

        parsed = urlparse(url.strip())
        netloc = parsed.netloc.lower()
        for prefix in ('www.', 'm.', 'api.'):
            if netloc.startswith(prefix):
                netloc = netloc[len(prefix):]
                break

        path = '/' + '/'.join(segment for segment in parsed.path.split('/') if segment)
        if not path.endswith('/'):
            path += '/'

        return urlunparse(('https', netloc, path, '', '', ''))

    @staticmethod
    def is_mixcloud_url(url: str) -> bool:
        """Check whether a URL points at a Mixcloud host"""
        if not url:
            return False
        netloc = urlparse(url.strip()).netloc.lower().split(':')[0]
        return netloc in Config.MIXCLOUD_HOSTS

    @staticmethod
    def extract_path(url: str) -> str:
        """
        Extract the resource path from a Mixcloud page or API URL

        Args:
            url: e.g. "https://www.mixcloud.com/TotalRockOfficial/playlists/industrial/"

        Returns:
            Path without surrounding slashes, e.g. "TotalRockOfficial/playlists/industrial"

        Raises:
            ValidationError: If the URL is not a Mixcloud URL or has no path
        """
        if not MixcloudURL.is_mixcloud_url(url):
            raise ValidationError(f"Not a Mixcloud URL: {url!r}")

        segments = [segment for segment in urlparse(url.strip()).path.split('/') if segment]
        if not segments:
            raise ValidationError(f"Mixcloud URL has no resource path: {url!r}")

        return '/'.join(segments)

    @staticmethod
    def api_url(path: str, suffix: str = '', **params) -> str:
        """
        Build a Mixcloud API URL for a resource path

        Args:
            path: Resource path from extract_path()
            suffix: Optional sub-resource, e.g. "cloudcasts"
            **params: Query parameters (None values are dropped)

        Returns:
            Absolute API URL with trailing slash
        """
        url = f"{Config.MIXCLOUD_API_BASE}/{path.strip('/')}/"
        if suffix:
            url += f"{suffix.strip('/')}/"

        query = {key: value for key, value in params.items() if value is not None}
        if query:
            url += '?' + urlencode(query)
        return url

    @staticmethod
    def with_client_id(url: str, client_id: str) -> str:
        """Add client_id to a URL's query string if it doesn't already have it"""
        parsed = urlparse(url)
        query = parse_qsl(parsed.query, keep_blank_values=True)
        if any(key == 'client_id' for key, _ in query):
            return url
        query.append(('client_id', client_id))
        return urlunparse(parsed._replace(query=urlencode(query)))

    @staticmethod
    def episode_url_from_key(key: str) -> str:
        """Build the canonical web URL for a cloudcast key such as /user/show/"""
        return f"{Config.MIXCLOUD_WEB_BASE}/{key.strip('/')}/"

    @staticmethod
    def widget_embed_url(episode_url: Optional[str]) -> Optional[str]:
        """
        Build the Mixcloud widget iframe URL that plays an episode

        Args:
            episode_url: Canonical Mixcloud episode URL

        Returns:
            Widget URL, or None when there is no episode URL
        """
        if not episode_url:
            return None
        feed = quote(episode_url, safe='')
        return f"{Config.MIXCLOUD_WIDGET_BASE}?feed={feed}&hide_cover=1"

    @staticmethod
    def are_same_playlist(url1: str, url2: str) -> bool:
        """Check if two URLs refer to the same Mixcloud resource"""
        return MixcloudURL.normalize_url(url1) == MixcloudURL.normalize_url(url2)
