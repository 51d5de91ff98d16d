"""
Mixcloud API client

Fetches playlist metadata and walks the paginated cloudcast listing of a
playlist. Listing pages are checked for shape here; the entries inside them
are returned raw and validated by the sync service.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Set

import requests
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, field_validator

from core.config import Config
from core.errors import UpstreamFetchError
from core.url_normalizer import MixcloudURL


class CloudcastPaging(BaseModel):
    model_config = ConfigDict(extra='ignore')

    next: Optional[str] = None


class CloudcastPage(BaseModel):
    """One page of a cloudcast listing"""
    model_config = ConfigDict(extra='ignore')

    data: List[Any] = []
    paging: Optional[CloudcastPaging] = None

    @field_validator('data', mode='before')
    @classmethod
    def _none_to_empty(cls, value):
        return [] if value is None else value

    @property
    def next_url(self) -> Optional[str]:
        return self.paging.next if self.paging else None


class MixcloudClient:
    """Authenticated client for the Mixcloud public API"""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        session: Optional[requests.Session] = None,
        timeout: int = Config.DEFAULT_TIMEOUT,
        page_size: int = Config.MIXCLOUD_PAGE_SIZE,
        max_pages: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.page_size = page_size
        self.max_pages = max_pages or Config.MAX_PLAYLIST_EPISODES // page_size + 1
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update(Config.get_default_headers())

    @classmethod
    def from_env(cls, **kwargs) -> "MixcloudClient":
        """
        Create a client from MIXCLOUD_CLIENT_ID / MIXCLOUD_CLIENT_SECRET

        Raises:
            ConfigurationError: If credentials are missing
        """
        client_id, client_secret = Config.get_mixcloud_credentials()
        return cls(client_id, client_secret, **kwargs)

    def _get_json(self, url: str) -> Dict:
        """GET a Mixcloud API URL and decode the JSON body"""
        url = MixcloudURL.with_client_id(url, self.client_id)
        self.logger.info(f"Fetching: {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamFetchError(f"Mixcloud API request failed: {e}", url=url) from e

        if not response.ok:
            raise UpstreamFetchError(
                f"Mixcloud API error: {response.status_code} {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFetchError(
                f"Mixcloud API returned invalid JSON: {e}",
                status_code=response.status_code,
                url=url,
            ) from e

    def get_playlist(self, playlist_url: str) -> Dict:
        """
        Fetch playlist metadata

        Args:
            playlist_url: Mixcloud playlist page URL

        Returns:
            Raw playlist JSON (name, description, user, ...)

        Raises:
            ValidationError: If the URL is not a Mixcloud URL
            UpstreamFetchError: On HTTP or transport failure
        """
        path = MixcloudURL.extract_path(playlist_url)
        return self._get_json(MixcloudURL.api_url(path))

    def get_cloudcast_page(self, url: str) -> CloudcastPage:
        """
        Fetch a single page of a cloudcast listing

        Raises:
            UpstreamFetchError: On HTTP or transport failure, or if the body is not a listing page
        """
        data = self._get_json(url)
        try:
            return CloudcastPage.model_validate(data)
        except PydanticValidationError as e:
            raise UpstreamFetchError(
                f"Mixcloud API returned an unexpected page shape: {e.error_count()} error(s)",
                url=url,
            ) from e

    def iter_cloudcast_pages(self, playlist_url: str) -> Iterator[List[Any]]:
        """
        Walk the cloudcast listing of a playlist page by page

        The first page must succeed; a failure there raises. A failure on any
        later page stops pagination and the pages already yielded stand.
        Pagination also stops after an empty page, on a next link that was
        already fetched, and after max_pages pages.

        Args:
            playlist_url: Mixcloud playlist page URL

        Yields:
            The raw cloudcast entries of each page, in upstream order

        Raises:
            ValidationError: If the URL is not a Mixcloud URL
            UpstreamFetchError: If the first page cannot be fetched
        """
        path = MixcloudURL.extract_path(playlist_url)
        next_url: Optional[str] = MixcloudURL.api_url(path, 'cloudcasts', limit=self.page_size)
        visited: Set[str] = set()

        while next_url:
            if len(visited) >= self.max_pages:
                self.logger.warning(f"Reached page limit of {self.max_pages}, stopping pagination")
                return

            try:
                page = self.get_cloudcast_page(next_url)
            except UpstreamFetchError as e:
                if not visited:
                    raise
                self.logger.warning(f"Failed to fetch page, keeping results so far: {e}")
                return

            visited.add(next_url)
            self.logger.info(f"Loaded {len(page.data)} episodes in this page")

            yield page.data

            next_url = page.next_url
            if not next_url:
                self.logger.info("No more pages to fetch")
            elif not page.data:
                self.logger.warning("Empty page with a next link, stopping pagination")
                return
            elif next_url in visited:
                self.logger.warning(f"Next link already fetched, stopping pagination: {next_url}")
                return
