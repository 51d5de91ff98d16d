"""
Unit tests for core/mixcloud_client.py

HTTP is mocked at the requests.Session level.
"""

from unittest.mock import Mock

import pytest
import requests

from core.errors import ConfigurationError, UpstreamFetchError, ValidationError
from core.mixcloud_client import MixcloudClient


def mock_response(payload=None, status_code=200, reason='OK'):
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    response.ok = 200 <= status_code < 400
    response.json.return_value = payload
    return response


def make_client(responses):
    session = Mock()
    session.headers = {}
    session.get.side_effect = responses
    return MixcloudClient('client-123', 'secret-456', session=session), session


class TestFromEnv:
    """Tests for MixcloudClient.from_env()"""

    @pytest.mark.unit
    def test_missing_credentials_raise(self, monkeypatch):
        monkeypatch.delenv('MIXCLOUD_CLIENT_ID', raising=False)
        monkeypatch.setenv('MIXCLOUD_CLIENT_SECRET', 'secret')
        with pytest.raises(ConfigurationError):
            MixcloudClient.from_env()

    @pytest.mark.unit
    def test_reads_credentials(self, monkeypatch):
        monkeypatch.setenv('MIXCLOUD_CLIENT_ID', 'id')
        monkeypatch.setenv('MIXCLOUD_CLIENT_SECRET', 'secret')
        client = MixcloudClient.from_env(session=Mock(headers={}))
        assert client.client_id == 'id'


class TestGetPlaylist:
    """Tests for MixcloudClient.get_playlist()"""

    @pytest.mark.unit
    def test_fetches_playlist_resource_with_client_id(self, playlist_url):
        client, session = make_client([mock_response({'name': 'Industrial'})])

        assert client.get_playlist(playlist_url) == {'name': 'Industrial'}

        url = session.get.call_args[0][0]
        assert url.startswith('https://api.mixcloud.com/TotalRockOfficial/playlists/industrial/')
        assert 'client_id=client-123' in url
        assert session.get.call_args[1]['timeout'] == client.timeout

    @pytest.mark.unit
    def test_http_error_raises_with_status(self, playlist_url):
        client, _ = make_client([mock_response(status_code=404, reason='Not Found')])

        with pytest.raises(UpstreamFetchError) as exc_info:
            client.get_playlist(playlist_url)

        assert exc_info.value.status_code == 404
        assert '404' in str(exc_info.value)

    @pytest.mark.unit
    def test_transport_error_raises(self, playlist_url):
        client, _ = make_client(requests.ConnectionError('connection refused'))

        with pytest.raises(UpstreamFetchError):
            client.get_playlist(playlist_url)

    @pytest.mark.unit
    def test_non_mixcloud_url_rejected_without_request(self):
        client, session = make_client([])
        with pytest.raises(ValidationError):
            client.get_playlist('https://example.com/a/b/')
        session.get.assert_not_called()


class TestIterCloudcastPages:
    """Tests for MixcloudClient.iter_cloudcast_pages()"""

    @pytest.mark.unit
    def test_follows_next_links_and_adds_client_id(self, playlist_url, cloudcast_factory):
        next_url = 'https://api.mixcloud.com/TotalRockOfficial/playlists/industrial/cloudcasts/?limit=20&offset=20'
        client, session = make_client([
            mock_response({'data': [cloudcast_factory(1)], 'paging': {'next': next_url}}),
            mock_response({'data': [cloudcast_factory(2)], 'paging': {}}),
        ])

        pages = list(client.iter_cloudcast_pages(playlist_url))

        assert [len(page) for page in pages] == [1, 1]
        first_url = session.get.call_args_list[0][0][0]
        second_url = session.get.call_args_list[1][0][0]
        assert '/cloudcasts/' in first_url and 'limit=20' in first_url
        assert 'offset=20' in second_url and 'client_id=client-123' in second_url

    @pytest.mark.unit
    def test_first_page_failure_raises(self, playlist_url):
        client, _ = make_client([mock_response(status_code=500, reason='Server Error')])

        with pytest.raises(UpstreamFetchError):
            list(client.iter_cloudcast_pages(playlist_url))

    @pytest.mark.unit
    def test_later_page_failure_keeps_earlier_pages(self, playlist_url, cloudcast_factory):
        client, _ = make_client([
            mock_response({'data': [cloudcast_factory(1)], 'paging': {'next': 'https://api.mixcloud.com/x/?offset=20'}}),
            mock_response(status_code=502, reason='Bad Gateway'),
        ])

        pages = list(client.iter_cloudcast_pages(playlist_url))

        assert len(pages) == 1

    @pytest.mark.unit
    def test_missing_data_key_yields_empty_page(self, playlist_url):
        client, _ = make_client([mock_response({'paging': {}})])
        assert list(client.iter_cloudcast_pages(playlist_url)) == [[]]

    @pytest.mark.unit
    def test_first_page_with_wrong_shape_raises(self, playlist_url):
        client, _ = make_client([mock_response([])])

        with pytest.raises(UpstreamFetchError):
            list(client.iter_cloudcast_pages(playlist_url))

    @pytest.mark.unit
    @pytest.mark.parametrize('body', [[], None, {'data': 'nope'}, {'data': [], 'paging': []}])
    def test_later_page_with_wrong_shape_keeps_earlier_pages(self, playlist_url, cloudcast_factory, body):
        client, _ = make_client([
            mock_response({'data': [cloudcast_factory(1)], 'paging': {'next': 'https://api.mixcloud.com/x/?offset=20'}}),
            mock_response(body),
        ])

        pages = list(client.iter_cloudcast_pages(playlist_url))

        assert len(pages) == 1
        assert pages[0][0]['key'] == cloudcast_factory(1)['key']

    @pytest.mark.unit
    def test_null_data_yields_empty_page(self, playlist_url):
        client, _ = make_client([mock_response({'data': None, 'paging': None})])
        assert list(client.iter_cloudcast_pages(playlist_url)) == [[]]

    @pytest.mark.unit
    def test_empty_page_with_next_link_stops(self, playlist_url):
        next_url = 'https://api.mixcloud.com/x/?offset=20'
        session = Mock()
        session.headers = {}
        session.get.return_value = mock_response({'data': [], 'paging': {'next': next_url}})
        client = MixcloudClient('client-123', 'secret-456', session=session)

        pages = list(client.iter_cloudcast_pages(playlist_url))

        assert pages == [[]]
        assert session.get.call_count == 1

    @pytest.mark.unit
    def test_repeated_next_link_stops(self, playlist_url, cloudcast_factory):
        next_url = 'https://api.mixcloud.com/x/?offset=20'
        session = Mock()
        session.headers = {}
        session.get.return_value = mock_response({'data': [cloudcast_factory(1)], 'paging': {'next': next_url}})
        client = MixcloudClient('client-123', 'secret-456', session=session)

        pages = list(client.iter_cloudcast_pages(playlist_url))

        assert len(pages) == 2
        assert session.get.call_count == 2

    @pytest.mark.unit
    def test_page_limit_stops_endless_listing(self, playlist_url, cloudcast_factory):
        counter = {'offset': 0}

        def next_page(url, timeout):
            counter['offset'] += 20
            return mock_response({
                'data': [cloudcast_factory(counter['offset'])],
                'paging': {'next': f"https://api.mixcloud.com/x/?offset={counter['offset']}"},
            })

        session = Mock()
        session.headers = {}
        session.get.side_effect = next_page
        client = MixcloudClient('client-123', 'secret-456', session=session, max_pages=5)

        pages = list(client.iter_cloudcast_pages(playlist_url))

        assert len(pages) == 5
        assert session.get.call_count == 5

    @pytest.mark.unit
    def test_default_page_limit_covers_episode_cap(self):
        client = MixcloudClient('client-123', 'secret-456', session=Mock(headers={}))
        assert client.max_pages == 51
