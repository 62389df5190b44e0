# tests/test_providers.py
"""
Provider adapter tests
"""
import pytest
from unittest.mock import Mock, patch

import httpx

from resource_hub.models import (
    ResourceQuery, ResourceType,
    ExternalAPIError, ProviderTimeoutError, ParseError, MissingCredentialError,
)
from resource_hub.services import (
    DevToProvider, YouTubeProvider, GoogleBooksProvider,
    OpenLibraryProvider, FreeBooksProvider, detect_type_from_url,
)


def json_response(data):
    response = Mock()
    response.json.return_value = data
    return response


class TestDetectType:
    """Type inference from links"""

    def test_pdf_wins_over_other_rules(self):
        assert detect_type_from_url('https://docs.example.com/guide.pdf') == ResourceType.PDF
        assert detect_type_from_url('https://example.com/file.pdf?dl=1') == ResourceType.PDF

    def test_video_hosts(self):
        assert detect_type_from_url('https://youtu.be/abc') == ResourceType.VIDEO
        assert detect_type_from_url('https://vimeo.com/1') == ResourceType.VIDEO

    def test_doc_markers(self):
        assert detect_type_from_url('https://developer.mozilla.org/en-US/') == ResourceType.DOC
        assert detect_type_from_url('https://example.com/docs/intro') == ResourceType.DOC

    def test_default_is_article(self):
        assert detect_type_from_url('https://dev.to/someone/post') == ResourceType.ARTICLE
        assert detect_type_from_url(None) == ResourceType.ARTICLE


class TestBaseHTTPService:
    """Transport failures map onto adapter errors"""

    def _provider(self, settings, security_config, handler):
        provider = OpenLibraryProvider(settings, security_config)
        provider._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return provider

    @pytest.mark.asyncio
    async def test_non_2xx_raises_external_api_error(self, settings, security_config):
        provider = self._provider(
            settings, security_config,
            lambda request: httpx.Response(503, json={'error': 'down'})
        )

        with pytest.raises(ExternalAPIError) as exc_info:
            await provider.fetch_page(ResourceQuery())

        assert exc_info.value.status_code == 503
        assert exc_info.value.payload == {'error': 'down'}
        await provider.close()

    @pytest.mark.asyncio
    async def test_timeout_raises_provider_timeout(self, settings, security_config):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        provider = self._provider(settings, security_config, handler)

        with pytest.raises(ProviderTimeoutError):
            await provider.fetch_page(ResourceQuery(), timeout=2)
        await provider.close()

    @pytest.mark.asyncio
    async def test_malformed_body_raises_parse_error(self, settings, security_config):
        provider = self._provider(
            settings, security_config,
            lambda request: httpx.Response(200, text='<html>not json</html>')
        )

        with pytest.raises(ParseError):
            await provider.fetch_page(ResourceQuery())
        await provider.close()


class TestDevToProvider:
    """Article feed tests"""

    @pytest.mark.asyncio
    async def test_search_with_text(self, settings, security_config):
        provider = DevToProvider(settings, security_config)
        mock_response = json_response([
            {
                'id': 101,
                'title': 'Async Python',
                'description': 'Intro to asyncio',
                'url': 'https://dev.to/a/async-python',
                'tag_list': ['python', 'async'],
                'user': {'name': 'Ada'},
            }
        ])

        with patch.object(provider, '_make_request', return_value=mock_response) as mock_request:
            page = await provider.fetch_page(ResourceQuery(query='asyncio', page=2, page_size=5))

        url = mock_request.call_args.args[1]
        params = mock_request.call_args.kwargs['params']
        assert url.endswith('/search/articles')
        assert params == {'page': 2, 'per_page': 5, 'q': 'asyncio'}

        assert page.total is None
        assert len(page.items) == 1
        article = page.items[0]
        assert article.id == 'devto:101'
        assert article.type == 'article'
        assert article.tags == ['python', 'async']
        assert article.author == 'Ada'

    @pytest.mark.asyncio
    async def test_listing_uses_first_tag(self, settings, security_config):
        provider = DevToProvider(settings, security_config)

        with patch.object(provider, '_make_request', return_value=json_response([])) as mock_request:
            await provider.fetch_page(ResourceQuery(tags=['react', 'hooks']))

        url = mock_request.call_args.args[1]
        params = mock_request.call_args.kwargs['params']
        assert url.endswith('/articles')
        assert params['tag'] == 'react'
        assert 'api-key' not in mock_request.call_args.kwargs['headers']

    @pytest.mark.asyncio
    async def test_custom_feed_with_bearer(self, settings, keyed_security_config):
        settings = settings.model_copy(update={'resource_api_url': 'https://feed.example.com/items'})
        provider = DevToProvider(settings, keyed_security_config)
        mock_response = json_response({'items': [
            {'id': 'x', 'title': 'Guide', 'url': 'https://example.com/guide.pdf', 'tags': 'pdf, guide'}
        ]})

        with patch.object(provider, '_make_request', return_value=mock_response) as mock_request:
            page = await provider.fetch_page(ResourceQuery(type='pdf'))

        assert mock_request.call_args.args[1] == 'https://feed.example.com/items'
        assert mock_request.call_args.kwargs['headers'] == {'Authorization': 'Bearer test-resource-key'}
        assert mock_request.call_args.kwargs['params']['type'] == 'pdf'
        assert page.items[0].type == 'pdf'
        assert page.items[0].tags == ['pdf', 'guide']

    def test_parse_article_defaults(self, settings, security_config):
        provider = DevToProvider(settings, security_config)

        article = provider.parse_article({'id': 7, 'path': '/someone/post'})

        assert article.title == 'Untitled'
        assert article.description == ''
        assert article.url == 'https://dev.to/someone/post'


class TestYouTubeProvider:
    """YouTube search tests"""

    @pytest.mark.asyncio
    async def test_missing_key(self, settings, security_config):
        provider = YouTubeProvider(settings, security_config)

        assert provider.configured is False
        with pytest.raises(MissingCredentialError):
            await provider.fetch_page(ResourceQuery(type='video'))

    @pytest.mark.asyncio
    async def test_first_page(self, settings, keyed_security_config):
        provider = YouTubeProvider(settings, keyed_security_config)
        mock_response = json_response({
            'nextPageToken': 'T2',
            'items': [
                {
                    'id': {'videoId': 'abc'},
                    'snippet': {'title': 'Python Tutorial', 'description': 'Learn', 'channelTitle': 'Chan'}
                },
                {'id': {'channelId': 'skip-me'}, 'snippet': {'title': 'Channel'}},
            ]
        })

        with patch.object(provider, '_make_request', return_value=mock_response) as mock_request:
            page = await provider.fetch_page(ResourceQuery(page_size=100))

        params = mock_request.call_args.kwargs['params']
        assert params['maxResults'] == 50
        assert params['q'] == 'programming tutorials'
        assert 'pageToken' not in params

        assert page.has_next is True
        assert len(page.items) == 1
        video = page.items[0]
        assert video.id == 'youtube:abc'
        assert video.url == 'https://www.youtube.com/watch?v=abc'
        assert video.type == 'video'
        assert video.author == 'Chan'

    @pytest.mark.asyncio
    async def test_walks_cursor_to_requested_page(self, settings, keyed_security_config):
        provider = YouTubeProvider(settings, keyed_security_config)
        responses = [
            json_response({'nextPageToken': 'T2', 'items': []}),
            json_response({'items': [{'id': {'videoId': 'p2'}, 'snippet': {'title': 'Page two'}}]}),
        ]

        with patch.object(provider, '_make_request', side_effect=responses) as mock_request:
            page = await provider.fetch_page(ResourceQuery(query='rust', page=2))

        assert mock_request.call_count == 2
        assert mock_request.call_args.kwargs['params']['pageToken'] == 'T2'
        assert [item.id for item in page.items] == ['youtube:p2']
        assert page.has_next is False

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, settings, keyed_security_config):
        provider = YouTubeProvider(settings, keyed_security_config)

        with patch.object(provider, '_make_request', return_value=json_response({'items': []})) as mock_request:
            page = await provider.fetch_page(ResourceQuery(page=3))

        assert mock_request.call_count == 1
        assert page.items == []
        assert page.has_next is False


class TestGoogleBooksProvider:
    """Google Books tests"""

    @pytest.mark.asyncio
    async def test_total_and_pdf_detection(self, settings, security_config):
        provider = GoogleBooksProvider(settings, security_config)
        mock_response = json_response({
            'totalItems': 87,
            'items': [
                {
                    'id': 'vol1',
                    'volumeInfo': {
                        'title': 'Fluent Python',
                        'authors': ['Luciano Ramalho'],
                        'language': 'en',
                        'categories': ['Computers'],
                        'infoLink': 'https://books.google.com/vol1',
                    },
                    'accessInfo': {'pdf': {'isAvailable': True, 'downloadLink': 'https://books.google.com/vol1.pdf'}},
                },
                {
                    'id': 'vol2',
                    'volumeInfo': {'title': 'No PDF', 'infoLink': 'https://books.google.com/vol2'},
                },
            ]
        })

        with patch.object(provider, '_make_request', return_value=mock_response) as mock_request:
            page = await provider.fetch_page(ResourceQuery(query='python', page=3, page_size=60))

        params = mock_request.call_args.kwargs['params']
        assert params['maxResults'] == 40
        assert params['startIndex'] == 80
        assert 'key' not in params
        assert 'filter' not in params

        assert page.total == 87
        assert page.page_size == 40
        first, second = page.items
        assert first.type == 'pdf'
        assert first.url == 'https://books.google.com/vol1.pdf'
        assert first.author == 'Luciano Ramalho'
        assert second.type == 'book'
        assert second.url == 'https://books.google.com/vol2'

    def test_free_filter(self, settings, keyed_security_config):
        provider = GoogleBooksProvider(settings, keyed_security_config)

        free = provider.build_params(ResourceQuery(tags=['free']))
        beginner = provider.build_params(ResourceQuery(difficulty='beginner'))

        assert free['filter'] == 'free-ebooks'
        assert free['q'] == 'free'
        assert free['key'] == 'test-books-key'
        assert beginner['filter'] == 'free-ebooks'
        assert beginner['q'] == 'programming'

    @pytest.mark.asyncio
    async def test_free_filter_only_for_single_listing(self, settings, security_config):
        provider = GoogleBooksProvider(settings, security_config)
        query = ResourceQuery(difficulty='beginner', page_size=4)
        mock_response = json_response({'totalItems': 2, 'items': [
            {'id': 'vol1', 'volumeInfo': {'title': 'One', 'infoLink': 'https://books.google.com/vol1'}},
            {'id': 'vol2', 'volumeInfo': {'title': 'Two', 'infoLink': 'https://books.google.com/vol2'}},
        ]})

        with patch.object(provider, '_make_request', return_value=mock_response) as mock_request:
            await provider.fetch_page(query)
            single_params = mock_request.call_args.kwargs['params']
            share = await provider.fetch_share(query, 1)
            mixed_params = mock_request.call_args.kwargs['params']

        assert single_params['filter'] == 'free-ebooks'
        assert 'filter' not in mixed_params
        assert [r.id for r in share] == ['googlebooks:vol1']


class TestOpenLibraryProvider:
    """OpenLibrary tests"""

    @pytest.mark.asyncio
    async def test_search(self, settings, security_config):
        provider = OpenLibraryProvider(settings, security_config)
        mock_response = json_response({
            'numFound': 3,
            'docs': [
                {
                    'key': '/works/OL1W',
                    'title': 'Clean Code',
                    'author_name': ['Robert Martin'],
                    'first_sentence': ['Writing clean code is what you must do.'],
                    'language': ['eng'],
                    'subject': ['a', 'b', 'c', 'd', 'e', 'f'],
                },
                {
                    'key': '/works/OL2W',
                    'title': 'Refactoring',
                    'first_sentence': {'value': 'Any fool can write code.'},
                },
            ]
        })

        with patch.object(provider, '_make_request', return_value=mock_response) as mock_request:
            page = await provider.fetch_page(ResourceQuery(query='code', page=2, page_size=10))

        assert mock_request.call_args.kwargs['params'] == {'q': 'code', 'page': 2, 'limit': 10}
        assert page.total == 3

        first, second = page.items
        assert first.id == 'openlibrary:/works/OL1W'
        assert first.url == 'https://openlibrary.org/works/OL1W'
        assert first.description == 'Writing clean code is what you must do.'
        assert first.language == 'eng'
        assert len(first.tags) == 5
        assert second.description == 'Any fool can write code.'
        assert second.language == 'general'


class TestFreeBooksProvider:
    """FreeBooks tests"""

    @pytest.mark.asyncio
    async def test_missing_key(self, settings, security_config):
        provider = FreeBooksProvider(settings, security_config)

        with pytest.raises(MissingCredentialError):
            await provider.fetch_page(ResourceQuery())

    @pytest.mark.asyncio
    async def test_genre_path_and_parsing(self, settings, keyed_security_config):
        provider = FreeBooksProvider(settings, keyed_security_config)
        mock_response = json_response({'data': [
            {'bookTitle': 'Linux Basics', 'link': 'https://books.example.com/linux', 'writer': 'Linus'},
        ]})

        with patch.object(provider, '_make_request', return_value=mock_response) as mock_request:
            page = await provider.fetch_page(ResourceQuery(query='Operating Systems', page=2))

        url = mock_request.call_args.args[1]
        assert url == 'https://freebooks-api2.p.rapidapi.com/fetchEbooks/operating-systems/2'
        assert mock_request.call_args.kwargs['headers']['x-rapidapi-key'] == 'test-rapidapi-key'

        book = page.items[0]
        assert book.id == 'freebooks:operating-systems-2-0'
        assert book.title == 'Linux Basics'
        assert book.author == 'Linus'
        assert book.type == 'book'

    @pytest.mark.asyncio
    async def test_upstream_page_length_is_page_size(self, settings, keyed_security_config):
        provider = FreeBooksProvider(settings, keyed_security_config)
        mock_response = json_response([
            {'id': f"b{i}", 'title': f"Book {i}", 'url': f"https://books.example.com/{i}"}
            for i in range(20)
        ])

        with patch.object(provider, '_make_request', return_value=mock_response):
            page = await provider.fetch_page(ResourceQuery(tags=['linux'], page_size=12))

        assert page.page_size == 20
        assert len(page.items) == 20
        assert page.items[-1].id == 'freebooks:b19'

    @pytest.mark.asyncio
    async def test_empty_page_keeps_requested_size(self, settings, keyed_security_config):
        provider = FreeBooksProvider(settings, keyed_security_config)

        with patch.object(provider, '_make_request', return_value=json_response([])):
            page = await provider.fetch_page(ResourceQuery(tags=['linux'], page_size=12))

        assert page.items == []
        assert page.page_size == 12
