# tests/conftest.py
"""
pytest configuration and shared fixtures
"""
import os
from typing import List, Optional
from unittest.mock import AsyncMock, Mock

import pytest

# Environment for tests
os.environ['HUB_ENV'] = 'test'
os.environ['HUB_LOG_LEVEL'] = 'ERROR'  # keep test output quiet
for key in ('YOUTUBE_API_KEY', 'GOOGLE_BOOKS_API_KEY', 'RAPIDAPI_KEY',
            'RESOURCE_API_KEY', 'API_KEY', 'GEMINI_API_KEY', 'GOOGLE_API_KEY',
            'RESOURCE_API_URL', 'CHATBOT_MOCK_ON_FAILURE'):
    os.environ.pop(key, None)

from resource_hub.config import Settings, SecurityConfig, get_settings, reset_security_config
from resource_hub.models import Resource, ResourceType, ProviderPage


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings and service singletons around every test"""
    get_settings.cache_clear()
    reset_security_config()

    import resource_hub.services.aggregator as aggregator_module
    aggregator_module._aggregator = None

    import resource_hub.services as services_module
    services_module._chat_service = None

    yield

    get_settings.cache_clear()
    reset_security_config()


@pytest.fixture
def settings():
    """Settings independent of any .env file"""
    return Settings(_env_file=None)


@pytest.fixture
def security_config():
    """No upstream credentials"""
    return SecurityConfig()


@pytest.fixture
def keyed_security_config():
    """Every upstream credential present"""
    return SecurityConfig(
        youtube_api_key='test-youtube-key',
        google_books_api_key='test-books-key',
        rapidapi_key='test-rapidapi-key',
        resource_api_key='test-resource-key',
        gemini_api_key='test-gemini-key',
    )


def make_resource(
    native_id: str,
    provider: str = 'devto',
    url: Optional[str] = None,
    **kwargs
) -> Resource:
    return Resource(
        id=f"{provider}:{native_id}",
        title=kwargs.pop('title', f"Resource {native_id}"),
        url=url or f"https://example.com/{provider}/{native_id}",
        **kwargs
    )


def make_provider(
    items: Optional[List[Resource]] = None,
    total: Optional[int] = None,
    has_next: Optional[bool] = None,
    page_size: int = 12,
    configured: bool = True,
    error: Optional[Exception] = None
) -> Mock:
    """Provider double answering fetch_page, fetch_items and fetch_share from a fixed list"""
    provider = Mock()
    provider.configured = configured
    provider.close = AsyncMock()

    if error is not None:
        provider.fetch_page = AsyncMock(side_effect=error)
        provider.fetch_items = AsyncMock(side_effect=error)
        provider.fetch_share = AsyncMock(side_effect=error)
    else:
        items = list(items or [])
        provider.fetch_page = AsyncMock(return_value=ProviderPage(
            items=items, page_size=page_size, total=total, has_next=has_next
        ))
        provider.fetch_items = AsyncMock(return_value=items)
        provider.fetch_share = AsyncMock(side_effect=lambda query, count, timeout=None: items[:count])
    return provider


@pytest.fixture
def video():
    return make_resource('v1', provider='youtube', type=ResourceType.VIDEO,
                         url='https://www.youtube.com/watch?v=v1')
