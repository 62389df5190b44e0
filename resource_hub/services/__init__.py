"""
Provider adapters, aggregation and chat services
"""
from typing import Optional

from .base import BaseHTTPService, BaseProvider, ConcurrentFetchMixin
from .devto import DevToProvider
from .youtube import YouTubeProvider
from .google_books import GoogleBooksProvider
from .openlibrary import OpenLibraryProvider
from .freebooks import FreeBooksProvider
from .fallback import FallbackController, FALLBACK_CATALOG
from .filters import apply_filters
from .normalize import detect_type_from_url
from .pagination import Paginator, PageMeta
from .aggregator import ResourceAggregator, get_aggregator, resolve_provider, dedupe_by_url
from .chat import GeminiChatService, ChatFailedError

_chat_service: Optional[GeminiChatService] = None


def get_chat_service() -> GeminiChatService:
    global _chat_service
    if _chat_service is None:
        _chat_service = GeminiChatService()
    return _chat_service


__all__ = [
    # Base classes
    'BaseHTTPService',
    'BaseProvider',
    'ConcurrentFetchMixin',

    # Providers
    'DevToProvider',
    'YouTubeProvider',
    'GoogleBooksProvider',
    'OpenLibraryProvider',
    'FreeBooksProvider',

    # Aggregation
    'ResourceAggregator',
    'FallbackController',
    'FALLBACK_CATALOG',
    'Paginator',
    'PageMeta',
    'apply_filters',
    'detect_type_from_url',
    'resolve_provider',
    'dedupe_by_url',
    'get_aggregator',

    # Chat
    'GeminiChatService',
    'ChatFailedError',
    'get_chat_service',
]
