"""
Data models and error definitions
"""
from .resource import (
    ALL,
    MIXED,
    ResourceType,
    Difficulty,
    ProviderName,
    Resource,
    ResourceQuery,
    ProviderPage,
    PaginatedResult,
)
from .chat import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
)
from .errors import (
    ErrorResponse,
    ValidationError,
    ServiceError,
    ConfigurationError,
    AdapterError,
    ExternalAPIError,
    ProviderTimeoutError,
    ParseError,
    MissingCredentialError,
    handle_unexpected_error,
)

__all__ = [
    # Enums and sentinels
    'ALL',
    'MIXED',
    'ResourceType',
    'Difficulty',
    'ProviderName',

    # Records
    'Resource',
    'ResourceQuery',
    'ProviderPage',
    'PaginatedResult',

    # Chat
    'ChatMessage',
    'ChatRequest',
    'ChatResponse',

    # Errors
    'ErrorResponse',
    'ValidationError',
    'ServiceError',
    'ConfigurationError',
    'AdapterError',
    'ExternalAPIError',
    'ProviderTimeoutError',
    'ParseError',
    'MissingCredentialError',
    'handle_unexpected_error',
]
