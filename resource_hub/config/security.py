"""
Credential configuration and input sanitization
"""
import os
import re
from typing import Optional, Any, Iterable
import logging

from pydantic import BaseModel, Field, field_validator, ConfigDict

logger = logging.getLogger(__name__)


class SecurityConfig(BaseModel):
    """Upstream credentials with validation"""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )

    youtube_api_key: Optional[str] = Field(default=None, max_length=100)
    google_books_api_key: Optional[str] = Field(default=None, max_length=100)
    rapidapi_key: Optional[str] = Field(default=None, max_length=200)
    resource_api_key: Optional[str] = Field(default=None, max_length=200)
    gemini_api_key: Optional[str] = Field(default=None, max_length=200)
    max_query_length: int = Field(default=500, ge=50, le=1000)

    @field_validator(
        'youtube_api_key', 'google_books_api_key', 'rapidapi_key',
        'resource_api_key', 'gemini_api_key',
        mode='before'
    )
    @classmethod
    def empty_key_is_unset(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('youtube_api_key', 'google_books_api_key')
    @classmethod
    def validate_api_key_format(cls, v: Optional[str]) -> Optional[str]:
        if v and not re.match(r'^[A-Za-z0-9\-_]+$', v):
            raise ValueError("Invalid API key format")
        return v


class InputSanitizer:
    """Input validation and sanitization"""

    # XSS prevention patterns
    XSS_PATTERNS = [
        re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL),
        re.compile(r'javascript:', re.IGNORECASE),
        re.compile(r'on\w+\s*=', re.IGNORECASE),
        re.compile(r'<iframe[^>]*>', re.IGNORECASE),
        re.compile(r'<object[^>]*>', re.IGNORECASE),
        re.compile(r'<embed[^>]*>', re.IGNORECASE),
    ]

    @classmethod
    def sanitize_query(cls, query: Optional[str], max_length: int = 500) -> str:
        """Sanitize free-text search input"""
        if not query:
            return ""

        # Length limit
        query = query[:max_length]

        # Remove XSS patterns
        for pattern in cls.XSS_PATTERNS:
            query = pattern.sub('', query)

        # Remove HTML tags
        query = re.sub(r'<[^>]+>', '', query)

        # Normalize special characters
        query = query.replace('\x00', '')  # Null byte
        query = re.sub(r'\s+', ' ', query)  # Remove consecutive spaces
        query = query.strip()

        return query

    @classmethod
    def clamp_numeric_param(
        cls,
        value: Any,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None
    ) -> int:
        """Coerce a numeric parameter, falling back to the default instead of failing"""
        try:
            num_value = int(float(value))
        except (ValueError, TypeError, OverflowError):
            return default

        if min_val is not None and num_value < min_val:
            return default if default >= min_val else min_val

        if max_val is not None and num_value > max_val:
            return max_val

        return num_value

    @classmethod
    def normalize_enum_param(
        cls,
        value: Optional[str],
        allowed_values: Iterable[str],
        default: Optional[str] = None
    ) -> Optional[str]:
        """Lower-case an enum parameter, returning the default for unknown values"""
        if not value:
            return default
        normalized = value.strip().lower()
        if normalized not in allowed_values:
            logger.debug(f"Ignoring unknown parameter value: {value!r}")
            return default
        return normalized


# Singleton instances
_security_config: Optional[SecurityConfig] = None


def get_security_config() -> SecurityConfig:
    """Get credential configuration"""
    global _security_config

    if _security_config is None:
        _security_config = SecurityConfig(
            youtube_api_key=os.getenv("YOUTUBE_API_KEY"),
            google_books_api_key=os.getenv("GOOGLE_BOOKS_API_KEY"),
            rapidapi_key=os.getenv("RAPIDAPI_KEY"),
            resource_api_key=os.getenv("RESOURCE_API_KEY") or os.getenv("API_KEY"),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
        )

    return _security_config


def reset_security_config() -> None:
    """Drop the cached credentials so the next access re-reads the environment"""
    global _security_config
    _security_config = None
