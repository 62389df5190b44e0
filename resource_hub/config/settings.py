"""
Application settings management using Pydantic v2
"""
from typing import Optional, List, Any, Dict
from functools import lru_cache
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with Pydantic v2 patterns"""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        populate_by_name=True,
        extra='ignore'
    )

    # Environment settings
    environment: str = Field(default="development", alias="HUB_ENV")
    debug: bool = Field(default=False, alias="HUB_DEBUG")

    # Server settings
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3001, alias="PORT", ge=1, le=65535)

    # Logging settings
    log_level: str = Field(default="INFO", alias="HUB_LOG_LEVEL")
    log_file: str = Field(default="", alias="HUB_LOG_FILE")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
        alias="HUB_LOG_FORMAT"
    )

    # Outbound request timeouts (seconds)
    http_timeout: float = Field(default=15.0, alias="HUB_HTTP_TIMEOUT", ge=1, le=120)
    mixed_timeout: float = Field(default=12.0, alias="HUB_MIXED_TIMEOUT", ge=1, le=120)
    lookahead_timeout: float = Field(default=12.0, alias="HUB_LOOKAHEAD_TIMEOUT", ge=1, le=120)
    chat_timeout: float = Field(default=20.0, alias="HUB_CHAT_TIMEOUT", ge=1, le=120)

    # Resource listing
    default_page_size: int = Field(default=12, alias="HUB_DEFAULT_PAGE_SIZE", ge=1, le=100)
    max_page_size: int = Field(default=100, alias="HUB_MAX_PAGE_SIZE", ge=1, le=500)
    fallback_search_term: str = Field(default="programming", alias="HUB_FALLBACK_TERM", min_length=1)

    # Custom article feed replacing DEV.to
    resource_api_url: Optional[str] = Field(default=None, alias="RESOURCE_API_URL")

    # Chat settings
    chat_default_model: str = Field(default="gemini-1.5-flash", alias="HUB_CHAT_MODEL")
    chatbot_mock_on_failure: bool = Field(default=False, alias="CHATBOT_MOCK_ON_FAILURE")

    # Monitoring settings
    metrics_enabled: bool = Field(default=True, alias="HUB_METRICS_ENABLED")

    # HTTP surface
    cors_origins: str = Field(default="*", alias="HUB_CORS_ORIGINS")
    request_id_header: str = Field(default="X-Request-ID", alias="HUB_REQUEST_ID_HEADER")

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed_envs = ['development', 'test', 'staging', 'production']
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {', '.join(allowed_envs)}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of: {', '.join(allowed_levels)}")
        return v.upper()

    @field_validator('resource_api_url', mode='before')
    @classmethod
    def empty_url_is_unset(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == 'production'

    def get_cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(',') if origin.strip()]

    def get_log_config(self) -> Dict[str, Any]:
        """Get logging configuration"""
        handlers = {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'json' if self.is_production() else 'default',
                'level': self.log_level,
            }
        }

        # Add file handler only if log file is specified
        if self.log_file:
            handlers['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': self.log_file,
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'formatter': 'json' if self.is_production() else 'default',
                'level': self.log_level,
            }

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                },
                'json': {
                    'format': '%(asctime)s %(name)s %(levelname)s %(request_id)s %(message)s',
                    'class': 'pythonjsonlogger.jsonlogger.JsonFormatter'
                }
            },
            'handlers': handlers,
            'root': {
                'level': self.log_level,
                'handlers': list(handlers.keys())
            }
        }


@lru_cache()
def get_settings() -> Settings:
    """Get settings singleton"""
    return Settings()
