"""
Error models and exception handling using Pydantic v2
"""
import traceback
from typing import Optional, Dict, Any
from datetime import datetime
import logging

from pydantic import BaseModel, Field, ConfigDict

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response"""
    model_config = ConfigDict(populate_by_name=True)

    error_code: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    user_message: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    request_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response"""
        return self.model_dump(mode='json', exclude_none=True)


class ValidationError(Exception):
    """Input validation error"""
    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.message = message
        self.field = field
        self.value = value
        self.user_message = f"Invalid input: {message}"
        super().__init__(self.message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response"""
        details = {}
        if self.field:
            details['field'] = self.field
        if self.value is not None:
            details['value'] = str(self.value)

        return ErrorResponse(
            error_code="VALIDATION_ERROR",
            message=self.message,
            user_message=self.user_message,
            request_id=request_id,
            details=details if details else None
        )


class ServiceError(Exception):
    """Service-level error"""
    def __init__(
        self,
        error_code: str = "SERVICE_ERROR",
        message: str = "Service error occurred",
        user_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.user_message = user_message or message
        self.details = details
        super().__init__(self.message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response"""
        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            user_message=self.user_message,
            request_id=request_id,
            details=self.details
        )

    def log_error(self, request_id: Optional[str] = None):
        """Log the error"""
        logger.error(
            f"ServiceError [{self.error_code}]: {self.message}",
            extra={
                'error_code': self.error_code,
                'request_id': request_id,
                'details': self.details
            }
        )


class ConfigurationError(ServiceError):
    """A required server setting is absent"""
    def __init__(self, setting: str, message: Optional[str] = None):
        self.setting = setting
        super().__init__(
            error_code="CONFIGURATION_ERROR",
            message=message or f"{setting} is not set on the server",
            user_message="The server is missing required configuration.",
            details={'setting': setting}
        )


class AdapterError(ServiceError):
    """Failure of a single upstream provider"""
    def __init__(
        self,
        provider: str,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.provider = provider

        error_details = {'provider': provider}
        if details:
            error_details.update(details)

        super().__init__(
            error_code=error_code or f"ADAPTER_ERROR_{provider.upper()}",
            message=message,
            user_message=f"External service error: {provider} is currently unavailable",
            details=error_details
        )


class ExternalAPIError(AdapterError):
    """Upstream answered with a non-2xx status or could not be reached"""
    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.payload = payload

        error_details: Dict[str, Any] = {}
        if status_code:
            error_details['status_code'] = status_code
        if details:
            error_details.update(details)

        super().__init__(
            provider=provider,
            message=message,
            error_code=f"EXTERNAL_API_ERROR_{provider.upper()}",
            details=error_details
        )


class ProviderTimeoutError(AdapterError):
    """Upstream request timed out"""
    def __init__(
        self,
        provider: str,
        timeout: float,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details: Dict[str, Any] = {'timeout': timeout}
        if details:
            error_details.update(details)

        super().__init__(
            provider=provider,
            message=f"Request to {provider} timed out after {timeout}s",
            error_code="REQUEST_TIMEOUT",
            details=error_details
        )


class ParseError(AdapterError):
    """Upstream body could not be decoded"""
    def __init__(self, provider: str, message: str = "Malformed response body"):
        super().__init__(
            provider=provider,
            message=message,
            error_code="PARSE_ERROR"
        )


class MissingCredentialError(AdapterError):
    """Provider needs a credential that is not configured"""
    def __init__(self, provider: str, setting: str):
        self.setting = setting
        super().__init__(
            provider=provider,
            message=f"{setting} is not set",
            error_code="MISSING_CREDENTIAL",
            details={'setting': setting}
        )


def handle_unexpected_error(
    error: Exception,
    request_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> ErrorResponse:
    """Handle unexpected errors"""
    # Log the full traceback
    logger.exception(
        "Unexpected error occurred",
        extra={
            'request_id': request_id,
            'context': context
        }
    )

    return ErrorResponse(
        error_code="INTERNAL_ERROR",
        message=str(error) or type(error).__name__,
        user_message="An unexpected error occurred. Please try again later.",
        request_id=request_id,
        details={
            'type': type(error).__name__,
            'traceback': traceback.format_exc() if logger.isEnabledFor(logging.DEBUG) else None
        }
    )
