"""
Logging utilities
Structured application logging and audit logging
"""
import logging
import logging.config
from typing import Dict, Any, Optional
from datetime import datetime
from contextvars import ContextVar

from ..config import get_settings

# Request context
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)


class ContextFilter(logging.Filter):
    """Adds request context to every record"""

    def filter(self, record):
        record.request_id = request_id_var.get() or 'no-request-id'
        return True


class AuditLogger:
    """Audit logging"""

    def __init__(self, name: str = "resource_hub"):
        self.logger = logging.getLogger(f"{name}.audit")

    def log_search(
        self,
        query: str,
        source: str,
        results_count: int,
        duration: float,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Resource listing served"""
        self.logger.info(
            "search_performed",
            extra={
                'event_type': 'search',
                'query': query,
                'source': source,
                'results_count': results_count,
                'duration': duration,
                'metadata': metadata or {},
                'timestamp': datetime.utcnow().isoformat()
            }
        )

    def log_api_call(
        self,
        api: str,
        endpoint: str,
        status: int,
        duration: float,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Upstream API call"""
        self.logger.info(
            "api_call",
            extra={
                'event_type': 'api_call',
                'api': api,
                'endpoint': endpoint,
                'status': status,
                'duration': duration,
                'metadata': metadata or {},
                'timestamp': datetime.utcnow().isoformat()
            }
        )

    def log_fallback(
        self,
        query: str,
        reason: str,
        results_count: int,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Static catalog substituted for upstream results"""
        self.logger.warning(
            "fallback_served",
            extra={
                'event_type': 'fallback',
                'query': query,
                'reason': reason,
                'results_count': results_count,
                'metadata': metadata or {},
                'timestamp': datetime.utcnow().isoformat()
            }
        )

    def log_error(
        self,
        error_type: str,
        error_message: str,
        source: str,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Error"""
        self.logger.error(
            "error_occurred",
            extra={
                'event_type': 'error',
                'error_type': error_type,
                'error_message': error_message,
                'source': source,
                'metadata': metadata or {},
                'timestamp': datetime.utcnow().isoformat()
            }
        )


class PerformanceLogger:
    """Context manager that times an operation"""

    def __init__(self, operation: str, logger: logging.Logger):
        self.operation = operation
        self.logger = logger
        self.start_time = None
        self.duration = 0.0
        self.context = {}

    def add_context(self, **kwargs):
        self.context.update(kwargs)
        return self

    async def __aenter__(self):
        self.start_time = datetime.utcnow()
        self.logger.debug(f"{self.operation} started", extra=self.context)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.duration = (datetime.utcnow() - self.start_time).total_seconds()

        if exc_type:
            self.logger.warning(
                f"{self.operation} failed",
                extra={
                    **self.context,
                    'duration': self.duration,
                    'error': str(exc_val)
                }
            )
        else:
            self.logger.debug(
                f"{self.operation} finished",
                extra={
                    **self.context,
                    'duration': self.duration
                }
            )


def setup_logging():
    """Configure logging from settings"""
    settings = get_settings()
    log_config = settings.get_log_config()

    # Attach the context filter to every handler
    for handler in log_config.get('handlers', {}).values():
        if 'filters' not in handler:
            handler['filters'] = []
        handler['filters'].append('context_filter')

    if 'filters' not in log_config:
        log_config['filters'] = {}

    log_config['filters']['context_filter'] = {
        '()': ContextFilter
    }

    logging.config.dictConfig(log_config)

    # Quiet chatty libraries
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_request_context(request_id: Optional[str] = None):
    """Bind the request id for log records emitted while serving this request"""
    if request_id:
        request_id_var.set(request_id)


def clear_request_context():
    request_id_var.set(None)


def get_request_id() -> Optional[str]:
    return request_id_var.get()


# Audit logger singleton
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
