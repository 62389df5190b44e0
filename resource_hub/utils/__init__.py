"""
Utility module
"""
from .logging import (
    setup_logging,
    get_logger,
    get_audit_logger,
    get_request_id,
    PerformanceLogger,
    AuditLogger,
    ContextFilter,
    set_request_context,
    clear_request_context
)

__all__ = [
    # Logging
    'setup_logging',
    'get_logger',
    'get_audit_logger',
    'get_request_id',
    'PerformanceLogger',
    'AuditLogger',
    'ContextFilter',
    'set_request_context',
    'clear_request_context',
]
