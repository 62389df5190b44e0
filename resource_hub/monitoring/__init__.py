"""
Monitoring and metrics module
"""
from .health import (
    HealthStatus,
    ComponentHealth,
    HealthCheckResult,
    HealthChecker,
)
from .metrics import (
    MetricsCollector,
    create_metrics_app,
)

__all__ = [
    # Health
    'HealthStatus',
    'ComponentHealth',
    'HealthCheckResult',
    'HealthChecker',

    # Metrics
    'MetricsCollector',
    'create_metrics_app',
]
