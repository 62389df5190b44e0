"""
Metric collection and Prometheus integration
"""
import logging

from prometheus_client import (
    Counter, Histogram, Info,
    make_asgi_app
)

from .. import __version__
from ..config import get_settings

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Process-wide metric collector"""

    # Resource listing metrics
    resource_requests_total = Counter(
        'resource_hub_resource_requests_total',
        'Total number of resource listing requests',
        ['mode', 'outcome']
    )

    resource_request_duration_seconds = Histogram(
        'resource_hub_resource_request_duration_seconds',
        'Resource listing duration in seconds',
        ['mode'],
        buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0)
    )

    fallbacks_total = Counter(
        'resource_hub_fallbacks_total',
        'Total number of responses served from the fallback catalog',
        ['reason']
    )

    # Upstream API metrics
    api_calls_total = Counter(
        'resource_hub_api_calls_total',
        'Total number of upstream API calls',
        ['api', 'status']
    )

    api_call_duration_seconds = Histogram(
        'resource_hub_api_call_duration_seconds',
        'Upstream API call duration in seconds',
        ['api'],
        buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0)
    )

    # Chat metrics
    chat_requests_total = Counter(
        'resource_hub_chat_requests_total',
        'Total number of chat requests',
        ['model', 'outcome']
    )

    # Error metrics
    errors_total = Counter(
        'resource_hub_errors_total',
        'Total number of errors',
        ['error_type', 'source']
    )

    system_info = Info(
        'resource_hub_system',
        'System information'
    )

    @classmethod
    def init_metrics(cls):
        settings = get_settings()

        cls.system_info.info({
            'version': __version__,
            'environment': settings.environment,
        })

    @classmethod
    def record_resource_request(cls, mode: str, outcome: str, duration: float):
        cls.resource_requests_total.labels(mode=mode, outcome=outcome).inc()
        cls.resource_request_duration_seconds.labels(mode=mode).observe(duration)

    @classmethod
    def record_fallback(cls, reason: str):
        cls.fallbacks_total.labels(reason=reason).inc()

    @classmethod
    def record_api_call(cls, api: str, success: bool, duration: float):
        status = 'success' if success else 'failure'
        cls.api_calls_total.labels(api=api, status=status).inc()

        if success:
            cls.api_call_duration_seconds.labels(api=api).observe(duration)

    @classmethod
    def record_chat(cls, model: str, success: bool):
        outcome = 'success' if success else 'failure'
        cls.chat_requests_total.labels(model=model, outcome=outcome).inc()

    @classmethod
    def record_error(cls, error_type: str, source: str):
        cls.errors_total.labels(
            error_type=error_type,
            source=source
        ).inc()


def create_metrics_app():
    """ASGI app serving the default registry, mounted at /metrics"""
    MetricsCollector.init_metrics()
    return make_asgi_app()
