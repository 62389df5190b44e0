"""
Health checks
"""
import time
from typing import Dict, Any, List, Optional
from datetime import datetime
from enum import Enum
import logging

from pydantic import BaseModel, Field

from .. import __version__
from ..config import get_settings, get_security_config

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health of one component"""
    name: str
    status: HealthStatus
    message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class HealthCheckResult(BaseModel):
    """Full health report"""
    status: HealthStatus
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    version: str = __version__
    environment: str
    uptime_seconds: float
    components: List[ComponentHealth] = Field(default_factory=list)


# Credential each upstream needs; None means it works anonymously
PROVIDER_CREDENTIALS: Dict[str, Optional[str]] = {
    'devto': None,
    'youtube': 'youtube_api_key',
    'googlebooks': None,
    'openlibrary': None,
    'freebooks': 'rapidapi_key',
}


class HealthChecker:
    """
    Reports process uptime and which upstreams are usable.

    Only configuration is inspected; no outbound calls are made.
    """

    def __init__(self):
        self.settings = get_settings()
        self._started = time.monotonic()

    def uptime(self) -> float:
        return time.monotonic() - self._started

    async def check_health(self) -> HealthCheckResult:
        components = self._check_providers()
        components.append(self._check_chat())

        return HealthCheckResult(
            status=self._determine_overall_status(components),
            environment=self.settings.environment,
            uptime_seconds=self.uptime(),
            components=components
        )

    def _check_providers(self) -> List[ComponentHealth]:
        security_config = get_security_config()
        components = []

        for provider, credential in PROVIDER_CREDENTIALS.items():
            if credential is None or getattr(security_config, credential):
                components.append(ComponentHealth(
                    name=f"provider_{provider}",
                    status=HealthStatus.HEALTHY,
                    message="configured",
                ))
            else:
                components.append(ComponentHealth(
                    name=f"provider_{provider}",
                    status=HealthStatus.DEGRADED,
                    message=f"{credential.upper()} is not set",
                ))

        if self.settings.resource_api_url:
            components[0].metadata['feed_url'] = self.settings.resource_api_url

        return components

    def _check_chat(self) -> ComponentHealth:
        if get_security_config().gemini_api_key:
            return ComponentHealth(name="chat", status=HealthStatus.HEALTHY, message="configured")
        if self.settings.chatbot_mock_on_failure:
            return ComponentHealth(name="chat", status=HealthStatus.DEGRADED, message="mock replies only")
        return ComponentHealth(name="chat", status=HealthStatus.UNHEALTHY, message="GEMINI_API_KEY is not set")

    def _determine_overall_status(self, components: List[ComponentHealth]) -> HealthStatus:
        # Listing still answers from the fallback catalog; worst case is degraded
        if all(c.status == HealthStatus.HEALTHY for c in components):
            return HealthStatus.HEALTHY
        return HealthStatus.DEGRADED
