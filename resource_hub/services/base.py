"""
Service base classes
Shared HTTP plumbing and the provider adapter interface
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List, Tuple, Callable, Awaitable
import asyncio

import httpx

from .. import __version__
from ..config import get_settings, get_security_config, Settings, SecurityConfig
from ..models import (
    ResourceQuery, ProviderPage, Resource,
    AdapterError, ExternalAPIError, ProviderTimeoutError, ParseError,
)
from ..utils import get_logger, PerformanceLogger, get_audit_logger
from ..monitoring import MetricsCollector

logger = get_logger(__name__)


class BaseHTTPService(ABC):
    """Owns a pooled httpx client and maps transport failures to AdapterError"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        security_config: Optional[SecurityConfig] = None
    ):
        self.settings = settings or get_settings()
        self.security_config = security_config or get_security_config()
        self.audit_logger = get_audit_logger()
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    @property
    @abstractmethod
    def service_name(self) -> str:
        pass

    @property
    @abstractmethod
    def api_base_url(self) -> str:
        pass

    async def get_client(self) -> httpx.AsyncClient:
        """HTTP client with connection pooling"""
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=httpx.Timeout(self.settings.http_timeout),
                        limits=httpx.Limits(
                            max_keepalive_connections=5,
                            max_connections=10
                        ),
                        follow_redirects=True,
                        headers=self._get_default_headers()
                    )
        return self._client

    def _get_default_headers(self) -> Dict[str, str]:
        return {
            'User-Agent': f'DevResourceHub/{__version__}',
            'Accept': 'application/json',
        }

    async def _make_request(
        self,
        method: str,
        url: str,
        timeout: Optional[float] = None,
        **kwargs
    ) -> httpx.Response:
        """Perform one upstream request; non-2xx and transport failures raise AdapterError"""
        client = await self.get_client()
        timeout = timeout or self.settings.http_timeout

        async with PerformanceLogger(
            f"{self.service_name}_request",
            logger
        ).add_context(method=method, url=url) as perf:

            try:
                response = await client.request(method, url, timeout=timeout, **kwargs)
                response.raise_for_status()

            except httpx.TimeoutException:
                MetricsCollector.record_api_call(
                    api=self.service_name,
                    success=False,
                    duration=timeout
                )
                raise ProviderTimeoutError(
                    provider=self.service_name,
                    timeout=timeout,
                    details={'url': url}
                )

            except httpx.HTTPStatusError as e:
                MetricsCollector.record_api_call(
                    api=self.service_name,
                    success=False,
                    duration=0
                )
                status_code = e.response.status_code
                if status_code == 429:
                    retry_after = e.response.headers.get('Retry-After', '60')
                    message = f"Rate limit exceeded. Retry after {retry_after}s"
                elif status_code >= 500:
                    message = f"Server error: {status_code}"
                else:
                    message = f"Client error: {status_code}"

                raise ExternalAPIError(
                    provider=self.service_name,
                    message=message,
                    status_code=status_code,
                    payload=_response_payload(e.response),
                    details={'url': url}
                )

            except httpx.HTTPError as e:
                MetricsCollector.record_api_call(
                    api=self.service_name,
                    success=False,
                    duration=0
                )
                raise ExternalAPIError(
                    provider=self.service_name,
                    message=f"Network error: {e}",
                    details={'url': url}
                )

        MetricsCollector.record_api_call(
            api=self.service_name,
            success=True,
            duration=perf.duration
        )
        self.audit_logger.log_api_call(
            api=self.service_name,
            endpoint=url,
            status=response.status_code,
            duration=perf.duration
        )
        return response

    async def _get_json(self, url: str, timeout: Optional[float] = None, **kwargs) -> Any:
        """GET a JSON document"""
        response = await self._make_request("GET", url, timeout=timeout, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(self.service_name, f"Invalid JSON from {url}: {e}")

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


def _response_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {'error': response.text[:500]}


class BaseProvider(BaseHTTPService):
    """
    Adapter for one external catalog.

    Subclasses translate a ResourceQuery into the provider's request and map
    the provider's native items into Resource records. Any failure raises
    AdapterError; deciding whether that degrades to an empty list is the
    caller's job.
    """

    # Largest page the upstream will serve, None when unbounded
    max_page_size: Optional[int] = None

    @property
    def configured(self) -> bool:
        """Whether required credentials are present"""
        return True

    def effective_page_size(self, page_size: int) -> int:
        if self.max_page_size is None:
            return max(1, page_size)
        return max(1, min(self.max_page_size, page_size))

    @abstractmethod
    async def fetch_page(
        self,
        query: ResourceQuery,
        timeout: Optional[float] = None
    ) -> ProviderPage:
        """Fetch and normalize one page"""
        pass

    async def fetch_items(
        self,
        query: ResourceQuery,
        timeout: Optional[float] = None
    ) -> List[Resource]:
        page = await self.fetch_page(query, timeout=timeout)
        return page.items

    async def fetch_share(
        self,
        query: ResourceQuery,
        count: int,
        timeout: Optional[float] = None
    ) -> List[Resource]:
        """At most `count` items for a mixed feed"""
        items = await self.fetch_items(query, timeout=timeout)
        return items[:count]


class ConcurrentFetchMixin:
    """Concurrent fan-out where one failure never cancels its siblings"""

    async def fetch_concurrently(
        self,
        fetch_funcs: List[Tuple[str, Callable[[], Awaitable[List[Resource]]]]],
        max_concurrent: Optional[int] = None
    ) -> Dict[str, List[Resource]]:
        """Run every fetch; failures are logged and contribute an empty list"""
        semaphore = asyncio.Semaphore(max_concurrent or max(1, len(fetch_funcs)))

        async def limited_fetch(name: str, func):
            async with semaphore:
                try:
                    return name, await func()
                except AdapterError as e:
                    logger.warning(f"Provider {name} failed: {e.message}")
                    MetricsCollector.record_error(error_type=type(e).__name__, source=name)
                    return name, []
                except Exception as e:
                    logger.exception(f"Provider {name} failed unexpectedly: {e}")
                    MetricsCollector.record_error(error_type=type(e).__name__, source=name)
                    return name, []

        tasks = [
            limited_fetch(name, func)
            for name, func in fetch_funcs
        ]

        results = await asyncio.gather(*tasks)
        return dict(results)
