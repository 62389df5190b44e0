"""
Resource aggregation service
Routes a listing query to one provider or fans out across several
"""
import asyncio
import math
import time
from typing import Dict, List, Optional, Iterable
import logging

from .base import BaseProvider, ConcurrentFetchMixin
from .devto import DevToProvider
from .youtube import YouTubeProvider
from .google_books import GoogleBooksProvider
from .openlibrary import OpenLibraryProvider
from .freebooks import FreeBooksProvider
from .fallback import FallbackController
from .filters import apply_filters, RESIDUAL_DIMENSIONS
from .pagination import Paginator, from_total, from_next_page
from ..config import get_settings, get_security_config, Settings, SecurityConfig
from ..models import (
    ALL, MIXED, ProviderName, Resource, ResourceQuery, PaginatedResult, ResourceType,
)
from ..utils import PerformanceLogger, get_audit_logger
from ..monitoring import MetricsCollector

logger = logging.getLogger(__name__)

# Mixed mode invocation order; earlier providers win de-duplication
MIXED_PROVIDERS = (ProviderName.DEVTO, ProviderName.YOUTUBE, ProviderName.GOOGLE_BOOKS)

MIXED_SOURCE_COUNT = 3


def resolve_provider(query: ResourceQuery) -> Optional[ProviderName]:
    """
    Pick the provider for a query, or None for mixed mode.

    An explicit provider wins. Otherwise the type decides: video goes to
    YouTube, pdf or a "free" tag to Google Books, doc and book to
    OpenLibrary, anything else to the article feed. Unfiltered type with no
    provider means mixed mode.
    """
    if query.provider and query.provider != MIXED:
        return ProviderName(query.provider)

    if query.type == ALL:
        return None
    if query.type == ResourceType.VIDEO.value:
        return ProviderName.YOUTUBE
    if query.type == ResourceType.PDF.value or "free" in query.tags:
        return ProviderName.GOOGLE_BOOKS
    if query.type in (ResourceType.DOC.value, ResourceType.BOOK.value):
        return ProviderName.OPEN_LIBRARY
    return ProviderName.DEVTO


def dedupe_by_url(resources: Iterable[Resource]) -> List[Resource]:
    """Keep the first resource seen for each url"""
    seen = set()
    unique = []
    for resource in resources:
        if resource.url not in seen:
            seen.add(resource.url)
            unique.append(resource)
    return unique


class ResourceAggregator(ConcurrentFetchMixin):
    """Resource listing across all configured providers"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        security_config: Optional[SecurityConfig] = None,
        providers: Optional[Dict[ProviderName, BaseProvider]] = None,
        fallback: Optional[FallbackController] = None
    ):
        self.settings = settings or get_settings()
        self.security_config = security_config or get_security_config()
        self.audit_logger = get_audit_logger()
        self.fallback = fallback or FallbackController()
        self.paginator = Paginator(lookahead_timeout=self.settings.lookahead_timeout)

        if providers is None:
            providers = {
                ProviderName.DEVTO: DevToProvider(self.settings, self.security_config),
                ProviderName.YOUTUBE: YouTubeProvider(self.settings, self.security_config),
                ProviderName.GOOGLE_BOOKS: GoogleBooksProvider(self.settings, self.security_config),
                ProviderName.OPEN_LIBRARY: OpenLibraryProvider(self.settings, self.security_config),
                ProviderName.FREE_BOOKS: FreeBooksProvider(self.settings, self.security_config),
            }
        self.providers = providers

    async def search(self, query: ResourceQuery) -> PaginatedResult:
        """
        Serve a listing query. Never raises.

        Any failure in aggregation is replaced by the fallback catalog, so
        the caller always gets a well-formed page.
        """
        started = time.monotonic()
        route = resolve_provider(query)
        mode = route.value if route else MIXED

        try:
            result = await self.aggregate(query)
            outcome = 'success'
        except Exception as e:
            reason = type(e).__name__
            logger.warning(f"Provider fetch failed, falling back to local data: {e}")
            MetricsCollector.record_fallback(reason=reason)
            result = self.fallback.on_failure(query)
            self.audit_logger.log_fallback(
                query=query.query,
                reason=reason,
                results_count=len(result.items),
                metadata={'mode': mode}
            )
            outcome = 'fallback'

        duration = time.monotonic() - started
        MetricsCollector.record_resource_request(mode=mode, outcome=outcome, duration=duration)
        self.audit_logger.log_search(
            query=query.query,
            source=mode,
            results_count=len(result.items),
            duration=duration,
            metadata={'page': query.page, 'page_size': query.page_size, 'outcome': outcome}
        )
        return result

    async def aggregate(self, query: ResourceQuery) -> PaginatedResult:
        """Aggregate without the fallback; single-provider failures propagate"""
        route = resolve_provider(query)

        async with PerformanceLogger(
            "aggregate",
            logger
        ).add_context(mode=route.value if route else MIXED, page=query.page):
            if route is None:
                return await self._aggregate_mixed(query)
            return await self._aggregate_single(route, query)

    async def _aggregate_single(self, name: ProviderName, query: ResourceQuery) -> PaginatedResult:
        provider = self.providers[name]
        page = await provider.fetch_page(query, timeout=self.settings.http_timeout)

        def residual(items: List[Resource]) -> List[Resource]:
            return apply_filters(items, query, RESIDUAL_DIMENSIONS)

        items = residual(page.items)[:page.page_size]

        if page.total is not None:
            meta = from_total(page.total, query.page, page.page_size)
        else:
            has_next = page.has_next
            if has_next is None:
                has_next = await self.paginator.lookahead_has_next(provider.fetch_items, query, residual)
            meta = from_next_page(query.page, page.page_size, len(items), has_next)

        return PaginatedResult.from_items(
            items=items,
            total=meta.total,
            page=query.page,
            page_size=page.page_size,
            total_pages=meta.total_pages,
            total_is_estimate=not meta.exact
        )

    async def _aggregate_mixed(self, query: ResourceQuery) -> PaginatedResult:
        # Known limitation: the merged list is not re-filtered locally and
        # no combined total exists, so totalPages is always 1.
        per_source = max(1, math.ceil(query.page_size / MIXED_SOURCE_COUNT))
        sub_query = query.model_copy(update={
            "query": query.search_term(self.settings.fallback_search_term),
            "page_size": per_source,
        })
        timeout = self.settings.mixed_timeout

        fetch_funcs = []
        for name in MIXED_PROVIDERS:
            provider = self.providers.get(name)
            if provider is None or not provider.configured:
                continue
            # Video search only contributes its first page
            provider_query = sub_query.for_page(1) if name == ProviderName.YOUTUBE else sub_query
            fetch_funcs.append((name.value, self._bounded_fetch(provider, provider_query, per_source, timeout)))

        results = await self.fetch_concurrently(fetch_funcs)

        merged = dedupe_by_url(
            resource
            for name, _ in fetch_funcs
            for resource in results.get(name, [])
        )
        items = merged[:query.page_size]

        return PaginatedResult.from_items(
            items=items,
            total=len(items),
            page=query.page,
            page_size=query.page_size,
            total_pages=1,
            total_is_estimate=True
        )

    def _bounded_fetch(self, provider: BaseProvider, query: ResourceQuery, count: int, timeout: float):
        async def fetch() -> List[Resource]:
            items = await provider.fetch_share(query, count, timeout=timeout)
            return items[:count]
        return fetch

    async def close(self):
        await asyncio.gather(
            *(provider.close() for provider in self.providers.values()),
            return_exceptions=True
        )


# Singleton instance
_aggregator: Optional[ResourceAggregator] = None


def get_aggregator() -> ResourceAggregator:
    global _aggregator
    if _aggregator is None:
        _aggregator = ResourceAggregator()
    return _aggregator
