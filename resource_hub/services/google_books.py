"""
Google Books provider
Book and PDF search with the Google Books volumes API
"""
from typing import Any, Dict, List, Optional
import logging

from .base import BaseProvider
from .normalize import qualified_id, limit
from ..models import (
    ProviderName, ProviderPage, Resource, ResourceQuery, ResourceType, Difficulty,
)

logger = logging.getLogger(__name__)


class GoogleBooksProvider(BaseProvider):
    """Google Books; `totalItems` is trusted as the total"""

    # Google Books serves at most 40 volumes per call
    max_page_size = 40

    @property
    def service_name(self) -> str:
        return ProviderName.GOOGLE_BOOKS.value

    @property
    def api_base_url(self) -> str:
        return "https://www.googleapis.com/books/v1/volumes"

    def build_params(self, query: ResourceQuery, free_filter: bool = True) -> Dict[str, Any]:
        max_results = self.effective_page_size(query.page_size)
        params: Dict[str, Any] = {
            "q": query.search_term(self.settings.fallback_search_term),
            "printType": "books",
            "maxResults": max_results,
            "startIndex": max(0, (query.page - 1) * max_results),
        }
        if self.security_config.google_books_api_key:
            params["key"] = self.security_config.google_books_api_key

        # "free" tag or beginner difficulty restricts to free e-books
        if free_filter and ("free" in query.tags or query.difficulty == Difficulty.BEGINNER.value):
            params["filter"] = "free-ebooks"
        return params

    async def fetch_page(
        self,
        query: ResourceQuery,
        timeout: Optional[float] = None
    ) -> ProviderPage:
        return await self._fetch(query, timeout, free_filter=True)

    async def fetch_share(
        self,
        query: ResourceQuery,
        count: int,
        timeout: Optional[float] = None
    ) -> List[Resource]:
        """Mixed feeds take the unnarrowed listing"""
        page = await self._fetch(query, timeout, free_filter=False)
        return page.items[:count]

    async def _fetch(
        self,
        query: ResourceQuery,
        timeout: Optional[float],
        free_filter: bool
    ) -> ProviderPage:
        params = self.build_params(query, free_filter=free_filter)
        data = await self._get_json(self.api_base_url, timeout=timeout, params=params)

        raw_items = data.get("items") if isinstance(data, dict) else None
        items: List[Resource] = []
        for volume in raw_items if isinstance(raw_items, list) else []:
            try:
                items.append(self.parse_volume(volume))
            except Exception as e:
                logger.error(f"Skipping unparseable volume: {e}")

        try:
            total = int(data.get("totalItems") or 0)
        except (TypeError, ValueError):
            total = 0

        return ProviderPage(items=items, page_size=params["maxResults"], total=max(0, total))

    def parse_volume(self, volume: Dict[str, Any]) -> Resource:
        info = volume.get("volumeInfo") or {}
        access = volume.get("accessInfo") or {}
        pdf = access.get("pdf") or {}
        epub = access.get("epub") or {}

        info_link = info.get("infoLink") or access.get("webReaderLink") or info.get("canonicalVolumeLink")
        download_link = pdf.get("downloadLink") or epub.get("downloadLink") or info_link
        identifiers = info.get("industryIdentifiers") or [{}]
        authors = info.get("authors") if isinstance(info.get("authors"), list) else []
        categories = info.get("categories") if isinstance(info.get("categories"), list) else []

        native_id = volume.get("id") or identifiers[0].get("identifier") or info_link or info.get("title")

        return Resource(
            id=qualified_id(self.service_name, native_id),
            title=info.get("title"),
            description=info.get("subtitle") or info.get("description"),
            url=download_link or info_link,
            type=ResourceType.PDF if pdf.get("isAvailable") else ResourceType.BOOK,
            language=info.get("language"),
            tags=limit(categories),
            author=authors[0] if authors else None,
        )
