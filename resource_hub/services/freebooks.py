"""
FreeBooks provider
Free e-book listing by genre, served through RapidAPI
"""
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import logging

from .base import BaseProvider
from .normalize import qualified_id, pick
from ..models import (
    ProviderName, ProviderPage, Resource, ResourceQuery, ResourceType,
    MissingCredentialError,
)

logger = logging.getLogger(__name__)

RAPIDAPI_HOST = "freebooks-api2.p.rapidapi.com"


class FreeBooksProvider(BaseProvider):
    """Genre listing paginated by path; reports no totals"""

    @property
    def service_name(self) -> str:
        return ProviderName.FREE_BOOKS.value

    @property
    def api_base_url(self) -> str:
        return f"https://{RAPIDAPI_HOST}/fetchEbooks"

    @property
    def configured(self) -> bool:
        return bool(self.security_config.rapidapi_key)

    def genre_for(self, query: ResourceQuery) -> str:
        term = query.tags[0] if query.tags else (query.query or self.settings.fallback_search_term)
        return re.sub(r'\s+', '-', term.strip().lower())

    async def fetch_page(
        self,
        query: ResourceQuery,
        timeout: Optional[float] = None
    ) -> ProviderPage:
        if not self.configured:
            raise MissingCredentialError(self.service_name, "RAPIDAPI_KEY")

        genre = self.genre_for(query)
        url = f"{self.api_base_url}/{quote(genre, safe='')}/{query.page}"
        headers = {
            "x-rapidapi-host": RAPIDAPI_HOST,
            "x-rapidapi-key": self.security_config.rapidapi_key,
        }
        data = await self._get_json(url, timeout=timeout, headers=headers)
        books = _extract_books(data)

        items: List[Resource] = []
        for index, book in enumerate(books):
            try:
                items.append(self.parse_book(book, genre, query.page, index))
            except Exception as e:
                logger.error(f"Skipping unparseable book: {e}")

        # The upstream decides its own page length; a path page is one result page
        return ProviderPage(items=items, page_size=len(books) or query.page_size)

    def parse_book(self, book: Dict[str, Any], genre: str, page: int, index: int) -> Resource:
        # Field names vary between responses of this API
        tags = [str(book[key]) for key in ("genre", "category") if book.get(key)]
        native_id = pick(book, "id", "isbn") or f"{genre}-{page}-{index}"

        return Resource(
            id=qualified_id(self.service_name, native_id),
            title=pick(book, "title", "name", "bookTitle"),
            description=pick(book, "description", "desc", "summary"),
            url=pick(book, "url", "link", "bookLink", "download", "source"),
            type=ResourceType.BOOK,
            tags=tags,
            author=pick(book, "author", "writer", "creator"),
        )


def _extract_books(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        raw = data
    elif isinstance(data, dict):
        raw = next(
            (data[key] for key in ("data", "items") if isinstance(data.get(key), list)),
            []
        )
    else:
        raw = []
    return [book for book in raw if isinstance(book, dict)]
