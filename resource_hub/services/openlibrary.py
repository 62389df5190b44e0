"""
OpenLibrary provider
"""
from typing import Any, Dict, List, Optional
import logging

from .base import BaseProvider
from .normalize import qualified_id, first_of, limit
from ..models import ProviderName, ProviderPage, Resource, ResourceQuery, ResourceType

logger = logging.getLogger(__name__)


class OpenLibraryProvider(BaseProvider):
    """OpenLibrary search; `numFound` is trusted as the total"""

    max_page_size = 50

    @property
    def service_name(self) -> str:
        return ProviderName.OPEN_LIBRARY.value

    @property
    def api_base_url(self) -> str:
        return "https://openlibrary.org"

    async def fetch_page(
        self,
        query: ResourceQuery,
        timeout: Optional[float] = None
    ) -> ProviderPage:
        page_size = self.effective_page_size(query.page_size)
        params = {
            "q": query.search_term(self.settings.fallback_search_term),
            "page": query.page,
            "limit": page_size,
        }
        data = await self._get_json(f"{self.api_base_url}/search.json", timeout=timeout, params=params)
        if not isinstance(data, dict):
            data = {}

        items: List[Resource] = []
        for doc in data.get("docs") or []:
            try:
                items.append(self.parse_doc(doc))
            except Exception as e:
                logger.error(f"Skipping unparseable document: {e}")

        try:
            total = int(data.get("numFound") or 0)
        except (TypeError, ValueError):
            total = 0

        return ProviderPage(items=items, page_size=page_size, total=max(0, total))

    def parse_doc(self, doc: Dict[str, Any]) -> Resource:
        key = doc.get("key")  # e.g. "/works/OL45804W"
        subjects = doc.get("subject") if isinstance(doc.get("subject"), list) else []

        first_sentence = doc.get("first_sentence")
        if isinstance(first_sentence, list):
            first_sentence = first_of(first_sentence)
        elif isinstance(first_sentence, dict):
            first_sentence = first_sentence.get("value")

        native_id = key or doc.get("cover_edition_key") or first_of(doc.get("edition_key")) or doc.get("title")

        return Resource(
            id=qualified_id(self.service_name, native_id),
            title=doc.get("title"),
            description=first_sentence or doc.get("subtitle"),
            url=f"{self.api_base_url}{key}" if key else None,
            type=ResourceType.BOOK,
            language=first_of(doc.get("language")),
            tags=limit(subjects),
            author=first_of(doc.get("author_name")),
        )
