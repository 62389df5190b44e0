"""
Article feed provider
DEV.to articles API, or a custom feed configured with RESOURCE_API_URL
"""
from typing import Any, Dict, List, Optional, Tuple
import logging

from .base import BaseProvider
from .normalize import detect_type_from_url, qualified_id, split_tags
from ..models import ProviderName, ProviderPage, Resource, ResourceQuery

logger = logging.getLogger(__name__)


class DevToProvider(BaseProvider):
    """Article feed; reports no totals, so callers look ahead for the next page"""

    @property
    def service_name(self) -> str:
        return ProviderName.DEVTO.value

    @property
    def api_base_url(self) -> str:
        return "https://dev.to/api"

    @property
    def custom_feed(self) -> Optional[str]:
        return self.settings.resource_api_url

    def build_request(self, query: ResourceQuery) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
        """Endpoint, params and headers for one page"""
        api_key = self.security_config.resource_api_key
        headers: Dict[str, str] = {}

        if self.custom_feed:
            url = self.custom_feed
            params = {
                "query": query.query,
                "type": query.type,
                "language": query.language,
                "framework": query.framework,
                "difficulty": query.difficulty,
                "tags": ",".join(query.tags),
                "page": query.page,
                "pageSize": query.page_size,
            }
            if api_key:
                headers["Authorization"] = f"Bearer {api_key}"
            return url, params, headers

        if query.query:
            url = f"{self.api_base_url}/search/articles"
            params = {"page": query.page, "per_page": query.page_size, "q": query.query}
        else:
            url = f"{self.api_base_url}/articles"
            params = {"page": query.page, "per_page": query.page_size}
            # The listing endpoint takes a single tag
            if query.tags:
                params["tag"] = query.tags[0]

        if api_key:
            headers["api-key"] = api_key
        return url, params, headers

    async def fetch_page(
        self,
        query: ResourceQuery,
        timeout: Optional[float] = None
    ) -> ProviderPage:
        url, params, headers = self.build_request(query)
        data = await self._get_json(url, timeout=timeout, params=params, headers=headers)

        items: List[Resource] = []
        for article in _extract_items(data):
            try:
                items.append(self.parse_article(article))
            except Exception as e:
                logger.error(f"Skipping unparseable article: {e}")

        return ProviderPage(items=items, page_size=query.page_size)

    def parse_article(self, article: Dict[str, Any]) -> Resource:
        path = article.get("path")
        primary_url = (
            article.get("canonical_url")
            or article.get("url")
            or (f"https://dev.to{path}" if path else None)
        )
        user = article.get("user") or {}
        tags = article.get("tag_list")
        if not isinstance(tags, list):
            tags = split_tags(article.get("tags"))

        return Resource(
            id=qualified_id(self.service_name, article.get("id") or primary_url or article.get("title")),
            title=article.get("title"),
            description=article.get("description") or article.get("body_text"),
            url=primary_url,
            type=detect_type_from_url(primary_url),
            tags=tags,
            author=user.get("name") or user.get("username") or None,
        )


def _extract_items(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        raw = data
    elif isinstance(data, dict):
        raw = data.get("items") or data.get("result") or data.get("results") or []
    else:
        raw = []
    return [item for item in raw if isinstance(item, dict)]
