"""
YouTube provider
Video search with the YouTube Data API v3
"""
from typing import List, Optional, Dict, Any
import logging

from .base import BaseProvider
from .normalize import qualified_id
from .pagination import Paginator
from ..models import (
    ProviderName, ProviderPage, Resource, ResourceQuery, ResourceType,
    MissingCredentialError,
)

logger = logging.getLogger(__name__)

DEFAULT_TERM = "programming tutorials"


class YouTubeProvider(BaseProvider):
    """
    YouTube search.

    Pagination is cursor based: page N is reached by replaying
    `nextPageToken` from page 1. A page past the end of the chain comes back
    empty rather than failing.
    """

    # YouTube serves at most 50 results per call
    max_page_size = 50

    @property
    def service_name(self) -> str:
        return ProviderName.YOUTUBE.value

    @property
    def api_base_url(self) -> str:
        return "https://www.googleapis.com/youtube/v3"

    @property
    def configured(self) -> bool:
        return bool(self.security_config.youtube_api_key)

    def _search_params(self, query: ResourceQuery, page_token: Optional[str] = None) -> Dict[str, Any]:
        params = {
            "key": self.security_config.youtube_api_key,
            "part": "snippet",
            "q": query.query or DEFAULT_TERM,
            "type": "video",
            "maxResults": self.effective_page_size(query.page_size),
        }
        if page_token:
            params["pageToken"] = page_token
        return params

    async def _search(
        self,
        query: ResourceQuery,
        page_token: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        return await self._get_json(
            f"{self.api_base_url}/search",
            timeout=timeout,
            params=self._search_params(query, page_token)
        )

    async def fetch_page(
        self,
        query: ResourceQuery,
        timeout: Optional[float] = None
    ) -> ProviderPage:
        if not self.configured:
            raise MissingCredentialError(self.service_name, "YOUTUBE_API_KEY")

        page_size = self.effective_page_size(query.page_size)

        async def next_token(token: Optional[str]) -> Optional[str]:
            data = await self._search(query, token, timeout)
            return data.get("nextPageToken")

        reached, token = await Paginator().walk_cursor(next_token, query.page)
        if not reached:
            return ProviderPage(items=[], page_size=page_size, has_next=False)

        data = await self._search(query, token, timeout)

        items: List[Resource] = []
        for item in data.get("items", []):
            if not (item.get("id") or {}).get("videoId") or not item.get("snippet"):
                continue
            try:
                items.append(self.parse_video(item))
            except Exception as e:
                logger.error(f"Skipping unparseable video: {e}")

        return ProviderPage(
            items=items,
            page_size=page_size,
            has_next=bool(data.get("nextPageToken"))
        )

    def parse_video(self, item: Dict[str, Any]) -> Resource:
        snippet = item["snippet"]
        video_id = item["id"]["videoId"]

        return Resource(
            id=qualified_id(self.service_name, video_id),
            title=snippet.get("title"),
            description=snippet.get("description"),
            url=f"https://www.youtube.com/watch?v={video_id}",
            type=ResourceType.VIDEO,
            author=snippet.get("channelTitle") or None,
        )
