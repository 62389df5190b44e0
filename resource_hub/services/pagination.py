"""
Page metadata for providers with and without authoritative totals
"""
import math
from typing import Awaitable, Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..models import Resource, ResourceQuery, AdapterError
from ..utils import get_logger

logger = get_logger(__name__)


class PageMeta(BaseModel):
    """Totals for one page, tagged with whether they are exact"""
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=1)
    has_next: bool
    exact: bool


def from_total(total: int, page: int, page_size: int) -> PageMeta:
    """Trust a count reported by the upstream"""
    total = max(0, total)
    total_pages = max(1, math.ceil(total / page_size))
    return PageMeta(total=total, total_pages=total_pages, has_next=page < total_pages, exact=True)


def from_next_page(page: int, page_size: int, items_on_page: int, has_next: bool) -> PageMeta:
    """
    Estimate totals when the upstream only tells us whether another page exists.

    A positive `has_next` adds one phantom item, meaning "at least one more";
    the figure must not be read as a count.
    """
    base = (page - 1) * page_size + items_on_page
    if has_next:
        return PageMeta(total=base + 1, total_pages=page + 1, has_next=True, exact=False)
    return PageMeta(total=base, total_pages=max(1, page), has_next=False, exact=False)


class Paginator:
    """Looks ahead for a following page and replays cursor chains"""

    def __init__(self, lookahead_timeout: Optional[float] = None):
        self.lookahead_timeout = lookahead_timeout

    async def lookahead_has_next(
        self,
        fetch: Callable[[ResourceQuery, Optional[float]], Awaitable[List[Resource]]],
        query: ResourceQuery,
        residual: Callable[[List[Resource]], List[Resource]] = lambda items: items
    ) -> bool:
        """
        Fetch page N+1 only to learn whether it has items.

        Lookahead failures count as "no next page" and never reach the caller.
        """
        try:
            items = await fetch(query.for_page(query.page + 1), self.lookahead_timeout)
        except AdapterError as e:
            logger.info(f"Next-page lookahead failed, assuming last page: {e.message}")
            return False
        except Exception as e:
            logger.warning(f"Next-page lookahead failed unexpectedly, assuming last page: {e}")
            return False
        return len(residual(items)) > 0

    async def walk_cursor(
        self,
        next_token: Callable[[Optional[str]], Awaitable[Optional[str]]],
        page: int
    ) -> Tuple[bool, Optional[str]]:
        """
        Follow continuation tokens from page 1 to the token for `page`.

        Returns (reached, token). Page 1 needs no token. A hop that yields no
        token means `page` lies beyond the available results.
        """
        token: Optional[str] = None
        for hop in range(1, page):
            token = await next_token(token)
            if not token:
                logger.debug(f"Cursor chain ended after {hop} page(s), wanted page {page}")
                return False, None
        return True, token
