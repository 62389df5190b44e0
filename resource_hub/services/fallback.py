"""
Fallback controller
Serves a small static catalog when upstream providers fail
"""
from typing import List, Optional, Sequence
import logging

from .filters import apply_filters
from ..models import Resource, ResourceQuery, PaginatedResult, ResourceType, Difficulty

logger = logging.getLogger(__name__)


FALLBACK_CATALOG: List[Resource] = [
    Resource(
        id="local:ex1",
        title="React Official Docs",
        description="The official React documentation with guides and API references.",
        url="https://react.dev/learn",
        type=ResourceType.DOC,
        language="javascript",
        framework="react",
        difficulty=Difficulty.BEGINNER,
        tags=["official", "docs"],
        author="React Team",
        rating=4.9,
    ),
    Resource(
        id="local:ex2",
        title="Docker Deep Dive",
        description="A comprehensive guide to Docker concepts and best practices.",
        url="https://docs.docker.com/",
        type=ResourceType.DOC,
        language="docker",
        difficulty=Difficulty.INTERMEDIATE,
        tags=["containers", "devops"],
        rating=4.7,
    ),
]


class FallbackController:
    """Filters and slices the static catalog into a well-formed page"""

    def __init__(self, catalog: Optional[Sequence[Resource]] = None):
        self.catalog = list(FALLBACK_CATALOG if catalog is None else catalog)

    def on_failure(self, query: ResourceQuery) -> PaginatedResult:
        filtered = apply_filters(self.catalog, query)
        start = (query.page - 1) * query.page_size
        items = filtered[start:start + query.page_size]

        return PaginatedResult.from_items(
            items=items,
            total=len(filtered),
            page=query.page,
            page_size=query.page_size,
        )
