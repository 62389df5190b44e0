"""
Filter engine for resource lists
"""
from typing import Iterable, List, Sequence

from ..models import ALL, Resource, ResourceQuery

EXACT_FIELDS = ('type', 'language', 'framework', 'difficulty')
ALL_DIMENSIONS = ('query',) + EXACT_FIELDS + ('tags',)

# Re-applied after push-down because upstreams may ignore it
RESIDUAL_DIMENSIONS = ('type',)


def _value(resource: Resource, field: str):
    value = getattr(resource, field)
    return getattr(value, 'value', value)


def matches_text(resource: Resource, text: str) -> bool:
    needle = text.lower()
    return (
        needle in resource.title.lower()
        or needle in resource.description.lower()
        or any(needle in tag.lower() for tag in resource.tags)
    )


def apply_filters(
    items: Sequence[Resource],
    query: ResourceQuery,
    dimensions: Iterable[str] = ALL_DIMENSIONS
) -> List[Resource]:
    """
    Return the items that satisfy the query, in their original order.

    `dimensions` limits which predicates are checked. Exact-match fields are
    skipped when set to "all"; tags pass when any requested tag is present.
    The input sequence is never modified.
    """
    dimensions = set(dimensions)
    filtered = list(items)

    if 'query' in dimensions and query.query:
        filtered = [r for r in filtered if matches_text(r, query.query)]

    for field in EXACT_FIELDS:
        wanted = getattr(query, field)
        if field in dimensions and wanted and wanted != ALL:
            filtered = [r for r in filtered if _value(r, field) == wanted]

    if 'tags' in dimensions and query.tags:
        wanted_tags = set(query.tags)
        filtered = [r for r in filtered if wanted_tags.intersection(r.tags)]

    return filtered
