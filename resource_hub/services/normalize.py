"""
Helpers shared by provider adapters for mapping native items onto Resource
"""
import re
from typing import Any, Iterable, List, Optional, Tuple

from ..models import ResourceType

PDF_PATTERN = re.compile(r'\.pdf($|\?)')

VIDEO_HOSTS = ('youtube.com', 'youtu.be', 'vimeo.com', 'dailymotion.com')

DOC_MARKERS = (
    '/docs', 'docs.', 'developer.mozilla.org', 'nodejs.org',
    'react.dev', 'angular.io', 'vuejs.org',
)

# Ordered: the first rule that matches decides the type
TYPE_RULES: Tuple[Tuple[ResourceType, Any], ...] = (
    (ResourceType.PDF, lambda u: PDF_PATTERN.search(u) is not None),
    (ResourceType.VIDEO, lambda u: any(host in u for host in VIDEO_HOSTS)),
    (ResourceType.DOC, lambda u: any(marker in u for marker in DOC_MARKERS)),
)


def detect_type_from_url(url: Optional[str]) -> ResourceType:
    """Infer a resource type from its link when the provider does not say"""
    if not url:
        return ResourceType.ARTICLE
    lowered = url.lower()
    for resource_type, matches in TYPE_RULES:
        if matches(lowered):
            return resource_type
    return ResourceType.ARTICLE


def qualified_id(provider: str, native_id: Any) -> str:
    return f"{provider}:{native_id}"


def first_of(values: Any) -> Optional[str]:
    """First element of a list-like value as a string"""
    if isinstance(values, (list, tuple)) and values:
        return str(values[0])
    return None


def pick(item: dict, *keys: str) -> Any:
    """First truthy value among alternative field names"""
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return None


def split_tags(value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(tag) for tag in value if tag]
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(',') if tag.strip()]
    return []


def limit(values: Iterable[Any], count: int = 5) -> List[str]:
    return [str(value) for value in list(values)[:count]]
