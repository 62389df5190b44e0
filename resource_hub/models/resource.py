"""
Resource catalog models using Pydantic v2
"""
from enum import Enum
from typing import List, Optional, Any, Iterable, Mapping, Union
import math

from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..config.security import InputSanitizer

ALL = "all"


class ResourceType(str, Enum):
    """Kinds of learning resource"""
    VIDEO = "video"
    BOOK = "book"
    DOC = "doc"
    PDF = "pdf"
    ARTICLE = "article"


class Difficulty(str, Enum):
    """Resource difficulty levels"""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ProviderName(str, Enum):
    """Upstream catalogs that can be addressed with the `provider` parameter"""
    DEVTO = "devto"
    YOUTUBE = "youtube"
    GOOGLE_BOOKS = "googlebooks"
    FREE_BOOKS = "freebooks"
    OPEN_LIBRARY = "openlibrary"


MIXED = "mixed"


class Resource(BaseModel):
    """Unified resource record"""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        use_enum_values=True
    )

    id: str = Field(..., min_length=1)
    title: str = "Untitled"
    description: str = ""
    url: str = "#"
    type: ResourceType = ResourceType.ARTICLE
    language: str = "general"
    framework: Optional[str] = None
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    tags: List[str] = Field(default_factory=list)
    author: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)

    @field_validator('title', mode='before')
    @classmethod
    def default_title(cls, v: Any) -> Any:
        return v if v and str(v).strip() else "Untitled"

    @field_validator('description', mode='before')
    @classmethod
    def default_description(cls, v: Any) -> Any:
        return v if v and str(v).strip() else ""

    @field_validator('url', mode='before')
    @classmethod
    def default_url(cls, v: Any) -> Any:
        return v if v and str(v).strip() else "#"

    @field_validator('language', mode='before')
    @classmethod
    def default_language(cls, v: Any) -> Any:
        return str(v) if v and str(v).strip() else "general"

    @field_validator('tags', mode='before')
    @classmethod
    def clean_tags(cls, v: Any) -> List[str]:
        if not v:
            return []
        return [str(tag).strip() for tag in v if tag and str(tag).strip()]


class ResourceQuery(BaseModel):
    """Filtered, paginated resource listing request"""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )

    query: str = Field(default="", max_length=1000)
    type: str = ALL
    language: str = ALL
    framework: str = ALL
    difficulty: str = ALL
    tags: List[str] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=12, ge=1)
    provider: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        tags: Optional[Iterable[str]] = None,
        default_page_size: int = 12,
        max_page_size: int = 100,
        max_query_length: int = 500
    ) -> "ResourceQuery":
        """
        Build a query from raw request parameters.

        Invalid numbers are clamped or defaulted, never rejected. `tags` may
        be given separately (repeated parameters); each entry may itself be
        a comma-separated list.
        """
        raw_tags = list(tags) if tags is not None else [params.get("tags") or ""]
        parsed_tags = [
            tag.strip()
            for entry in raw_tags if entry
            for tag in str(entry).split(",")
            if tag.strip()
        ]

        providers = [p.value for p in ProviderName] + [MIXED]

        return cls(
            query=InputSanitizer.sanitize_query(params.get("query"), max_length=max_query_length),
            type=_filter_value(params.get("type")),
            language=_filter_value(params.get("language")),
            framework=_filter_value(params.get("framework")),
            difficulty=_filter_value(params.get("difficulty")),
            tags=parsed_tags,
            page=InputSanitizer.clamp_numeric_param(params.get("page"), 1, min_val=1),
            page_size=InputSanitizer.clamp_numeric_param(
                params.get("pageSize"), default_page_size, min_val=1, max_val=max_page_size
            ),
            provider=InputSanitizer.normalize_enum_param(params.get("provider"), providers),
        )

    def search_term(self, default: str) -> str:
        """Free text, else the first tag, else the default term"""
        return self.query or (self.tags[0] if self.tags else default)

    def for_page(self, page: int) -> "ResourceQuery":
        return self.model_copy(update={"page": max(1, page)})


def _filter_value(value: Any) -> str:
    if value is None:
        return ALL
    value = str(value).strip()
    return value or ALL


class ProviderPage(BaseModel):
    """One page of normalized items from a provider, with whatever paging hints it gave"""
    items: List[Resource] = Field(default_factory=list)
    page_size: int = Field(..., ge=1)
    total: Optional[int] = Field(default=None, ge=0)
    has_next: Optional[bool] = None


class PaginatedResult(BaseModel):
    """Page of resources returned to the client"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True
    )

    items: List[Resource] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=12, ge=1)
    total_pages: int = Field(default=1, ge=1)
    total_is_estimate: bool = False

    @classmethod
    def from_items(
        cls,
        items: List[Resource],
        total: int,
        page: int,
        page_size: int,
        total_pages: Union[int, None] = None,
        total_is_estimate: bool = False
    ) -> "PaginatedResult":
        if total_pages is None:
            total_pages = max(1, math.ceil(total / page_size))
        return cls(
            items=items[:page_size],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=max(1, total_pages),
            total_is_estimate=total_is_estimate
        )

    def to_json(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)
