"""Data models for the news feed client."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from dateutil import parser
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """News category selectable by the user."""
    ALL = "all"
    POLITICS = "politics"
    TECH = "tech"
    SPORTS = "sports"
    BUSINESS = "business"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class QuerySpec(BaseModel):
    """What to fetch. The page number is a cursor and not part of the query."""
    model_config = ConfigDict(frozen=True)

    category: Category = Category.ALL
    search_term: str = ""

    @field_validator("search_term", mode="before")
    @classmethod
    def _normalize_search_term(cls, value):
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    @property
    def identity(self) -> Tuple[Category, str]:
        return (self.category, self.search_term)


class Article(BaseModel):
    """Represents a single news article returned by the upstream API."""
    url: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    published_at: datetime
    source_name: str = "Unknown"
    author: Optional[str] = None

    @property
    def key(self) -> Tuple[str, datetime]:
        return (self.url, self.published_at)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Article":
        """Build an article from one entry of the upstream ``articles`` array.

        Raises ``ValueError`` (pydantic's ValidationError included) when a
        required field is missing or unparsable.
        """
        source = raw.get("source") if isinstance(raw.get("source"), dict) else {}
        published_at = raw.get("publishedAt")
        if published_at and isinstance(published_at, str):
            published_at = parser.isoparse(published_at)
        return cls(
            url=raw.get("url"),
            title=raw.get("title"),
            description=raw.get("description"),
            image_url=raw.get("urlToImage"),
            published_at=published_at,
            source_name=source.get("name") or "Unknown",
            author=raw.get("author"),
        )


class Page(BaseModel):
    """One page of results for a query."""
    page_number: int = Field(ge=1)
    articles: List[Article] = Field(default_factory=list)
    is_last: bool = False


class ControllerStatus(str, Enum):
    IDLE = "idle"
    LOADING_FIRST = "loading_first"
    LOADING_MORE = "loading_more"
    ERROR = "error"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class ControllerState:
    """Pagination state. ``cause`` is only set for ERROR."""
    status: ControllerStatus = ControllerStatus.IDLE
    cause: Optional[Exception] = None

    @classmethod
    def idle(cls) -> "ControllerState":
        return cls(ControllerStatus.IDLE)

    @classmethod
    def loading_first(cls) -> "ControllerState":
        return cls(ControllerStatus.LOADING_FIRST)

    @classmethod
    def loading_more(cls) -> "ControllerState":
        return cls(ControllerStatus.LOADING_MORE)

    @classmethod
    def exhausted(cls) -> "ControllerState":
        return cls(ControllerStatus.EXHAUSTED)

    @classmethod
    def error(cls, cause: Exception) -> "ControllerState":
        return cls(ControllerStatus.ERROR, cause)

    @property
    def is_loading(self) -> bool:
        return self.status in (ControllerStatus.LOADING_FIRST, ControllerStatus.LOADING_MORE)


class FeedView(BaseModel):
    """What the presentation layer renders."""
    items: List[Article] = Field(default_factory=list)
    is_initial_loading: bool = False
    is_loading_more: bool = False
    error_message: Optional[str] = None
    status: ControllerStatus = ControllerStatus.IDLE
    has_more: bool = False
    query: Optional[QuerySpec] = None


class QueryRequest(BaseModel):
    """Request model for changing the active query."""
    category: Category = Category.ALL
    search_term: str = ""
