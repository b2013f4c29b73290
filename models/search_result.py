from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ContentType(str, Enum):
    """Page category; selects the prompt template and the structured schema."""

    NEWS_ARTICLE = "news_article"
    BLOG_POST = "blog_post"
    PRODUCT_PAGE = "product_page"
    FORUM_THREAD = "forum_thread"

    @classmethod
    def coerce(cls, value: Any) -> "ContentType":
        try:
            return cls(value)
        except ValueError:
            return cls.BLOG_POST


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"

    @classmethod
    def coerce(cls, value: Any) -> "Theme":
        try:
            return cls(value)
        except ValueError:
            return cls.SYSTEM


@dataclass(frozen=True)
class SearchResultItem:
    id: str
    name: str
    domain: str
    title: str
    snippet: str
    content_type: ContentType
    original_query: str
    preferred_theme: Theme = Theme.SYSTEM

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "domain": self.domain,
            "title": self.title,
            "snippet": self.snippet,
            "contentType": self.content_type.value,
            "originalQuery": self.original_query,
            "preferredTheme": self.preferred_theme.value,
        }


@dataclass(frozen=True)
class ModelInfo:
    """A model installed on the local LLM server, as listed by ``/api/tags``."""

    name: str
    model: str = ""
    modified_at: str = ""
    size: int = 0
    digest: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ModelInfo":
        details = payload.get("details")
        return cls(
            name=str(payload.get("name") or ""),
            model=str(payload.get("model") or payload.get("name") or ""),
            modified_at=str(payload.get("modified_at") or ""),
            size=_size_or_zero(payload.get("size")),
            digest=str(payload.get("digest") or ""),
            details=dict(details) if isinstance(details, dict) else {},
        )


def _size_or_zero(value: Any) -> int:
    # Sizes reported by the server are informational only
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0
