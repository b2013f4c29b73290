"""
Typed page records for the structured-content format.

Raw model output is an untyped mapping; ``parse_page_data`` validates it
field by field into one of the variants below instead of trusting it.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Union

from models.errors import ContentGenerationFailed
from models.search_result import ContentType


@dataclass(frozen=True)
class Post:
    username: str
    text: str
    timestamp: str | None = None


@dataclass(frozen=True)
class NewsArticleData:
    headline: str
    byline: str
    date: str
    paragraphs: list[str]
    websiteName: str = ""


@dataclass(frozen=True)
class BlogPostData:
    title: str
    author: str
    date: str
    paragraphs: list[str]
    websiteName: str = ""


@dataclass(frozen=True)
class ProductPageData:
    productName: str
    tagline: str
    features: list[str]
    description: str
    price: str
    callToAction: str
    imageUrl: str | None = None
    websiteName: str = ""


@dataclass(frozen=True)
class ForumThreadData:
    threadTitle: str
    originalPost: Post
    replies: list[Post] = field(default_factory=list)
    websiteName: str = ""


PageData = Union[NewsArticleData, BlogPostData, ProductPageData, ForumThreadData]


@dataclass(frozen=True)
class PageContent:
    type: ContentType
    data: PageData

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "data": asdict(self.data)}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "PageContent":
        content_type = ContentType(payload["type"])
        data = dict(payload["data"])
        website_name = str(data.pop("websiteName", "") or "")
        return parse_page_data(content_type, data, website_name=website_name)


def _fail(content_type: ContentType, reason: str) -> ContentGenerationFailed:
    return ContentGenerationFailed(
        f"AI returned invalid {content_type.value} content: {reason}",
        content_type=content_type.value,
    )


def _scalar_str(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _require_str(raw: dict[str, Any], key: str, content_type: ContentType) -> str:
    value = _scalar_str(raw.get(key))
    if value is None:
        raise _fail(content_type, f"field '{key}' is missing or not text")
    return value


def _optional_str(raw: dict[str, Any], key: str, content_type: ContentType) -> str | None:
    if raw.get(key) is None:
        return None
    return _require_str(raw, key, content_type)


def _require_str_list(raw: dict[str, Any], key: str, content_type: ContentType) -> list[str]:
    values = raw.get(key)
    if not isinstance(values, list):
        raise _fail(content_type, f"field '{key}' must be a list")
    items: list[str] = []
    for value in values:
        text = _scalar_str(value)
        if text is None:
            raise _fail(content_type, f"field '{key}' contains a non-text entry")
        items.append(text)
    return items


def _parse_post(raw: Any, content_type: ContentType) -> Post:
    if not isinstance(raw, dict):
        raise _fail(content_type, "post entries must be objects")
    return Post(
        username=_require_str(raw, "username", content_type),
        text=_require_str(raw, "text", content_type),
        timestamp=_optional_str(raw, "timestamp", content_type),
    )


def parse_page_data(content_type: ContentType, raw: Any, *, website_name: str) -> PageContent:
    """
    Validate a raw mapping into the variant matching ``content_type``.

    Args:
        content_type: The category the page was generated for
        raw: Parsed model output (expected to be a JSON object)
        website_name: Taken from the originating search result, never from the model

    Returns:
        PageContent with ``websiteName`` attached

    Raises:
        ContentGenerationFailed: If a required field is missing or has the wrong shape
    """
    if not isinstance(raw, dict):
        raise _fail(content_type, "expected a JSON object")

    data: PageData
    if content_type == ContentType.NEWS_ARTICLE:
        data = NewsArticleData(
            headline=_require_str(raw, "headline", content_type),
            byline=_require_str(raw, "byline", content_type),
            date=_require_str(raw, "date", content_type),
            paragraphs=_require_str_list(raw, "paragraphs", content_type),
            websiteName=website_name,
        )
    elif content_type == ContentType.PRODUCT_PAGE:
        data = ProductPageData(
            productName=_require_str(raw, "productName", content_type),
            tagline=_require_str(raw, "tagline", content_type),
            features=_require_str_list(raw, "features", content_type),
            description=_require_str(raw, "description", content_type),
            price=_require_str(raw, "price", content_type),
            callToAction=_require_str(raw, "callToAction", content_type),
            imageUrl=_optional_str(raw, "imageUrl", content_type),
            websiteName=website_name,
        )
    elif content_type == ContentType.FORUM_THREAD:
        replies = raw.get("replies")
        if not isinstance(replies, list):
            raise _fail(content_type, "field 'replies' must be a list")
        data = ForumThreadData(
            threadTitle=_require_str(raw, "threadTitle", content_type),
            originalPost=_parse_post(raw.get("originalPost"), content_type),
            replies=[_parse_post(reply, content_type) for reply in replies],
            websiteName=website_name,
        )
    else:
        data = BlogPostData(
            title=_require_str(raw, "title", content_type),
            author=_require_str(raw, "author", content_type),
            date=_require_str(raw, "date", content_type),
            paragraphs=_require_str_list(raw, "paragraphs", content_type),
            websiteName=website_name,
        )

    return PageContent(type=content_type, data=data)
