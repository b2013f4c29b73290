import uuid
from typing import Any

from models.errors import InvalidResultSetFormat, MalformedModelOutput
from models.search_result import ContentType, SearchResultItem, Theme
from orchestrator.response_extractor import extract_json
from utils.logger import get_logger

logger = get_logger(__name__)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _normalize_item(raw: dict[str, Any], query: str) -> SearchResultItem:
    return SearchResultItem(
        id=str(uuid.uuid4()),
        name=_text(raw.get("name")),
        domain=_text(raw.get("domain")),
        title=_text(raw.get("title")),
        snippet=_text(raw.get("snippet")),
        content_type=ContentType.coerce(raw.get("contentType")),
        original_query=query,
        preferred_theme=Theme.coerce(raw.get("preferredTheme")),
    )


def normalize(raw_items: Any, query: str, *, limit: int | None = None) -> list[SearchResultItem]:
    """
    Map parsed model output onto SearchResultItem records.

    A single object is treated as a one-element result set. Every item gets a
    fresh id and the originating query; unknown content types and themes are
    coerced to blog_post and system.

    Raises:
        InvalidResultSetFormat: The value is neither a list nor an object, or
            no entry of the list is an object
    """
    if isinstance(raw_items, dict):
        logger.warning("Model returned a single result object; wrapping it in a list")
        raw_items = [raw_items]

    if not isinstance(raw_items, list):
        raise InvalidResultSetFormat(
            "AI returned an unexpected JSON type for search results (not an array or object)."
        )

    if limit is not None:
        raw_items = raw_items[:limit]

    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            logger.warning(
                "Skipping search result entry that is not an object",
                extra={"extra_fields": {"index": index, "entry_type": type(raw).__name__}},
            )
            continue
        items.append(_normalize_item(raw, query))

    if raw_items and not items:
        raise InvalidResultSetFormat("AI returned search results without any usable entries.")

    return items


def normalize_response(raw_text: Any, query: str, *, limit: int | None = None) -> list[SearchResultItem]:
    """Extract and normalize a result set from raw model text."""
    try:
        parsed = extract_json(raw_text, expect="array")
    except MalformedModelOutput as exc:
        raise InvalidResultSetFormat(
            "AI failed to generate valid search results format."
        ) from exc
    return normalize(parsed, query, limit=limit)
