"""
Models package for search results, generated pages and errors.
"""

from .errors import (
    ContentGenerationFailed,
    InvalidResultSetFormat,
    MalformedHtmlDocument,
    MalformedModelOutput,
    MdluexSearchError,
    NoModelSelected,
    ProviderNotConfigured,
    ProviderResponseError,
    ProviderUnreachable,
    ResultNotFound,
    StaleResponseDiscarded,
)
from .page_content import PageContent, parse_page_data
from .search_result import ContentType, ModelInfo, SearchResultItem, Theme

__all__ = [
    "ContentGenerationFailed",
    "ContentType",
    "InvalidResultSetFormat",
    "MalformedHtmlDocument",
    "MalformedModelOutput",
    "MdluexSearchError",
    "ModelInfo",
    "NoModelSelected",
    "PageContent",
    "ProviderNotConfigured",
    "ProviderResponseError",
    "ProviderUnreachable",
    "ResultNotFound",
    "SearchResultItem",
    "StaleResponseDiscarded",
    "Theme",
    "parse_page_data",
]
