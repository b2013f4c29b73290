"""
Generate the page behind a search result, in either representation.

The cache is consulted first. On a miss the provider is asked for a page,
the output is validated (structured records) or cleaned (HTML documents),
and the result is stored under the provider's namespace.
"""

import asyncio
import json
from dataclasses import dataclass

from api.base_client import ModelProvider
from config.config import PageFormat
from models.errors import ContentGenerationFailed, MalformedModelOutput
from models.page_content import PageContent, parse_page_data
from models.search_result import ContentType, SearchResultItem
from orchestrator.html_postprocessor import clean_html, rewrite_placeholders
from orchestrator.page_cache import PageCache, build_cache_key
from orchestrator.prompts import PageTemplates, load_templates
from orchestrator.response_extractor import extract_json, strip_code_fence
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PageResult:
    """Exactly one of ``html`` and ``content`` is set, matching ``page_format``."""

    result_id: str
    page_format: PageFormat
    html: str | None = None
    content: PageContent | None = None
    cached: bool = False


class PageContentGenerator:
    def __init__(
        self,
        provider: ModelProvider,
        cache: PageCache,
        page_format: PageFormat = PageFormat.HTML,
        templates: PageTemplates | None = None,
    ):
        self.provider = provider
        self.cache = cache
        self.page_format = page_format
        self.templates = templates or load_templates()

    def cache_key(self, item: SearchResultItem) -> str:
        return build_cache_key(
            self.provider.cache_prefix,
            item.id,
            model_id=self.provider.cache_model_id,
            structured=self.page_format == PageFormat.STRUCTURED,
        )

    async def generate(self, item: SearchResultItem, query: str) -> PageResult:
        """
        Produce the page for ``item``, from cache when possible.

        Args:
            item: The selected search result
            query: The search query the result was generated for

        Raises:
            ContentGenerationFailed: The model output is unusable (MalformedHtmlDocument
                for HTML without a document root)
            ProviderUnreachable / ProviderResponseError: Propagated from the provider
        """
        key = self.cache_key(item)
        # Cache backends may block on database I/O
        cached = await asyncio.to_thread(self._from_cache, item, key)
        if cached is not None:
            logger.info(
                "Page served from cache",
                extra={"extra_fields": {"result_id": item.id, "format": self.page_format.value}},
            )
            return cached

        if self.page_format == PageFormat.STRUCTURED:
            content = await self._generate_structured(item, query)
            await asyncio.to_thread(self.cache.put, key, json.dumps(content.to_dict()))
            result = PageResult(item.id, self.page_format, content=content)
        else:
            html = await self._generate_html(item, query)
            await asyncio.to_thread(self.cache.put, key, html)
            result = PageResult(item.id, self.page_format, html=html)

        logger.info(
            "Page generated",
            extra={
                "extra_fields": {
                    "result_id": item.id,
                    "provider": self.provider.provider_name,
                    "model": self.provider.model_name,
                    "content_type": item.content_type.value,
                    "format": self.page_format.value,
                }
            },
        )
        return result

    def _from_cache(self, item: SearchResultItem, key: str) -> PageResult | None:
        value = self.cache.get(key)
        if value is None:
            return None
        if self.page_format == PageFormat.HTML:
            return PageResult(item.id, self.page_format, html=value, cached=True)
        try:
            content = PageContent.from_dict(json.loads(value))
        except (ValueError, KeyError, TypeError, ContentGenerationFailed) as exc:
            logger.warning(
                "Unreadable structured page in cache, regenerating",
                extra={"extra_fields": {"key": key, "error": str(exc)}},
            )
            return None
        return PageResult(item.id, self.page_format, content=content, cached=True)

    async def _generate_html(self, item: SearchResultItem, query: str) -> str:
        prompt = self.templates.page_prompt(item, query)
        raw = await self.provider.generate_text(prompt)
        if not raw or not raw.strip():
            raise ContentGenerationFailed("AI failed to generate page content string.")
        return clean_html(strip_code_fence(raw, "html"))

    async def _generate_structured(self, item: SearchResultItem, query: str) -> PageContent:
        prompt = self.templates.structured_prompt(item, query)
        raw = await self.provider.generate_text(prompt, json_mode=True)
        try:
            parsed = extract_json(raw, expect="object")
        except MalformedModelOutput as exc:
            raise ContentGenerationFailed(
                f"AI returned malformed {item.content_type.value} content."
            ) from exc
        image_url = parsed.get("imageUrl")
        if item.content_type == ContentType.PRODUCT_PAGE and isinstance(image_url, str):
            parsed = {**parsed, "imageUrl": rewrite_placeholders(image_url)}
        return parse_page_data(item.content_type, parsed, website_name=item.name)
