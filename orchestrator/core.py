"""
SearchEngine - session state and business logic for Mdluex Search.

Key guarantees:
- HTTP layer stays thin (no provider imports there)
- Provider settings are loaded per request and passed explicitly
- Page caches of every provider are dropped when a new search starts
- Responses that were overtaken by a newer request never touch session state
"""

import asyncio
import math
import random
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy import Engine

from api.base_client import ModelProvider
from api.factory import create_provider
from config.config import (
    GEMINI_PAGE_CACHE_PREFIX,
    OLLAMA_PAGE_CACHE_PREFIX,
    Config,
    PageFormat,
    ProviderSettings,
    ProviderType,
)
from config.settings_store import SettingsStore
from models.errors import ResultNotFound, StaleResponseDiscarded
from models.search_result import ModelInfo, SearchResultItem
from orchestrator.page_cache import PageCache, create_page_cache
from orchestrator.page_generator import PageContentGenerator, PageResult
from orchestrator.prompts import PageTemplates, load_templates, pick_result_count
from orchestrator.request_fence import RequestFence
from orchestrator.result_normalizer import normalize_response
from utils.logger import get_logger

logger = get_logger(__name__)

PAGE_CACHE_PREFIXES = (GEMINI_PAGE_CACHE_PREFIX, OLLAMA_PAGE_CACHE_PREFIX)

ProviderFactory = Callable[[ProviderSettings], ModelProvider]


@dataclass(frozen=True)
class ResultsPage:
    query: str | None
    page: int
    page_size: int
    total_results: int
    items: list[SearchResultItem] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_results / self.page_size))


class SearchEngine:
    """One search session: the current query, its results and page generation."""

    def __init__(
        self,
        settings_store: SettingsStore,
        cache: PageCache,
        provider_factory: ProviderFactory = create_provider,
        templates: PageTemplates | None = None,
        page_size: int = 10,
        rng: random.Random | None = None,
    ):
        self.settings_store = settings_store
        self.cache = cache
        self.provider_factory = provider_factory
        self.templates = templates or load_templates()
        self.page_size = page_size
        self._rng = rng or random.Random()
        self._search_fence = RequestFence()
        self._page_fence = RequestFence()
        self._query: str | None = None
        self._results: list[SearchResultItem] = []

    @property
    def query(self) -> str | None:
        return self._query

    @property
    def results(self) -> list[SearchResultItem]:
        return list(self._results)

    def current_settings(self) -> ProviderSettings:
        return self.settings_store.load()

    async def search(self, query: str) -> ResultsPage:
        """
        Run a new search and replace the session's result set.

        The query and its results are swapped in together once the model output
        has been normalized; a failed search leaves the previous set in place.

        Returns:
            ResultsPage: The first page of results

        Raises:
            InvalidResultSetFormat: The model output could not be turned into results
            StaleResponseDiscarded: A newer search started while this one was running
            ProviderNotConfigured / NoModelSelected / ProviderUnreachable /
            ProviderResponseError: Propagated from the provider
        """
        token = self._search_fence.issue()
        # In-flight page requests belong to the previous result set
        self._page_fence.issue()

        for prefix in PAGE_CACHE_PREFIXES:
            await asyncio.to_thread(self.cache.clear_namespace, prefix)

        settings = await asyncio.to_thread(self.settings_store.load)
        provider = self.provider_factory(settings)
        json_mode = provider.supports_json_mode
        num_results = pick_result_count(json_mode, self._rng)

        logger.info(
            "Search started",
            extra={
                "extra_fields": {
                    "provider": provider.provider_name,
                    "model": provider.model_name,
                    "requested_results": num_results,
                    "query_chars": len(query),
                }
            },
        )
        prompt = self.templates.search_prompt(query, json_mode=json_mode, num_results=num_results)
        raw = await provider.generate_text(prompt, json_mode=json_mode)
        items = normalize_response(raw, query, limit=None if json_mode else num_results)

        if not self._search_fence.is_current(token):
            logger.info("Discarding results of a superseded search")
            raise StaleResponseDiscarded("A newer search replaced this one.")

        self._query = query
        self._results = items
        logger.info(
            "Search completed",
            extra={"extra_fields": {"provider": provider.provider_name, "results": len(items)}},
        )
        return self.results_page(1)

    def results_page(self, page: int) -> ResultsPage:
        """
        Slice the current result set; pages past the end are empty.

        Raises:
            ValueError: If ``page`` is smaller than 1
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        start = (page - 1) * self.page_size
        return ResultsPage(
            query=self._query,
            page=page,
            page_size=self.page_size,
            total_results=len(self._results),
            items=self._results[start:start + self.page_size],
        )

    def get_result(self, result_id: str) -> SearchResultItem:
        for item in self._results:
            if item.id == result_id:
                return item
        raise ResultNotFound(f"No search result with id '{result_id}' in the current result set.")

    async def open_result(self, result_id: str) -> PageResult:
        """
        Generate (or load from cache) the page behind a result of the current set.

        Raises:
            ResultNotFound: Unknown result id
            StaleResponseDiscarded: Another page or a new search was requested meanwhile
            ContentGenerationFailed: The model output is unusable
        """
        item = self.get_result(result_id)
        token = self._page_fence.issue()

        settings = await asyncio.to_thread(self.settings_store.load)
        generator = PageContentGenerator(
            self.provider_factory(settings),
            self.cache,
            page_format=settings.page_format,
            templates=self.templates,
        )
        page = await generator.generate(item, item.original_query)

        if not self._page_fence.is_current(token):
            logger.info(
                "Discarding page of a superseded request",
                extra={"extra_fields": {"result_id": result_id}},
            )
            raise StaleResponseDiscarded("A newer request replaced this page.")
        return page

    async def list_models(self) -> list[ModelInfo]:
        """
        Refresh the list of models installed on the local server.

        When the stored model is unset or no longer installed, the first listed
        model becomes the selected one.
        """
        stored = await asyncio.to_thread(self.settings_store.load)
        settings = stored.with_updates(provider=ProviderType.OLLAMA)
        models = await self.provider_factory(settings).list_models()
        logger.info(
            "Local models listed",
            extra={"extra_fields": {"count": len(models), "url": settings.ollama_api_url}},
        )

        if models and stored.ollama_model not in {model.name for model in models}:
            selected = models[0].name
            await asyncio.to_thread(self.settings_store.save, ollama_model=selected)
            logger.info(
                "Selected first installed local model",
                extra={"extra_fields": {"previous": stored.ollama_model, "model": selected}},
            )
        return models

    def update_settings(
        self,
        *,
        provider: ProviderType | None = None,
        gemini_api_key: str | None = None,
        ollama_model: str | None = None,
        ollama_api_url: str | None = None,
        page_format: PageFormat | None = None,
    ) -> ProviderSettings:
        return self.settings_store.save(
            provider=provider,
            gemini_api_key=gemini_api_key,
            ollama_model=ollama_model,
            ollama_api_url=ollama_api_url,
            page_format=page_format,
        )


def build_search_engine(config: Config | None = None, engine: Engine | None = None) -> SearchEngine:
    """Wire a SearchEngine from the environment configuration."""
    from db.engine import create_db_engine

    config = config or Config()
    for problem in config.validate():
        logger.warning("Configuration problem", extra={"extra_fields": {"problem": problem}})

    engine = engine or create_db_engine(config.DATABASE_URL)
    return SearchEngine(
        settings_store=SettingsStore(engine, config),
        cache=create_page_cache(config.PAGE_CACHE_BACKEND, engine),
        page_size=config.RESULTS_PAGE_SIZE,
    )
