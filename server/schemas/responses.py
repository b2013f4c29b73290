"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from utils.text_direction import text_direction


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str


class ErrorDTO(BaseModel):
    code: str
    message: str


class ErrorResponseDTO(BaseModel):
    error: ErrorDTO


class SearchResultDTO(BaseModel):
    # camelCase on the wire, like the records the front end already renders
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    domain: str
    title: str
    snippet: str
    content_type: str = Field(..., alias="contentType")
    original_query: str = Field(..., alias="originalQuery")
    preferred_theme: str = Field(..., alias="preferredTheme")
    direction: str

    @classmethod
    def from_item(cls, item):
        """Convert SearchResultItem to DTO."""
        return cls(
            id=item.id,
            name=item.name,
            domain=item.domain,
            title=item.title,
            snippet=item.snippet,
            content_type=item.content_type.value,
            original_query=item.original_query,
            preferred_theme=item.preferred_theme.value,
            direction=text_direction(item.title, item.snippet),
        )


class SearchResultsPageDTO(BaseModel):
    query: str | None
    page: int
    page_size: int
    total_pages: int
    total_results: int
    results: list[SearchResultDTO]

    @classmethod
    def from_results_page(cls, results_page):
        return cls(
            query=results_page.query,
            page=results_page.page,
            page_size=results_page.page_size,
            total_pages=results_page.total_pages,
            total_results=results_page.total_results,
            results=[SearchResultDTO.from_item(item) for item in results_page.items],
        )


class PageResponseDTO(BaseModel):
    result_id: str
    format: str
    cached: bool
    html: str | None = None
    content: dict[str, Any] | None = None

    @classmethod
    def from_page_result(cls, page):
        return cls(
            result_id=page.result_id,
            format=page.page_format.value,
            cached=page.cached,
            html=page.html,
            content=page.content.to_dict() if page.content else None,
        )


class SettingsDTO(BaseModel):
    provider: str
    gemini_api_key_set: bool
    gemini_api_key: str | None = None
    gemini_model: str
    ollama_api_url: str
    ollama_model: str
    page_format: str

    @classmethod
    def from_settings(cls, settings):
        """Convert ProviderSettings to DTO; the API key is never echoed back."""
        return cls(
            provider=settings.provider.value,
            gemini_api_key_set=bool(settings.gemini_api_key),
            gemini_api_key="[REDACTED]" if settings.gemini_api_key else None,
            gemini_model=settings.gemini_model,
            ollama_api_url=settings.ollama_api_url,
            ollama_model=settings.ollama_model,
            page_format=settings.page_format.value,
        )


class ModelInfoDTO(BaseModel):
    name: str
    model: str
    modified_at: str
    size: int
    digest: str
    details: dict[str, Any] = Field(default_factory=dict)


class ModelsResponseDTO(BaseModel):
    models: list[ModelInfoDTO]
