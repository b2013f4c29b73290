"""Pydantic request models for FastAPI endpoints."""

from pydantic import BaseModel, Field, field_validator


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)

    @field_validator("query")
    @classmethod
    def strip_query(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("query must not be blank")
        return value


class PageRequest(BaseModel):
    result_id: str = Field(..., min_length=1)


class SettingsUpdateRequest(BaseModel):
    """Fields left out are not changed. An empty gemini_api_key clears the stored key."""

    provider: str | None = Field(None, pattern="^(gemini|ollama)$")
    gemini_api_key: str | None = None
    ollama_model: str | None = None
    ollama_api_url: str | None = Field(None, pattern="^https?://")
    page_format: str | None = Field(None, pattern="^(html|structured)$")
