"""Settings and local model endpoints."""

import asyncio

from fastapi import APIRouter, Depends

from config.config import PageFormat, ProviderType
from orchestrator.core import SearchEngine
from server.dependencies import get_search_engine
from server.schemas.requests import SettingsUpdateRequest
from server.schemas.responses import ModelInfoDTO, ModelsResponseDTO, SettingsDTO

router = APIRouter(prefix="/v1", tags=["Settings"])


@router.get("/settings", response_model=SettingsDTO)
async def get_settings(engine: SearchEngine = Depends(get_search_engine)):
    """Effective settings; the Gemini API key is redacted."""
    settings = await asyncio.to_thread(engine.current_settings)
    return SettingsDTO.from_settings(settings)


@router.put("/settings", response_model=SettingsDTO)
async def update_settings(
    body: SettingsUpdateRequest,
    engine: SearchEngine = Depends(get_search_engine),
):
    """Persist the provided settings; omitted fields keep their value."""
    settings = await asyncio.to_thread(
        engine.update_settings,
        provider=ProviderType(body.provider) if body.provider else None,
        gemini_api_key=body.gemini_api_key,
        ollama_model=body.ollama_model,
        ollama_api_url=body.ollama_api_url,
        page_format=PageFormat(body.page_format) if body.page_format else None,
    )
    return SettingsDTO.from_settings(settings)


@router.get("/models", response_model=ModelsResponseDTO)
async def list_models(engine: SearchEngine = Depends(get_search_engine)):
    """Refresh the list of models installed on the local Ollama server."""
    models = await engine.list_models()
    return ModelsResponseDTO(
        models=[
            ModelInfoDTO(
                name=model.name,
                model=model.model,
                modified_at=model.modified_at,
                size=model.size,
                digest=model.digest,
                details=model.details,
            )
            for model in models
        ]
    )
