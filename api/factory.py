import httpx

from config.config import ProviderSettings, ProviderType
from .base_client import ModelProvider
from .google_gemini_client import GeminiProvider
from .ollama_client import OllamaProvider


def create_provider(settings: ProviderSettings, http_client: httpx.AsyncClient | None = None) -> ModelProvider:
    """
    Build the provider selected in ``settings``.

    Args:
        settings: Effective provider settings
        http_client: Optional shared HTTP client for the Ollama provider

    Raises:
        ProviderNotConfigured: Gemini selected without an API key
    """
    if settings.provider == ProviderType.OLLAMA:
        return OllamaProvider(
            base_url=settings.ollama_api_url,
            model_name=settings.ollama_model,
            http_client=http_client,
            temperature=settings.temperature,
            timeout_s=settings.timeout_s,
        )
    return GeminiProvider(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_model,
        temperature=settings.temperature,
        timeout_s=settings.timeout_s,
    )
