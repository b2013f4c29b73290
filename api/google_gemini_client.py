import asyncio
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors

from config.config import DEFAULT_GEMINI_MODEL, GEMINI_PAGE_CACHE_PREFIX, ProviderType
from models.errors import ProviderNotConfigured, ProviderResponseError, ProviderUnreachable
from utils.logger import get_logger
from .base_client import ModelProvider

logger = get_logger(__name__)


class GeminiProvider(ModelProvider):
    """
    A provider for the Google Gemini API using the google.genai package.
    Uses the async surface (``client.aio``) so calls can be bounded by a timeout.
    """

    provider_name = ProviderType.GEMINI.value
    cache_prefix = GEMINI_PAGE_CACHE_PREFIX

    def __init__(
        self,
        api_key: str | None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        client: Any = None,
        **kwargs,
    ):
        """
        Initialize the Gemini provider.

        Args:
            api_key: The Google Gemini API key
            model_name: The name of the model to use (default: gemini-2.5-flash)
            client: Pre-built ``genai.Client`` (tests pass a fake here)
            **kwargs: temperature, timeout_s

        Raises:
            ProviderNotConfigured: If no API key is available
        """
        super().__init__(model_name or DEFAULT_GEMINI_MODEL, **kwargs)

        if not api_key and client is None:
            raise ProviderNotConfigured(
                "Gemini client not initialized. Configure API key in settings "
                "or ensure GEMINI_API_KEY is available."
            )

        self.client = client or genai.Client(api_key=api_key)

    async def generate_text(self, prompt: str, *, json_mode: bool = False) -> str:
        config: dict[str, Any] = {'temperature': self.temperature}
        if json_mode:
            config['response_mime_type'] = 'application/json'

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model_name,
                    contents=prompt,
                    config=config,
                ),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderUnreachable(
                f"Gemini did not respond within {self.timeout_s:g} seconds."
            ) from exc
        except genai_errors.APIError as exc:
            logger.error(
                "Gemini API error",
                extra={"extra_fields": {"model": self.model_name, "status": exc.code}},
            )
            raise ProviderResponseError(
                f"Gemini API error ({exc.code}): {exc.message or exc}",
                status_code=exc.code,
                body=str(exc),
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderUnreachable(f"Could not connect to the Gemini API. Error: {exc}") from exc

        text = getattr(response, 'text', None) or ""
        if not text:
            logger.warning(
                "Gemini returned an empty response",
                extra={"extra_fields": {"model": self.model_name, "json_mode": json_mode}},
            )
        return text
