from typing import Any

import httpx

from config.config import DEFAULT_OLLAMA_API_URL, OLLAMA_PAGE_CACHE_PREFIX, ProviderType
from models.errors import NoModelSelected, ProviderResponseError, ProviderUnreachable
from models.search_result import ModelInfo
from utils.logger import get_logger
from .base_client import ModelProvider

logger = get_logger(__name__)


class OllamaProvider(ModelProvider):
    """
    A provider for a locally hosted Ollama server, spoken to over its REST API.

    Search results are requested as free text and parsed afterwards; the
    structured page format uses Ollama's ``format: "json"`` option.
    """

    provider_name = ProviderType.OLLAMA.value
    cache_prefix = OLLAMA_PAGE_CACHE_PREFIX

    def __init__(
        self,
        base_url: str = DEFAULT_OLLAMA_API_URL,
        model_name: str = "",
        http_client: httpx.AsyncClient | None = None,
        **kwargs,
    ):
        """
        Args:
            base_url: Server root, e.g. http://localhost:11434
            model_name: Installed model to generate with; may be empty until one is chosen
            http_client: Shared client (tests pass one built on httpx.MockTransport)
            **kwargs: temperature, timeout_s
        """
        super().__init__(model_name or "", **kwargs)
        self.base_url = (base_url or DEFAULT_OLLAMA_API_URL).rstrip("/")
        self._http_client = http_client

    @property
    def supports_json_mode(self) -> bool:
        return False

    @property
    def cache_model_id(self) -> str | None:
        return self.model_name or None

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            if self._http_client is not None:
                response = await self._http_client.request(method, url, timeout=self.timeout_s, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                    response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderUnreachable(
                f"Ollama at {url} did not respond within {self.timeout_s:g} seconds."
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderUnreachable(
                f"Could not connect to Ollama API at {url}. "
                f"Ensure Ollama is running and accessible. Error: {exc}"
            ) from exc

        if response.is_error:
            body = response.text
            logger.error(
                "Ollama API error",
                extra={"extra_fields": {"url": url, "status": response.status_code, "body": body[:300]}},
            )
            raise ProviderResponseError(
                f"Ollama API error ({response.status_code}): {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderResponseError(
                "Ollama returned a response that is not JSON.",
                status_code=response.status_code,
                body=response.text,
            ) from exc

    async def list_models(self) -> list[ModelInfo]:
        """
        Fetch the installed models from ``/api/tags``.

        Returns:
            Models sorted by name
        """
        payload = await self._request("GET", "/api/tags")
        entries = payload.get("models") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            logger.warning("Ollama /api/tags response has no model list")
            return []
        models = [ModelInfo.from_payload(entry) for entry in entries if isinstance(entry, dict)]
        return sorted(models, key=lambda model: model.name)

    async def generate_text(self, prompt: str, *, json_mode: bool = False) -> str:
        if not self.model_name:
            raise NoModelSelected("No Ollama model selected. Please select a model in settings.")

        body: dict[str, Any] = {
            "model": self.model_name,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        if json_mode:
            body["format"] = "json"

        logger.debug(
            "Sending Ollama generate request",
            extra={"extra_fields": {"model": self.model_name, "json_mode": json_mode, "prompt_chars": len(prompt)}},
        )
        payload = await self._request("POST", "/api/generate", json=body)
        text = payload.get("response") if isinstance(payload, dict) else None
        return text if isinstance(text, str) else ""
