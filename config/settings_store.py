"""Persisted user settings layered over the environment defaults."""

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from config.config import (
    SETTINGS_KEY_GEMINI_API_KEY,
    SETTINGS_KEY_OLLAMA_API_URL,
    SETTINGS_KEY_OLLAMA_MODEL,
    SETTINGS_KEY_PAGE_FORMAT,
    SETTINGS_KEY_PROVIDER,
    Config,
    PageFormat,
    ProviderSettings,
    ProviderType,
)
from db.repository import get_values, set_value
from utils.logger import get_logger

logger = get_logger(__name__)

_ALL_KEYS = [
    SETTINGS_KEY_PROVIDER,
    SETTINGS_KEY_GEMINI_API_KEY,
    SETTINGS_KEY_OLLAMA_MODEL,
    SETTINGS_KEY_OLLAMA_API_URL,
    SETTINGS_KEY_PAGE_FORMAT,
]


class SettingsStore:
    """
    Reads and writes the user-chosen settings (provider, API key, model, URL,
    page format) in the key/value table.

    Stored values override the environment; an empty stored API key falls back
    to the environment key.
    """

    def __init__(self, engine: Engine, config: Config | None = None):
        self._engine = engine
        self._config = config or Config()

    def load(self) -> ProviderSettings:
        defaults = self._config.default_settings()
        try:
            with self._engine.begin() as conn:
                stored = get_values(conn, _ALL_KEYS)
        except SQLAlchemyError as exc:
            logger.warning(
                "Could not read persisted settings, using environment defaults",
                extra={"extra_fields": {"error": str(exc)}},
            )
            return defaults

        changes = {}
        provider = stored.get(SETTINGS_KEY_PROVIDER)
        if provider in {p.value for p in ProviderType}:
            changes["provider"] = ProviderType(provider)
        if stored.get(SETTINGS_KEY_GEMINI_API_KEY):
            changes["gemini_api_key"] = stored[SETTINGS_KEY_GEMINI_API_KEY]
        if SETTINGS_KEY_OLLAMA_MODEL in stored:
            changes["ollama_model"] = stored[SETTINGS_KEY_OLLAMA_MODEL]
        if stored.get(SETTINGS_KEY_OLLAMA_API_URL):
            changes["ollama_api_url"] = stored[SETTINGS_KEY_OLLAMA_API_URL]
        page_format = stored.get(SETTINGS_KEY_PAGE_FORMAT)
        if page_format in {f.value for f in PageFormat}:
            changes["page_format"] = PageFormat(page_format)

        return defaults.with_updates(**changes)

    def save(
        self,
        *,
        provider: ProviderType | None = None,
        gemini_api_key: str | None = None,
        ollama_model: str | None = None,
        ollama_api_url: str | None = None,
        page_format: PageFormat | None = None,
    ) -> ProviderSettings:
        """
        Persist the given settings; arguments left as None are not touched.

        Returns:
            ProviderSettings: The effective settings after the update
        """
        updates: dict[str, str] = {}
        if provider is not None:
            updates[SETTINGS_KEY_PROVIDER] = provider.value
        if gemini_api_key is not None:
            updates[SETTINGS_KEY_GEMINI_API_KEY] = gemini_api_key.strip()
        if ollama_model is not None:
            updates[SETTINGS_KEY_OLLAMA_MODEL] = ollama_model.strip()
        if ollama_api_url is not None:
            updates[SETTINGS_KEY_OLLAMA_API_URL] = ollama_api_url.strip().rstrip("/")
        if page_format is not None:
            updates[SETTINGS_KEY_PAGE_FORMAT] = page_format.value

        if updates:
            with self._engine.begin() as conn:
                for key, value in updates.items():
                    set_value(conn, key, value)
            logger.info(
                "Settings saved",
                extra={"extra_fields": {"keys": sorted(updates)}},
            )
        return self.load()
