import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

# Keys used for persisted settings and page cache entries
SETTINGS_KEY_PROVIDER = "mdlx_selectedProvider"
SETTINGS_KEY_GEMINI_API_KEY = "mdlx_userGeminiApiKey"
SETTINGS_KEY_OLLAMA_MODEL = "mdlx_selectedOllamaModel"
SETTINGS_KEY_OLLAMA_API_URL = "mdlx_ollamaApiUrl"
SETTINGS_KEY_PAGE_FORMAT = "mdlx_pageFormat"

GEMINI_PAGE_CACHE_PREFIX = "mdlxSearch_geminiPageCache_"
OLLAMA_PAGE_CACHE_PREFIX = "mdlxSearch_ollamaPageCache_"

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_OLLAMA_API_URL = "http://localhost:11434"
DEFAULT_DATABASE_URL = "sqlite:///mdluex_search.db"

APP_TITLE = "Mdluex Search"


class ProviderType(Enum):
    """Supported model backends."""
    GEMINI = "gemini"
    OLLAMA = "ollama"


class PageFormat(Enum):
    """How generated pages are represented."""
    HTML = "html"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class ProviderSettings:
    """
    Everything a provider call needs, passed explicitly instead of living
    in module-level client state.
    """

    provider: ProviderType = ProviderType.GEMINI
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    ollama_api_url: str = DEFAULT_OLLAMA_API_URL
    ollama_model: str = ""
    page_format: PageFormat = PageFormat.HTML
    temperature: float = 0.7
    timeout_s: float = 120.0

    def with_updates(self, **changes) -> "ProviderSettings":
        return replace(self, **changes)


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Provider defaults (persisted user settings override these)
        self.DEFAULT_PROVIDER = os.getenv('DEFAULT_PROVIDER', ProviderType.GEMINI.value).lower()
        self.GEMINI_API_KEY = os.getenv('GEMINI_API_KEY') or os.getenv('API_KEY')
        self.GEMINI_MODEL = os.getenv('GEMINI_MODEL', DEFAULT_GEMINI_MODEL)
        self.OLLAMA_API_URL = os.getenv('OLLAMA_API_URL', DEFAULT_OLLAMA_API_URL)
        self.OLLAMA_MODEL = os.getenv('OLLAMA_MODEL', '')
        self.PAGE_FORMAT = os.getenv('PAGE_FORMAT', PageFormat.HTML.value).lower()
        self.MODEL_TEMPERATURE = float(os.getenv('MODEL_TEMPERATURE', '0.7'))
        self.REQUEST_TIMEOUT_S = float(os.getenv('REQUEST_TIMEOUT_S', '120'))

        # Storage
        self.DATABASE_URL = os.getenv('DATABASE_URL', DEFAULT_DATABASE_URL)
        self.PAGE_CACHE_BACKEND = os.getenv('PAGE_CACHE_BACKEND', 'sql').lower()

        # Presentation
        self.RESULTS_PAGE_SIZE = int(os.getenv('RESULTS_PAGE_SIZE', '10'))

    def validate(self) -> list[str]:
        """
        Check the environment defaults.

        Returns:
            list[str]: Human-readable problems; empty when the configuration is usable
        """
        problems = []
        if self.DEFAULT_PROVIDER not in {p.value for p in ProviderType}:
            problems.append(
                f"Unknown DEFAULT_PROVIDER '{self.DEFAULT_PROVIDER}'. "
                f"Must be one of: {', '.join(p.value for p in ProviderType)}"
            )
        if self.PAGE_FORMAT not in {f.value for f in PageFormat}:
            problems.append(
                f"Unknown PAGE_FORMAT '{self.PAGE_FORMAT}'. "
                f"Must be one of: {', '.join(f.value for f in PageFormat)}"
            )
        if self.PAGE_CACHE_BACKEND not in {'sql', 'memory'}:
            problems.append(f"Unknown PAGE_CACHE_BACKEND '{self.PAGE_CACHE_BACKEND}'. Must be 'sql' or 'memory'")
        if self.REQUEST_TIMEOUT_S <= 0:
            problems.append("REQUEST_TIMEOUT_S must be positive")
        if self.RESULTS_PAGE_SIZE <= 0:
            problems.append("RESULTS_PAGE_SIZE must be positive")
        return problems

    def default_settings(self) -> ProviderSettings:
        """Build the provider settings implied by the environment alone."""
        try:
            provider = ProviderType(self.DEFAULT_PROVIDER)
        except ValueError:
            provider = ProviderType.GEMINI
        try:
            page_format = PageFormat(self.PAGE_FORMAT)
        except ValueError:
            page_format = PageFormat.HTML
        return ProviderSettings(
            provider=provider,
            gemini_api_key=self.GEMINI_API_KEY,
            gemini_model=self.GEMINI_MODEL,
            ollama_api_url=self.OLLAMA_API_URL,
            ollama_model=self.OLLAMA_MODEL,
            page_format=page_format,
            temperature=self.MODEL_TEMPERATURE,
            timeout_s=self.REQUEST_TIMEOUT_S,
        )
