import pytest
from sqlalchemy import create_engine

from config.config import (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_OLLAMA_API_URL,
    SETTINGS_KEY_GEMINI_API_KEY,
    Config,
    PageFormat,
    ProviderType,
)
from config.settings_store import SettingsStore
from db.repository import get_value, set_value

pytestmark = pytest.mark.integration


def test_defaults_come_from_environment(db_engine, monkeypatch):
    monkeypatch.setenv("DEFAULT_PROVIDER", "ollama")
    monkeypatch.setenv("OLLAMA_MODEL", "llama3")
    monkeypatch.setenv("PAGE_FORMAT", "structured")
    monkeypatch.setenv("REQUEST_TIMEOUT_S", "30")

    settings = SettingsStore(db_engine, Config()).load()

    assert settings.provider == ProviderType.OLLAMA
    assert settings.ollama_model == "llama3"
    assert settings.page_format == PageFormat.STRUCTURED
    assert settings.timeout_s == 30.0
    assert settings.gemini_model == DEFAULT_GEMINI_MODEL
    assert settings.ollama_api_url == DEFAULT_OLLAMA_API_URL


def test_saved_settings_override_environment(db_engine, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    store = SettingsStore(db_engine, Config())

    settings = store.save(
        provider=ProviderType.OLLAMA,
        ollama_model=" mistral ",
        ollama_api_url="http://gpu-box:11434/",
        page_format=PageFormat.STRUCTURED,
    )

    assert settings.provider == ProviderType.OLLAMA
    assert settings.ollama_model == "mistral"
    assert settings.ollama_api_url == "http://gpu-box:11434"
    assert settings.page_format == PageFormat.STRUCTURED
    assert settings.gemini_api_key == "env-key"


def test_stored_api_key_wins_and_empty_key_falls_back(db_engine, monkeypatch):
    monkeypatch.setenv("API_KEY", "env-key")
    store = SettingsStore(db_engine, Config())

    assert store.save(gemini_api_key="user-key").gemini_api_key == "user-key"
    with db_engine.begin() as conn:
        assert get_value(conn, SETTINGS_KEY_GEMINI_API_KEY) == "user-key"

    assert store.save(gemini_api_key="").gemini_api_key == "env-key"


def test_unknown_stored_values_are_ignored(db_engine):
    store = SettingsStore(db_engine, Config())
    with db_engine.begin() as conn:
        set_value(conn, "mdlx_selectedProvider", "openai")
        set_value(conn, "mdlx_pageFormat", "pdf")

    settings = store.load()
    assert settings.provider == ProviderType.GEMINI
    assert settings.page_format == PageFormat.HTML


def test_unreadable_database_uses_defaults(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    settings = SettingsStore(engine, Config()).load()
    assert settings.provider == ProviderType.GEMINI


def test_config_validate_reports_problems(monkeypatch):
    monkeypatch.setenv("DEFAULT_PROVIDER", "openai")
    monkeypatch.setenv("PAGE_CACHE_BACKEND", "redis")
    problems = Config().validate()
    assert any("DEFAULT_PROVIDER" in problem for problem in problems)
    assert any("PAGE_CACHE_BACKEND" in problem for problem in problems)
    assert Config().default_settings().provider == ProviderType.GEMINI
