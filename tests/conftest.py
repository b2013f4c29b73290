import os
import tempfile

import pytest

# Keep log files out of the working tree; must run before any module calls get_logger
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="mdluex-test-logs-"))

from config.config import Config  # noqa: E402
from db.engine import create_db_engine  # noqa: E402
from models.search_result import ContentType, SearchResultItem, Theme  # noqa: E402

_ENV_VARS = [
    "DEFAULT_PROVIDER",
    "GEMINI_API_KEY",
    "API_KEY",
    "GEMINI_MODEL",
    "OLLAMA_API_URL",
    "OLLAMA_MODEL",
    "PAGE_FORMAT",
    "REQUEST_TIMEOUT_S",
    "MODEL_TEMPERATURE",
    "DATABASE_URL",
    "PAGE_CACHE_BACKEND",
    "RESULTS_PAGE_SIZE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Tests never see a developer's provider configuration."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_engine(tmp_path):
    """SQLite engine on a temp file with the key/value table created."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def make_item():
    def _make(
        content_type: ContentType = ContentType.BLOG_POST,
        item_id: str = "result-1",
        name: str = "NovaChronicles",
        theme: Theme = Theme.DARK,
    ) -> SearchResultItem:
        return SearchResultItem(
            id=item_id,
            name=name,
            domain="novachronicles.news",
            title="The Future of Cats",
            snippet="Everything about cats.",
            content_type=content_type,
            original_query="cats",
            preferred_theme=theme,
        )

    return _make
