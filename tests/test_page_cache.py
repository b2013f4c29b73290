import pytest
from sqlalchemy import create_engine

from config.config import GEMINI_PAGE_CACHE_PREFIX, OLLAMA_PAGE_CACHE_PREFIX
from orchestrator.page_cache import (
    InMemoryPageCache,
    SqlPageCache,
    build_cache_key,
    create_page_cache,
)

pytestmark = pytest.mark.unit


@pytest.fixture(params=["memory", "sql"])
def cache(request, db_engine):
    if request.param == "memory":
        return InMemoryPageCache()
    return SqlPageCache(db_engine)


def test_put_then_get_returns_identical_value(cache):
    html = "<!DOCTYPE html>\n<html><body>  ünïcode é </body></html>\n"
    cache.put("providerA_xyz", html)
    assert cache.get("providerA_xyz") == html


def test_missing_key_is_none(cache):
    assert cache.get("providerA_nothing") is None


def test_clear_namespace_removes_only_that_prefix(cache):
    cache.put("providerA_xyz", "a")
    cache.put("providerB_xyz", "b")

    cache.clear_namespace("providerA_")

    assert cache.get("providerA_xyz") is None
    assert cache.get("providerB_xyz") == "b"


def test_put_overwrites(cache):
    cache.put("k", "first")
    cache.put("k", "second")
    assert cache.get("k") == "second"


def test_clear_namespace_treats_prefix_literally(cache):
    cache.put("a%_1", "x")
    cache.put("ab_1", "y")
    cache.clear_namespace("a%_")
    assert cache.get("a%_1") is None
    assert cache.get("ab_1") == "y"


def test_sql_cache_survives_new_instance(db_engine):
    SqlPageCache(db_engine).put("persisted", "<html></html>")
    assert SqlPageCache(db_engine).get("persisted") == "<html></html>"


def test_sql_cache_failures_degrade_to_miss(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'no_tables.db'}")
    cache = SqlPageCache(engine)

    cache.put("k", "v")
    assert cache.get("k") is None
    cache.clear_namespace("k")


def test_cache_keys():
    assert build_cache_key(GEMINI_PAGE_CACHE_PREFIX, "abc") == "mdlxSearch_geminiPageCache_abc"
    assert (
        build_cache_key(OLLAMA_PAGE_CACHE_PREFIX, "abc", model_id="llama3")
        == "mdlxSearch_ollamaPageCache_llama3_abc"
    )
    assert (
        build_cache_key(GEMINI_PAGE_CACHE_PREFIX, "abc", structured=True)
        == "mdlxSearch_geminiPageCache_structured_abc"
    )


def test_create_page_cache_backends(db_engine):
    assert isinstance(create_page_cache("memory"), InMemoryPageCache)
    assert isinstance(create_page_cache("sql", db_engine), SqlPageCache)
    with pytest.raises(ValueError):
        create_page_cache("sql")
    with pytest.raises(ValueError):
        create_page_cache("redis")
