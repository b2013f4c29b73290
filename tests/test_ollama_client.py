import asyncio
import json

import httpx
import pytest

from api.ollama_client import OllamaProvider
from models.errors import NoModelSelected, ProviderResponseError, ProviderUnreachable

pytestmark = pytest.mark.unit


def _provider(handler, model_name="llama3", **kwargs) -> OllamaProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OllamaProvider(
        base_url="http://ollama.test:11434/",
        model_name=model_name,
        http_client=client,
        **kwargs,
    )


def test_generate_posts_expected_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "[]", "done": True})

    provider = _provider(handler, temperature=0.3)
    text = asyncio.run(provider.generate_text("make results"))

    assert text == "[]"
    assert seen["url"] == "http://ollama.test:11434/api/generate"
    assert seen["body"] == {
        "model": "llama3",
        "prompt": "make results",
        "stream": False,
        "options": {"temperature": 0.3},
    }


def test_json_mode_sets_format():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "{}"})

    asyncio.run(_provider(handler).generate_text("p", json_mode=True))
    assert seen["body"]["format"] == "json"


def test_error_status_raises_with_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text='{"error":"model \'nope\' not found"}')

    with pytest.raises(ProviderResponseError) as exc_info:
        asyncio.run(_provider(handler).generate_text("p"))

    assert exc_info.value.status_code == 404
    assert "not found" in exc_info.value.body
    assert "Ollama API error (404)" in exc_info.value.message


def test_connection_failure_is_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderUnreachable, match="Could not connect to Ollama"):
        asyncio.run(_provider(handler).generate_text("p"))


def test_timeout_is_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ProviderUnreachable, match="did not respond"):
        asyncio.run(_provider(handler, timeout_s=5).generate_text("p"))


def test_missing_model_is_rejected_before_any_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(NoModelSelected):
        asyncio.run(_provider(handler, model_name="").generate_text("p"))


def test_list_models_sorted_by_name():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/tags"
        return httpx.Response(
            200,
            json={
                "models": [
                    {"name": "mistral:latest", "size": 4100, "details": {"family": "llama"}},
                    {"name": "gemma:2b", "digest": "abc", "modified_at": "2024-05-01T10:00:00Z"},
                ]
            },
        )

    models = asyncio.run(_provider(handler, model_name="").list_models())

    assert [model.name for model in models] == ["gemma:2b", "mistral:latest"]
    assert models[0].digest == "abc"
    assert models[1].size == 4100
    assert models[1].details == {"family": "llama"}


def test_list_models_tolerates_unreadable_sizes():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"models": [{"name": "big", "size": "huge"}, {"name": "small", "size": None}]},
        )

    models = asyncio.run(_provider(handler).list_models())

    assert [(model.name, model.size) for model in models] == [("big", 0), ("small", 0)]


def test_list_models_without_model_list_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"unexpected": True})

    assert asyncio.run(_provider(handler).list_models()) == []


def test_cache_model_id_follows_selected_model():
    provider = OllamaProvider(model_name="llama3")
    assert provider.cache_model_id == "llama3"
    assert provider.supports_json_mode is False
    assert OllamaProvider().cache_model_id is None
