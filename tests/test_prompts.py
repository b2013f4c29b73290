import random

import pytest

from models.search_result import ContentType, Theme
from orchestrator.prompts import (
    FREE_TEXT_RESULT_RANGE,
    JSON_MODE_RESULT_RANGE,
    PageTemplates,
    load_templates,
    pick_result_count,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def templates():
    return load_templates()


def test_result_count_ranges():
    rng = random.Random(7)
    json_counts = {pick_result_count(True, rng) for _ in range(200)}
    text_counts = {pick_result_count(False, rng) for _ in range(200)}

    assert min(json_counts) >= JSON_MODE_RESULT_RANGE[0]
    assert max(json_counts) <= JSON_MODE_RESULT_RANGE[1]
    assert min(text_counts) >= FREE_TEXT_RESULT_RANGE[0]
    assert max(text_counts) <= FREE_TEXT_RESULT_RANGE[1]


def test_search_prompt_embeds_query_and_count(templates):
    prompt = templates.search_prompt("quantum cats", json_mode=True, num_results=9)

    assert '"quantum cats"' in prompt
    assert "exactly 9" in prompt
    assert "'preferredTheme'" in prompt
    assert "$" not in prompt


def test_free_text_search_prompt_differs(templates):
    json_prompt = templates.search_prompt("q", json_mode=True, num_results=6)
    text_prompt = templates.search_prompt("q", json_mode=False, num_results=6)

    assert text_prompt != json_prompt
    assert "MUST contain exactly 6 objects" in text_prompt


@pytest.mark.parametrize("content_type", list(ContentType))
def test_page_prompt_for_every_content_type(templates, make_item, content_type):
    item = make_item(content_type=content_type, theme=Theme.DARK)
    prompt = templates.page_prompt(item, "cats", year=2031)

    assert f'Content Type to Generate: "{content_type.value}"' in prompt
    assert '"NovaChronicles"' in prompt
    assert "novachronicles.news" in prompt
    assert "The Future of Cats" in prompt
    assert "© 2031 NovaChronicles" in prompt
    assert "dark theme" in prompt
    assert "placeholder-image://picsum.photos/seed/" in prompt
    assert "$" not in prompt


def test_missing_type_template_falls_back_to_blog_post(templates, make_item, caplog):
    trimmed = PageTemplates(
        search=templates.search,
        themes=templates.themes,
        document={
            **templates.document,
            "content_types": {"blog_post": templates.document["content_types"]["blog_post"]},
        },
        structured=templates.structured,
    )
    prompt = trimmed.page_prompt(make_item(content_type=ContentType.NEWS_ARTICLE), "cats")

    assert "An engaging blog post format" in prompt
    assert any("falling back to blog_post" in record.getMessage() for record in caplog.records)


def test_structured_prompt_names_the_record_fields(templates, make_item):
    prompt = templates.structured_prompt(make_item(content_type=ContentType.PRODUCT_PAGE), "cats")

    assert '"productName"' in prompt
    assert '"callToAction"' in prompt
    assert "single JSON object" in prompt


def test_from_yaml_rejects_incomplete_file(tmp_path):
    path = tmp_path / "templates.yaml"
    path.write_text("search: {}\n", encoding="utf-8")
    with pytest.raises(ValueError, match="missing"):
        PageTemplates.from_yaml(path)


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(ValueError, match="not found"):
        PageTemplates.from_yaml(tmp_path / "absent.yaml")
