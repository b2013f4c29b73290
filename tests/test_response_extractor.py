import codecs

import pytest

from models.errors import MalformedModelOutput
from orchestrator.response_extractor import extract_json, strip_code_fence

pytestmark = pytest.mark.unit

BOM = codecs.BOM_UTF8.decode("utf-8")


def test_plain_json_array_parses():
    assert extract_json('[{"a": 1}, {"b": 2}]') == [{"a": 1}, {"b": 2}]


def test_fenced_block_inside_prose_is_extracted():
    text = 'Sure! ```json\n[{"a":1}]\n```'
    assert extract_json(text) == [{"a": 1}]


def test_whole_text_fence_without_language_tag():
    assert extract_json('```\n{"title": "x"}\n```') == {"title": "x"}


def test_leading_bom_and_whitespace_are_ignored():
    assert extract_json(f'{BOM}  \n {{"a": true}}  ') == {"a": True}


def test_truncated_array_fails():
    with pytest.raises(MalformedModelOutput) as exc_info:
        extract_json('[{"a":1}')
    assert exc_info.value.original == '[{"a":1}'
    assert exc_info.value.cleaned == '[{"a":1}'


def test_array_span_recovered_from_surrounding_prose():
    text = 'Here are your results: [{"name": "A"}] Hope this helps!'
    assert extract_json(text, expect="array") == [{"name": "A"}]


def test_object_span_recovered_from_surrounding_prose():
    text = 'The page:\n{"headline": "H", "paragraphs": ["p"]}\nEnjoy.'
    assert extract_json(text, expect="object") == {"headline": "H", "paragraphs": ["p"]}


def test_expected_array_does_not_fall_back_to_object_span():
    with pytest.raises(MalformedModelOutput):
        extract_json('Result: {"name": "A"} done', expect="array")


def test_prose_without_expectation_tries_array_then_object():
    assert extract_json('Result: {"name": "A"} done') == {"name": "A"}


@pytest.mark.parametrize("value", ["", "   \n", None, 42])
def test_empty_or_non_text_input_fails(value):
    with pytest.raises(MalformedModelOutput):
        extract_json(value)


def test_trailing_comma_is_not_repaired():
    with pytest.raises(MalformedModelOutput):
        extract_json('[{"a": 1},]', expect="array")


def test_strip_code_fence_for_html():
    html = "```html\n<!DOCTYPE html><html></html>\n```"
    assert strip_code_fence(html, "html") == "<!DOCTYPE html><html></html>"


def test_strip_code_fence_leaves_unfenced_text_trimmed():
    assert strip_code_fence("  <html></html>\n", "html") == "<html></html>"
