import pytest

from models.errors import ContentGenerationFailed, MalformedHtmlDocument
from orchestrator.html_postprocessor import clean_html, ensure_document_root, rewrite_placeholders

pytestmark = pytest.mark.unit


def _doc(body: str) -> str:
    return f"<!DOCTYPE html>\n<html><head><title>t</title></head><body>{body}</body></html>"


def test_seeded_image_placeholder_is_rewritten():
    html = '<img src="placeholder-image://picsum.photos/seed/cats/100/50">'
    assert rewrite_placeholders(html) == '<img src="https://picsum.photos/seed/cats/100/50">'


def test_seed_is_percent_encoded_and_truncated():
    seed = "cute cats&dogs" + "x" * 60
    html = f'<img src="placeholder-image://picsum.photos/seed/{seed}/640/480">'
    out = rewrite_placeholders(html)

    assert "https://picsum.photos/seed/cute%20cats%26dogs" in out
    assert "/640/480" in out
    encoded_seed = out.split("/seed/")[1].split("/")[0]
    assert encoded_seed.count("x") == 50 - len("cute cats&dogs")


def test_plain_image_placeholder_is_rewritten():
    html = '<img src="placeholder-image://picsum.photos/300/200">'
    assert rewrite_placeholders(html) == '<img src="https://picsum.photos/300/200">'


def test_avatar_placeholders_are_rewritten():
    html = (
        '<img src="placeholder-avatar://i.pravatar.cc/48?u=user@alex">'
        '<img src="placeholder-avatar://i.pravatar.cc/64">'
    )
    out = rewrite_placeholders(html)
    assert 'src="https://i.pravatar.cc/48?u=user%40alex"' in out
    assert 'src="https://i.pravatar.cc/64"' in out
    assert "placeholder-" not in out


def test_clean_html_rewrites_and_keeps_doctype():
    out = clean_html(_doc('<img src="placeholder-image://picsum.photos/seed/cats/100/50">'))
    assert out.startswith("<!DOCTYPE html>")
    assert "https://picsum.photos/seed/cats/100/50" in out


def test_clean_html_is_idempotent():
    html = _doc(
        '<img src="placeholder-image://picsum.photos/seed/a b/10/20">'
        '<img src="placeholder-avatar://i.pravatar.cc/40?u=x@y">'
    )
    once = clean_html(html)
    assert clean_html(once) == once


def test_html_tag_near_start_gets_doctype():
    out = ensure_document_root("  x <html><body></body></html>")
    assert out == "<!DOCTYPE html>\n<html><body></body></html>"


def test_html_tag_at_start_is_accepted():
    html = "<html lang='en'><head></head><body></body></html>"
    assert clean_html(html) == html


def test_html_tag_far_from_start_is_rejected():
    with pytest.raises(MalformedHtmlDocument, match="not at/near beginning"):
        clean_html("Here is your page you asked for: <html></html>")


def test_missing_html_tag_is_rejected():
    with pytest.raises(MalformedHtmlDocument, match="missing <html> tag"):
        clean_html("<div>no document</div>")


def test_malformed_document_is_a_content_generation_failure():
    with pytest.raises(ContentGenerationFailed):
        clean_html("plain text")


def test_missing_closing_tags_only_warn(caplog):
    html = "<!DOCTYPE html><html><head></head><body><p>truncated"
    assert clean_html(html) == html
    assert any("might be incomplete" in record.getMessage() for record in caplog.records)
