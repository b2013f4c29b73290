"""
Clean model-generated HTML documents.

Placeholder image and avatar URIs that the page prompt asks for are rewritten
to the real image services, and the document root is checked.
"""

import re
from urllib.parse import quote

from models.errors import MalformedHtmlDocument
from utils.logger import get_logger

logger = get_logger(__name__)

IMAGE_SERVICE_URL = "https://picsum.photos"
AVATAR_SERVICE_URL = "https://i.pravatar.cc"
MAX_SEED_CHARS = 50
DOCTYPE = "<!DOCTYPE html>"
# How far into the document an <html> tag may start and still be repaired
MAX_HTML_TAG_OFFSET = 10

_SEEDED_IMAGE = re.compile(r"placeholder-image://picsum\.photos/seed/([^/\"']+)/(\d+)/(\d+)")
_PLAIN_IMAGE = re.compile(r"placeholder-image://picsum\.photos/(\d+)/(\d+)")
_NAMED_AVATAR = re.compile(r"placeholder-avatar://[^/\s\"']+/(\d+)\?u=([^\"\s&']+)")
_PLAIN_AVATAR = re.compile(r"placeholder-avatar://[^/\s\"']+/(\d+)")
_DOCTYPE_START = re.compile(r"<!doctype\s+html", re.I)

_REQUIRED_CLOSING_TAGS = ("</head>", "</body>", "</html>")


def _encode(value: str) -> str:
    # Same character set as JavaScript's encodeURIComponent
    return quote(value[:MAX_SEED_CHARS], safe="-_.!~*'()")


def rewrite_placeholders(html: str) -> str:
    html = _SEEDED_IMAGE.sub(
        lambda m: f"{IMAGE_SERVICE_URL}/seed/{_encode(m.group(1))}/{m.group(2)}/{m.group(3)}", html
    )
    html = _PLAIN_IMAGE.sub(lambda m: f"{IMAGE_SERVICE_URL}/{m.group(1)}/{m.group(2)}", html)
    html = _NAMED_AVATAR.sub(
        lambda m: f"{AVATAR_SERVICE_URL}/{m.group(1)}?u={_encode(m.group(2))}", html
    )
    html = _PLAIN_AVATAR.sub(lambda m: f"{AVATAR_SERVICE_URL}/{m.group(1)}", html)
    return html


def ensure_document_root(html: str) -> str:
    """
    Make sure the document starts with a doctype or an <html> tag.

    Raises:
        MalformedHtmlDocument: No <html> tag, or one too far from the start to repair
    """
    lowered = html.lower()
    if _DOCTYPE_START.match(html) or lowered.startswith("<html"):
        return html

    logger.warning(
        "Generated HTML does not start with a doctype or <html> tag",
        extra={"extra_fields": {"preview": html[:150]}},
    )
    position = lowered.find("<html")
    if position == -1:
        raise MalformedHtmlDocument(
            "AI failed to generate valid HTML structure (missing <html> tag after cleaning)."
        )
    if position >= MAX_HTML_TAG_OFFSET:
        raise MalformedHtmlDocument(
            "AI failed to generate valid HTML structure (<html> tag not at/near beginning)."
        )

    logger.warning("Prepending <!DOCTYPE html> as it was missing or misplaced")
    return f"{DOCTYPE}\n{html[position:]}"


def clean_html(html: str) -> str:
    """
    Rewrite placeholder URIs and validate the document root.

    Idempotent: rewritten URLs no longer match the placeholder patterns and a
    repaired document already starts with a doctype.
    """
    cleaned = ensure_document_root(rewrite_placeholders(html.strip()))

    lowered = cleaned.lower()
    missing = [tag for tag in _REQUIRED_CLOSING_TAGS if tag not in lowered]
    if missing:
        # The renderer copes with truncated markup, so this is not fatal
        logger.warning(
            "Generated HTML might be incomplete",
            extra={"extra_fields": {"missing_tags": missing, "length": len(cleaned)}},
        )
    return cleaned
