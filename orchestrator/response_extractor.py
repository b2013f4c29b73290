"""
Recover JSON values from free-text model output.

Handles markdown code fences, a leading byte-order mark and prose around the
payload. Nothing beyond fence/BOM/span stripping is attempted: a payload that
is still not valid JSON fails with MalformedModelOutput.
"""

import codecs
import json
import re
from typing import Any, Literal

from models.errors import MalformedModelOutput
from utils.logger import get_logger

logger = get_logger(__name__)

Expectation = Literal["array", "object"] | None

_BOM = codecs.BOM_UTF8.decode("utf-8")

_ARRAY_SPAN = re.compile(r"\[.*\]", re.S)
_OBJECT_SPAN = re.compile(r"\{.*\}", re.S)


def _fence_patterns(lang: str) -> tuple[re.Pattern, re.Pattern]:
    tag = re.escape(lang)
    whole = re.compile(rf"^```(?:{tag})?\s*\n?(.*?)\n?\s*```$", re.S | re.I)
    embedded = re.compile(rf"```(?:{tag})?[ \t]*\n(.*?)\n?\s*```", re.S | re.I)
    return whole, embedded


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith(_BOM) else text


def strip_code_fence(text: str, lang: str = "json") -> str:
    """
    Remove a markdown fence around the payload.

    A fence wrapping the whole text wins; otherwise the first fenced block
    found inside surrounding prose is used. Text without a fence is returned
    trimmed.
    """
    cleaned = _strip_bom(text.strip()).strip()
    whole, embedded = _fence_patterns(lang)

    match = whole.match(cleaned)
    if match and match.group(1).strip():
        return match.group(1).strip()

    match = embedded.search(cleaned)
    if match and match.group(1).strip():
        return match.group(1).strip()

    return cleaned


def _loads(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return False, None


def _span_candidates(text: str, expect: Expectation) -> list[str]:
    if expect is None:
        # A payload that opens with a bracket declares its own kind
        if text.startswith("["):
            expect = "array"
        elif text.startswith("{"):
            expect = "object"

    if expect == "array":
        patterns = [_ARRAY_SPAN]
    elif expect == "object":
        patterns = [_OBJECT_SPAN]
    else:
        patterns = [_ARRAY_SPAN, _OBJECT_SPAN]

    spans = []
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            spans.append(match.group(0))
    return spans


def extract_json(text: Any, expect: Expectation = None) -> Any:
    """
    Parse the JSON value contained in ``text``.

    Args:
        text: Raw model output
        expect: "array" or "object" to enable span recovery for that kind.
            With None the kind is taken from the first character of the
            cleaned text, or both spans are tried (array first) when the text
            opens with prose.

    Returns:
        The parsed JSON value

    Raises:
        MalformedModelOutput: No parseable JSON could be located
    """
    if not isinstance(text, str) or not text.strip():
        raise MalformedModelOutput(
            "AI returned an empty or non-text response.", original=text, cleaned=None
        )

    cleaned = strip_code_fence(text, "json")
    ok, value = _loads(cleaned)
    if ok:
        return value

    for span in _span_candidates(cleaned, expect):
        ok, value = _loads(span)
        if ok:
            logger.debug(
                "Recovered JSON from a span of the model output",
                extra={"extra_fields": {"span_chars": len(span), "total_chars": len(cleaned)}},
            )
            return value

    logger.error(
        "Could not parse JSON from model output",
        extra={
            "extra_fields": {
                "expect": expect,
                "cleaned_preview": cleaned[:300],
                "original_preview": text[:300],
            }
        },
    )
    raise MalformedModelOutput(
        "AI returned output that could not be parsed as JSON.", original=text, cleaned=cleaned
    )
