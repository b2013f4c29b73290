"""
Prompt construction for search results and generated pages.

Template text lives in ``config/page_templates.yaml``; this module only picks
the right pieces and substitutes values into them.
"""

import random
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Any

import yaml

from models.search_result import ContentType, SearchResultItem, Theme
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "config" / "page_templates.yaml"

# Inclusive ranges of results requested per search
JSON_MODE_RESULT_RANGE = (7, 20)
FREE_TEXT_RESULT_RANGE = (5, 10)

_REQUIRED_SECTIONS = ("search", "themes", "document", "structured")


def _render(text: str, **values: Any) -> str:
    return Template(text).substitute(**values).strip()


def pick_result_count(json_mode: bool, rng: random.Random | None = None) -> int:
    low, high = JSON_MODE_RESULT_RANGE if json_mode else FREE_TEXT_RESULT_RANGE
    return (rng or random).randint(low, high)


@dataclass(frozen=True)
class PageTemplates:
    search: dict[str, str]
    themes: dict[str, str]
    document: dict[str, Any]
    structured: dict[str, Any]

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "PageTemplates":
        templates_path = Path(path) if path else DEFAULT_TEMPLATES_PATH
        if not templates_path.exists():
            raise ValueError(f"Prompt templates not found at {templates_path}")

        data = yaml.safe_load(templates_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Invalid prompt templates: expected a mapping")
        missing = [section for section in _REQUIRED_SECTIONS if section not in data]
        if missing:
            raise ValueError(f"Invalid prompt templates: missing {', '.join(missing)}")
        for section in ("document", "structured"):
            if "blog_post" not in data[section].get("content_types", {}):
                raise ValueError(f"Invalid prompt templates: {section} has no blog_post template")

        return cls(
            search=data["search"],
            themes=data["themes"],
            document=data["document"],
            structured=data["structured"],
        )

    def search_prompt(self, query: str, *, json_mode: bool, num_results: int) -> str:
        """
        Build the prompt asking for ``num_results`` fake results.

        Args:
            query: The user's search query
            json_mode: True when the provider enforces JSON output, which
                selects the shorter prompt variant
            num_results: How many results to ask for
        """
        values = {"query": query, "num_results": num_results}
        template = self.search["json_mode" if json_mode else "free_text"]
        return _render(
            template,
            field_rules=_render(self.search["field_rules"], **values),
            example=_render(self.search["example"], **values),
            **values,
        )

    def _type_template(self, section: dict[str, Any], content_type: ContentType | str) -> str:
        key = getattr(content_type, "value", content_type)
        templates = section["content_types"]
        if key not in templates:
            logger.warning(
                "No page template for content type, falling back to blog_post",
                extra={"extra_fields": {"content_type": key}},
            )
            key = ContentType.BLOG_POST.value
        return templates[key]

    def _theme_rules(self, theme: Theme) -> str:
        return self.themes.get(theme.value) or self.themes[Theme.SYSTEM.value]

    def page_prompt(self, item: SearchResultItem, query: str, *, year: int | None = None) -> str:
        """Prompt for a complete, self-contained HTML document."""
        values = {
            "name": item.name,
            "domain": item.domain,
            "title": item.title,
            "query": query,
            "year": year or date.today().year,
        }
        type_rules = _render(
            self._type_template(self.document, item.content_type),
            full_width_rules=_render(self.document["full_width_rules"]),
            header_footer_rules=_render(self.document["header_footer_rules"], **values),
            **values,
        )
        return _render(
            self.document["page"],
            content_type=item.content_type.value,
            theme=item.preferred_theme.value,
            theme_rules=self._theme_rules(item.preferred_theme),
            type_rules=type_rules,
            image_rules=_render(self.document["image_rules"]),
            **values,
        )

    def structured_prompt(self, item: SearchResultItem, query: str) -> str:
        """Prompt for a JSON object matching the content type's record shape."""
        values = {
            "name": item.name,
            "domain": item.domain,
            "title": item.title,
            "query": query,
        }
        type_rules = _render(self._type_template(self.structured, item.content_type), **values)
        return _render(
            self.structured["page"],
            content_type=item.content_type.value,
            type_rules=type_rules,
            **values,
        )


@lru_cache(maxsize=1)
def load_templates() -> PageTemplates:
    return PageTemplates.from_yaml()
