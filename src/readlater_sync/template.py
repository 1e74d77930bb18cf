"""Render article records through a small mustache-like template.

Grammar:
    {{field}}                  replaced with the field's value
    {{#if field}}...{{/if}}    kept (with placeholders expanded) when the field
                               has a value, removed entirely otherwise

Fields: title, url, source, author, date (publication date), excerpt, tags,
added (date the article was fetched). Unknown placeholders are left as is.
"""

import re
from typing import Callable, Iterable, Optional

from readlater_sync.models import ArticleRecord

DEFAULT_TEMPLATE = """## {{title}}
- **Source:** {{source}}
- **URL:** {{url}}
- **Author:** {{author}}
- **Date:** {{date}}
{{#if excerpt}}
- **Excerpt:** {{excerpt}}
{{/if}}
{{#if tags}}
- **Tags:** {{tags}}
{{/if}}

---
"""

BLOCK_SEPARATOR = "\n\n"

CONDITIONAL = re.compile(r"\{\{#if (\w+)\}\}(.*?)\{\{/if\}\}", re.DOTALL)
PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

# Shown in place of a missing value; other optional fields render empty
FALLBACKS = {
    "title": "Untitled",
    "author": "Unknown",
}

FIELDS: dict[str, Callable[[ArticleRecord], Optional[str]]] = {
    "title": lambda record: record.title,
    "url": lambda record: record.url,
    "source": lambda record: record.source,
    "author": lambda record: record.author,
    "date": lambda record: record.publication_date,
    "excerpt": lambda record: record.excerpt,
    "tags": lambda record: ", ".join(record.tags) if record.tags else None,
    "added": lambda record: record.added_date.date().isoformat() if record.added_date else None,
}


def _field_value(record: ArticleRecord, name: str) -> Optional[str]:
    return FIELDS[name](record) or None


def render(template: str, record: ArticleRecord) -> str:
    """Expand one record. Conditional blocks are resolved before placeholders."""

    def expand_block(match: re.Match) -> str:
        name, body = match.group(1), match.group(2)
        if name in FIELDS and _field_value(record, name):
            return body
        return ""

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in FIELDS:
            return match.group(0)
        return _field_value(record, name) or FALLBACKS.get(name, "")

    text = CONDITIONAL.sub(expand_block, template)
    return PLACEHOLDER.sub(substitute, text)


def render_batch(template: str, records: Iterable[ArticleRecord]) -> str:
    """Render records independently and join them with a blank line."""
    blocks = [render(template, record).rstrip("\n") for record in records]
    return BLOCK_SEPARATOR.join(blocks)
